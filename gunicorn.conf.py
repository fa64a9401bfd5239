import os

# Gunicorn config (ASGI via uvicorn workers)
bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"
workers = int(os.getenv('WEB_CONCURRENCY', '2'))
worker_class = "uvicorn.workers.UvicornWorker"
keepalive = 65

# Image generation with retries can take well over a minute
timeout = 300
graceful_timeout = 30

# Logging
loglevel = os.getenv('LOG_LEVEL', 'info').lower()

# Forward-facing proxy settings
forwarded_allow_ips = '*'

# Process naming
proc_name = "candy-generator"
