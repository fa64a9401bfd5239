# api/v1/__init__.py

"""
API v1 Blueprint Registration

This module imports all API v1 blueprint factories and provides a single
function to register them on the Quart app instance, using dependency injection.
"""

# --- Import blueprint factories ---
from .candy import create_candy_blueprint

def register_api_blueprints(app):
    """
    Register all API v1 blueprints on the given Quart app instance.
    All dependencies are injected from the app object.
    """
    # Candy generation and download endpoints
    app.register_blueprint(create_candy_blueprint(
        app.candy_generation_orchestrator,
        app.config['WATERMARK_TEXT'],
        app.logger
    ))
