#run.py

import asyncio
from hypercorn.config import Config
from hypercorn.asyncio import serve
from dotenv import load_dotenv

# Load environment variables before the app reads its config
load_dotenv()

from app import app  # noqa: E402


async def main():
    config = Config()
    config.bind = ["127.0.0.1:5000"]  # Local development binding
    config.use_reloader = True

    app.debug = True

    await serve(app, config)

if __name__ == "__main__":
    asyncio.run(main())
