# app.py

# =========================
# 1. Standard Library Imports
# =========================
import os

# =========================
# 2. Third-Party Imports
# =========================
from quart import Quart, jsonify, request
from quart_cors import cors
from quart_schema import QuartSchema
from werkzeug.exceptions import HTTPException

# =========================
# 3. Local Imports
# =========================
from api.v1 import register_api_blueprints
from config import get_config
from orchestration.candy_generation import CandyGenerationOrchestrator
from services.client_manager import ClientManager
from utils.logging_utils import setup_logging


def create_app(genai_client=None, config_object=None):
    """
    Build the Quart application.

    The provider client is created here, before the app can serve anything,
    so a missing credential fails the process at startup.
    """
    # =========================
    # 4. App Initialization
    # =========================
    app = Quart(__name__)
    app.config.from_object(config_object or get_config())
    app = cors(app, allow_origin=app.config['CORS_ALLOW_ORIGIN'])
    QuartSchema(app)

    setup_logging(
        app,
        app.config.get('DEBUG', False),
        log_file=app.config.get('LOG_FILE'),
        level_name=app.config.get('LOG_LEVEL'),
    )

    # =========================
    # 5. Orchestrator Instantiation
    # =========================
    if genai_client is None:
        client_manager = ClientManager(api_key=app.config['GOOGLE_API_KEY'])
        client_manager.initialize_all_clients()
        genai_client = client_manager.get_client('google')

    app.candy_generation_orchestrator = CandyGenerationOrchestrator(
        client=genai_client,
        logger=app.logger,
        text_model=app.config['CANDY_TEXT_MODEL'],
        image_model=app.config['CANDY_IMAGE_MODEL'],
        max_retries=app.config['CANDY_MAX_RETRIES'],
    )

    register_api_blueprints(app)

    # =========================
    # 6. Error Handlers
    # =========================
    @app.errorhandler(404)
    async def not_found_error(error):
        app.logger.error(f"404 Not Found: Path={request.path} | Method={request.method}")
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(Exception)
    async def handle_exception(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        app.logger.error(f"Unhandled exception: {str(error)}")
        app.logger.exception("Full error traceback:")
        return jsonify({'error': 'Internal server error'}), 500

    # =========================
    # 7. Static/Utility Routes
    # =========================
    @app.route('/health')
    async def health_check():
        return 'OK', 200

    app.logger.info("Application initialization completed successfully")
    return app


app = create_app()


# =========================
# 8. Main Entrypoint
# =========================
if __name__ == '__main__':
    import asyncio
    from hypercorn.config import Config
    from hypercorn.asyncio import serve

    config = Config()
    config.bind = [f"0.0.0.0:{int(os.getenv('PORT', 8080))}"]
    config.use_reloader = app.debug

    asyncio.run(serve(app, config))
