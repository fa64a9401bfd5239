# config.py

import os

from dotenv import load_dotenv

load_dotenv()


class BaseConfig:
    # General
    ASYNC_MODE = True
    PROPAGATE_EXCEPTIONS = False
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16 MB
    RESPONSE_TIMEOUT = 300
    CORS_ALLOW_ORIGIN = os.getenv('CORS_ALLOW_ORIGIN', '*')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_FILE = os.getenv('LOG_FILE', 'app.log')

    # Generative AI
    GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY')
    if not GOOGLE_API_KEY:
        raise RuntimeError("GOOGLE_API_KEY environment variable is required but not set.")

    CANDY_TEXT_MODEL = os.getenv('CANDY_TEXT_MODEL', 'gemini-2.5-flash')
    CANDY_IMAGE_MODEL = os.getenv('CANDY_IMAGE_MODEL', 'gemini-2.5-flash-image')
    CANDY_MAX_RETRIES = int(os.getenv('CANDY_MAX_RETRIES', '3'))

    # Downloads
    WATERMARK_TEXT = os.getenv('WATERMARK_TEXT', 'boldmaker.com')


class ProductionConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'


class TestingConfig(BaseConfig):
    DEBUG = False
    TESTING = True
    LOG_FILE = None
    ENV = 'testing'


def get_config():
    env = os.getenv('APP_ENV', os.getenv('ENV', 'development')).lower()
    if env == 'production':
        return ProductionConfig
    elif env == 'testing':
        return TestingConfig
    else:
        return DevelopmentConfig
