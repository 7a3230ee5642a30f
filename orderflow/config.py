from dotenv import load_dotenv
load_dotenv()  # Load environment variables from .env file

import os


class Config:
    """Base configuration class."""
    APP_NAME = os.getenv("APP_NAME", "OrderFlow")

    SECRET_KEY = os.getenv("SECRET_KEY", "your_default_secret_key")
    DEBUG = os.getenv("FLASK_DEBUG", "True") == "True"
    TESTING = False
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/orderflow")
    DB_NAME = os.getenv("DB_NAME", "orderflow")

    # ========================================
    # OPENAPI (flask-smorest)
    # ========================================
    API_TITLE = "OrderFlow API"
    API_VERSION = "v1"
    OPENAPI_VERSION = "3.0.3"
    OPENAPI_URL_PREFIX = "/api"
    OPENAPI_JSON_PATH = "openapi.json"
    OPENAPI_SWAGGER_UI_PATH = "/docs"
    OPENAPI_SWAGGER_UI_URL = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"
    API_SPEC_OPTIONS = {
        "components": {
            "securitySchemes": {
                "Bearer": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
            }
        }
    }

    # ========================================
    # LOGGING
    # ========================================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    LOG_TO_FILE = os.getenv("LOG_TO_FILE", "True") == "True"
    LOG_DIR = os.getenv("APP_LOG_DIR", os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "storage", "logs")))

    # ========================================
    # AUTH
    # ========================================
    JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", 60 * 24))
    # Admin sign-up is closed unless a key is configured
    ADMIN_SIGNUP_KEY = os.getenv("ADMIN_SIGNUP_KEY")

    # ========================================
    # REDIS (token blocklist)
    # ========================================
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))

    # ========================================
    # INVOICES
    # ========================================
    INVOICE_CURRENCY = os.getenv("INVOICE_CURRENCY", "BDT")

    # ========================================
    # RATE LIMITING
    # ========================================
    RATELIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "True") == "True"


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    MONGO_URI = os.getenv("TEST_MONGO_URI", "mongodb://localhost:27017/orderflow_test")
    DB_NAME = os.getenv("TEST_DB_NAME", "orderflow_test")
    ADMIN_SIGNUP_KEY = "test-admin-key"
    LOG_TO_FILE = False
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    MONGO_URI = os.getenv("PROD_MONGO_URI", "mongodb://localhost:27017/orderflow")


CONFIGS = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def load_config(app, config_name=None):
    load_dotenv()
    config_name = config_name or os.getenv("APP_ENV", "development")
    app.config.from_object(CONFIGS.get(config_name, DevelopmentConfig))
    app.config["ALLOWED_ORIGINS"] = [
        origin.strip()
        for origin in os.getenv("ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]
