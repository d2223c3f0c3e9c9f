import os
from dotenv import load_dotenv

load_dotenv()

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Uploads
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 64 * 1024

    # Editor
    HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", 50))
    EDIT_DEBOUNCE_SECONDS = float(os.getenv("EDIT_DEBOUNCE_SECONDS", 0.3))
    AUTOSAVE_DEBOUNCE_SECONDS = float(os.getenv("AUTOSAVE_DEBOUNCE_SECONDS", 2.0))
    SAVE_MAX_RETRIES = int(os.getenv("SAVE_MAX_RETRIES", 3))
    SAVE_BACKOFF_SECONDS = float(os.getenv("SAVE_BACKOFF_SECONDS", 0.5))

    # Persistence gateway (editor -> server)
    GATEWAY_BASE_URL = os.getenv("GATEWAY_BASE_URL", "http://localhost:5000/api/v1")
    GATEWAY_TIMEOUT = float(os.getenv("GATEWAY_TIMEOUT", 10))

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///pagebuilder-dev.db")

class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SAVE_BACKOFF_SECONDS = 0.0

class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")

config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig
}
