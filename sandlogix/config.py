import os
from pathlib import Path


class Config:
    """Base configuration - shared across all environments"""

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    STORAGE_PATH = os.getenv(
        "SANDLOGIX_STORAGE_ROOT",
        str(Path(__file__).resolve().parents[1] / "sandlogix-storage"))

    # Logging
    LOGS_DIR = os.getenv('LOGS_DIR', os.path.join(BASE_DIR, 'logs'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    REQUEST_METRICS_ENABLED = True

    # Deliveries are recorded and reported in local (Conakry) time
    DISPLAY_TIMEZONE = os.getenv('DISPLAY_TIMEZONE', 'Africa/Conakry')

    # Rate limiting
    RATELIMIT_DEFAULT = os.getenv('RATELIMIT_DEFAULT', '1000 per day;500 per hour')
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_ENABLED = True

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173',
        ).split(',')
        if origin.strip()
    ]

    DB_PATH = os.path.join(STORAGE_PATH, 'database', 'sandlogix.db')
    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI', f"sqlite:///{DB_PATH}")


class DevConfig(Config):
    """Development configuration"""
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')
    FLASK_HOST = '0.0.0.0'
    FLASK_PORT = 5000


class TestingConfig(Config):
    """Test configuration - in-memory database, no rate limits"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    REQUEST_METRICS_ENABLED = False
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    FLASK_HOST = '::'
    FLASK_PORT = 5000


CONFIGS = {
    'development': DevConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config():
    """Config class selected by the SANDLOGIX_ENV environment variable."""
    return CONFIGS.get(os.getenv('SANDLOGIX_ENV', 'development'), DevConfig)
