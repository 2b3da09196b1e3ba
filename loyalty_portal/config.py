"""
Configuration management for the loyalty portal.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Exchange rate API (v6.exchangerate-api.com)
    EXCHANGE_RATE_API_KEY = os.getenv('EXCHANGE_RATE_API_KEY', '')
    EXCHANGE_RATE_API_BASE = os.getenv('EXCHANGE_RATE_API_BASE', 'https://v6.exchangerate-api.com/v6')
    EXCHANGE_RATE_CACHE_SECONDS = int(os.getenv('EXCHANGE_RATE_CACHE_SECONDS', '2400'))  # 40 minutes
    EXCHANGE_RATE_TIMEOUT = float(os.getenv('EXCHANGE_RATE_TIMEOUT', '10'))

    # Markup applied on top of the market rate
    CURRENCY_SPREAD = 0.025

    # Points hub
    POINTS_PAGE_SIZE = int(os.getenv('POINTS_PAGE_SIZE', '10'))
    SITE_URL = os.getenv('SITE_URL', '')

    # Header set by the identity gateway once the customer is authenticated
    CLIENT_AUTH_HEADER = os.getenv('CLIENT_AUTH_HEADER', 'X-Client-ID')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///loyalty_portal_dev.db'  # SQLite fallback for local dev
    )
    SITE_URL = os.getenv('SITE_URL', 'http://localhost:3000')


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    _db_url = os.getenv('DATABASE_URL', '')
    if _db_url.startswith('postgres://'):
        # SQLAlchemy requires postgresql:// not postgres://
        _db_url = _db_url.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = _db_url

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,
    }

    _secret_key = os.getenv('SECRET_KEY', '')

    @classmethod
    def validate_secret_key(cls) -> str:
        """
        Validate SECRET_KEY in production environment.

        Raises:
            RuntimeError: If SECRET_KEY is missing, empty, or contains unsafe values
        """
        if not cls._secret_key:
            raise RuntimeError(
                "CRITICAL: SECRET_KEY environment variable is not set!\n"
                "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )

        insecure_patterns = ['dev', 'change', 'default', 'test', 'secret', 'password']
        lower_key = cls._secret_key.lower()
        for pattern in insecure_patterns:
            if pattern in lower_key:
                raise RuntimeError(
                    f"CRITICAL: SECRET_KEY contains '{pattern}' which suggests it's not secure!"
                )

        if len(cls._secret_key) < 32:
            raise RuntimeError(
                "CRITICAL: SECRET_KEY is too short (minimum 32 characters required)!"
            )

        return cls._secret_key

    @classmethod
    def validate_exchange_rate_key(cls) -> None:
        """The rate lookup cannot work without an API key."""
        if not cls.EXCHANGE_RATE_API_KEY:
            raise RuntimeError(
                "CRITICAL: EXCHANGE_RATE_API_KEY environment variable is not set!"
            )

    SECRET_KEY = _secret_key  # Will be validated at app startup


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    EXCHANGE_RATE_API_KEY = 'test-key'
    SITE_URL = 'http://portal.test'
    LOG_LEVEL = 'WARNING'
    LOG_FORMAT = 'text'


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    Args:
        config_name: The configuration environment name

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate_secret_key()
        ProductionConfig.validate_exchange_rate_key()
