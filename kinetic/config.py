"""
Configuration management for the Kinetic retention engine.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default):
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return int(value)


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer token verification for staff/member API calls
    AUTH_JWT_SECRET = os.getenv('AUTH_JWT_SECRET', '')
    AUTH_JWT_AUDIENCE = os.getenv('AUTH_JWT_AUDIENCE', '')

    # Retention engine
    RETENTION_ACTIVITY_WINDOW = _int_env('RETENTION_ACTIVITY_WINDOW', 30)  # most recent N samples
    RETENTION_SEND_CONCURRENCY = _int_env('RETENTION_SEND_CONCURRENCY', 4)
    RETENTION_BATCH_LIMIT = _int_env('RETENTION_BATCH_LIMIT', None)
    RETENTION_TRACKING_BASE_URL = os.getenv('RETENTION_TRACKING_BASE_URL', 'http://localhost:5000')
    RETENTION_RETURN_URL = os.getenv('RETENTION_RETURN_URL', 'http://localhost:3000/book')  # click-through destination

    # Outbound email (SendGrid)
    SENDGRID_API_KEY = os.getenv('SENDGRID_API_KEY', '')
    SENDGRID_FROM_EMAIL = os.getenv('SENDGRID_FROM_EMAIL', 'noreply@kinetic.fit')
    SENDGRID_FROM_NAME = os.getenv('SENDGRID_FROM_NAME', 'Kinetic Fitness')

    # Recommendation call-site defaults
    RECOMMENDATION_GENERAL_LIMIT = 10
    RECOMMENDATION_CONTEXTUAL_LIMIT = 12


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///kinetic_dev.db'  # SQLite fallback for local dev
    )
    AUTH_DEV_HEADERS = True


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False
    AUTH_DEV_HEADERS = False

    _db_url = os.getenv('DATABASE_URL', '')
    if _db_url.startswith('postgres://'):
        # SQLAlchemy requires postgresql:// not postgres://
        _db_url = _db_url.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = _db_url

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,  # Verify connections before using
    }

    _secret_key = os.getenv('SECRET_KEY', '')

    @classmethod
    def validate_secret_key(cls) -> str:
        """
        Validate SECRET_KEY in production environment.

        Raises:
            RuntimeError: If SECRET_KEY is missing, too short, or looks like a placeholder
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
    def validate_auth_secret(cls) -> str:
        """Production must verify bearer tokens; an empty secret would accept nothing."""
        if not cls.AUTH_JWT_SECRET:
            raise RuntimeError("CRITICAL: AUTH_JWT_SECRET environment variable is not set!")
        return cls.AUTH_JWT_SECRET

    SECRET_KEY = _secret_key  # Validated at app startup


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    AUTH_JWT_SECRET = 'testing-jwt-secret-with-enough-length-000'
    AUTH_DEV_HEADERS = True
    SENDGRID_API_KEY = ''
    RETENTION_SEND_CONCURRENCY = 2


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

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate_secret_key()
        ProductionConfig.validate_auth_secret()
