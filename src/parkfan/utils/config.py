"""
Park Fan Sync - Configuration Management
Handles environment configuration with AWS SSM Parameter Store for production
and python-dotenv for local development.
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()


class Config:
    """
    Configuration manager with dual-mode operation:
    - Local: Reads from .env file via python-dotenv
    - Production: Reads from AWS SSM Parameter Store
    """

    def __init__(self):
        self.environment = os.getenv('ENVIRONMENT', 'local')
        self._ssm_client = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Fetch configuration value from SSM (production) or environment (local).

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if self.environment == 'production':
            return self._get_from_ssm(key, default)
        return os.getenv(key, default)

    def _get_from_ssm(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Fetch configuration from AWS SSM Parameter Store.

        Raises:
            ConfigurationError: If parameter not found and no default provided,
                               or if AWS credentials/permissions are invalid
        """
        ssm_prefix = os.getenv('AWS_SSM_PREFIX', '/parkfan')
        parameter_name = f"{ssm_prefix}/{key}"

        try:
            if self._ssm_client is None:
                import boto3
                self._ssm_client = boto3.client(
                    'ssm',
                    region_name=os.getenv('AWS_REGION', 'eu-central-1')
                )

            response = self._ssm_client.get_parameter(
                Name=parameter_name,
                WithDecryption=True
            )
            return response['Parameter']['Value']

        except Exception as e:
            error_type = type(e).__name__
            if error_type == 'ParameterNotFound':
                if default is not None:
                    return default
                raise ConfigurationError(
                    f"Required parameter '{key}' not found in SSM at path '{parameter_name}'."
                ) from e

            if default is not None:
                import logging
                logging.warning(
                    f"Failed to fetch SSM parameter '{key}': {error_type}: {e}. "
                    f"Using default value."
                )
                return default
            raise ConfigurationError(
                f"Failed to fetch parameter '{key}' from SSM: {error_type}: {e}."
            ) from e

    def get_int(self, key: str, default: int) -> int:
        """
        Get configuration value as integer, falling back to default on bad input.
        """
        value = self.get(key, str(default))
        try:
            return int(value)
        except (ValueError, TypeError) as e:
            import logging
            logging.warning(
                f"Invalid integer for config key '{key}': '{value}'. "
                f"Using default={default}. Error: {e}"
            )
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, str(default))
        if value is None:
            return default
        return value.lower() in ('true', '1', 'yes', 'on')

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == 'production'

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == 'local'


class ConfigurationError(Exception):
    """Raised when configuration cannot be loaded."""
    pass


# Global configuration instance
config = Config()


# Database configuration
DB_URL = config.get('DB_URL', '')
DB_DRIVER = config.get('DB_DRIVER', 'mysql+pymysql')
DB_HOST = config.get('DB_HOST', 'localhost')
DB_PORT = config.get_int('DB_PORT', 3306)
DB_NAME = config.get('DB_NAME', 'parkfan')
DB_USER = config.get('DB_USER', 'root')
DB_PASSWORD = config.get('DB_PASSWORD', '')

# ThemeParks.wiki API configuration
THEMEPARKS_WIKI_API_BASE_URL = config.get('THEMEPARKS_WIKI_API_BASE_URL', 'https://api.themeparks.wiki/v1')
HTTP_TIMEOUT_SECONDS = config.get_int('HTTP_TIMEOUT_SECONDS', 10)
HTTP_MAX_REDIRECTS = config.get_int('HTTP_MAX_REDIRECTS', 5)
MAX_RETRY_ATTEMPTS = config.get_int('MAX_RETRY_ATTEMPTS', 3)
RETRY_BACKOFF_MULTIPLIER = config.get_int('RETRY_BACKOFF_MULTIPLIER', 2)

# Reconciliation fan-out
SYNC_MAX_WORKERS = config.get_int('SYNC_MAX_WORKERS', 10)

# Reverse geocoding
GEOCODING_USER_AGENT = config.get('GEOCODING_USER_AGENT', 'park.fan-api/2.0.0')
GEOCODING_BATCH_SIZE = config.get_int('GEOCODING_BATCH_SIZE', 5)
GEOCODING_DELAY_MS = config.get_int('GEOCODING_DELAY_MS', 1000)

# Flask configuration
FLASK_ENV = config.get('FLASK_ENV', 'development')
FLASK_DEBUG = config.get_bool('FLASK_DEBUG', False)
SECRET_KEY = config.get('SECRET_KEY', 'dev-secret-key-change-in-production')
README_PATH = config.get('README_PATH', os.path.join(os.getcwd(), 'README.md'))
OPENAPI_PATH = config.get('OPENAPI_PATH', os.path.join(os.getcwd(), 'openapi.yaml'))
README_REFRESH_SECONDS = config.get_int('README_REFRESH_SECONDS', 60)

# Logging configuration
LOG_LEVEL = config.get('LOG_LEVEL', 'INFO')

# Database connection pool settings
DB_POOL_SIZE = 10
DB_POOL_MAX_OVERFLOW = 20
DB_POOL_RECYCLE = 3600  # Recycle connections after 1 hour
DB_POOL_PRE_PING = True
