"""
Environment variable validation and security checks.

This module validates that all required environment variables are properly
configured before the application starts.
"""

import sys
from typing import List, Optional, Tuple

from around.core.config import settings
from around.core.logging import get_logger

logger = get_logger(__name__)


def validate_secret_key(key_name: str, key_value: Optional[str], min_length: int = 32) -> List[str]:
    """
    Validate that a secret key meets security requirements.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not key_value:
        errors.append(f"{key_name} is not set")
        return errors

    if len(key_value) < min_length:
        errors.append(
            f"{key_name} is too short (must be at least {min_length} characters)"
        )

    # Check if it's a default/example value
    lowered = key_value.lower()
    if "change" in lowered or "your-" in lowered or "example" in lowered:
        errors.append(
            f"{key_name} appears to be a placeholder value - update with a real secret key"
        )

    return errors


def validate_service_urls() -> List[str]:
    """Validate record store and blob store endpoints."""
    errors = []

    if not settings.OPENSEARCH_URL.startswith(("http://", "https://")):
        errors.append(
            "OPENSEARCH_URL must start with http:// or https:// (format: http://host:9200)"
        )

    if "://" in settings.MINIO_ENDPOINT:
        errors.append(
            "MINIO_ENDPOINT must be host:port without a scheme (use MINIO_SECURE for TLS)"
        )

    if not settings.MEDIA_BUCKET:
        errors.append("MEDIA_BUCKET is not set")

    return errors


def validate_scoring() -> List[str]:
    """Scoring falls back to Application Default Credentials without a key."""
    if not settings.VISION_API_KEY:
        logger.warning(
            "environment_validation_warning",
            message="VISION_API_KEY not set - Cloud Vision will use Application Default Credentials",
        )
    return []


def validate_production_settings() -> List[str]:
    errors = []

    if not settings.is_production:
        return errors

    if settings.DEBUG:
        errors.append("DEBUG must be false in production")

    if settings.MINIO_ACCESS_KEY == "minioadmin":
        errors.append("MINIO_ACCESS_KEY uses the default credentials")

    if settings.LOG_FORMAT != "json":
        logger.warning(
            "log_format_not_json",
            message="LOG_FORMAT should be 'json' in production for better log aggregation"
        )

    return errors


def validate_environment() -> Tuple[bool, List[str]]:
    """
    Validate all environment variables.

    Returns:
        (is_valid, list_of_errors)
    """
    all_errors = []

    logger.info(
        "validating_environment",
        app_env=settings.APP_ENV,
        app_name=settings.APP_NAME
    )

    all_errors.extend(validate_secret_key("JWT_SECRET_KEY", settings.JWT_SECRET_KEY))
    all_errors.extend(validate_service_urls())
    all_errors.extend(validate_scoring())
    all_errors.extend(validate_production_settings())

    if all_errors:
        logger.error(
            "environment_validation_failed",
            errors=all_errors,
            error_count=len(all_errors)
        )
        return False, all_errors

    logger.info("environment_validation_successful", app_env=settings.APP_ENV)
    return True, []


def validate_or_exit():
    """
    Validate environment and exit if validation fails.

    Called during application startup.
    """
    is_valid, errors = validate_environment()

    if not is_valid:
        logger.critical(
            "startup_aborted_invalid_environment",
            errors=errors
        )
        sys.exit(1)

    logger.info("environment_validation_passed")
