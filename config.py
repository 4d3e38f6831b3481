"""
Configuration for the documentation checker.
"""

import os
import logging
from dotenv import load_dotenv
from typing import Any, Dict, Optional

# Load environment variables (optional - only if .env file exists)
load_dotenv()

logger = logging.getLogger(__name__)


def _int_setting(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not an integer. Using {default}.")
        return default


class Config:
    """Checker configuration."""

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Run Configuration
    MAX_WORKERS = _int_setting('DOCCHECK_MAX_WORKERS', 4)
    SEVERITY_THRESHOLD = os.environ.get('DOCCHECK_SEVERITY_THRESHOLD', 'error').lower()
    OUTPUT_FORMAT = os.environ.get('DOCCHECK_OUTPUT_FORMAT', 'text').lower()

    # Rule Thresholds (None keeps the value from rules/config/doc_rules.yaml)
    AUTOLINK_THRESHOLD = _int_setting('DOCCHECK_AUTOLINK_THRESHOLD', None)
    MAX_RELATED = _int_setting('DOCCHECK_MAX_RELATED', None)

    # Optional rule configuration file replacing rules/config/doc_rules.yaml
    RULES_CONFIG = os.environ.get('DOCCHECK_RULES_CONFIG') or None

    @classmethod
    def get_checker_config(cls) -> Dict[str, Any]:
        """Get the keyword arguments for DocChecker."""
        return {
            'max_workers': cls.MAX_WORKERS,
            'max_related': cls.MAX_RELATED,
            'autolink_threshold': cls.AUTOLINK_THRESHOLD,
        }

    @classmethod
    def get_output_config(cls) -> Dict[str, Any]:
        """Get report output configuration."""
        return {
            'severity_threshold': cls.SEVERITY_THRESHOLD,
            'format': cls.OUTPUT_FORMAT,
        }
