"""
Rule Configuration Service

Loads the YAML configuration of the documentation rules once per file and
answers severity, threshold and pattern lookups. Falls back to built-in
defaults when the file is missing or unreadable.
"""

import os
import re
import logging
from typing import Any, Dict, Optional, Pattern, Tuple

import yaml

from rules.types import Severity
from structural_parsing.call_seq.parser import DEFAULT_FLAG_PREFIXES, DEFAULT_FORBIDDEN_PLACEHOLDERS
from structural_parsing.segment_classifier import DEFAULT_EXCEPTION_PATTERN

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), '..', 'config', 'doc_rules.yaml')

DEFAULT_SEVERITIES = {
    'MalformedComment': 'error',
    'CallSeqSyntaxError': 'error',
    'BlockPlaceholderError': 'error',
    'ReceiverNamingError': 'error',
    'RedundantEntry': 'advisory',
    'OutOfOrderSection': 'error',
    'TooManyRelated': 'error',
    'DuplicateAliasListing': 'error',
    'ExcessiveAutoLinkCandidate': 'advisory',
    'MissingSynopsis': 'error',
    'MissingCallSeq': 'error',
    'NonAsciiCharacter': 'error',
    'SourceReadError': 'error',
}

DEFAULT_THRESHOLDS = {
    'max_related': 3,
    'autolink_threshold': 3,
}


class RuleConfigService:
    """
    Configuration service for the documentation rules.

    One instance per configuration file; repeated construction with the same
    path returns the already loaded instance.
    """

    _instances: Dict[str, 'RuleConfigService'] = {}

    def __new__(cls, config_path: Optional[str] = None):
        key = os.path.abspath(config_path or DEFAULT_CONFIG_PATH)
        if key not in cls._instances:
            cls._instances[key] = super(RuleConfigService, cls).__new__(cls)
        return cls._instances[key]

    def __init__(self, config_path: Optional[str] = None):
        if hasattr(self, '_initialized'):
            return
        self.config_path = os.path.abspath(config_path or DEFAULT_CONFIG_PATH)
        self._load_configuration()
        self._initialized = True

    def _load_configuration(self):
        """Load configuration from the YAML file."""
        logger.debug(f"Loading rule config from {self.config_path}")
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
            if not isinstance(config, dict):
                raise ValueError("top level is not a mapping")
            self._apply(config)
        except (OSError, yaml.YAMLError, ValueError, TypeError, re.error) as e:
            logger.warning(f"Could not load rule config {self.config_path}: {e}. Using defaults.")
            self._set_fallback_config()

    def _apply(self, config: Dict[str, Any]):
        severities = dict(DEFAULT_SEVERITIES)
        severities.update(config.get('severities') or {})
        self.severities = {rule_id: Severity.from_name(name) for rule_id, name in severities.items()}

        self.thresholds = dict(DEFAULT_THRESHOLDS)
        self.thresholds.update({name: int(value) for name, value in (config.get('thresholds') or {}).items()})

        pattern = config.get('exception_pattern')
        self.exception_pattern = re.compile(pattern) if pattern else DEFAULT_EXCEPTION_PATTERN

        call_seq = config.get('call_seq') or {}
        self.flag_prefixes = tuple(call_seq.get('flag_prefixes') or DEFAULT_FLAG_PREFIXES)
        self.forbidden_placeholders = tuple(call_seq.get('forbidden_placeholders') or DEFAULT_FORBIDDEN_PLACEHOLDERS)

    def _set_fallback_config(self):
        self.severities = {rule_id: Severity.from_name(name) for rule_id, name in DEFAULT_SEVERITIES.items()}
        self.thresholds = dict(DEFAULT_THRESHOLDS)
        self.exception_pattern = DEFAULT_EXCEPTION_PATTERN
        self.flag_prefixes = DEFAULT_FLAG_PREFIXES
        self.forbidden_placeholders = DEFAULT_FORBIDDEN_PLACEHOLDERS

    def severity_for(self, rule_id: str) -> Severity:
        return self.severities.get(rule_id, Severity.ERROR)

    def threshold(self, name: str) -> int:
        return self.thresholds[name]

    @property
    def rule_ids(self) -> Tuple[str, ...]:
        return tuple(self.severities)

    @classmethod
    def reset(cls):
        """Forget loaded configurations (used by tests)."""
        cls._instances.clear()


def get_rule_config(config_path: Optional[str] = None) -> RuleConfigService:
    return RuleConfigService(config_path)
