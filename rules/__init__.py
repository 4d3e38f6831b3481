"""
Documentation Rules Package

Per-entity rules check one comment block at a time; cross-reference
analyzers check all the comments of a source unit together. RulesRegistry
holds one configured instance of each and applies them.
"""

import logging
import threading
from typing import List, Optional, Sequence

from structural_parsing.call_seq import CallSeqParser
from structural_parsing.types import CommentBlock, DocumentedEntity
from .types import CheckedEntity, RuleContext, Severity, Violation
from .base_rule import BaseRule
from .services.rule_config_service import RuleConfigService, get_rule_config
from .malformed_comment_rule import MalformedCommentRule
from .ascii_only_rule import AsciiOnlyRule
from .doc_structure.section_order_rule import SectionOrderRule
from .doc_structure.related_methods_rule import RelatedMethodsRule
from .call_sequence.call_seq_rule import CallSeqRule
from .call_sequence.new_instance_naming_rule import NewInstanceNamingRule
from .cross_reference import AliasAnalyzer, AutoLinkAnalyzer

logger = logging.getLogger(__name__)


class RulesRegistry:
    """Configured rule instances, applied independently of each other."""

    def __init__(self, config_service: Optional[RuleConfigService] = None,
                 max_related: Optional[int] = None, autolink_threshold: Optional[int] = None):
        self.config = config_service or get_rule_config()
        self.malformed_rule = MalformedCommentRule(self.config)
        self.rules: List[BaseRule] = [
            SectionOrderRule(self.config),
            CallSeqRule(self.config),
            NewInstanceNamingRule(self.config),
            RelatedMethodsRule(self.config, max_related=max_related),
            AsciiOnlyRule(self.config),
        ]
        self.unit_analyzers = [
            AliasAnalyzer(self.config),
            AutoLinkAnalyzer(self.config, threshold=autolink_threshold),
        ]
        logger.debug(f"Rules registry ready with {len(self.rules)} rules and "
                     f"{len(self.unit_analyzers)} unit analyzers")

    def create_parser(self) -> CallSeqParser:
        """A call-seq parser using the configured merge and placeholder settings."""
        return CallSeqParser(flag_prefixes=self.config.flag_prefixes,
                             forbidden_placeholders=self.config.forbidden_placeholders)

    def analyze_entity(self, entity: DocumentedEntity, block: CommentBlock,
                       context: RuleContext) -> List[Violation]:
        """
        Apply every per-entity rule.

        An empty block yields nothing; a malformed block yields only the
        MalformedComment violation.
        """
        if block.malformed:
            return self.malformed_rule.analyze(entity, block, context)
        if block.is_empty:
            return []
        violations: List[Violation] = []
        for rule in self.rules:
            violations.extend(rule.analyze(entity, block, context))
        return violations

    def analyze_unit(self, checked: Sequence[CheckedEntity]) -> List[Violation]:
        """Apply the cross-reference analyzers to a fully extracted unit."""
        violations: List[Violation] = []
        for analyzer in self.unit_analyzers:
            violations.extend(analyzer.analyze_unit(checked))
        return violations

    @property
    def rule_types(self) -> List[str]:
        return [self.malformed_rule.rule_type] + [rule.rule_type for rule in self.rules + self.unit_analyzers]


_registry: Optional[RulesRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> RulesRegistry:
    """Shared registry built from the default configuration."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = RulesRegistry()
        return _registry


__all__ = [
    'BaseRule',
    'CheckedEntity',
    'RuleContext',
    'RulesRegistry',
    'Severity',
    'Violation',
    'get_registry',
    'get_rule_config',
]
