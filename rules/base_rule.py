"""
Base Rule Class - Abstract interface for all documentation rules.
All rules must inherit from this class and implement the required methods.
Rules hold configuration only; everything about the comment being checked
arrives through analyze().
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from structural_parsing.types import CommentBlock, DocumentedEntity, Span
from .services.rule_config_service import RuleConfigService, get_rule_config
from .types import RuleContext, Violation


class BaseRule(ABC):
    """
    Abstract base class for all per-entity documentation rules.
    """

    def __init__(self, config_service: Optional[RuleConfigService] = None) -> None:
        self.rule_type = self._get_rule_type()
        self.config = config_service or get_rule_config()

    @abstractmethod
    def _get_rule_type(self) -> str:
        """Returns the rule id this rule reports by default."""
        pass

    @abstractmethod
    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        """
        Check one entity's comment block.

        Args:
            entity: The documented entity
            block: Its comment block (never empty or malformed)
            context: Classification and call-seq parse results for the block

        Returns:
            List of violations, empty when the block conforms
        """
        pass

    def _create_error(self, span: Span, message: str, suggestions: Iterable[str] = (),
                      rule_id: Optional[str] = None) -> Violation:
        """Create a Violation with the configured severity of its rule id."""
        rule_id = rule_id or self.rule_type
        return Violation(
            rule_id=rule_id,
            severity=self.config.severity_for(rule_id),
            span=span,
            message=str(message),
            suggestions=tuple(str(s) for s in suggestions),
        )

    @staticmethod
    def _block_span(entity: DocumentedEntity, block: CommentBlock) -> Span:
        if block.span is not None:
            return block.span
        if block.segments:
            return block.segments[0].span
        return entity.span
