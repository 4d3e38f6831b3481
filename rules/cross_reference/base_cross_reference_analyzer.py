"""
Base Cross-Reference Analyzer
Unit-level checks that compare the comments of a source unit with each other.
They run after every entity of the unit has been extracted.
"""
from abc import abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from structural_parsing.types import CommentBlock, DocumentedEntity, EntityKind
from ..base_rule import BaseRule
from ..types import CheckedEntity, RuleContext, Violation


class BaseCrossReferenceAnalyzer(BaseRule):
    """
    Base class for unit-level analyzers.

    analyze() is not meaningful for a single entity; subclasses implement
    analyze_unit() instead.
    """

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        return self.analyze_unit([CheckedEntity(entity, block, context)])

    @abstractmethod
    def analyze_unit(self, checked: Sequence[CheckedEntity]) -> List[Violation]:
        pass

    @staticmethod
    def _split_reference(reference: str) -> Tuple[Optional[str], str]:
        """
        Split 'Owner#name', 'Owner.name', 'Owner::name', '#name' or 'name'
        into (owner or None, name).
        """
        for separator in ('#', '::', '.'):
            owner, found, name = reference.rpartition(separator)
            if found and name and not name[0].isupper():
                return (owner or None), name
        return None, reference

    @staticmethod
    def _method_index(checked: Sequence[CheckedEntity]) -> Dict[Tuple[Optional[str], str], List[CheckedEntity]]:
        """Map (owner, name) to the checked method entities of the unit."""
        index = {}
        for item in checked:
            if item.entity.name and item.entity.kind is EntityKind.METHOD:
                index.setdefault((item.entity.owner, item.entity.name), []).append(item)
        return index

    @staticmethod
    def _owner_of(entity: DocumentedEntity) -> Optional[str]:
        """Owner that unqualified method names in this entity's comment refer to."""
        if entity.kind is EntityKind.METHOD:
            return entity.owner
        return entity.qualified_name
