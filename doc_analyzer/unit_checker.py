"""
Unit Checker
Runs the whole pipeline on one source unit: extraction, per-entity rules,
then the cross-reference analyzers over the complete entity list.
"""

import logging
from typing import List, Optional

from rules import RulesRegistry, get_registry
from rules.types import CheckedEntity, NewInstanceLookup, RuleContext, Violation
from structural_parsing.extractors import CommentExtractor
from structural_parsing.types import SourceUnit
from .classification import no_classification

logger = logging.getLogger(__name__)


class UnitChecker:
    """
    Checks one SourceUnit at a time.

    Holds only configured collaborators, so one instance can serve several
    worker threads.
    """

    def __init__(self, registry: Optional[RulesRegistry] = None,
                 new_instance_lookup: Optional[NewInstanceLookup] = None,
                 extractor: Optional[CommentExtractor] = None):
        self.registry = registry or get_registry()
        self.new_instance_lookup = new_instance_lookup or no_classification
        self.extractor = extractor or CommentExtractor()
        self.parser = self.registry.create_parser()

    def checked_entities(self, unit: SourceUnit) -> List[CheckedEntity]:
        """Extract every entity of the unit with the rule context of its block."""
        checked = []
        for entity, block in self.extractor.extract(unit):
            context = RuleContext.build(
                block,
                parser=self.parser,
                exception_pattern=self.registry.config.exception_pattern,
                new_instance_lookup=self.new_instance_lookup,
                entity=entity,
            )
            checked.append(CheckedEntity(entity, block, context))
        return checked

    def check_unit(self, unit: SourceUnit) -> List[Violation]:
        checked = self.checked_entities(unit)
        violations: List[Violation] = []
        for item in checked:
            violations.extend(self.registry.analyze_entity(item.entity, item.block, item.context))
        violations.extend(self.registry.analyze_unit(checked))
        logger.debug(f"{unit.path}: {len(checked)} entities, {len(violations)} violations")
        return violations
