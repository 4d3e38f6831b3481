"""
Alias Analyzer
Based on the Ruby documentation guide topic: "Aliases"

Aliases are mentioned in the documentation of the method they alias
("#size is an alias for #length"); they are not documented a second time.
"""
import logging
from typing import List, Sequence, Set, Tuple

from structural_parsing.segment_classifier import alias_declaration
from structural_parsing.sentence_splitter import split_sentences
from ..types import CheckedEntity, Violation
from .base_cross_reference_analyzer import BaseCrossReferenceAnalyzer

logger = logging.getLogger(__name__)


class AliasAnalyzer(BaseCrossReferenceAnalyzer):

    def _get_rule_type(self) -> str:
        return 'DuplicateAliasListing'

    def alias_edges(self, item: CheckedEntity) -> List[Tuple[str, str]]:
        """The (alias, target) pairs declared in one entity's comment."""
        edges = []
        for segment in item.context.prose_segments():
            for sentence in split_sentences(segment.text):
                declared = alias_declaration(sentence.text)
                if declared:
                    edges.append(declared)
        return edges

    def analyze_unit(self, checked: Sequence[CheckedEntity]) -> List[Violation]:
        index = self._method_index(checked)
        reported: Set[int] = set()
        errors = []
        for item in checked:
            if item.block.malformed or item.block.is_empty:
                continue
            for alias, target in self.alias_edges(item):
                owner, name = self._split_reference(alias)
                owner = owner or self._owner_of(item.entity)
                for duplicate in index.get((owner, name), []):
                    if duplicate is item or not duplicate.is_documented or id(duplicate) in reported:
                        continue
                    reported.add(id(duplicate))
                    logger.debug(f"{duplicate.entity.qualified_name} is both documented and listed as an alias")
                    errors.append(self._create_error(
                        span=self._block_span(duplicate.entity, duplicate.block),
                        message=f"{duplicate.entity.qualified_name} is documented separately, but the "
                                f"documentation of {item.entity.qualified_name} lists it as an alias for {target}.",
                        suggestions=["Remove this comment; the alias is already mentioned in the "
                                     "documentation of the method it aliases."],
                    ))
        return errors
