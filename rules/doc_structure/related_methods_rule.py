"""
Related Methods Rule
Based on the Ruby documentation guide topic: "Related Methods"
"""
import re
from typing import List, Optional

from structural_parsing.segment_classifier import RELATED_PREFIX, SegmentKind
from structural_parsing.types import CommentBlock, DocumentedEntity
from ..base_rule import BaseRule
from ..services.rule_config_service import RuleConfigService
from ..types import RuleContext, Violation

METHOD_REFERENCE = re.compile(
    r'(?<![\w:#.\\])(?:[A-Z]\w*(?:::[A-Z]\w*)*)?(?:#|::|\.)(?:[A-Za-z_]\w*[?!=]?|\[\]=?|[-+*/%<=>!~^&|]+)'
)
CONSTANT_REFERENCE = re.compile(r'^[A-Z]\w*(?:::[A-Z]\w*)*$')
LIST_SEPARATOR = re.compile(r'\s*[,;]\s*(?:(?:and|or)\s+)?|\s+(?:and|or)\s+')


def count_references(text: str) -> int:
    """Count the method and class references listed after 'Related:'."""
    body = RELATED_PREFIX.sub('', text.strip(), count=1)
    count = 0
    for item in LIST_SEPARATOR.split(body.replace('\n', ' ')):
        item = item.strip().rstrip('.')
        references = METHOD_REFERENCE.findall(item)
        if references:
            count += len(references)
        elif CONSTANT_REFERENCE.match(item):
            count += 1
    return count


class RelatedMethodsRule(BaseRule):
    """A Related paragraph lists at most `max_related` methods."""

    def __init__(self, config_service: Optional[RuleConfigService] = None, max_related: Optional[int] = None):
        super().__init__(config_service)
        self.max_related = max_related if max_related is not None else self.config.threshold('max_related')

    def _get_rule_type(self) -> str:
        return 'TooManyRelated'

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        errors = []
        for segment in context.segments_of(SegmentKind.RELATED):
            count = count_references(segment.text)
            if count > self.max_related:
                errors.append(self._create_error(
                    span=segment.span,
                    message=f"The Related paragraph of {entity.qualified_name} lists {count} methods; "
                            f"list at most {self.max_related}.",
                    suggestions=["Keep only the most closely related methods and leave the rest "
                                 "to the class's \"What's Here\" section."],
                ))
        return errors
