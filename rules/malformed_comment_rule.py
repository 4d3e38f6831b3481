"""
Malformed Comment Rule
Reports block comments whose delimiters are broken. No other rule looks at
such a comment: its content was never recovered.
"""
from typing import List

from structural_parsing.types import CommentBlock, DocumentedEntity
from .base_rule import BaseRule
from .types import RuleContext, Violation


class MalformedCommentRule(BaseRule):

    def _get_rule_type(self) -> str:
        return 'MalformedComment'

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        if not block.malformed:
            return []
        target = f" before {entity.qualified_name}" if entity.name else ""
        return [self._create_error(
            span=self._block_span(entity, block),
            message=f"Unterminated block comment{target}.",
            suggestions=["Close the comment with '*/' before the next '/*'."],
        )]
