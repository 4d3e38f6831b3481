"""
ASCII Only Rule
Documentation comments in C sources must be plain US-ASCII.
"""
from typing import List

from structural_parsing.types import CommentBlock, DocumentedEntity
from .base_rule import BaseRule
from .types import RuleContext, Violation

C_LANGUAGE = 'c'


class AsciiOnlyRule(BaseRule):
    """One violation per comment line that holds a non-ASCII character."""

    def _get_rule_type(self) -> str:
        return 'NonAsciiCharacter'

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        if entity.language != C_LANGUAGE:
            return []
        errors = []
        for segment in block.segments:
            for line, line_span in zip(segment.lines, segment.line_spans):
                column = next((i for i, ch in enumerate(line) if ord(ch) > 127), None)
                if column is None:
                    continue
                ch = line[column]
                errors.append(self._create_error(
                    span=line_span.advance(column),
                    message=f"Non-ASCII character '{ch}' (U+{ord(ch):04X}) in the documentation "
                            f"of {entity.qualified_name}.",
                    suggestions=["Use an ASCII spelling: '->' for arrows, plain quotes, '--' for dashes."],
                ))
        return errors
