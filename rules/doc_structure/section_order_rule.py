"""
Section Order Rule
Based on the Ruby documentation guide topic: "Methods" (layout of a method comment)
"""
from typing import List

from structural_parsing.segment_classifier import SECTION_ORDER, SegmentKind
from structural_parsing.types import CommentBlock, DocumentedEntity
from ..base_rule import BaseRule
from ..types import RuleContext, Violation

SECTION_LABELS = {
    SegmentKind.CALL_SEQ: 'call-seq',
    SegmentKind.SYNOPSIS: 'synopsis',
    SegmentKind.DETAILS: 'details',
    SegmentKind.ARGS: 'arguments',
    SegmentKind.CORNER_CASES: 'corner cases',
    SegmentKind.ALIASES: 'aliases',
    SegmentKind.RELATED: 'related methods',
}

START = 0


class SectionOrderRule(BaseRule):
    """
    Walks the classified segments through the section state machine.

    States are Start, one state per section in SECTION_ORDER, then End. Moving
    forward or staying put is valid; a backward move is reported and the walk
    continues from the section that caused it. Unclassified segments never
    move the state.
    """

    def _get_rule_type(self) -> str:
        return 'OutOfOrderSection'

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        errors: List[Violation] = []
        state = START
        previous = None
        for segment, kind in context.classified:
            if kind is SegmentKind.UNCLASSIFIED:
                continue
            position = SECTION_ORDER.index(kind) + 1
            if position < state:
                errors.append(self._create_error(
                    span=segment.span,
                    message=f"The {SECTION_LABELS[kind]} section of {entity.qualified_name} "
                            f"appears after the {SECTION_LABELS[previous]} section.",
                    suggestions=[f"Move this paragraph before the {SECTION_LABELS[previous]} section. "
                                 "Order: call-seq, synopsis, details, arguments, corner cases, aliases, related."],
                ))
            state = position
            previous = kind

        if not context.has(SegmentKind.SYNOPSIS) and not context.nodoc:
            errors.append(self._create_error(
                span=self._block_span(entity, block),
                message=f"The documentation of {entity.qualified_name} has no synopsis.",
                suggestions=["Start the prose with a short paragraph saying what the "
                             f"{entity.kind.value} does or is."],
                rule_id='MissingSynopsis',
            ))
        return errors
