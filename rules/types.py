"""
Rule Types
Violations produced by the rules and the per-entity context handed to them.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from structural_parsing.call_seq import CallSeqParser, CallSeqParseResult
from structural_parsing.segment_classifier import DEFAULT_EXCEPTION_PATTERN, SegmentKind, classify_block
from structural_parsing.types import CommentBlock, DocumentedEntity, EntityKind, Segment, Span

NewInstanceLookup = Callable[[DocumentedEntity], Optional[bool]]

NODOC_DIRECTIVE = ':nodoc:'


def implicit_receiver(entity: DocumentedEntity) -> str:
    """
    How receiver-less call-seq entries of an instance method spell the
    receiver: the owner's last name component in lower case ('array' for
    Array, 'stat' for File::Stat). Empty for everything else.
    """
    if entity.kind is not EntityKind.METHOD or entity.singleton or not entity.owner:
        return ''
    return entity.owner.rpartition('::')[2].lower()


class Severity(Enum):
    ERROR = "error"
    ADVISORY = "advisory"

    @property
    def rank(self) -> int:
        return 2 if self is Severity.ERROR else 1

    def at_least(self, threshold: 'Severity') -> bool:
        return self.rank >= threshold.rank

    @classmethod
    def from_name(cls, name: str) -> 'Severity':
        """Parse a severity name; raises ValueError for unknown names."""
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown severity '{name}' (expected 'error' or 'advisory')") from None


@dataclass(frozen=True)
class Violation:
    rule_id: str
    severity: Severity
    span: Span
    message: str
    suggestions: Tuple[str, ...] = ()

    @property
    def sort_key(self) -> Tuple[str, int, str]:
        return (self.span.path, self.span.offset, self.rule_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.span.path,
            'line': self.span.line,
            'column': self.span.column,
            'rule_id': self.rule_id,
            'severity': self.severity.value,
            'message': self.message,
            'suggestions': list(self.suggestions),
        }


@dataclass(frozen=True)
class RuleContext:
    """
    Everything the rules share about one entity's comment block.

    Segment classification and call-seq parsing happen once per block, here,
    so that every rule sees the same reading of the comment.
    """
    classified: Tuple[Tuple[Segment, SegmentKind], ...] = ()
    call_seqs: Tuple[Tuple[Segment, CallSeqParseResult], ...] = ()
    new_instance_lookup: Optional[NewInstanceLookup] = None
    nodoc: bool = False

    @classmethod
    def build(cls, block: CommentBlock, parser: Optional[CallSeqParser] = None,
              exception_pattern: Pattern = DEFAULT_EXCEPTION_PATTERN,
              new_instance_lookup: Optional[NewInstanceLookup] = None,
              entity: Optional[DocumentedEntity] = None) -> 'RuleContext':
        if block.malformed or block.is_empty:
            return cls(new_instance_lookup=new_instance_lookup)
        parser = parser or CallSeqParser()
        classified = tuple(classify_block(block, exception_pattern))
        prose = '\n\n'.join(segment.text for segment, kind in classified
                            if kind is not SegmentKind.CALL_SEQ and not segment.verbatim)
        receiver = implicit_receiver(entity) if entity is not None else ''
        call_seqs = tuple((segment, parser.parse(segment, prose, receiver))
                          for segment, kind in classified if kind is SegmentKind.CALL_SEQ)
        nodoc = any(NODOC_DIRECTIVE in segment.text for segment in block.segments)
        return cls(classified=classified, call_seqs=call_seqs,
                   new_instance_lookup=new_instance_lookup, nodoc=nodoc)

    def segments_of(self, kind: SegmentKind) -> List[Segment]:
        return [segment for segment, segment_kind in self.classified if segment_kind is kind]

    def has(self, kind: SegmentKind) -> bool:
        return any(segment_kind is kind for _, segment_kind in self.classified)

    def prose_segments(self) -> List[Segment]:
        """Segments that hold prose: neither call-seq nor code examples."""
        return [segment for segment, kind in self.classified
                if kind is not SegmentKind.CALL_SEQ and not segment.verbatim]


@dataclass(frozen=True)
class CheckedEntity:
    """An entity of a unit together with its block and the block's rule context."""
    entity: DocumentedEntity
    block: CommentBlock
    context: RuleContext

    @property
    def is_documented(self) -> bool:
        """Has its own full documentation: a readable comment with a synopsis."""
        return (not self.block.malformed and not self.block.is_empty
                and self.context.has(SegmentKind.SYNOPSIS))
