"""
Segment classification for documentation comments.

Each paragraph of a comment block is mapped to the section of the method
documentation layout it most likely belongs to. The classification is a
heuristic: anything that cannot be placed is UNCLASSIFIED, never guessed.
"""
import re
from enum import Enum
from typing import List, Optional, Pattern, Tuple

from .extractors.block_builder import CALL_SEQ_DIRECTIVE
from .sentence_splitter import split_sentences
from .types import CommentBlock, Segment


class SegmentKind(Enum):
    CALL_SEQ = "call_seq"
    SYNOPSIS = "synopsis"
    DETAILS = "details"
    ARGS = "args"
    CORNER_CASES = "corner_cases"
    ALIASES = "aliases"
    RELATED = "related"
    UNCLASSIFIED = "unclassified"


# Documented order of the sections of a method comment.
SECTION_ORDER = (
    SegmentKind.CALL_SEQ,
    SegmentKind.SYNOPSIS,
    SegmentKind.DETAILS,
    SegmentKind.ARGS,
    SegmentKind.CORNER_CASES,
    SegmentKind.ALIASES,
    SegmentKind.RELATED,
)

RELATED_PREFIX = re.compile(r'^Related:')
ALIAS_SENTENCE = re.compile(
    r'^(?P<alias>[^\s]+)\s+is\s+an\s+alias\s+(?:for|of)\s+(?P<target>[^\s,;]+?)[.,;]?(?=\s|$)'
)
RDOC_DIRECTIVE = re.compile(r'^:[\w-]+:')
LABELED_ITEM = re.compile(
    r'^(?:[-*]\s+\+?[\w?!]+\+?\s*:(?!:)'   # - +arg+: description
    r'|\[\+?[^\]]+?\+?\]\s'               # [+arg+] description
    r'|\+?[\w?!]+\+?::(?:\s|$))'          # arg:: description
)
DEFAULT_EXCEPTION_PATTERN = re.compile(
    r'\b(?:[A-Z]\w*::)*(?:[A-Z]\w*(?:Error|Exception)|Exception|StopIteration|Interrupt)\b'
)


def alias_declaration(sentence: str) -> Optional[Tuple[str, str]]:
    """Return (alias, target) when the sentence reads 'X is an alias for Y'."""
    match = ALIAS_SENTENCE.match(sentence.strip())
    if not match:
        return None
    return match.group('alias').strip('+'), match.group('target').strip('+')


def classify_segment(segment: Segment, synopsis_seen: bool,
                     exception_pattern: Pattern = DEFAULT_EXCEPTION_PATTERN) -> SegmentKind:
    """
    Classify one segment.

    Args:
        segment: The segment to classify
        synopsis_seen: Whether an earlier segment of the same block was the synopsis
        exception_pattern: Pattern recognising exception class names

    Returns:
        The SegmentKind of the segment
    """
    first_line = segment.lines[0].strip()
    if CALL_SEQ_DIRECTIVE.match(segment.lines[0]):
        return SegmentKind.CALL_SEQ
    if RELATED_PREFIX.match(first_line):
        return SegmentKind.RELATED
    if RDOC_DIRECTIVE.match(first_line) or segment.verbatim:
        return SegmentKind.UNCLASSIFIED

    sentences = split_sentences(segment.text)
    if sentences and alias_declaration(sentences[0].text):
        return SegmentKind.ALIASES
    if LABELED_ITEM.match(first_line):
        return SegmentKind.ARGS
    if not synopsis_seen:
        return SegmentKind.SYNOPSIS
    if any(exception_pattern.search(sentence.text) for sentence in sentences):
        return SegmentKind.CORNER_CASES
    return SegmentKind.DETAILS


def classify_block(block: CommentBlock,
                   exception_pattern: Pattern = DEFAULT_EXCEPTION_PATTERN) -> List[Tuple[Segment, SegmentKind]]:
    """Classify every segment of a block, in order."""
    classified = []
    synopsis_seen = False
    for segment in block.segments:
        kind = classify_segment(segment, synopsis_seen, exception_pattern)
        if kind is SegmentKind.SYNOPSIS:
            synopsis_seen = True
        classified.append((segment, kind))
    return classified
