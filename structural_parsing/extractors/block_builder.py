"""
Comment Block Builder
Turns the raw lines of one documentation comment into an immutable CommentBlock.
Decoration ('#', ' * ') has already been removed by the language extractor.
"""
import re
from typing import List, Sequence, Tuple

from ..types import CommentBlock, Segment, SourceUnit, Span

CALL_SEQ_DIRECTIVE = re.compile(r'^call-seq:', re.IGNORECASE)

# (text, offset of text[0] in the source unit)
RawLine = Tuple[str, int]


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(' \t'))


def build_comment_block(unit: SourceUnit, raw_lines: Sequence[RawLine], opener: Span) -> CommentBlock:
    """
    Split raw comment lines into paragraph segments.

    Blank lines separate segments; a `call-seq:` line always opens a new
    segment. The smallest indentation across the block is removed so that
    code examples keep their relative indent and can be marked verbatim.
    """
    lines = [(text.rstrip(), offset) for text, offset in raw_lines]
    while lines and not lines[0][0].strip():
        lines.pop(0)
    while lines and not lines[-1][0].strip():
        lines.pop()
    if not lines:
        return CommentBlock(segments=(), span=opener)

    base = min(_indent_of(text) for text, _ in lines if text.strip())

    groups: List[List[RawLine]] = []
    current: List[RawLine] = []
    for text, offset in lines:
        if not text.strip():
            if current:
                groups.append(current)
                current = []
            continue
        dedented = text[base:]
        if CALL_SEQ_DIRECTIVE.match(dedented) and current:
            groups.append(current)
            current = []
        current.append((dedented, offset + base))
    if current:
        groups.append(current)

    segments = []
    for group in groups:
        texts = tuple(text for text, _ in group)
        spans = tuple(unit.span_at(offset) for _, offset in group)
        is_call_seq = bool(CALL_SEQ_DIRECTIVE.match(texts[0]))
        verbatim = not is_call_seq and all(_indent_of(t) > 0 for t in texts)
        segments.append(Segment(lines=texts, line_spans=spans, verbatim=verbatim))

    return CommentBlock(segments=tuple(segments), span=opener)
