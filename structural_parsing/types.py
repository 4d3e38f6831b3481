"""
Structural Parsing Types
Core data structures for source units, documented entities and their comment blocks.
All values are immutable once produced by the extractors.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class SourceLoadError(Exception):
    """Raised when a source unit's backing file cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True, order=True)
class Span:
    """Position data copied by value out of a source unit."""
    path: str
    offset: int
    line: int = field(compare=False)
    column: int = field(compare=False)

    def advance(self, columns: int) -> 'Span':
        """The span `columns` characters further along the same line."""
        return Span(path=self.path, offset=self.offset + columns, line=self.line, column=self.column + columns)


@dataclass(frozen=True)
class SourceUnit:
    """A named source file with its raw text and language tag ('c' or 'ruby')."""
    path: str
    text: str
    language: str

    @classmethod
    def load(cls, path: str, language: str) -> 'SourceUnit':
        """
        Read a source file from disk.

        Raises:
            SourceLoadError: if the file cannot be opened or decoded.
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceLoadError(path, str(e)) from e
        return cls(path=path, text=text, language=language)

    def span_at(self, offset: int) -> Span:
        """Build a Span for a character offset of this unit's text."""
        line = self.text.count('\n', 0, offset) + 1
        line_start = self.text.rfind('\n', 0, offset) + 1
        return Span(path=self.path, offset=offset, line=line, column=offset - line_start + 1)


class EntityKind(Enum):
    CLASS = "class"
    MODULE = "module"
    METHOD = "method"


@dataclass(frozen=True)
class DocumentedEntity:
    """A class, module or method declaration found in a source unit."""
    kind: EntityKind
    name: str
    span: Span
    language: str
    owner: Optional[str] = None
    singleton: bool = False

    @property
    def qualified_name(self) -> str:
        if self.kind is not EntityKind.METHOD or not self.owner:
            return self.name
        separator = '.' if self.singleton else '#'
        return f"{self.owner}{separator}{self.name}"


@dataclass(frozen=True)
class Segment:
    """
    One paragraph of a comment block.

    `lines` holds the comment text with decoration stripped and the block's
    base indentation removed; `line_spans` holds the position of each line's
    first content character in the source.
    """
    lines: Tuple[str, ...]
    line_spans: Tuple[Span, ...]
    verbatim: bool = False

    @property
    def text(self) -> str:
        return '\n'.join(self.lines)

    @property
    def span(self) -> Span:
        return self.line_spans[0]

    def offset_to_span(self, index: int) -> Span:
        """Map a character index inside `text` back to a source Span."""
        remaining = index
        for line, line_span in zip(self.lines, self.line_spans):
            if remaining <= len(line):
                return Span(path=line_span.path,
                            offset=line_span.offset + remaining,
                            line=line_span.line,
                            column=line_span.column + remaining)
            remaining -= len(line) + 1
        return self.line_spans[-1]


@dataclass(frozen=True)
class CommentBlock:
    """The ordered segments of one documentation comment."""
    segments: Tuple[Segment, ...] = ()
    span: Optional[Span] = None
    malformed: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.segments and not self.malformed

    @classmethod
    def empty(cls) -> 'CommentBlock':
        return cls()

    @classmethod
    def unterminated(cls, opener: Span) -> 'CommentBlock':
        return cls(segments=(), span=opener, malformed=True)
