"""
Comment extractor dispatch.
Picks the language-specific extractor from the source unit's language tag.
"""
from typing import Iterator, Tuple

from ..types import CommentBlock, DocumentedEntity, SourceUnit
from .c_extractor import CCommentExtractor
from .ruby_extractor import RubyCommentExtractor


class CommentExtractor:
    """
    Produces (DocumentedEntity, CommentBlock) pairs for a source unit.

    The result is a generator: it is evaluated lazily and re-scanning the
    same unit always yields the same sequence.
    """

    def __init__(self):
        self.extractors = {
            'c': CCommentExtractor(),
            'ruby': RubyCommentExtractor(),
        }

    @property
    def supported_languages(self):
        return sorted(self.extractors)

    def extract(self, unit: SourceUnit) -> Iterator[Tuple[DocumentedEntity, CommentBlock]]:
        extractor = self.extractors.get(unit.language)
        if extractor is None:
            raise ValueError(f"Unsupported language tag '{unit.language}' for {unit.path}")
        return extractor.extract(unit)


def extract_comments(unit: SourceUnit) -> Iterator[Tuple[DocumentedEntity, CommentBlock]]:
    """Convenience function for one-off extraction."""
    return CommentExtractor().extract(unit)
