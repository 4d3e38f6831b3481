"""
Structural Parsing Package

Turns source files into documented entities and their comment blocks:
- SourceClassifier: language tag from the file extension
- CommentExtractor: (DocumentedEntity, CommentBlock) pairs per source unit
- classify_block: section kind of every comment paragraph
- CallSeqParser: structured call-seq entries
"""

from .types import (
    CommentBlock, DocumentedEntity, EntityKind, Segment, SourceLoadError, SourceUnit, Span,
)
from .source_classifier import SourceClassifier
from .extractors import CommentExtractor, extract_comments
from .segment_classifier import SegmentKind, classify_block, classify_segment
from .call_seq import CallSeqParser

__all__ = [
    'CommentBlock',
    'DocumentedEntity',
    'EntityKind',
    'Segment',
    'SourceLoadError',
    'SourceUnit',
    'Span',
    'SourceClassifier',
    'CommentExtractor',
    'extract_comments',
    'SegmentKind',
    'classify_block',
    'classify_segment',
    'CallSeqParser',
]
