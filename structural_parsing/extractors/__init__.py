"""
Comment extractors for C extension sources and Ruby sources.
"""

from .comment_extractor import CommentExtractor, extract_comments
from .c_extractor import CCommentExtractor
from .ruby_extractor import RubyCommentExtractor

__all__ = [
    'CommentExtractor',
    'CCommentExtractor',
    'RubyCommentExtractor',
    'extract_comments',
]
