"""
Cross-Reference Package

Unit-level analyzers that look at all comments of a source unit at once:
- AliasAnalyzer: Aliases documented a second time
- AutoLinkAnalyzer: Entity names mentioned often enough to need escaping
"""

from .base_cross_reference_analyzer import BaseCrossReferenceAnalyzer
from .alias_analyzer import AliasAnalyzer
from .auto_link_analyzer import AutoLinkAnalyzer

__all__ = [
    'BaseCrossReferenceAnalyzer',
    'AliasAnalyzer',
    'AutoLinkAnalyzer',
]
