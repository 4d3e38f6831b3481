"""
Source language classification using file extensions.
This module's sole purpose is choosing a language tag - NOT parsing.
"""

import os
from typing import Dict, Optional


class SourceClassifier:
    """
    Extension based classifier for documentation sources.
    C extension sources document their methods in fenced block comments,
    Ruby sources in line-prefixed comments.
    """

    def __init__(self, extensions: Optional[Dict[str, str]] = None):
        self.extensions = extensions or {
            '.c': 'c',
            '.h': 'c',
            '.inc': 'c',
            '.y': 'c',
            '.rb': 'ruby',
            '.rake': 'ruby',
            '.gemspec': 'ruby',
        }

    def classify(self, path: str) -> Optional[str]:
        """Return the language tag for `path`, or None when it is not a documentation source."""
        _, extension = os.path.splitext(path)
        return self.extensions.get(extension.lower())

    def is_supported(self, path: str) -> bool:
        return self.classify(path) is not None
