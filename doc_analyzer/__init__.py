"""
Documentation Analyzer Package

Orchestrates a documentation check:
- DocChecker: Files and directories in, Report out, one thread per unit
- UnitChecker: The extraction and rule pipeline for a single source unit
- Report: Sorted violations with JSON and text renderings
- StaticClassification: New-instance answers for the naming rule
"""

from .classification import ClassificationError, StaticClassification, no_classification
from .report import Report
from .unit_checker import UnitChecker
from .doc_checker import DocChecker

__all__ = [
    'ClassificationError',
    'DocChecker',
    'Report',
    'StaticClassification',
    'UnitChecker',
    'no_classification',
]
