"""
Shared fixtures for the documentation checker tests.
"""

import textwrap

import pytest

from doc_analyzer.unit_checker import UnitChecker
from rules import RulesRegistry
from structural_parsing.call_seq import CallSeqParser
from structural_parsing.types import SourceUnit


def make_unit(text: str, language: str = 'ruby', path: str = None) -> SourceUnit:
    """Build a SourceUnit from an indented triple-quoted literal."""
    path = path or ('sample.c' if language == 'c' else 'sample.rb')
    return SourceUnit(path=path, text=textwrap.dedent(text).lstrip('\n'), language=language)


@pytest.fixture
def parser():
    return CallSeqParser()


@pytest.fixture
def registry():
    return RulesRegistry()


@pytest.fixture
def unit_checker(registry):
    return UnitChecker(registry)


@pytest.fixture
def check(unit_checker):
    """Check source text and return the violations, optionally only those of one rule."""
    def _check(text, language='ruby', rule_id=None, checker=None):
        violations = (checker or unit_checker).check_unit(make_unit(text, language))
        if rule_id is not None:
            violations = [v for v in violations if v.rule_id == rule_id]
        return violations
    return _check


@pytest.fixture
def extract():
    """Extract (entity, block) pairs from source text."""
    from structural_parsing.extractors import CommentExtractor

    def _extract(text, language='ruby'):
        return list(CommentExtractor().extract(make_unit(text, language)))
    return _extract


@pytest.fixture
def source_unit():
    return make_unit
