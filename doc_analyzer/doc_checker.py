"""
Documentation Checker
Collects source units from paths and checks them on a thread pool.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple

from rules import RulesRegistry
from rules.services.rule_config_service import RuleConfigService, get_rule_config
from rules.types import NewInstanceLookup, Violation
from structural_parsing.source_classifier import SourceClassifier
from structural_parsing.types import SourceLoadError, SourceUnit, Span
from .report import Report
from .unit_checker import UnitChecker

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class DocChecker:
    """
    Checks documentation comments across many files.

    One task per source unit; units share nothing mutable, so their order of
    completion does not affect the report.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS,
                 new_instance_lookup: Optional[NewInstanceLookup] = None,
                 config_service: Optional[RuleConfigService] = None,
                 max_related: Optional[int] = None,
                 autolink_threshold: Optional[int] = None,
                 classifier: Optional[SourceClassifier] = None):
        self.max_workers = max(1, max_workers)
        self.config = config_service or get_rule_config()
        self.registry = RulesRegistry(self.config, max_related=max_related,
                                      autolink_threshold=autolink_threshold)
        self.unit_checker = UnitChecker(self.registry, new_instance_lookup)
        self.classifier = classifier or SourceClassifier()

    def collect(self, paths: Iterable[str]) -> Tuple[List[Tuple[str, str]], List[str]]:
        """
        Expand files and directories into (path, language) pairs.

        Returns:
            The supported files, and the explicitly named files that were skipped
        """
        sources: List[Tuple[str, str]] = []
        skipped: List[str] = []
        for path in paths:
            if os.path.isdir(path):
                for root, dirs, files in os.walk(path):
                    dirs.sort()
                    for name in sorted(files):
                        full_path = os.path.join(root, name)
                        language = self.classifier.classify(full_path)
                        if language:
                            sources.append((full_path, language))
                continue
            language = self.classifier.classify(path)
            if language:
                sources.append((path, language))
            else:
                logger.warning(f"Skipping {path}: not a C or Ruby source file")
                skipped.append(path)
        return sources, skipped

    def check_paths(self, paths: Sequence[str]) -> Report:
        sources, _ = self.collect(paths)
        logger.info(f"Checking {len(sources)} source files with {self.max_workers} workers")
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(lambda source: self._check_path(*source), sources))
        return Report((v for violations in results for v in violations), files_checked=len(sources))

    def check_units(self, units: Sequence[SourceUnit]) -> Report:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(self.unit_checker.check_unit, units))
        return Report((v for violations in results for v in violations), files_checked=len(units))

    def _check_path(self, path: str, language: str) -> List[Violation]:
        try:
            unit = SourceUnit.load(path, language)
        except SourceLoadError as e:
            logger.error(f"Cannot read {e.path}: {e.reason}")
            return [Violation(
                rule_id='SourceReadError',
                severity=self.config.severity_for('SourceReadError'),
                span=Span(path=path, offset=0, line=1, column=1),
                message=f"Cannot read source file: {e.reason}",
            )]
        return self.unit_checker.check_unit(unit)
