"""
Report Generator
Aggregates the violations of a run and renders them for machines (JSON) and
people (text grouped by file).
"""

import json
from collections import Counter
from itertools import groupby
from typing import Any, Dict, Iterable, Iterator, List, Union

from rules.types import Severity, Violation


class Report:
    """Violations of a run, kept sorted by (path, offset, rule_id)."""

    def __init__(self, violations: Iterable[Violation] = (), files_checked: int = 0):
        self.violations: List[Violation] = sorted(violations, key=lambda v: v.sort_key)
        self.files_checked = files_checked

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def __len__(self) -> int:
        return len(self.violations)

    def records(self) -> List[Dict[str, Any]]:
        """One flat dict per violation."""
        return [violation.to_dict() for violation in self.violations]

    def summary(self) -> Dict[str, Any]:
        by_severity = Counter(v.severity.value for v in self.violations)
        return {
            'files_checked': self.files_checked,
            'violations': len(self.violations),
            'errors': by_severity.get(Severity.ERROR.value, 0),
            'advisories': by_severity.get(Severity.ADVISORY.value, 0),
            'by_rule': dict(sorted(Counter(v.rule_id for v in self.violations).items())),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps({'summary': self.summary(), 'violations': self.records()}, indent=indent)

    def to_text(self) -> str:
        if not self.violations:
            return f"No documentation violations found ({self.files_checked} files checked)."
        lines = []
        for path, violations in groupby(self.violations, key=lambda v: v.span.path):
            lines.append(path)
            for v in violations:
                lines.append(f"  {v.span.line}:{v.span.column}: {v.severity.value}: {v.rule_id}: {v.message}")
                for suggestion in v.suggestions:
                    lines.append(f"      suggestion: {suggestion}")
            lines.append("")
        summary = self.summary()
        lines.append(f"{summary['violations']} violations ({summary['errors']} errors, "
                     f"{summary['advisories']} advisories) in {self.files_checked} files checked.")
        return "\n".join(lines)

    def filter(self, threshold: Union[str, Severity]) -> 'Report':
        """A report holding only violations at or above `threshold`."""
        threshold = _severity(threshold)
        return Report((v for v in self.violations if v.severity.at_least(threshold)), self.files_checked)

    def exit_code(self, threshold: Union[str, Severity] = Severity.ERROR) -> int:
        """1 when any violation is at or above `threshold`, else 0."""
        return 1 if len(self.filter(threshold)) else 0


def _severity(value: Union[str, Severity]) -> Severity:
    return value if isinstance(value, Severity) else Severity.from_name(value)
