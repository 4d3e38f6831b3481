"""
Auto-Link Analyzer
Based on the Ruby documentation guide topic: "Auto-Linking"

RDoc turns every mention of a known class or method into a link. A name
mentioned over and over in one comment should be linked once and escaped
with a leading backslash afterwards.
"""
import re
from typing import Dict, List, Optional, Pattern, Sequence, Set, Tuple

from structural_parsing.types import DocumentedEntity, EntityKind, Segment, Span
from ..services.rule_config_service import RuleConfigService
from ..types import CheckedEntity, Violation
from .base_cross_reference_analyzer import BaseCrossReferenceAnalyzer

NOT_AFTER = r'(?<![\\\w:#.$@])'
WORD = re.compile(r'[A-Za-z_]\w*(?:::[A-Z]\w*)*[?!=]?')


def reference_pattern(entity: DocumentedEntity) -> Optional[Tuple[str, Pattern]]:
    """(label, pattern) matching the auto-linkable mentions of an entity."""
    if not entity.name:
        return None
    if entity.kind is EntityKind.METHOD:
        name = re.escape(entity.name)
        tail = r'(?![\w?!=])' if re.match(r'\w', entity.name[-1]) else r'(?!\w)'
        if entity.owner:
            head = rf'(?:{re.escape(entity.owner)}(?:#|::|\.)|#|::)'
        else:
            head = r'(?:#|::)'
        label = f"#{entity.name}" if not entity.singleton else f"::{entity.name}"
        return label, re.compile(NOT_AFTER + head + name + tail)
    name = re.escape(entity.qualified_name)
    return entity.qualified_name, re.compile(NOT_AFTER + name + r'(?!\w|#|::\w|\.[a-z_])')


class AutoLinkAnalyzer(BaseCrossReferenceAnalyzer):

    def __init__(self, config_service: Optional[RuleConfigService] = None, threshold: Optional[int] = None):
        super().__init__(config_service)
        self.threshold = threshold if threshold is not None else self.config.threshold('autolink_threshold')

    def _get_rule_type(self) -> str:
        return 'ExcessiveAutoLinkCandidate'

    def analyze_unit(self, checked: Sequence[CheckedEntity]) -> List[Violation]:
        patterns: Dict[Tuple[str, str], Tuple[Pattern, str]] = {}
        for item in checked:
            reference = reference_pattern(item.entity)
            if reference is not None:
                needle = item.entity.name if item.entity.kind is EntityKind.METHOD else item.entity.qualified_name
                patterns.setdefault((reference[0], item.entity.owner or ''), (reference[1], needle))
        if not patterns:
            return []

        by_word: Dict[str, List[Tuple[str, Pattern]]] = {}
        always: List[Tuple[str, Pattern]] = []
        for (label, _), (pattern, needle) in patterns.items():
            if WORD.fullmatch(needle):
                by_word.setdefault(needle, []).append((label, pattern))
            else:
                always.append((label, pattern))

        advisories = []
        for item in checked:
            if item.block.malformed or item.block.is_empty:
                continue
            segments = item.context.prose_segments()
            words = self._words(segments)
            candidates = [reference for word in sorted(words & by_word.keys()) for reference in by_word[word]]
            for label, pattern in candidates + always:
                mentions = self._mentions(pattern, segments)
                if len(mentions) <= self.threshold:
                    continue
                advisories.append(self._create_error(
                    span=mentions[self.threshold],
                    message=f"'{label}' is mentioned {len(mentions)} times in the documentation of "
                            f"{item.entity.qualified_name}; each mention becomes a link.",
                    suggestions=[f"Keep the first mention as a link and write later ones as '\\{label}'."],
                ))
        return advisories

    @staticmethod
    def _words(segments: Sequence[Segment]) -> Set[str]:
        """Names that occur in the segments; only their patterns need to run."""
        words = set()
        for segment in segments:
            for word in WORD.findall(segment.text):
                words.add(word)
                words.add(word.rstrip('?!='))
        return words

    @staticmethod
    def _mentions(pattern: Pattern, segments: Sequence[Segment]) -> List[Span]:
        spans = []
        for segment in segments:
            for match in pattern.finditer(segment.text):
                spans.append(segment.offset_to_span(match.start()))
        return spans
