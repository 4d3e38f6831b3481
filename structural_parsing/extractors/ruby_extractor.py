"""
Ruby Comment Extractor
Collects '#' line comments written directly above class, module, def and
alias declarations, tracking class/module nesting to name method owners.
"""
import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..types import CommentBlock, DocumentedEntity, EntityKind, SourceUnit
from .block_builder import RawLine, build_comment_block

logger = logging.getLogger(__name__)

COMMENT_LINE = re.compile(r'^(\s*)#(?!\{)(.*)$')
MAGIC_COMMENT = re.compile(
    r'^\s*#\s*(?:-\*-.*-\*-|!|(?:frozen_string_literal|encoding|coding|warn_indent|'
    r'shareable_constant_value)\s*:)',
    re.IGNORECASE,
)
SCOPE_DECLARATION = re.compile(r'^(\s*)(class|module)\s+([A-Z][\w:]*)')
SINGLETON_SCOPE = re.compile(r'^(\s*)class\s*<<\s*self\b')
METHOD_DECLARATION = re.compile(
    r'^(\s*)(?:(?:private|protected|public|module_function|private_class_method|public_class_method)\s+)?'
    r'def\s+(?:(self|[A-Z]\w*)\.)?'
    r'([A-Za-z_]\w*[?!=]?|\[\]=?|<=>|===?|=~|![=~]?|[+\-]@|[+\-*/%<>&|^~]|\*\*|<<|>>|<=|>=)'
)
ALIAS_DECLARATION = re.compile(r'^(\s*)alias\s+:?([^\s,]+)\s+:?([^\s,]+)')
ALIAS_METHOD_DECLARATION = re.compile(r'^(\s*)alias_method\s*\(?\s*[:\'"]?([\w?!=]+)[\'"]?\s*,\s*[:\'"]?([\w?!=]+)')
END_LINE = re.compile(r'^(\s*)end\b')
ONE_LINER_END = re.compile(r';\s*end\s*$')
BEGIN_BLOCK = re.compile(r'^=begin\b')
END_BLOCK = re.compile(r'^=end\b')


@dataclass
class _Scope:
    indent: int
    name: Optional[str]
    singleton: bool = False


class RubyCommentExtractor:
    """Extractor for the 'ruby' language tag."""

    def extract(self, unit: SourceUnit) -> Iterator[Tuple[DocumentedEntity, CommentBlock]]:
        scopes: List[_Scope] = []
        pending: List[RawLine] = []
        pending_start: Optional[int] = None
        in_embedded_doc = False
        embedded_start = 0
        offset = 0

        for line in unit.text.split('\n'):
            line_offset = offset
            offset += len(line) + 1

            if in_embedded_doc:
                if END_BLOCK.match(line):
                    in_embedded_doc = False
                continue
            if BEGIN_BLOCK.match(line):
                in_embedded_doc = True
                embedded_start = line_offset
                pending, pending_start = [], None
                continue

            comment = COMMENT_LINE.match(line)
            if comment:
                if MAGIC_COMMENT.match(line) and pending_start is None:
                    continue
                if pending_start is None:
                    pending_start = line_offset + len(comment.group(1))
                content_offset = line_offset + len(comment.group(1)) + 1
                pending.append((comment.group(2), content_offset))
                continue

            if not line.strip():
                pending, pending_start = [], None
                continue

            declaration = self._declaration(unit, line, line_offset, scopes)
            if declaration is not None:
                block = CommentBlock.empty()
                if pending:
                    block = build_comment_block(unit, pending, unit.span_at(pending_start))
                yield declaration, block
            pending, pending_start = [], None

        if in_embedded_doc:
            opener = unit.span_at(embedded_start)
            logger.debug(f"Unterminated =begin block in {unit.path} at line {opener.line}")
            yield DocumentedEntity(EntityKind.METHOD, "", opener, unit.language), CommentBlock.unterminated(opener)

    def _declaration(self, unit: SourceUnit, line: str, line_offset: int,
                     scopes: List[_Scope]) -> Optional[DocumentedEntity]:
        """Update the nesting stack for `line` and return the entity it declares, if any."""
        end = END_LINE.match(line)
        if end:
            indent = len(end.group(1))
            if scopes and scopes[-1].indent == indent:
                scopes.pop()
            return None

        singleton_scope = SINGLETON_SCOPE.match(line)
        if singleton_scope:
            if not ONE_LINER_END.search(line):
                scopes.append(_Scope(len(singleton_scope.group(1)), None, singleton=True))
            return None

        scope = SCOPE_DECLARATION.match(line)
        if scope:
            indent, keyword, name = scope.groups()
            owner = self._owner(scopes)
            full_name = f"{owner}::{name}" if owner else name
            if not ONE_LINER_END.search(line):
                scopes.append(_Scope(len(indent), full_name))
            kind = EntityKind.CLASS if keyword == 'class' else EntityKind.MODULE
            return DocumentedEntity(kind, full_name, unit.span_at(line_offset + len(indent)), unit.language)

        method = METHOD_DECLARATION.match(line)
        if method:
            indent, receiver, name = method.groups()
            owner = self._owner(scopes)
            singleton = receiver is not None or self._in_singleton_scope(scopes)
            if receiver not in (None, 'self'):
                owner = receiver
            return DocumentedEntity(EntityKind.METHOD, name, unit.span_at(line_offset + len(indent)),
                                    unit.language, owner=owner, singleton=singleton)

        alias = ALIAS_DECLARATION.match(line) or ALIAS_METHOD_DECLARATION.match(line)
        if alias:
            indent, new_name, _old_name = alias.groups()
            return DocumentedEntity(EntityKind.METHOD, new_name, unit.span_at(line_offset + len(indent)),
                                    unit.language, owner=self._owner(scopes),
                                    singleton=self._in_singleton_scope(scopes))
        return None

    def _owner(self, scopes: List[_Scope]) -> Optional[str]:
        for scope in reversed(scopes):
            if scope.name:
                return scope.name
        return None

    def _in_singleton_scope(self, scopes: List[_Scope]) -> bool:
        return bool(scopes) and scopes[-1].singleton
