"""
C Comment Extractor
Finds fenced block comments in C extension sources and attaches them to the
Ruby classes, modules and methods registered through the rb_define_* API.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ..types import CommentBlock, DocumentedEntity, EntityKind, SourceUnit
from .block_builder import RawLine, build_comment_block

logger = logging.getLogger(__name__)

METHOD_REGISTRATION = re.compile(
    r'\brb_define_(method|private_method|protected_method|singleton_method|module_function)\s*\(\s*'
    r'(\w+)\s*,\s*"([^"]+)"\s*,\s*(?:RUBY_METHOD_FUNC\s*\(\s*)?(\w+)'
)
GLOBAL_REGISTRATION = re.compile(
    r'\brb_define_global_function\s*\(\s*"([^"]+)"\s*,\s*(?:RUBY_METHOD_FUNC\s*\(\s*)?(\w+)'
)
ALIAS_REGISTRATION = re.compile(
    r'\brb_define_alias\s*\(\s*(\w+)\s*,\s*"([^"]+)"\s*,\s*"([^"]+)"'
)
CLASS_DEFINITION = re.compile(
    r'(?:\b(\w+)\s*=\s*)?\brb_define_(class|module)(?:_under)?\s*\(\s*(?:(\w+)\s*,\s*)?"([^"]+)"'
)
DOCUMENT_DIRECTIVE = re.compile(r'^\s*Document-(class|module|method):\s*(\S+)\s*$')
WELL_KNOWN_OWNER = re.compile(r'^rb_[cme]([A-Z]\w*)$')
FUNCTION_HEAD = re.compile(r'([A-Za-z_]\w*)\s*\([^()]*(?:\([^()]*\)[^()]*)*\)\s*$')
NOT_FUNCTIONS = {'if', 'while', 'for', 'switch', 'return', 'sizeof', 'do', 'else'}
SINGLETON_REGISTRATIONS = {'singleton_method', 'module_function'}


@dataclass(frozen=True)
class _RawComment:
    start: int
    # For an unterminated comment: where scanning resumed (nested opener or end of text).
    end: int
    terminated: bool


@dataclass(frozen=True)
class _Registration:
    kind: EntityKind
    name: str
    owner: Optional[str]
    function: Optional[str]
    offset: int
    singleton: bool = False


class CCommentExtractor:
    """Extractor for the 'c' language tag."""

    def extract(self, unit: SourceUnit) -> Iterator[Tuple[DocumentedEntity, CommentBlock]]:
        text = unit.text
        comments, code, code_without_strings = self._scan(text)
        comments_by_end = {c.end: c for c in comments if c.terminated}

        blocks: Dict[int, CommentBlock] = {}
        directives: Dict[Tuple[str, str], CommentBlock] = {}
        for comment in comments:
            if comment.terminated:
                directive, block = self._comment_block(unit, comment)
                blocks[comment.end] = block
                if directive:
                    directives[directive] = block
        directive_blocks = {id(block) for block in directives.values()}

        functions = self._function_definitions(code_without_strings)
        function_offsets: Dict[str, int] = {}
        function_comments: Dict[str, CommentBlock] = {}
        for name, offset in functions:
            function_offsets.setdefault(name, offset)
            comment = self._comment_before(text, offset, comments_by_end)
            if comment is not None and id(blocks[comment.end]) not in directive_blocks:
                function_comments.setdefault(name, blocks[comment.end])

        malformed: List[Tuple[str, CommentBlock]] = []
        for comment in comments:
            if comment.terminated:
                continue
            opener = unit.span_at(comment.start)
            logger.debug(f"Unterminated comment in {unit.path} at line {opener.line}")
            follower = self._function_within(functions, comment.start, comment.end) or ""
            malformed.append((follower, CommentBlock.unterminated(opener)))

        def take_malformed(function: str) -> Optional[CommentBlock]:
            for index, (follower, block) in enumerate(malformed):
                if follower == function:
                    del malformed[index]
                    return block
            return None

        registrations = self._registrations(text, code, comments_by_end, blocks, directives, directive_blocks)
        results: List[Tuple[DocumentedEntity, CommentBlock]] = []

        if not any(r.kind is EntityKind.METHOD for r, _ in registrations):
            for name, offset in functions:
                block = take_malformed(name) or function_comments.get(name, CommentBlock.empty())
                entity = DocumentedEntity(EntityKind.METHOD, name, unit.span_at(offset), unit.language)
                results.append((entity, block))

        claimed_functions = set()
        for registration, block in registrations:
            function = registration.function
            offset = registration.offset
            if function:
                offset = function_offsets.get(function, offset)
            if block is None:
                block = CommentBlock.empty()
                # A function registered under several names is documented once; later names are aliases.
                if function and function not in claimed_functions:
                    claimed_functions.add(function)
                    block = take_malformed(function) or function_comments.get(function, block)
            entity = DocumentedEntity(
                kind=registration.kind,
                name=registration.name,
                span=unit.span_at(offset),
                language=unit.language,
                owner=registration.owner,
                singleton=registration.singleton,
            )
            results.append((entity, block))

        for follower, block in malformed:
            results.append((DocumentedEntity(EntityKind.METHOD, follower, block.span, unit.language), block))

        results.sort(key=lambda pair: (pair[0].span.offset, pair[0].qualified_name))
        yield from results

    def _scan(self, text: str) -> Tuple[List[_RawComment], str, str]:
        """
        Locate block comments.

        Returns the comments plus two offset-preserving copies of the text: one
        with comments and preprocessor lines blanked, and one that additionally
        blanks string and character literals (for brace matching).
        """
        comments: List[_RawComment] = []
        code = list(text)
        literals: List[Tuple[int, int]] = []
        i, n = 0, len(text)
        at_line_start = True

        def blank(start, end):
            for k in range(start, end):
                if code[k] != '\n':
                    code[k] = ' '

        while i < n:
            ch = text[i]
            if ch == '\n':
                at_line_start = True
                i += 1
                continue
            if at_line_start and ch == '#':
                end = i
                while end < n and (text[end] != '\n' or text[end - 1] == '\\'):
                    end += 1
                blank(i, end)
                i = end
                continue
            if not ch.isspace():
                at_line_start = False
            if text.startswith('/*', i):
                close = text.find('*/', i + 2)
                nested = text.find('/*', i + 2)
                if close != -1 and (nested == -1 or nested > close):
                    comments.append(_RawComment(i, close + 2, True))
                    blank(i, close + 2)
                    i = close + 2
                else:
                    resume = nested if nested != -1 else n
                    comments.append(_RawComment(i, resume, False))
                    blank(i, i + 2)
                    i = resume
                continue
            if text.startswith('//', i):
                end = text.find('\n', i)
                end = n if end == -1 else end
                blank(i, end)
                i = end
                continue
            if ch in '"\'':
                end = i + 1
                while end < n and text[end] != ch and text[end] != '\n':
                    end += 2 if text[end] == '\\' else 1
                literals.append((i + 1, min(end, n)))
                i = end + 1
                continue
            i += 1

        masked = ''.join(code)
        without_strings = list(masked)
        for start, end in literals:
            for k in range(start, end):
                without_strings[k] = ' '
        return comments, masked, ''.join(without_strings)

    def _comment_block(self, unit: SourceUnit, comment: _RawComment) -> Tuple[Optional[Tuple[str, str]], CommentBlock]:
        body_start = comment.start + 2
        body_end = comment.end - 2
        raw_lines: List[RawLine] = []
        directive = None
        offset = body_start
        for line in unit.text[body_start:body_end].split('\n'):
            line_offset = offset
            offset += len(line) + 1
            stripped = line.lstrip()
            content_offset = line_offset + (len(line) - len(stripped))
            if stripped.startswith('*'):
                stripped = stripped[1:]
                content_offset += 1
            match = DOCUMENT_DIRECTIVE.match(stripped)
            if match and directive is None:
                directive = (match.group(1), match.group(2))
                continue
            raw_lines.append((stripped, content_offset))
        return directive, build_comment_block(unit, raw_lines, unit.span_at(comment.start))

    def _function_definitions(self, code: str) -> List[Tuple[str, int]]:
        """Top-level function definitions as (name, offset of the declaration's first line)."""
        functions = []
        depth = 0
        chunk_start = 0
        for i, ch in enumerate(code):
            if ch == '{':
                if depth == 0:
                    found = self._function_head(code[chunk_start:i])
                    if found:
                        name, relative = found
                        functions.append((name, chunk_start + relative))
                depth += 1
            elif ch == '}':
                depth = max(depth - 1, 0)
                if depth == 0:
                    chunk_start = i + 1
            elif ch == ';' and depth == 0:
                chunk_start = i + 1
        return functions

    def _function_head(self, chunk: str) -> Optional[Tuple[str, int]]:
        head = chunk.rstrip()
        tail_lines: List[str] = []
        for line in reversed(head.split('\n')):
            if not line.strip():
                break
            tail_lines.insert(0, line)
        if any(line.lstrip().startswith('*') for line in tail_lines):
            # Decorated comment text left visible by an unterminated comment.
            return None
        tail = '\n'.join(tail_lines)
        match = FUNCTION_HEAD.search(tail)
        if not match or match.group(1) in NOT_FUNCTIONS or '=' in tail:
            return None
        start = len(head) - len(tail)
        return match.group(1), start + (len(tail) - len(tail.lstrip()))

    def _comment_before(self, text: str, offset: int, comments_by_end: Dict[int, _RawComment]) -> Optional[_RawComment]:
        position = offset
        while position > 0 and text[position - 1].isspace():
            position -= 1
        return comments_by_end.get(position)

    def _function_within(self, functions: List[Tuple[str, int]], start: int, end: int) -> Optional[str]:
        for name, offset in functions:
            if start < offset < end:
                return name
        return None

    def _registrations(self, text, code, comments_by_end, blocks, directives,
                       directive_blocks) -> List[Tuple[_Registration, Optional[CommentBlock]]]:
        """
        Collect rb_define_* registrations in source order.

        Method registrations carry a block only when a Document-method
        directive names them; otherwise the caller pairs them with the
        comment above the registered C function.
        """
        owners: Dict[str, str] = {}
        found: List[Tuple[_Registration, Optional[CommentBlock]]] = []

        for match in CLASS_DEFINITION.finditer(code):
            variable, flavor, parent, name = match.groups()
            full_name = f"{owners[parent]}::{name}" if parent in owners else name
            if variable:
                owners[variable] = full_name
            kind = EntityKind.CLASS if flavor == 'class' else EntityKind.MODULE
            block = directives.get((flavor, full_name)) or directives.get((flavor, name))
            if block is None:
                comment = self._comment_before(text, match.start(), comments_by_end)
                if comment is not None and id(blocks[comment.end]) not in directive_blocks:
                    block = blocks[comment.end]
            found.append((_Registration(kind, full_name, None, None, match.start()), block or CommentBlock.empty()))

        defined = {(r.kind.value, r.name) for r, _ in found}
        for (flavor, name), block in directives.items():
            if flavor in ('class', 'module') and (flavor, name) not in defined:
                kind = EntityKind.CLASS if flavor == 'class' else EntityKind.MODULE
                found.append((_Registration(kind, name, None, None, block.span.offset), block))

        for match in METHOD_REGISTRATION.finditer(code):
            flavor, variable, name, function = match.groups()
            owner = self._owner_name(variable, owners)
            singleton = flavor in SINGLETON_REGISTRATIONS
            block = self._method_directive(directives, owner, name, singleton)
            found.append((_Registration(EntityKind.METHOD, name, owner, function, match.start(), singleton), block))

        for match in GLOBAL_REGISTRATION.finditer(code):
            name, function = match.groups()
            block = self._method_directive(directives, 'Kernel', name, False)
            found.append((_Registration(EntityKind.METHOD, name, 'Kernel', function, match.start()), block))

        for match in ALIAS_REGISTRATION.finditer(code):
            variable, name, _original = match.groups()
            owner = self._owner_name(variable, owners)
            block = self._method_directive(directives, owner, name, False) or CommentBlock.empty()
            found.append((_Registration(EntityKind.METHOD, name, owner, None, match.start()), block))

        return found

    def _owner_name(self, variable: str, owners: Dict[str, str]) -> str:
        if variable in owners:
            return owners[variable]
        match = WELL_KNOWN_OWNER.match(variable)
        return match.group(1) if match else variable

    def _method_directive(self, directives, owner, name, singleton) -> Optional[CommentBlock]:
        separator = '.' if singleton else '#'
        for key in (f"{owner}{separator}{name}", f"{owner}#{name}", f"{owner}::{name}", name):
            block = directives.get(('method', key))
            if block is not None:
                return block
        return None
