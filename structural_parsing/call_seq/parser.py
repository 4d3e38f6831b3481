"""
Call-Seq Parser
Parses the entries of a `call-seq:` directive, one entry per line:

    receiver.method(arg, opt=default) {|x| ... } -> type or type

Besides the grammar, the parser applies the rules that decide what an entry
means: merged optional arguments, block placeholders and receiver naming.
"""
import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from ..extractors.block_builder import CALL_SEQ_DIRECTIVE
from ..types import Segment, Span
from .types import (
    CALL, INDEX, INDEX_ASSIGN, OPERATOR, UNARY,
    ArgSpec, BlockPlaceholderError, BlockSpec, CallSeqEntry, CallSeqParseResult,
    CallSeqSyntaxError, ReceiverNamingIssue, RedundantPair,
)

logger = logging.getLogger(__name__)

IDENTIFIER = r'[A-Za-z_]\w*'
RECEIVER = rf'{IDENTIFIER}(?:::[A-Z]\w*)*'
METHOD_NAME = r'[A-Za-z_]\w*[?!=]?|\[\]=?|<=>|===?|=~|!~|\*\*|<<|>>|<=|>=|[+\-*/%<>&|^~!]@?'
BINARY_OPERATORS = r'<=>|===|==|!=|=~|!~|\*\*|<<|>>|<=|>=|[+\-*/%<>&|^]'

CALL_FORM = re.compile(
    rf'^(?:(?P<receiver>{RECEIVER})\s*(?:\.|#|::))?\s*(?P<method>{METHOD_NAME})\s*(?P<args>\(.*\))?$'
)
INDEX_FORM = re.compile(rf'^(?P<receiver>{RECEIVER})\[(?P<args>.*)\](?:\s*=\s*(?P<value>\S+))?$')
OPERATOR_FORM = re.compile(
    rf'^(?P<receiver>{RECEIVER})\s+(?P<operator>{BINARY_OPERATORS})\s+(?P<operand>{IDENTIFIER}|-?\d+)$'
)
UNARY_FORM = re.compile(rf'^(?P<operator>[-+!~])(?P<receiver>{RECEIVER})$')
ARG_ITEM = re.compile(
    rf'^(?P<prefix>\*\*|\*|&)?(?P<name>{IDENTIFIER})'
    r'(?:\s*(?P<keyword>:)\s*(?P<kwdefault>.*)|\s*=\s*(?P<default>.+))?$'
)
BLOCK_BODY = re.compile(r'^\|(?P<params>[^|]*)\|\s*(?P<rest>.*)$')
BLOCK_PARAM = re.compile(r'^(?:[*&]{0,2}[A-Za-z_]\w*|\([\w\s,*]+\))$')
RETURN_SEPARATOR = re.compile(r'\s*,\s*(?:or\s+)?|\s+or\s+')
RETURN_TYPE = re.compile(rf'^(?:{RECEIVER}[?!]?|-?\d+|\[[^\[\]]*\])$')

DEFAULT_FLAG_PREFIXES = ('include_', 'all', 'is_', 'allow_', 'use_', 'with_', 'exception',
                         'strict', 'freeze', 'inclusive', 'exclusive')
DEFAULT_FORBIDDEN_PLACEHOLDERS = ('block', 'code')
ELLIPSIS = '...'


class CallSeqParser:
    """
    Line-oriented call-seq parser.

    parse_line() raises CallSeqSyntaxError/BlockPlaceholderError; the
    block-level parse methods recover per line and collect those errors.
    """

    def __init__(self, flag_prefixes: Sequence[str] = DEFAULT_FLAG_PREFIXES,
                 forbidden_placeholders: Sequence[str] = DEFAULT_FORBIDDEN_PLACEHOLDERS):
        self.flag_prefixes = tuple(flag_prefixes)
        self.forbidden_placeholders = set(forbidden_placeholders)

    # Block-level entry points

    def parse(self, segment: Segment, prose: str = '', implicit_receiver: str = '') -> CallSeqParseResult:
        """
        Parse a call-seq segment.

        `prose` is the rest of the comment, used by the merge heuristics.
        `implicit_receiver` is how entries written without a receiver
        (`push(*objects) -> array`) would spell it, e.g. 'array' for Array.
        """
        lines: List[Tuple[str, Span]] = []
        for index, (line, span) in enumerate(zip(segment.lines, segment.line_spans)):
            text = line
            skipped = 0
            if index == 0:
                directive = CALL_SEQ_DIRECTIVE.match(line)
                if directive:
                    skipped = directive.end()
                    text = line[skipped:]
            lead = len(text) - len(text.lstrip())
            lines.append((text.strip(), span.advance(skipped + lead)))
        return self.parse_lines(lines, prose, implicit_receiver)

    def parse_text(self, text: str, prose: str = '', path: str = '<call-seq>',
                   implicit_receiver: str = '') -> CallSeqParseResult:
        """Parse raw call-seq text (one entry per line)."""
        lines = []
        offset = 0
        for number, line in enumerate(text.split('\n'), start=1):
            lead = len(line) - len(line.lstrip())
            lines.append((line.strip(), Span(path=path, offset=offset + lead, line=number, column=lead + 1)))
            offset += len(line) + 1
        return self.parse_lines(lines, prose, implicit_receiver)

    def parse_lines(self, lines: Iterable[Tuple[str, Span]], prose: str = '',
                    implicit_receiver: str = '') -> CallSeqParseResult:
        result = CallSeqParseResult()
        for text, span in lines:
            if not text:
                continue
            try:
                result.entries.append(self.parse_line(text, span))
            except CallSeqSyntaxError as e:
                logger.debug(f"{e.rule_id} at {span.path}:{span.line}: {e.reason}")
                result.errors.append(e)
        result.redundancies = self.find_redundant_entries(result.entries, prose)
        result.receiver_naming = self.find_receiver_naming_issue(result.entries, implicit_receiver)
        return result

    # Single entry

    def parse_line(self, text: str, span: Span) -> CallSeqEntry:
        """
        Parse one call-seq entry.

        Raises:
            BlockPlaceholderError: if the block placeholder is not `{|x| ... }`
            CallSeqSyntaxError: if the line does not follow the grammar
        """
        text = text.replace('→', '->').strip()
        left, arrow, returns_text = text.rpartition('->')
        if not arrow:
            raise CallSeqSyntaxError(span, "missing '->' before the return type")
        left = left.strip()

        block = None
        if left.endswith('}'):
            opening = _matching_open_brace(left)
            if opening is None:
                raise CallSeqSyntaxError(span, "unbalanced braces in block")
            block = self._parse_block(left[opening + 1:-1].strip(), span)
            left = left[:opening].rstrip()

        returns = self._parse_returns(returns_text.strip(), span)
        receiver, method, args, form = self._parse_invocation(left, span)
        if block is not None and form != CALL:
            raise CallSeqSyntaxError(span, "a block can only follow a method call")
        return CallSeqEntry(receiver=receiver, method=method, args=args, block=block,
                            returns=returns, form=form, span=span)

    def _parse_invocation(self, left: str, span: Span) -> Tuple[str, str, Tuple[ArgSpec, ...], str]:
        if not left:
            raise CallSeqSyntaxError(span, "missing receiver and method")

        match = INDEX_FORM.match(left)
        if match:
            args = self._parse_args(match.group('args'), span)
            if match.group('value'):
                value = self._parse_args(match.group('value'), span)
                return match.group('receiver'), '[]=', args + value, INDEX_ASSIGN
            return match.group('receiver'), '[]', args, INDEX

        match = OPERATOR_FORM.match(left)
        if match:
            operand = ArgSpec(name=match.group('operand'))
            return match.group('receiver'), match.group('operator'), (operand,), OPERATOR

        match = UNARY_FORM.match(left)
        if match:
            operator = match.group('operator')
            method = operator + '@' if operator in '+-' else operator
            return match.group('receiver'), method, (), UNARY

        match = CALL_FORM.match(left)
        if not match:
            raise CallSeqSyntaxError(span, f"expected 'receiver.method(args)', got '{left}'")
        args_text = match.group('args')
        args: Tuple[ArgSpec, ...] = ()
        if args_text:
            if _matching_close_paren(args_text) != len(args_text) - 1:
                raise CallSeqSyntaxError(span, "unbalanced parentheses in argument list")
            args = self._parse_args(args_text[1:-1], span)
        return match.group('receiver') or '', match.group('method'), args, CALL

    def _parse_args(self, text: str, span: Span) -> Tuple[ArgSpec, ...]:
        if not text.strip():
            return ()
        args = []
        for item, omittable in _split_arglist(text, span):
            match = ARG_ITEM.match(item)
            if not match:
                raise CallSeqSyntaxError(span, f"invalid argument '{item}'")
            keyword = match.group('keyword') is not None
            default = match.group('kwdefault') if keyword else match.group('default')
            if default is not None:
                default = default.strip() or None
            args.append(ArgSpec(name=match.group('name'), default=default, omittable=omittable,
                                prefix=match.group('prefix') or '', keyword=keyword))
        return tuple(args)

    def _parse_block(self, inner: str, span: Span) -> BlockSpec:
        match = BLOCK_BODY.match(inner)
        if match:
            params_text, rest = match.group('params'), match.group('rest').strip()
        else:
            params_text, rest = '', inner
        if rest != ELLIPSIS:
            if not rest:
                reason = "block placeholder is missing the '...' ellipsis"
            elif rest.lower() in self.forbidden_placeholders:
                reason = f"block placeholder '{rest}' must be written as '...'"
            else:
                reason = f"block placeholder '{rest}' must be written as '{{|x| ... }}'"
            raise BlockPlaceholderError(span, reason)
        params = tuple(p.strip() for p in _split_top_level(params_text) if p.strip())
        for param in params:
            if not BLOCK_PARAM.match(param):
                raise CallSeqSyntaxError(span, f"invalid block parameter '{param}'")
        return BlockSpec(params=params)

    def _parse_returns(self, text: str, span: Span) -> Tuple[str, ...]:
        if not text:
            raise CallSeqSyntaxError(span, "missing return type after '->'")
        tokens = [t.strip() for t in _split_top_level(text, RETURN_SEPARATOR)]
        returns: List[str] = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token == 'true' and index + 1 < len(tokens) and tokens[index + 1] == 'false':
                returns.append('true or false')
                index += 2
                continue
            if not RETURN_TYPE.match(token):
                raise CallSeqSyntaxError(span, f"invalid return type '{token}'")
            returns.append(token)
            index += 1
        return tuple(returns)

    # Meaning rules

    def find_receiver_naming_issue(self, entries: Sequence[CallSeqEntry],
                                   implicit_receiver: str = '') -> Optional[ReceiverNamingIssue]:
        """
        Entries that return the receiver must spell it `self`; reported once per call-seq.

        Entries without a receiver are checked against `implicit_receiver`.
        """
        offenders = []
        for entry in entries:
            receiver = entry.receiver or implicit_receiver
            for spelled in entry.returns:
                if spelled == 'receiver' or (receiver and receiver != 'self' and spelled == receiver):
                    offenders.append((entry, spelled))
                    break
        if not offenders:
            return None
        entry, spelled = offenders[0]
        return ReceiverNamingIssue(entry=entry, spelling=spelled, count=len(offenders))

    def find_redundant_entries(self, entries: Sequence[CallSeqEntry], prose: str = '') -> List[RedundantPair]:
        """
        Find entry pairs that differ only by the presence of one trailing argument.

        Such pairs should be a single entry with `arg=default`. Whether both
        forms really behave the same is a semantic question, so the result is
        advisory: a pair whose shorter form takes no argument at all, or whose
        extra argument the prose describes separately ("With +arg+ given"),
        is left alone.
        """
        pairs = []
        for i, first in enumerate(entries):
            for second in entries[i + 1:]:
                if first.signature_key != second.signature_key:
                    continue
                if first.block != second.block or first.returns != second.returns:
                    continue
                if len(first.args) == len(second.args):
                    continue
                shorter, longer = (first, second) if len(first.args) < len(second.args) else (second, first)
                if len(longer.args) != len(shorter.args) + 1 or longer.args[:-1] != shorter.args:
                    continue
                extra = longer.args[-1]
                if not shorter.args or extra.prefix or extra.default is not None or extra.omittable:
                    continue
                if _described_separately(extra.name, prose):
                    continue
                merged = ArgSpec(name=extra.name, default=self._default_for(extra, prose), keyword=extra.keyword)
                recommendation = shorter.with_args(shorter.args + (merged,))
                pairs.append(RedundantPair(shorter=shorter, longer=longer, recommendation=recommendation))
        return pairs

    def _default_for(self, arg: ArgSpec, prose: str) -> str:
        name = re.escape(arg.name)
        stated = re.search(
            rf'\+?{name}\+?\s+(?:is\s+optional\s+and\s+)?(?:defaults\s+to|default\s+is|has\s+a\s+default\s+of)'
            r'\s+\+?([^\s+,;]+?)\+?(?=[\s.,;]|$)',
            prose,
        )
        if stated:
            return stated.group(1)
        if arg.name.startswith(self.flag_prefixes):
            return 'false'
        return 'nil'


def _described_separately(name: str, prose: str) -> bool:
    pattern = rf'\b(?:with|when|if)\s+(?:optional\s+)?(?:argument\s+)?\+{re.escape(name)}\+\s+(?:is\s+)?given'
    return re.search(pattern, prose, re.IGNORECASE) is not None


def _matching_open_brace(text: str) -> Optional[int]:
    depth = 0
    for index in range(len(text) - 1, -1, -1):
        if text[index] == '}':
            depth += 1
        elif text[index] == '{':
            depth -= 1
            if depth == 0:
                return index
    return None


def _matching_close_paren(text: str) -> Optional[int]:
    depth = 0
    for index, ch in enumerate(text):
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth == 0:
                return index
    return None


def _split_top_level(text: str, separator: Optional['re.Pattern'] = None) -> List[str]:
    """Split on commas (or `separator`) that are not nested in brackets."""
    separator = separator or re.compile(r',')
    parts, depth, start, index = [], 0, 0, 0
    while index < len(text):
        ch = text[index]
        if ch in '([{':
            depth += 1
        elif ch in ')]}':
            depth -= 1
        elif depth == 0:
            match = separator.match(text, index)
            if match and match.end() > index:
                parts.append(text[start:index])
                start = index = match.end()
                continue
        index += 1
    parts.append(text[start:])
    return parts


def _split_arglist(text: str, span: Span) -> List[Tuple[str, bool]]:
    """
    Split an argument list into (item, omittable) pairs.

    Square brackets outside a default value mark optional groups:
    `pattern [, limit]` and `pattern, [limit]` both make `limit` omittable.
    """
    items: List[Tuple[str, bool]] = []
    buffer = ''
    item_omittable: Optional[bool] = None
    group = depth = 0
    in_default = False
    quote = None
    index = 0

    def flush():
        item = buffer.strip()
        if not item:
            raise CallSeqSyntaxError(span, "empty argument in argument list")
        items.append((item, bool(item_omittable)))

    while index < len(text):
        ch = text[index]
        if quote:
            buffer += ch
            if ch == '\\' and index + 1 < len(text):
                buffer += text[index + 1]
                index += 1
            elif ch == quote:
                quote = None
            index += 1
            continue
        if ch in '"\'':
            quote = ch
        elif ch == '$' and index + 1 < len(text):
            # Global variables such as $, or $/ are single atoms.
            buffer += text[index:index + 2]
            index += 2
            continue
        elif depth == 0:
            if ch == ',':
                if buffer.strip():
                    flush()
                elif group == 0:
                    raise CallSeqSyntaxError(span, "empty argument in argument list")
                buffer, item_omittable, in_default = '', None, False
                index += 1
                continue
            if ch == '[' and not in_default:
                group += 1
                index += 1
                continue
            if ch == ']' and group > 0:
                group -= 1
                index += 1
                continue
            if ch == '=' and not in_default and text[index + 1:index + 2] != '=':
                in_default = True
            elif ch == ':' and not in_default and text[index + 1:index + 2] != ':' \
                    and text[index - 1:index] != ':':
                in_default = True
        if ch in '([{':
            depth += 1
        elif ch in ')]}':
            depth -= 1
            if depth < 0:
                raise CallSeqSyntaxError(span, "unbalanced brackets in argument list")
        if item_omittable is None and not ch.isspace():
            item_omittable = group > 0
        buffer += ch
        index += 1

    if quote or depth != 0 or group != 0:
        raise CallSeqSyntaxError(span, "unbalanced brackets in argument list")
    if buffer.strip():
        flush()
    return items
