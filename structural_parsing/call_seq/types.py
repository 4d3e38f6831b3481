"""
Call-Seq Types
Structured form of the entries of a `call-seq:` directive.
"""
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from ..types import Span

CALL = "call"
INDEX = "index"
INDEX_ASSIGN = "index_assign"
OPERATOR = "operator"
UNARY = "unary"


class CallSeqSyntaxError(Exception):
    """A call-seq line that does not follow the call-seq grammar."""
    rule_id = 'CallSeqSyntaxError'

    def __init__(self, span: Span, reason: str):
        super().__init__(reason)
        self.span = span
        self.reason = reason


class BlockPlaceholderError(CallSeqSyntaxError):
    """A block written with anything other than `{|x| ... }`."""
    rule_id = 'BlockPlaceholderError'


@dataclass(frozen=True)
class ArgSpec:
    name: str
    default: Optional[str] = None
    omittable: bool = False
    prefix: str = ''
    keyword: bool = False

    def render(self) -> str:
        text = f"{self.prefix}{self.name}"
        if self.keyword:
            text += f": {self.default}" if self.default is not None else ":"
        elif self.default is not None:
            text += f"={self.default}"
        return f"[{text}]" if self.omittable else text


@dataclass(frozen=True)
class BlockSpec:
    params: Tuple[str, ...] = ()

    def render(self) -> str:
        if not self.params:
            return "{ ... }"
        return "{|" + ", ".join(self.params) + "| ... }"


@dataclass(frozen=True)
class CallSeqEntry:
    receiver: str
    method: str
    args: Tuple[ArgSpec, ...] = ()
    block: Optional[BlockSpec] = None
    returns: Tuple[str, ...] = ()
    form: str = CALL
    span: Optional[Span] = field(default=None, compare=False)

    def render(self) -> str:
        """Canonical text of the entry."""
        arg_text = ", ".join(arg.render() for arg in self.args)
        if self.form == INDEX:
            head = f"{self.receiver}[{arg_text}]"
        elif self.form == INDEX_ASSIGN:
            keys = ", ".join(arg.render() for arg in self.args[:-1])
            head = f"{self.receiver}[{keys}] = {self.args[-1].render()}"
        elif self.form == OPERATOR:
            head = f"{self.receiver} {self.method} {arg_text}"
        elif self.form == UNARY:
            head = f"{self.method.rstrip('@')}{self.receiver}"
        else:
            head = f"{self.receiver}.{self.method}" if self.receiver else self.method
            if self.args:
                head += f"({arg_text})"
        if self.block is not None:
            head += f" {self.block.render()}"
        return f"{head} -> {' or '.join(self.returns)}"

    def with_args(self, args: Tuple[ArgSpec, ...]) -> 'CallSeqEntry':
        return replace(self, args=args)

    @property
    def signature_key(self) -> Tuple[str, str, str]:
        return (self.receiver, self.method, self.form)


@dataclass(frozen=True)
class RedundantPair:
    """Two entries that differ only by the presence of one trailing argument."""
    shorter: CallSeqEntry
    longer: CallSeqEntry
    recommendation: CallSeqEntry


@dataclass(frozen=True)
class ReceiverNamingIssue:
    """First entry whose return types spell the receiver instead of `self`."""
    entry: CallSeqEntry
    spelling: str
    count: int = 1


@dataclass
class CallSeqParseResult:
    entries: List[CallSeqEntry] = field(default_factory=list)
    errors: List[CallSeqSyntaxError] = field(default_factory=list)
    redundancies: List[RedundantPair] = field(default_factory=list)
    receiver_naming: Optional[ReceiverNamingIssue] = None

    @property
    def success(self) -> bool:
        return not self.errors
