"""
Call-Seq Package

This package provides:
- CallSeqParser: Parses `call-seq:` segments into CallSeqEntry values
- CallSeqEntry, ArgSpec, BlockSpec: Structured call-seq entries
- CallSeqSyntaxError, BlockPlaceholderError: Per-line parse failures
"""

from .parser import CallSeqParser
from .types import (
    ArgSpec, BlockPlaceholderError, BlockSpec, CallSeqEntry, CallSeqParseResult,
    CallSeqSyntaxError, ReceiverNamingIssue, RedundantPair,
)

__all__ = [
    'CallSeqParser',
    'ArgSpec',
    'BlockSpec',
    'CallSeqEntry',
    'CallSeqParseResult',
    'CallSeqSyntaxError',
    'BlockPlaceholderError',
    'ReceiverNamingIssue',
    'RedundantPair',
]
