"""
Call-Seq Rule
Based on the Ruby documentation guide topic: "Calling Sequence"
"""
from dataclasses import replace
from typing import List

from structural_parsing.call_seq.types import CallSeqEntry
from structural_parsing.types import CommentBlock, DocumentedEntity, EntityKind
from ..base_rule import BaseRule
from ..types import RuleContext, Violation

C_LANGUAGE = 'c'


class CallSeqRule(BaseRule):
    """
    Reports what the call-seq parser found in each call-seq paragraph, and
    missing call-seqs on methods defined in C.
    """

    def _get_rule_type(self) -> str:
        return 'CallSeqSyntaxError'

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        if not context.call_seqs:
            return self._missing_call_seq(entity, block, context)

        errors = []
        for segment, result in context.call_seqs:
            for error in result.errors:
                errors.append(self._create_error(
                    span=error.span,
                    message=f"Invalid call-seq entry for {entity.qualified_name}: {error.reason}.",
                    suggestions=self._syntax_suggestions(error.rule_id),
                    rule_id=error.rule_id,
                ))

            issue = result.receiver_naming
            if issue is not None:
                others = f" ({issue.count} entries)" if issue.count > 1 else ""
                errors.append(self._create_error(
                    span=issue.entry.span,
                    message=f"Call-seq return type '{issue.spelling}' names the receiver{others}; "
                            "write 'self' when a method returns its receiver.",
                    suggestions=[self._returning_self(issue.entry, issue.spelling).render()],
                    rule_id='ReceiverNamingError',
                ))

            for pair in result.redundancies:
                extra = pair.longer.args[-1].name
                errors.append(self._create_error(
                    span=pair.longer.span,
                    message=f"Call-seq entries '{pair.shorter.render()}' and '{pair.longer.render()}' "
                            f"differ only by the optional argument '{extra}'; merge them into one entry.",
                    suggestions=[pair.recommendation.render()],
                    rule_id='RedundantEntry',
                ))
        return errors

    def _missing_call_seq(self, entity: DocumentedEntity, block: CommentBlock,
                          context: RuleContext) -> List[Violation]:
        if entity.language != C_LANGUAGE or entity.kind is not EntityKind.METHOD or context.nodoc:
            return []
        return [self._create_error(
            span=self._block_span(entity, block),
            message=f"{entity.qualified_name} is defined in C and has no call-seq; "
                    "RDoc cannot infer its arguments.",
            suggestions=["Add a 'call-seq:' paragraph as the first paragraph of the comment."],
            rule_id='MissingCallSeq',
        )]

    @staticmethod
    def _syntax_suggestions(rule_id: str) -> List[str]:
        if rule_id == 'BlockPlaceholderError':
            return ["Write the block as {|x| ... } with a literal '...' body."]
        return ["Use the form 'receiver.method(arg, opt=default) {|x| ... } -> type'."]

    @staticmethod
    def _returning_self(entry: CallSeqEntry, spelling: str) -> CallSeqEntry:
        return replace(entry, returns=tuple('self' if spelled == spelling else spelled
                                            for spelled in entry.returns))
