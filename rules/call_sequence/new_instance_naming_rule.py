"""
New Instance Naming Rule
Based on the Ruby documentation guide topic: "Calling Sequence" (return types)
"""
from typing import List

from structural_parsing.types import CommentBlock, DocumentedEntity, EntityKind
from ..base_rule import BaseRule
from ..types import RuleContext, Violation

NEW_PREFIX = 'new_'


class NewInstanceNamingRule(BaseRule):
    """
    A method that returns a new instance of its receiver's class names the
    return type `new_<type>`; other methods never use the `new_` prefix.

    Whether a method returns a new instance is answered by the injected
    classification lookup; when it has no answer the rule does nothing.
    """

    def _get_rule_type(self) -> str:
        return 'ReceiverNamingError'

    def analyze(self, entity: DocumentedEntity, block: CommentBlock, context: RuleContext) -> List[Violation]:
        if entity.kind is not EntityKind.METHOD or context.new_instance_lookup is None:
            return []
        entries = [entry for _, result in context.call_seqs for entry in result.entries]
        if not entries:
            return []
        returns_new_instance = context.new_instance_lookup(entity)
        if returns_new_instance is None:
            return []

        if returns_new_instance:
            if any(spelled.startswith(NEW_PREFIX) for entry in entries for spelled in entry.returns):
                return []
            return [self._create_error(
                span=entries[0].span,
                message=f"{entity.qualified_name} returns a new instance, but no call-seq return type "
                        f"is prefixed with '{NEW_PREFIX}'.",
                suggestions=[f"Name the return type after the new object, e.g. '-> {NEW_PREFIX}{_type_name(entity)}'."],
            )]

        errors = []
        for entry in entries:
            misnamed = [spelled for spelled in entry.returns if spelled.startswith(NEW_PREFIX)]
            if misnamed:
                errors.append(self._create_error(
                    span=entry.span,
                    message=f"{entity.qualified_name} does not return a new instance; "
                            f"return type '{misnamed[0]}' should not be prefixed with '{NEW_PREFIX}'.",
                    suggestions=[f"'-> {misnamed[0][len(NEW_PREFIX):]}'"],
                ))
        return errors


def _type_name(entity: DocumentedEntity) -> str:
    owner = entity.owner or 'object'
    return owner.split('::')[-1].lower()
