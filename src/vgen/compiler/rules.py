"""Rule compiler: maps each (rule, field type) pair to a check.

The outcome for every pair is fixed by the table below. ``required``,
``min`` and ``max`` degrade to a no-op marker on types they do not cover,
while ``len``, ``email`` and ``in`` refuse to compile on a type mismatch
(except ``in`` on integers, which is accepted but not enforced yet).

    rule      string        integer       sequence      other
    required  not empty     not zero      no-op         no-op
    min=N     len >= N      value >= N    no-op         no-op
    max=N     len <= N      value <= N    no-op         no-op
    len=N     len == N      error         len == N      error
    email     pattern       error         error         error
    in=a,b    member        no-op         error         error
"""

import logging
from collections.abc import Callable

from ..errors import RuleCompileError, RuleValueError
from ..models import (
    CheckKind,
    CompiledCheck,
    CompiledField,
    CompiledStruct,
    FieldDescriptor,
    NoOpMarker,
    Rule,
    StructDescriptor,
    TypeKind,
    ValidationFragment,
)
from ..parser.tag import as_int, as_list

logger = logging.getLogger(__name__)

RULE_REQUIRED = "required"
RULE_MIN = "min"
RULE_MAX = "max"
RULE_LEN = "len"
RULE_EMAIL = "email"
RULE_IN = "in"

MESSAGES = {
    CheckKind.NOT_EMPTY: "{struct}: field {field} is required",
    CheckKind.NOT_ZERO: "{struct}: field {field} is required",
    CheckKind.MIN_LENGTH: "{struct}: field {field} length must be at least {expected}, got {actual}",
    CheckKind.MIN_VALUE: "{struct}: field {field} must be at least {expected}, got {actual}",
    CheckKind.MAX_LENGTH: "{struct}: field {field} length must be at most {expected}, got {actual}",
    CheckKind.MAX_VALUE: "{struct}: field {field} must be at most {expected}, got {actual}",
    CheckKind.EXACT_LENGTH: "{struct}: field {field} length must be {expected}, got {actual}",
    CheckKind.EMAIL: "{struct}: field {field} is not a valid email",
    CheckKind.ONE_OF: "{struct}: field {field} value '{actual}' is not in the allowed list [{expected}]",
}


class RuleCompiler:
    """Compile parsed rules into validation fragments."""

    def __init__(self):
        self._handlers: dict[str, Callable[[str, FieldDescriptor, Rule], CompiledCheck]] = {
            RULE_REQUIRED: self._compile_required,
            RULE_MIN: self._compile_min,
            RULE_MAX: self._compile_max,
            RULE_LEN: self._compile_len,
            RULE_EMAIL: self._compile_email,
            RULE_IN: self._compile_in,
        }

    @property
    def known_rules(self) -> list[str]:
        return list(self._handlers)

    def compile_struct(self, struct: StructDescriptor) -> CompiledStruct:
        """Compile every rule of every field, in declaration order.

        Args:
            struct: Structure whose fields already carry parsed rules

        Returns:
            CompiledStruct with one CompiledField per annotated field

        Raises:
            RuleCompileError: On the first rule that cannot be compiled
        """
        compiled = CompiledStruct(name=struct.name)
        for field in struct.fields:
            compiled.fields.append(self.compile_field(struct.name, field))

        logger.debug(
            f"Compiled {struct.name}: {compiled.fragment_count} checks, "
            f"{len(compiled.no_ops)} not enforced"
        )
        return compiled

    def compile_field(self, struct_name: str, field: FieldDescriptor) -> CompiledField:
        """Compile the rule list of a single field."""
        compiled = CompiledField(name=field.name)
        for rule in field.rules:
            compiled.checks.append(self.compile_rule(struct_name, field, rule))
        return compiled

    def compile_rule(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        """Compile one rule against one field.

        Returns:
            A ValidationFragment, or a NoOpMarker when the rule is accepted
            but not enforced for the field's type

        Raises:
            RuleCompileError: For unknown rules, bad values and type mismatches
        """
        handler = self._handlers.get(rule.name)
        if handler is None:
            raise RuleCompileError(
                struct_name, field.name, rule.name,
                f"unknown rule {rule.name}",
            )
        return handler(struct_name, field, rule)

    def _compile_required(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        kind = field.type.kind
        if kind == TypeKind.STRING:
            return self._fragment(struct_name, field, rule, CheckKind.NOT_EMPTY)
        if kind == TypeKind.INTEGER:
            return self._fragment(struct_name, field, rule, CheckKind.NOT_ZERO)
        return self._no_op(struct_name, field, rule)

    def _compile_min(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        return self._compile_bound(struct_name, field, rule, CheckKind.MIN_LENGTH, CheckKind.MIN_VALUE)

    def _compile_max(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        return self._compile_bound(struct_name, field, rule, CheckKind.MAX_LENGTH, CheckKind.MAX_VALUE)

    def _compile_bound(self, struct_name: str, field: FieldDescriptor, rule: Rule,
                       length_check: CheckKind, value_check: CheckKind) -> CompiledCheck:
        bound = self._int_value(struct_name, field, rule)
        kind = field.type.kind
        if kind == TypeKind.STRING:
            return self._fragment(struct_name, field, rule, length_check, bound)
        if kind == TypeKind.INTEGER:
            return self._fragment(struct_name, field, rule, value_check, bound)
        return self._no_op(struct_name, field, rule)

    def _compile_len(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        bound = self._int_value(struct_name, field, rule)
        if field.type.kind not in (TypeKind.STRING, TypeKind.SEQUENCE):
            raise self._not_applicable(struct_name, field, rule)
        return self._fragment(struct_name, field, rule, CheckKind.EXACT_LENGTH, bound)

    def _compile_email(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        if field.type.kind != TypeKind.STRING:
            raise self._not_applicable(struct_name, field, rule)
        return self._fragment(struct_name, field, rule, CheckKind.EMAIL)

    def _compile_in(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> CompiledCheck:
        kind = field.type.kind
        if kind == TypeKind.INTEGER:
            return self._no_op(struct_name, field, rule)
        if kind != TypeKind.STRING:
            raise self._not_applicable(struct_name, field, rule)

        allowed = as_list(rule)
        if not allowed:
            raise RuleCompileError(
                struct_name, field.name, rule.name,
                "invalid 'in' value: no allowed values",
            )
        return self._fragment(struct_name, field, rule, CheckKind.ONE_OF, tuple(allowed))

    def _int_value(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> int:
        try:
            return as_int(rule)
        except RuleValueError as e:
            raise RuleCompileError(
                struct_name, field.name, rule.name,
                f"invalid '{rule.name}' value: {e.reason}",
            ) from e

    def _not_applicable(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> RuleCompileError:
        return RuleCompileError(
            struct_name, field.name, rule.name,
            f"rule '{rule.name}' is not applicable to type {field.type}",
        )

    def _fragment(self, struct_name: str, field: FieldDescriptor, rule: Rule,
                  check: CheckKind, expected: int | tuple[str, ...] | None = None) -> ValidationFragment:
        return ValidationFragment(
            struct=struct_name,
            field=field.name,
            rule=rule.name,
            check=check,
            message=MESSAGES[check],
            expected=expected,
        )

    def _no_op(self, struct_name: str, field: FieldDescriptor, rule: Rule) -> NoOpMarker:
        marker = NoOpMarker(struct_name, field.name, rule.name, field.type.spelling)
        logger.warning(f"{struct_name}: {marker.note}")
        return marker
