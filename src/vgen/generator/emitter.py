"""Python source emitter for compiled validators.

Turns CompiledStruct values into the text of a standalone module: a fixed
email helper followed by one ``validate_<name>(obj)`` function per
structure. Rendering is a pure function of its input so the same structs
always produce the same bytes.
"""

import logging
import re

from ..errors import VgenError
from ..models import CheckKind, CompiledStruct, NoOpMarker, ValidationFragment

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
DEFAULT_FUNCTION_PREFIX = "validate_"
RECEIVER = "obj"
INDENT = "    "

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """Convert a class name such as ``HTTPUserInfo`` to ``http_user_info``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _comment_safe(text: str) -> str:
    """Return text usable inside a one-line ``#`` comment."""
    return text if text.isprintable() else repr(text)


class CodeEmitter:
    """Render compiled structs as a Python validator module."""

    def __init__(self, function_prefix: str = DEFAULT_FUNCTION_PREFIX):
        self.function_prefix = function_prefix

    def function_name(self, struct_name: str) -> str:
        return f"{self.function_prefix}{snake_case(struct_name)}"

    def render(self, structs: list[CompiledStruct], source_name: str) -> str:
        """Render the complete module text.

        Args:
            structs: Compiled structures in declaration order
            source_name: Name of the source unit, quoted in the header

        Returns:
            Module source text ending with a single newline

        Raises:
            VgenError: If two structures map to the same function name
        """
        names = [self.function_name(s.name) for s in structs]
        seen: set[str] = set()
        for struct, name in zip(structs, names):
            if name in seen:
                raise VgenError(f"duplicate validator name {name}", struct=struct.name)
            seen.add(name)

        constants = _ConstantTable()
        bodies = [self._render_struct(struct, name, constants) for struct, name in zip(structs, names)]

        lines = [
            f"# Code generated by vgen from {_comment_safe(source_name)}. DO NOT EDIT.",
            '"""Validators generated by vgen."""',
            "",
            "import re",
            "",
            f"EMAIL_PATTERN = re.compile(r\"{EMAIL_PATTERN}\")",
        ]
        lines.extend(constants.lines())
        lines.extend([
            "",
            "",
            "def is_email_valid(value):",
            f'{INDENT}"""Return True if value matches the email pattern."""',
            f"{INDENT}return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None",
        ])
        for body in bodies:
            lines.extend(["", ""])
            lines.extend(body)

        lines.extend(["", ""])
        lines.append("__all__ = [")
        for name in ["is_email_valid", *names]:
            lines.append(f"{INDENT}{name!r},")
        lines.append("]")

        logger.debug(f"Rendered {len(structs)} validators for {source_name}")
        return "\n".join(lines) + "\n"

    def _render_struct(self, struct: CompiledStruct, function_name: str,
                       constants: "_ConstantTable") -> list[str]:
        lines = [
            f"def {function_name}({RECEIVER}):",
            f'{INDENT}"""Validate a {struct.name}; return failure messages, empty when valid."""',
            f"{INDENT}errs = []",
        ]
        for field in struct.fields:
            for check in field.checks:
                if isinstance(check, NoOpMarker):
                    lines.append(f"{INDENT}# {check.note}")
                else:
                    lines.extend(self._render_fragment(check, constants))
        lines.append(f"{INDENT}return errs")
        return lines

    def _render_fragment(self, fragment: ValidationFragment, constants: "_ConstantTable") -> list[str]:
        value = f"{RECEIVER}.{fragment.field}"
        length = f"len({value})"
        expected = fragment.expected
        check = fragment.check

        if check == CheckKind.NOT_EMPTY:
            condition, actual = f"{value} == ''", None
        elif check == CheckKind.NOT_ZERO:
            condition, actual = f"{value} == 0", None
        elif check == CheckKind.MIN_LENGTH:
            condition, actual = f"{length} < {expected}", length
        elif check == CheckKind.MAX_LENGTH:
            condition, actual = f"{length} > {expected}", length
        elif check == CheckKind.EXACT_LENGTH:
            condition, actual = f"{length} != {expected}", length
        elif check == CheckKind.MIN_VALUE:
            condition, actual = f"{value} < {expected}", value
        elif check == CheckKind.MAX_VALUE:
            condition, actual = f"{value} > {expected}", value
        elif check == CheckKind.EMAIL:
            condition, actual = f"not is_email_valid({value})", None
        elif check == CheckKind.ONE_OF:
            allowed = constants.add(fragment.struct, fragment.field, expected)
            condition, actual = f"{value} not in {allowed}", value
        else:
            raise VgenError(f"no emitter for check {check.value}", struct=fragment.struct,
                            field=fragment.field, rule=fragment.rule)

        return [
            f"{INDENT}if {condition}:",
            f"{INDENT}{INDENT}errs.append({render_message(fragment, actual)})",
        ]


def render_message(fragment: ValidationFragment, actual: str | None) -> str:
    """Render the message template as a Python expression.

    Struct, field and expected values are bound into a string literal; the
    runtime value, if the template uses it, is interpolated with ``%``.
    """
    expected = fragment.expected
    if isinstance(expected, tuple):
        expected = ", ".join(expected)

    pieces = fragment.message.split("{actual}")
    static = [
        piece.format(struct=fragment.struct, field=fragment.field, expected=expected)
        for piece in pieces
    ]
    if actual is None or len(static) == 1:
        return repr("{actual}".join(static))

    template = "%s".join(piece.replace("%", "%%") for piece in static)
    return f"{template!r} % ({actual},)"


class _ConstantTable:
    """Module-level allow-list constants, kept in first-use order."""

    def __init__(self):
        self._entries: list[tuple[str, tuple[str, ...]]] = []

    def add(self, struct: str, field: str, values: tuple[str, ...]) -> str:
        base = f"_{snake_case(struct)}_{field}_allowed".upper()
        taken = {name for name, _ in self._entries}
        name, n = base, 2
        while name in taken:
            name, n = f"{base}_{n}", n + 1
        self._entries.append((name, values))
        return name

    def lines(self) -> list[str]:
        out = []
        for name, values in self._entries:
            items = ", ".join(repr(v) for v in values)
            if len(values) == 1:
                items += ","
            out.append(f"{name} = frozenset(({items}))")
        return out
