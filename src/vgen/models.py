"""Data model shared by the tag parser, rule compiler and code emitter."""

from dataclasses import dataclass, field
from enum import Enum


class TypeKind(str, Enum):
    """Semantic field types understood by the rule compiler."""
    STRING = "string"
    INTEGER = "integer"
    SEQUENCE = "sequence"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SemanticType:
    """Field type as classified by the struct descriptor provider.

    ``spelling`` keeps the annotation as written in the source so diagnostics
    and no-op comments can quote it back.
    """
    kind: TypeKind
    spelling: str
    element: "SemanticType | None" = None

    @classmethod
    def string(cls) -> "SemanticType":
        return cls(TypeKind.STRING, "str")

    @classmethod
    def integer(cls) -> "SemanticType":
        return cls(TypeKind.INTEGER, "int")

    @classmethod
    def sequence(cls, spelling: str, element: "SemanticType | None" = None) -> "SemanticType":
        return cls(TypeKind.SEQUENCE, spelling, element)

    @classmethod
    def unsupported(cls, spelling: str) -> "SemanticType":
        return cls(TypeKind.UNSUPPORTED, spelling)

    def __str__(self) -> str:
        return self.spelling


@dataclass(frozen=True)
class Rule:
    """A single rule parsed from an annotation, e.g. ``min=2``."""
    name: str
    value: str = ""

    @property
    def is_flag(self) -> bool:
        return self.value == ""

    def __str__(self) -> str:
        return self.name if self.is_flag else f"{self.name}={self.value}"


@dataclass
class FieldDescriptor:
    """One annotated field of a structure."""
    name: str
    type: SemanticType
    raw_tag: str
    rules: list[Rule] = field(default_factory=list)
    line: int | None = None


@dataclass
class StructDescriptor:
    """One annotated structure with its fields in declaration order."""
    name: str
    fields: list[FieldDescriptor] = field(default_factory=list)
    line: int | None = None


class CheckKind(str, Enum):
    """Runtime condition a fragment evaluates."""
    NOT_EMPTY = "not_empty"
    NOT_ZERO = "not_zero"
    MIN_LENGTH = "min_length"
    MIN_VALUE = "min_value"
    MAX_LENGTH = "max_length"
    MAX_VALUE = "max_value"
    EXACT_LENGTH = "exact_length"
    EMAIL = "email"
    ONE_OF = "one_of"


@dataclass(frozen=True)
class ValidationFragment:
    """A compiled check: condition kind, bound parameters and message template.

    The template may reference ``{struct}``, ``{field}`` and ``{expected}``,
    which are bound at generation time, and ``{actual}``, which the emitted
    routine fills in at runtime.
    """
    struct: str
    field: str
    rule: str
    check: CheckKind
    message: str
    expected: int | tuple[str, ...] | None = None


@dataclass(frozen=True)
class NoOpMarker:
    """A rule that was accepted but is not enforced for the field's type."""
    struct: str
    field: str
    rule: str
    type_spelling: str

    @property
    def note(self) -> str:
        return f"'{self.rule}' is not enforced for {self.field} of type {self.type_spelling}"


CompiledCheck = ValidationFragment | NoOpMarker


@dataclass
class CompiledField:
    """Resolved checks for one field, in rule order."""
    name: str
    checks: list[CompiledCheck] = field(default_factory=list)

    @property
    def fragments(self) -> list[ValidationFragment]:
        return [c for c in self.checks if isinstance(c, ValidationFragment)]

    @property
    def no_ops(self) -> list[NoOpMarker]:
        return [c for c in self.checks if isinstance(c, NoOpMarker)]


@dataclass
class CompiledStruct:
    """Resolved checks for one structure, in field order."""
    name: str
    fields: list[CompiledField] = field(default_factory=list)

    @property
    def fragment_count(self) -> int:
        return sum(len(f.fragments) for f in self.fields)

    @property
    def no_ops(self) -> list[NoOpMarker]:
        return [m for f in self.fields for m in f.no_ops]
