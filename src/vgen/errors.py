"""Generation-time error hierarchy for vgen.

Every error raised while turning annotated source into a validator derives
from VgenError and aborts the run before any artifact is written. The
struct/field/rule context is carried as attributes so callers can locate the
offending declaration without re-running.
"""


class VgenError(Exception):
    """Base class for all generation-time failures."""

    def __init__(self, message: str, struct: str | None = None,
                 field: str | None = None, rule: str | None = None):
        self.reason = message
        self.struct = struct
        self.field = field
        self.rule = rule
        super().__init__(self._format())

    @property
    def location(self) -> str:
        """Dotted struct.field location, or empty when unknown."""
        parts = [p for p in (self.struct, self.field) if p]
        return ".".join(parts)

    def _format(self) -> str:
        prefix = ""
        if self.location:
            prefix = f"{self.location}: "
        if self.rule:
            prefix += f"rule '{self.rule}': "
        return f"{prefix}{self.reason}"


class SourceParseError(VgenError):
    """Raised when the source unit cannot be read or parsed."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class TagSyntaxError(VgenError):
    """Raised when an annotation segment has no extractable rule name."""

    def __init__(self, segment: str, struct: str | None = None, field: str | None = None):
        self.segment = segment
        super().__init__(f"invalid tag part: {segment!r}", struct=struct, field=field)


class RuleValueError(VgenError, ValueError):
    """Raised when a rule value cannot be read as the expected kind."""


class RuleCompileError(VgenError):
    """Raised when a (rule, field type) pair has no valid compilation."""

    def __init__(self, struct: str, field: str, rule: str, reason: str):
        super().__init__(reason, struct=struct, field=field, rule=rule)
