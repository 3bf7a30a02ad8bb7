"""Struct descriptor provider for Python source units.

Reads class declarations with the standard library ``ast`` module and picks
up fields declared as ``name: T = field(metadata={"vgen": "..."})``. The
rest of vgen only ever sees the resulting StructDescriptor values.
"""

import ast
import logging
from pathlib import Path

from ..errors import SourceParseError
from ..models import FieldDescriptor, SemanticType, StructDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TAG_KEY = "vgen"

STRING_NAMES = {"str"}
INTEGER_NAMES = {"int"}
SEQUENCE_NAMES = {
    "list", "List",
    "tuple", "Tuple",
    "set", "Set",
    "frozenset", "FrozenSet",
    "Sequence", "MutableSequence",
}
FIELD_FACTORIES = {"field"}


class SourceStructProvider:
    """Extract annotated structures from a Python source file."""

    def __init__(self, tag_key: str = DEFAULT_TAG_KEY):
        """Initialize provider.

        Args:
            tag_key: Metadata key holding the annotation string
        """
        self.tag_key = tag_key

    def load(self, path: Path) -> list[StructDescriptor]:
        """Read and parse a source file.

        Args:
            path: Python source file

        Returns:
            Annotated structures in declaration order

        Raises:
            SourceParseError: If the file cannot be read or is not valid Python
        """
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise SourceParseError(f"cannot read source: {e.strerror or e}", path=str(path)) from e

        return self.parse_source(text, str(path))

    def parse_source(self, text: str, filename: str = "<source>") -> list[StructDescriptor]:
        """Parse source text into struct descriptors.

        Only top-level classes are considered. Classes without any annotated
        field are left out.
        """
        try:
            module = ast.parse(text, filename=filename)
        except SyntaxError as e:
            raise SourceParseError(f"line {e.lineno}: {e.msg}", path=filename) from e

        structs = []
        for node in module.body:
            if not isinstance(node, ast.ClassDef):
                continue

            struct = StructDescriptor(name=node.name, line=node.lineno)
            for statement in node.body:
                descriptor = self._field_from_statement(statement)
                if descriptor is not None:
                    struct.fields.append(descriptor)

            if struct.fields:
                logger.debug(f"Found struct {struct.name} with {len(struct.fields)} annotated fields")
                structs.append(struct)
            else:
                logger.debug(f"Skipping struct {node.name}: no '{self.tag_key}' annotations")

        return structs

    def _field_from_statement(self, statement: ast.stmt) -> FieldDescriptor | None:
        if not isinstance(statement, ast.AnnAssign):
            return None
        if not isinstance(statement.target, ast.Name):
            return None

        raw_tag = self._tag_from_value(statement.value)
        if raw_tag is None:
            return None

        return FieldDescriptor(
            name=statement.target.id,
            type=classify_annotation(statement.annotation),
            raw_tag=raw_tag,
            line=statement.lineno,
        )

    def _tag_from_value(self, value: ast.expr | None) -> str | None:
        """Return the annotation string from a ``field(metadata=...)`` call."""
        if not isinstance(value, ast.Call) or _callee_name(value.func) not in FIELD_FACTORIES:
            return None

        for keyword in value.keywords:
            if keyword.arg != "metadata" or not isinstance(keyword.value, ast.Dict):
                continue
            for key, item in zip(keyword.value.keys, keyword.value.values):
                if (
                    isinstance(key, ast.Constant) and key.value == self.tag_key
                    and isinstance(item, ast.Constant) and isinstance(item.value, str)
                ):
                    return item.value
        return None


def classify_annotation(annotation: ast.expr) -> SemanticType:
    """Map a type annotation to the semantic type used by the rule compiler."""
    spelling = ast.unparse(annotation)

    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        # String annotations ("str") are parsed and classified the same way
        try:
            inner = ast.parse(annotation.value, mode="eval").body
        except SyntaxError:
            return SemanticType.unsupported(spelling)
        return classify_annotation(inner)

    name = _callee_name(annotation)
    if name in STRING_NAMES:
        return SemanticType.string()
    if name in INTEGER_NAMES:
        return SemanticType.integer()
    if name in SEQUENCE_NAMES:
        return SemanticType.sequence(spelling)

    if isinstance(annotation, ast.Subscript) and _callee_name(annotation.value) in SEQUENCE_NAMES:
        element = None
        params = annotation.slice
        if isinstance(params, ast.Tuple):
            params = params.elts[0] if params.elts else None
        if params is not None:
            element = classify_annotation(params)
        return SemanticType.sequence(spelling, element)

    return SemanticType.unsupported(spelling)


def _callee_name(node: ast.expr) -> str | None:
    """Bare or attribute name, e.g. ``field`` for ``dataclasses.field``."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None
