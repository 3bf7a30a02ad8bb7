"""End-to-end validator generation for one source unit.

Reads structures, parses their tags, compiles rules and renders the module
before touching the output path, so a failure at any stage leaves no
artifact behind.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..compiler.rules import RuleCompiler
from ..config import VgenConfig
from ..errors import SourceParseError, TagSyntaxError
from ..models import CompiledStruct, NoOpMarker, StructDescriptor
from ..parser.source import SourceStructProvider
from ..parser.tag import parse_tag
from .emitter import CodeEmitter

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of a generation run."""
    source: Path
    output: Path
    structs: list[CompiledStruct] = field(default_factory=list)

    @property
    def struct_count(self) -> int:
        return len(self.structs)

    @property
    def field_count(self) -> int:
        return sum(len(s.fields) for s in self.structs)

    @property
    def fragment_count(self) -> int:
        return sum(s.fragment_count for s in self.structs)

    @property
    def no_ops(self) -> list[NoOpMarker]:
        return [m for s in self.structs for m in s.no_ops]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "source": str(self.source),
            "output": str(self.output),
            "structs": self.struct_count,
            "fields": self.field_count,
            "checks": self.fragment_count,
            "notEnforced": [
                {"struct": m.struct, "field": m.field, "rule": m.rule, "type": m.type_spelling}
                for m in self.no_ops
            ],
        }


def output_path_for(source: Path, config: VgenConfig) -> Path:
    """Artifact path for a source file: ``<stem><suffix>.py``."""
    directory = Path(config.output.dir) if config.output.dir else source.parent
    return directory / f"{source.stem}{config.output.suffix}.py"


def attach_rules(structs: list[StructDescriptor]) -> list[StructDescriptor]:
    """Parse each field's raw tag into its rule list.

    Raises:
        TagSyntaxError: Located at the offending struct and field
    """
    for struct in structs:
        for descriptor in struct.fields:
            try:
                descriptor.rules = parse_tag(descriptor.raw_tag)
            except TagSyntaxError as e:
                raise TagSyntaxError(e.segment, struct=struct.name, field=descriptor.name) from e
    return structs


def compile_structs(structs: list[StructDescriptor]) -> list[CompiledStruct]:
    """Compile every struct in order; stops at the first failure."""
    compiler = RuleCompiler()
    return [compiler.compile_struct(struct) for struct in structs]


def render_validator(structs: list[StructDescriptor], source_name: str,
                     config: VgenConfig | None = None) -> tuple[list[CompiledStruct], str]:
    """Parse, compile and render without writing anything.

    Args:
        structs: Struct descriptors from a provider, with raw tags
        source_name: Source unit name used in the module header
        config: Optional configuration (defaults apply when None)

    Returns:
        Tuple of (compiled structs, module text)
    """
    config = config or VgenConfig()
    compiled = compile_structs(attach_rules(structs))
    text = CodeEmitter(config.output.function_prefix).render(compiled, source_name)
    return compiled, text


def generate_validator(source: str | Path, config: VgenConfig | None = None) -> GenerationResult:
    """Generate the validator module for one source file.

    Args:
        source: Path to the annotated Python source file
        config: Optional configuration (defaults apply when None)

    Returns:
        GenerationResult describing what was written

    Raises:
        VgenError: On any parse or compile failure; no file is written
    """
    source = Path(source)
    config = config or VgenConfig()

    if not source.is_file():
        raise SourceParseError("source file not found", path=str(source))

    logger.info(f"Generating validator for {source}")
    structs = SourceStructProvider(config.tag.key).load(source)
    if not structs:
        logger.warning(f"No '{config.tag.key}' annotations found in {source}")

    compiled, text = render_validator(structs, source.name, config)

    output = output_path_for(source, config)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)

    logger.info(f"Wrote {output} ({len(compiled)} validators)")
    return GenerationResult(source=source, output=output, structs=compiled)
