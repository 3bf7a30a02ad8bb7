"""vgen - Validator generator for annotated Python structures.

vgen reads per-field annotation strings such as ``required,min=2,max=50``
from class declarations and emits a companion module with one validation
function per structure.
"""

__version__ = "0.1.0"
__author__ = "vgen contributors"
__description__ = "Generate validation functions from field annotations"

from vgen.config import VgenConfig
from vgen.generator import generate_validator

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "VgenConfig",
    "generate_validator",
]
