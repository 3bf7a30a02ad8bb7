"""Validator module generation."""

from .emitter import EMAIL_PATTERN, CodeEmitter
from .pipeline import GenerationResult, generate_validator, output_path_for, render_validator

__all__ = [
    "CodeEmitter",
    "EMAIL_PATTERN",
    "GenerationResult",
    "generate_validator",
    "output_path_for",
    "render_validator",
]
