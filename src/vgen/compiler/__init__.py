"""Rule compilation for vgen."""

from .rules import MESSAGES, RuleCompiler

__all__ = ["RuleCompiler", "MESSAGES"]
