"""
Error types for formula parsing, tree validation and configuration.
"""

from typing import Optional


class FormulaBuilderError(Exception):
    """Base class for all formula builder errors."""


class FormulaParseError(FormulaBuilderError):
    """Internal parser failure.

    Raised inside the expression rules (unterminated call, missing IF
    arguments, operator chain without operands). The public ``parse`` entry
    point catches it and resolves the text to a fallback node.
    """

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        full = f"Formula parse error: {message}"
        if position is not None:
            full += f" (at position {position})"
        super().__init__(full)


class MalformedTreeError(FormulaBuilderError):
    """Expression tree violates a structural invariant."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        full = message if path is None else f"{message} (at {path})"
        super().__init__(full)


class NestingDepthError(MalformedTreeError):
    """Formula text or tree nests deeper than the configured limit."""

    def __init__(self, depth: int, limit: int, path: Optional[str] = None):
        self.depth = depth
        self.limit = limit
        super().__init__(
            f"Nesting depth {depth} exceeds the maximum of {limit}", path=path
        )


class FormulaConfigError(FormulaBuilderError):
    """Configuration file could not be read or validated."""


__all__ = [
    "FormulaBuilderError",
    "FormulaParseError",
    "MalformedTreeError",
    "NestingDepthError",
    "FormulaConfigError",
]
