"""
Error taxonomy for the Commandless matching engine.

Error code ranges:
- E001-E099: Template rendering errors
- E100-E199: Catalog construction errors
- E200-E299: Generative-AI collaborator errors

Copyright (c) 2025 Graziano Labs Corp.
"""


class CommandlessError(Exception):
    """Base class for all Commandless errors."""

    def __init__(
        self,
        code: str,
        message: str,
        hint: str | None = None
    ):
        """
        Initialize Commandless error.

        Args:
            code: Error code (e.g., "E001")
            message: Human-readable error message
            hint: Optional suggestion for fixing the error
        """
        self.code = code
        self.message = message
        self.hint = hint
        super().__init__(f"[{code}] {message}")


class TemplateError(CommandlessError):
    """Command template rendering errors (E001-E099)."""
    pass


class CatalogError(CommandlessError):
    """Catalog construction errors (E100-E199)."""
    pass


class AnalysisError(CommandlessError):
    """Generative-AI collaborator errors (E200-E299)."""
    pass


# Specific error codes documentation:
#
# E001: Template references a placeholder that is not a canonical slot
# E101: Unknown command option type code
# E102: Output template references a slot the entry does not declare
# E201: AI collaborator returned no usable JSON
# E202: AI collaborator timed out
# E203: AI collaborator request failed
