"""Errors that abort a generation run.

Recoverable conditions (unknown primitive types, unparsable response codes,
enum-name collisions) are handled where they occur and never reach here.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for conditions that stop generation before any output."""


class UnsupportedDocumentError(GenerationError):
    """The input is neither a Swagger 2.x nor an OpenAPI 3.x document."""


class UnsupportedReferenceError(GenerationError):
    """A $ref points outside the component locations the generator reads."""

    def __init__(self, ref: str) -> None:
        super().__init__(f'Unsupported reference: "{ref}"')
        self.ref = ref


class UnresolvableReferenceError(GenerationError):
    """A local $ref pointer does not exist in the document."""

    def __init__(self, ref: str) -> None:
        super().__init__(f'Could not find reference: "{ref}"')
        self.ref = ref


class ConfigError(GenerationError):
    """A configuration value is outside its allowed set."""
