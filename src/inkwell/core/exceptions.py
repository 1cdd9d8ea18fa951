"""Core exceptions for Inkwell.

Build problems are data: every individual error carries the offending document
identifier (and token, where one applies) so that a whole batch can be reported
back to the author in a single run.
"""

from __future__ import annotations

from collections.abc import Sequence


class InkwellError(Exception):
    """Base exception for all Inkwell errors."""


# --- Individual build errors ---


class BuildError(InkwellError):
    """A single reportable problem attached to one document."""

    code = "build-error"

    def __init__(self, identifier: str, message: str) -> None:
        self.identifier = identifier
        super().__init__(message)


class MalformedDocument(BuildError):
    """Raised when a document's metadata block is missing or has invalid fields."""

    code = "malformed-document"

    def __init__(self, identifier: str, problems: Sequence[str]) -> None:
        self.problems = tuple(problems)
        super().__init__(identifier, f"Document '{identifier}' is malformed: {'; '.join(self.problems)}")


class DuplicateIdentifier(BuildError):
    """Raised when two or more sources share an identifier."""

    code = "duplicate-identifier"

    def __init__(self, identifier: str, count: int) -> None:
        self.count = count
        super().__init__(identifier, f"Identifier '{identifier}' is used by {count} sources.")


class PermalinkCollision(BuildError):
    """Raised when published documents compute the same permalink."""

    code = "permalink-collision"

    def __init__(self, permalink: str, identifiers: Sequence[str]) -> None:
        self.permalink = permalink
        self.identifiers = tuple(sorted(identifiers))
        super().__init__(
            self.identifiers[0],
            f"Permalink '{permalink}' is claimed by {', '.join(repr(i) for i in self.identifiers)}.",
        )


class BrokenReference(BuildError):
    """Base class for broken `related` tokens."""

    code = "reference-error"

    def __init__(self, identifier: str, token: str, message: str) -> None:
        self.token = token
        super().__init__(identifier, message)


class DanglingReference(BrokenReference):
    """Raised when a related token names a document that does not exist."""

    code = "dangling-reference"

    def __init__(self, identifier: str, token: str) -> None:
        super().__init__(identifier, token, f"Document '{identifier}' references unknown document '{token}'.")


class ReferenceToDraft(BrokenReference):
    """Raised when a related token names a draft."""

    code = "reference-to-draft"

    def __init__(self, identifier: str, token: str) -> None:
        super().__init__(identifier, token, f"Document '{identifier}' references draft '{token}'.")


class SelfReference(BrokenReference):
    """Raised when a document lists itself as related."""

    code = "self-reference"

    def __init__(self, identifier: str, token: str) -> None:
        super().__init__(identifier, token, f"Document '{identifier}' references itself.")


# --- Aggregate failure ---


class BuildFailedError(InkwellError):
    """Raised when a build stage fails; carries every error found by that stage."""

    def __init__(self, stage: str, errors: Sequence[BuildError]) -> None:
        self.stage = stage
        self.errors = tuple(errors)
        noun = "error" if len(self.errors) == 1 else "errors"
        super().__init__(f"Build failed at stage '{stage}' with {len(self.errors)} {noun}.")


# --- Configuration ---


class ConfigError(InkwellError):
    """Base class for configuration problems detected before any stage runs."""


class InvalidPageSize(ConfigError):
    """Raised when the configured page size is below one."""

    def __init__(self, page_size: int) -> None:
        self.page_size = page_size
        super().__init__(f"Page size must be at least 1, got {page_size}.")


class InvalidConfigurationValue(ConfigError):
    """Raised when a configuration value is out of range."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for '{field}': {reason}")


class ConfigLoadError(ConfigError):
    """Raised when a site configuration file cannot be loaded or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load or parse config at '{path}': {reason}")


# --- Output and authoring helpers ---


class OutputError(InkwellError):
    """Raised when build artifacts cannot be written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write output at '{path}': {reason}")


class ComposeError(InkwellError):
    """Raised when a draft cannot be created or published."""
