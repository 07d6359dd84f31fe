"""Exceptions related to cluster-assets."""

__all__ = [
    "AssetException",
    "MissingProducerError",
    "CycleError",
    "SynthesisError",
    "DependencyFailedError",
    "RedactionError",
    "BindingError",
    "PersistedStateError",
    "FileConflictError",
]


class AssetException(Exception):
    """Generic base exception used for this library.

    The store records the name of the asset being resolved when the error
    surfaced so the caller can tell which step of the pass failed.
    """

    def __init__(self, message: str, asset_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.asset_name = asset_name

    def __str__(self) -> str:
        if self.asset_name:
            return f"{self.asset_name}: {self.message}"
        return self.message


class MissingProducerError(AssetException):
    """Raised when a declared dependency has no registered asset."""

    def __init__(self, dependent: str | None, dependency: str) -> None:
        if dependent:
            message = f"Asset {dependent} depends on unknown asset {dependency}"
        else:
            message = f"Unknown asset {dependency}"
        super().__init__(message)
        self.dependent = dependent
        self.dependency = dependency


class CycleError(AssetException):
    """Raised when the declared dependencies contain a cycle."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(chain)}")
        self.chain = chain


class SynthesisError(AssetException):
    """Raised when an asset can't be generated from its dependencies."""


class DependencyFailedError(SynthesisError):
    """Raised when an asset that was already resolved in this pass has failed."""

    def __init__(self, dependency: str, dependency_error: str | None) -> None:
        super().__init__(
            f"Dependency {dependency} failed: {dependency_error or 'Unknown error'}"
        )
        self.dependency = dependency
        self.dependency_error = dependency_error


class RedactionError(AssetException):
    """Raised when the install config can't be redacted and serialized."""


class BindingError(AssetException):
    """Raised when a template is malformed or references an unbound value."""


class PersistedStateError(AssetException):
    """Raised when files on disk exist but are not formatted as expected."""


class FileConflictError(AssetException):
    """Raised when two files in one output set share a path."""
