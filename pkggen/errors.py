"""
Errors raised by the package generator.

Configuration and filesystem errors stop a run before any packaging
happens. Image and process errors are collected per image / per bucket
and reported at the end.
"""


class PackageError(Exception):
    """Base class for package generation errors."""


class ConfigurationError(PackageError):
    """Settings document is missing, empty or inconsistent."""


class FilesystemError(PackageError):
    """Build tree could not be created, listed or pruned."""


class ImageIOError(PackageError):
    """Source image could not be decoded or the result could not be saved."""


class ProcessError(PackageError):
    """External packaging job failed for a single bucket."""

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"{token}: {reason}")
