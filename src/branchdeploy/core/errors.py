"""
Errors raised by the branchdeploy application.

Every fatal condition is a DeployError subclass so the command line can turn
it into a message and a non-zero exit code.
"""

from pathlib import Path
from typing import Iterable


class DeployError(Exception):
    """Base class for all deployment errors."""


class ConfigurationError(DeployError):
    """Raised when the environment or the repository remote is unusable."""


class MissingEnvironmentError(ConfigurationError):
    """Raised when required environment variables are missing or empty."""

    def __init__(self, names: Iterable[str]):
        self.names = list(names)
        super().__init__(
            "Cannot continue without the following environment variables:\n  "
            + "\n  ".join(self.names)
        )


class RepositoryError(DeployError):
    """Raised when the git repository cannot be opened or queried."""


class UploadError(DeployError):
    """Raised when a directory upload fails."""

    def __init__(self, directory: Path, cause: BaseException):
        self.directory = directory
        self.cause = cause
        super().__init__(f"Failed to upload {directory}: {cause}")
