#!/usr/bin/env python3
"""
Error types for Package Backup Tool
Every failure surfaced to the user is one of these
"""

from typing import Optional, Sequence


class PackageBackupError(Exception):
    """Base class for all backup tool errors"""


class ConfigurationError(PackageBackupError):
    """Credentials or settings are missing or invalid"""


class ExecutableNotFoundError(PackageBackupError):
    """Git could not be found on this machine"""


class CommandError(PackageBackupError):
    """A shelled git command exited non-zero and wrote to stderr"""

    def __init__(self, args: Sequence[str], exit_code: int, stderr: str):
        self.command_args = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Git command failed: {stderr.strip()}")


class CommandTimeoutError(PackageBackupError):
    """A shelled git command did not finish in time"""

    def __init__(self, args: Sequence[str], timeout: float):
        self.command_args = list(args)
        self.timeout = timeout
        super().__init__(f"Git command timed out after {timeout:g}s: git {' '.join(args)}")


class RepositoryError(PackageBackupError):
    """Repository check or creation failed on the provider side"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class RemoteTimeoutError(PackageBackupError):
    """A call to the provider API did not answer in time"""


class CopyError(PackageBackupError):
    """Local copy of the package failed"""


class AuthError(PackageBackupError):
    """Connection test against the provider failed"""


class OperationInProgressError(PackageBackupError):
    """A backup is already running on this orchestrator"""


class BackupCancelledError(PackageBackupError):
    """The backup was cancelled between two steps"""
