"""
Package Backup Tool - Core Components

Settings, credential storage, error types and git process execution.
"""

from .config import Settings, settings
from .credentials import BackupConfig
from .errors import (
    PackageBackupError,
    ConfigurationError,
    ExecutableNotFoundError,
    CommandError,
    CommandTimeoutError,
    RepositoryError,
    RemoteTimeoutError,
    CopyError,
    AuthError,
    OperationInProgressError,
    BackupCancelledError
)
from .process_runner import GitLocator, ProcessRunner, ProcessResult

__all__ = [
    'Settings',
    'settings',
    'BackupConfig',
    'PackageBackupError',
    'ConfigurationError',
    'ExecutableNotFoundError',
    'CommandError',
    'CommandTimeoutError',
    'RepositoryError',
    'RemoteTimeoutError',
    'CopyError',
    'AuthError',
    'OperationInProgressError',
    'BackupCancelledError',
    'GitLocator',
    'ProcessRunner',
    'ProcessResult'
]
