"""
Package Backup Tool - Backup Components

Package discovery, local copies, GitHub repository management and the
orchestrator that ties them together.
"""

from .github_client import GitHubClient, RepositoryStatus
from .local_backup import copy_package
from .orchestrator import (
    BackupOrchestrator,
    BackupRequest,
    BackupOutcome,
    BackupMode,
    BackupState,
    ProgressUpdate,
    RemoteTarget
)
from .packages import PackageRef, PackageInfo, discover_packages, find_package, get_package_info
from .vcs import VersionControl, GitCommandLine

__all__ = [
    'GitHubClient',
    'RepositoryStatus',
    'copy_package',
    'BackupOrchestrator',
    'BackupRequest',
    'BackupOutcome',
    'BackupMode',
    'BackupState',
    'ProgressUpdate',
    'RemoteTarget',
    'PackageRef',
    'PackageInfo',
    'discover_packages',
    'find_package',
    'get_package_info',
    'VersionControl',
    'GitCommandLine'
]
