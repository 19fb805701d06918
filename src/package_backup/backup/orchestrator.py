#!/usr/bin/env python3
"""
Backup orchestration for Package Backup Tool

Runs a backup request as a short state machine:

    IDLE -> COPYING_LOCAL -> ENSURING_REMOTE -> INITIALIZING_REPO -> PUSHING -> COMPLETE

Any step can end the run in FAILED. A failure in the remote leg after the
local copy finished ends the run in PARTIAL_SUCCESS instead, and the local
copy is still reported. Each state change is yielded to the caller as a
``ProgressUpdate``; the last one carries the ``BackupOutcome``.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple
import logging

from ..core.config import settings as default_settings
from ..core.credentials import BackupConfig, DEFAULT_BRANCH_PREFIX
from ..core.errors import (
    PackageBackupError,
    ConfigurationError,
    OperationInProgressError,
    BackupCancelledError
)
from ..core.process_runner import GitLocator, ProcessRunner
from .github_client import GitHubClient
from .local_backup import copy_package
from .packages import PackageRef
from .vcs import VersionControl, GitCommandLine

TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M"

class BackupMode(Enum):
    """Where a backup goes"""
    LOCAL = "local"
    REMOTE = "remote"
    BOTH = "both"

    @property
    def includes_local(self) -> bool:
        return self in (BackupMode.LOCAL, BackupMode.BOTH)

    @property
    def includes_remote(self) -> bool:
        return self in (BackupMode.REMOTE, BackupMode.BOTH)

class BackupState(Enum):
    """Backup run states"""
    IDLE = "idle"
    COPYING_LOCAL = "copying_local"
    ENSURING_REMOTE = "ensuring_remote"
    INITIALIZING_REPO = "initializing_repo"
    PUSHING = "pushing"
    COMPLETE = "complete"
    FAILED = "failed"
    PARTIAL_SUCCESS = "partial_success"

    @property
    def is_terminal(self) -> bool:
        return self in (BackupState.COMPLETE, BackupState.FAILED, BackupState.PARTIAL_SUCCESS)

@dataclass
class BackupRequest:
    """One backup invocation"""
    package: PackageRef
    mode: BackupMode
    local_destination: Optional[Path] = None
    backup_name: str = ""
    repository_name: str = ""
    branch_name: str = ""
    commit_message: str = ""

    def validate(self):
        """Raise ConfigurationError if required fields for the mode are missing"""
        if self.mode.includes_local:
            if not self.backup_name:
                raise ConfigurationError("Please enter a backup name.")
            if not self.local_destination:
                raise ConfigurationError("Please select a backup location.")

    @property
    def resolved_repository_name(self) -> str:
        return self.repository_name or f"{self.package.name}-backup"

    @property
    def resolved_branch_name(self) -> str:
        return self.branch_name or self.backup_name or self.package.name

    def resolved_commit_message(self, timestamp: str) -> str:
        return self.commit_message or f"Backup: {timestamp}"

@dataclass
class RemoteTarget:
    """Where the remote leg pushed to"""
    owner: str
    repository: str
    branch: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repository} @ {self.branch}"

@dataclass
class BackupOutcome:
    """Result of a backup run"""
    state: BackupState = BackupState.IDLE
    local_path: Optional[Path] = None
    remote: Optional[RemoteTarget] = None
    partial_failure: bool = False
    errors: List[Exception] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == BackupState.COMPLETE

    def summary(self) -> str:
        """User-facing description of the outcome"""
        lines = []
        if self.state == BackupState.COMPLETE:
            lines.append("Backup complete!")
        elif self.state == BackupState.PARTIAL_SUCCESS:
            lines.append("Partial success: local backup succeeded, but GitHub backup failed.")
        else:
            lines.append("Backup failed.")

        if self.local_path:
            lines.append(f"Local: {self.local_path}")
        if self.remote:
            lines.append(f"GitHub: {self.remote}")
        for error in self.errors:
            lines.append(f"Error ({type(error).__name__}): {error}")
        for warning in self.warnings:
            lines.append(f"Warning: {warning}")
        return "\n".join(lines)

@dataclass
class ProgressUpdate:
    """One progress report; ``outcome`` is set on the final update only"""
    fraction: float
    message: str
    state: BackupState
    outcome: Optional[BackupOutcome] = None

class BackupOrchestrator:
    """Runs backup requests one at a time"""

    def __init__(self, config: BackupConfig,
                 settings=None,
                 client_factory: Optional[Callable[[BackupConfig], GitHubClient]] = None,
                 vcs: Optional[VersionControl] = None,
                 git_locator: Optional[GitLocator] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.logger = logging.getLogger(__name__)
        self.config = config
        self.settings = settings or default_settings
        self.client_factory = client_factory or (
            lambda cfg: GitHubClient.from_settings(cfg, self.settings)
        )
        self.git_locator = git_locator or GitLocator(override=self.settings.get('git.executable'))
        self.clock = clock
        self._vcs = vcs

        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self.state = BackupState.IDLE

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def cancel(self):
        """Ask the running backup to stop before its next step"""
        self._cancel_event.set()

    def test_connection(self, config: Optional[BackupConfig] = None) -> bool:
        """Check credentials against GitHub; never raises"""
        config = config or self.config
        if not config.is_configured():
            return False
        client = self.client_factory(config)
        try:
            return client.test_connection()
        finally:
            client.close()

    def verify_git(self) -> Tuple[str, str]:
        """Return the git path and version; raises ExecutableNotFoundError"""
        path = self.git_locator.locate()
        return path, self._make_runner(path).version()

    def run(self, request: BackupRequest,
            on_progress: Optional[Callable[[ProgressUpdate], None]] = None) -> BackupOutcome:
        """Run a backup to completion and return its outcome"""
        last = None
        for update in self.begin_backup(request):
            if on_progress:
                on_progress(update)
            last = update
        return last.outcome

    def begin_backup(self, request: BackupRequest) -> Iterator[ProgressUpdate]:
        """Start a backup; iterate the result to drive it"""
        if self.is_running:
            raise OperationInProgressError("A backup is already in progress.")
        request.validate()
        self._cancel_event.clear()
        return self._execute(request)

    def _execute(self, request: BackupRequest) -> Iterator[ProgressUpdate]:
        if not self._lock.acquire(blocking=False):
            raise OperationInProgressError("A backup is already in progress.")

        try:
            timestamp = self.clock().strftime(TIMESTAMP_FORMAT)
            outcome = BackupOutcome()
            steps = self._plan(request.mode)

            def enter(state: BackupState, message: str) -> ProgressUpdate:
                self.state = state
                outcome.state = state
                self.logger.info(message)
                return ProgressUpdate(steps.index(state) / len(steps), message, state)

            if request.mode.includes_local:
                yield enter(BackupState.COPYING_LOCAL, "Creating local backup...")
                try:
                    self._check_cancelled()
                    outcome.local_path = copy_package(
                        request.package.source_path,
                        request.local_destination,
                        request.backup_name,
                        timestamp,
                        min_free_space_mb=self.settings.get('local.min_free_space_mb', 0)
                    )
                except PackageBackupError as e:
                    self.logger.error(f"Local backup failed: {e}")
                    outcome.errors.append(e)
                    yield self._finish(outcome, BackupState.FAILED)
                    return

            if request.mode.includes_remote:
                try:
                    yield from self._remote_leg(request, outcome, timestamp, enter)
                except PackageBackupError as e:
                    self.logger.error(f"GitHub backup failed: {e}")
                    outcome.errors.append(e)
                    if outcome.local_path:
                        outcome.partial_failure = True
                        yield self._finish(outcome, BackupState.PARTIAL_SUCCESS)
                    else:
                        yield self._finish(outcome, BackupState.FAILED)
                    return

            yield self._finish(outcome, BackupState.COMPLETE)
        finally:
            self._lock.release()

    def _remote_leg(self, request: BackupRequest, outcome: BackupOutcome, timestamp: str, enter):
        repository = request.resolved_repository_name
        prefix = self.config.default_branch or DEFAULT_BRANCH_PREFIX
        branch = f"{prefix}/{request.resolved_branch_name}_{timestamp}"
        message = f"{request.resolved_commit_message(timestamp)} - {timestamp}"
        path = Path(request.package.source_path)

        yield enter(BackupState.ENSURING_REMOTE, "Checking/creating repository...")
        self._check_cancelled()
        self.config.require_configured()

        client = self.client_factory(self.config)
        try:
            client.ensure_repository(repository)

            yield enter(BackupState.INITIALIZING_REPO, "Creating local git repository...")
            self._check_cancelled()
            vcs = self._get_vcs()
            username = self.config.username
            vcs.init_or_verify(path, client.repository_url(repository))
            vcs.configure_identity(path, username, f"{username}@users.noreply.github.com")
            vcs.branch_and_commit(path, branch, message)

            yield enter(BackupState.PUSHING, "Pushing to GitHub...")
            self._check_cancelled()
            vcs.repoint_remote(path, client.authenticated_url(repository))
            try:
                vcs.push(path, branch)
            finally:
                self._restore_remote(vcs, path, client.repository_url(repository), outcome)
        finally:
            client.close()

        outcome.remote = RemoteTarget(owner=self.config.username, repository=repository, branch=branch)
        self.logger.info(f"GitHub backup complete: {outcome.remote}")

    def _restore_remote(self, vcs: VersionControl, path: Path, url: str, outcome: BackupOutcome):
        """Drop the token from origin once the push is done"""
        try:
            vcs.repoint_remote(path, url)
        except PackageBackupError as e:
            self.logger.warning(f"Could not reset origin URL in {path}: {e}")
            outcome.warnings.append(
                f"The access token may still be stored in {path / '.git' / 'config'}; reset origin manually."
            )

    def _finish(self, outcome: BackupOutcome, state: BackupState) -> ProgressUpdate:
        self.state = state
        outcome.state = state
        messages = {
            BackupState.COMPLETE: "Complete!",
            BackupState.PARTIAL_SUCCESS: "Local backup saved, GitHub backup failed",
            BackupState.FAILED: "Backup failed"
        }
        return ProgressUpdate(1.0, messages[state], state, outcome=outcome)

    def _plan(self, mode: BackupMode) -> List[BackupState]:
        steps = []
        if mode.includes_local:
            steps.append(BackupState.COPYING_LOCAL)
        if mode.includes_remote:
            steps.extend([BackupState.ENSURING_REMOTE, BackupState.INITIALIZING_REPO, BackupState.PUSHING])
        return steps

    def _check_cancelled(self):
        if self._cancel_event.is_set():
            raise BackupCancelledError("Backup cancelled.")

    def _get_vcs(self) -> VersionControl:
        if self._vcs is None:
            self._vcs = GitCommandLine(self._make_runner(self.git_locator.locate()))
        return self._vcs

    def _make_runner(self, executable: str) -> ProcessRunner:
        return ProcessRunner(executable, timeout=self.settings.get('git.command_timeout'))
