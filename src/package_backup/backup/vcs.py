#!/usr/bin/env python3
"""
Version control operations used by the backup orchestrator

The orchestrator only talks to ``VersionControl``; ``GitCommandLine`` is the
shelled implementation.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union
import logging

from ..core.process_runner import ProcessRunner

class VersionControl(ABC):
    """Operations needed to turn a directory into a pushed branch"""

    @abstractmethod
    def init_or_verify(self, path: Path, remote_url: str) -> bool:
        """Initialize a repository with an origin remote unless one exists; True if created"""
        pass

    @abstractmethod
    def configure_identity(self, path: Path, name: str, email: str):
        """Set the committer identity for the repository"""
        pass

    @abstractmethod
    def branch_and_commit(self, path: Path, branch: str, message: str):
        """Create and switch to ``branch``, stage everything and commit"""
        pass

    @abstractmethod
    def repoint_remote(self, path: Path, url: str):
        """Point origin at ``url``"""
        pass

    @abstractmethod
    def push(self, path: Path, branch: str):
        """Push ``branch`` to origin with upstream tracking"""
        pass

class GitCommandLine(VersionControl):
    """VersionControl backed by the git executable"""

    def __init__(self, runner: ProcessRunner):
        self.logger = logging.getLogger(__name__)
        self.runner = runner

    def _git(self, path: Union[str, Path], *args: str):
        return self.runner.run(path, list(args))

    def init_or_verify(self, path: Path, remote_url: str) -> bool:
        if (Path(path) / '.git').exists():
            self.logger.debug(f"Existing git repository found in {path}")
            return False

        self._git(path, 'init')
        self._git(path, 'remote', 'add', 'origin', remote_url)
        self.logger.info(f"Initialized git repository in {path}")
        return True

    def configure_identity(self, path: Path, name: str, email: str):
        self._git(path, 'config', 'user.name', name)
        self._git(path, 'config', 'user.email', email)

    def branch_and_commit(self, path: Path, branch: str, message: str):
        self._git(path, 'checkout', '-b', branch)
        self._git(path, 'add', '.')
        self._git(path, 'commit', '-m', message)
        self.logger.info(f"Committed to branch {branch}")

    def repoint_remote(self, path: Path, url: str):
        self._git(path, 'remote', 'set-url', 'origin', url)

    def push(self, path: Path, branch: str):
        self._git(path, 'push', '-u', 'origin', branch)
        self.logger.info(f"Pushed branch {branch}")
