#!/usr/bin/env python3
"""
Git executable discovery and command execution for Package Backup Tool
"""

import os
import re
import platform
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from .errors import ExecutableNotFoundError, CommandError, CommandTimeoutError

GIT_NOT_FOUND_MESSAGE = (
    "Git not found! Please install Git or add it to your system PATH.\n\n"
    "Download Git from: https://git-scm.com/downloads\n\n"
    "Or set 'git.executable' in the settings file to the full path of git."
)

VERSION_CHECK_TIMEOUT = 10

_URL_CREDENTIALS = re.compile(r'(https?://)[^/@\s]+@')

def redact(text: str) -> str:
    """Strip credentials embedded in URLs"""
    return _URL_CREDENTIALS.sub(r'\1***@', text)

@dataclass
class ProcessResult:
    """Captured output of a finished command"""
    exit_code: int
    stdout: str
    stderr: str

class GitLocator:
    """Finds a working git executable and remembers it"""

    def __init__(self, override: Optional[str] = None, system: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.override = override or None
        self.system = (system or platform.system()).lower()
        self._located: Optional[str] = None

    def candidates(self) -> List[str]:
        """Ordered list of places to look for git"""
        paths: List[str] = []
        if self.override:
            paths.append(self.override)

        which = shutil.which("git")
        if which:
            paths.append(which)

        if self.system == 'windows':
            user_programs = Path(os.environ.get('LOCALAPPDATA', Path.home() / 'AppData' / 'Local')) / 'Programs' / 'Git'
            for root in (Path(r"C:\Program Files\Git"), Path(r"C:\Program Files (x86)\Git"), user_programs):
                paths.append(str(root / 'bin' / 'git.exe'))
                paths.append(str(root / 'cmd' / 'git.exe'))
        else:
            for directory in ('/usr/bin', '/usr/local/bin', '/opt/homebrew/bin', '/opt/local/bin'):
                paths.append(os.path.join(directory, 'git'))

        seen = set()
        return [p for p in paths if not (p in seen or seen.add(p))]

    def locate(self) -> str:
        """Return the first working git executable, caching it on this locator"""
        if self._located:
            return self._located

        for candidate in self.candidates():
            if self._works(candidate):
                self.logger.debug(f"Using git at {candidate}")
                self._located = candidate
                return candidate

        raise ExecutableNotFoundError(GIT_NOT_FOUND_MESSAGE)

    def _works(self, candidate: str) -> bool:
        """True if candidate is executable and `--version` exits cleanly"""
        if not (os.path.isfile(candidate) and os.access(candidate, os.X_OK)):
            return False
        try:
            completed = subprocess.run(
                [candidate, '--version'],
                capture_output=True,
                timeout=VERSION_CHECK_TIMEOUT
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            self.logger.debug(f"Skipping git candidate {candidate}: {e}")
            return False
        if completed.returncode != 0:
            self.logger.debug(f"Skipping git candidate {candidate}: --version exited with {completed.returncode}")
            return False
        return True

    def reset(self):
        self._located = None

class ProcessRunner:
    """Runs an executable synchronously against a working directory"""

    def __init__(self, executable: str, timeout: Optional[float] = None):
        self.logger = logging.getLogger(__name__)
        self.executable = executable
        self.timeout = timeout

    def run(self, working_dir: Union[str, Path], args: Sequence[str]) -> ProcessResult:
        """Run a command; raise CommandError on non-zero exit with stderr output

        Arguments and stderr are redacted before they reach logs or errors.
        """
        shown = [redact(arg) for arg in args]
        self.logger.debug(f"Running git {' '.join(shown)} in {working_dir}")

        if not Path(working_dir).is_dir():
            raise CommandError(shown, -1, f"Working directory not found: {working_dir}")

        try:
            completed = subprocess.run(
                [self.executable, *args],
                cwd=str(working_dir),
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(shown, self.timeout) from e
        except FileNotFoundError as e:
            raise ExecutableNotFoundError(f"{GIT_NOT_FOUND_MESSAGE}\n\n({e})") from e

        result = ProcessResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or ""
        )

        # Tools like git print progress to stderr on success
        if result.exit_code != 0 and result.stderr.strip():
            stderr = redact(result.stderr)
            self.logger.error(f"git {' '.join(shown)} exited with {result.exit_code}: {stderr.strip()}")
            raise CommandError(shown, result.exit_code, stderr)

        return result

    def version(self) -> str:
        """Get the executable's version string, or 'unknown'"""
        try:
            return self.run(os.getcwd(), ['--version']).stdout.strip() or "unknown"
        except (OSError, CommandError, CommandTimeoutError, ExecutableNotFoundError) as e:
            self.logger.warning(f"Could not determine git version: {e}")
            return "unknown"
