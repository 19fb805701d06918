#!/usr/bin/env python3
"""
GitHub credential storage for Package Backup Tool

Credentials live in a flat ``key=value`` file, one pair per line, with an
optional ``[github]`` section header that is written on save and ignored on
load. The token is stored in plain text, so the file name is added to the
``.gitignore`` next to it when saving.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union
import logging

from .errors import ConfigurationError

DEFAULT_CONFIG_FILE = ".packagebackup.config"
DEFAULT_BRANCH_PREFIX = "backup"

logger = logging.getLogger(__name__)

@dataclass
class BackupConfig:
    """GitHub credentials and branch naming preferences"""
    username: str = ""
    token: str = field(default="", repr=False)
    default_branch: str = DEFAULT_BRANCH_PREFIX

    _KEYS = {
        'username': 'username',
        'token': 'token',
        'default-branch': 'default_branch'
    }

    def is_configured(self) -> bool:
        """Check if both username and token are set"""
        return bool(self.username and self.token)

    def require_configured(self):
        if not self.is_configured():
            raise ConfigurationError(
                "GitHub is not configured. Run 'package-backup setup' to store a username and token."
            )

    @classmethod
    def load(cls, path: Union[str, Path] = DEFAULT_CONFIG_FILE) -> "BackupConfig":
        """Load credentials; a missing or unreadable file yields an empty config"""
        path = Path(path)
        config = cls()

        if not path.exists():
            return config

        try:
            lines = path.read_text(encoding='utf-8').splitlines()
        except OSError as e:
            logger.error(f"Failed to load config {path}: {e}")
            return config

        for line in lines:
            line = line.strip()
            if not line or line.startswith('[') or '=' not in line:
                continue
            key, value = line.split('=', 1)
            attribute = cls._KEYS.get(key.strip())
            if attribute:
                setattr(config, attribute, value.strip())

        if not config.default_branch:
            config.default_branch = DEFAULT_BRANCH_PREFIX
        return config

    def save(self, path: Union[str, Path] = DEFAULT_CONFIG_FILE, update_gitignore: bool = True):
        """Write credentials to disk"""
        path = Path(path)
        content = "\n".join([
            "[github]",
            f"username={self.username}",
            f"token={self.token}",
            f"default-branch={self.default_branch}",
        ]) + "\n"

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(f"Failed to save config to {path}: {e}") from e

        logger.info(f"Configuration saved to {path}")

        if update_gitignore:
            ensure_gitignored(path)

def ensure_gitignored(path: Union[str, Path]) -> bool:
    """Add ``path``'s file name to the sibling .gitignore; returns True if it was added"""
    path = Path(path)
    gitignore = path.parent / ".gitignore"
    entry = path.name

    try:
        if gitignore.exists():
            content = gitignore.read_text(encoding='utf-8')
            if entry in content.splitlines():
                return False
            prefix = "" if content.endswith("\n") or not content else "\n"
            with open(gitignore, 'a', encoding='utf-8') as f:
                f.write(f"{prefix}{entry}\n")
        else:
            gitignore.write_text(f"{entry}\n", encoding='utf-8')
    except OSError as e:
        logger.warning(f"Could not update {gitignore}: {e}")
        return False

    return True
