#!/usr/bin/env python3
"""
GitHub repository client for Package Backup Tool
Checks credentials and makes sure the backup repository exists
"""

import time
from enum import Enum
from typing import Callable, Optional
import logging

import requests

from ..core.credentials import BackupConfig
from ..core.errors import RepositoryError, RemoteTimeoutError

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_HOST = "github.com"
DEFAULT_USER_AGENT = "Package-Backup-Tool/1.0"

class RepositoryStatus(Enum):
    """Result of ensuring a repository"""
    EXISTS = "exists"
    CREATED = "created"

class GitHubClient:
    """Minimal GitHub REST client bound to one set of credentials"""

    def __init__(self, config: BackupConfig,
                 api_base: str = DEFAULT_API_BASE,
                 host: str = DEFAULT_HOST,
                 user_agent: str = DEFAULT_USER_AGENT,
                 description: str = "Package Backup",
                 timeout: Optional[float] = 30,
                 settle_delay: float = 2.0,
                 sleep: Callable[[float], None] = time.sleep,
                 session: Optional[requests.Session] = None):
        self.logger = logging.getLogger(__name__)
        self.username = config.username
        self._token = config.token
        self.api_base = api_base.rstrip('/')
        self.host = host
        self.description = description
        self.timeout = timeout
        self.settle_delay = settle_delay
        self._sleep = sleep

        # One session per client, so headers never leak between credentials
        self.session = session or requests.Session()
        self.session.headers.clear()
        self.session.headers.update({
            'Authorization': f'token {self._token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': user_agent
        })

    @classmethod
    def from_settings(cls, config: BackupConfig, settings, **kwargs) -> "GitHubClient":
        """Build a client using values from a Settings instance"""
        return cls(
            config,
            api_base=settings.get('github.api_base', DEFAULT_API_BASE),
            host=settings.get('github.host', DEFAULT_HOST),
            user_agent=settings.get('github.user_agent', DEFAULT_USER_AGENT),
            description=settings.get('github.repo_description', 'Package Backup'),
            timeout=settings.get('github.request_timeout', 30),
            settle_delay=settings.get('github.settle_delay', 2.0),
            **kwargs
        )

    def test_connection(self) -> bool:
        """Test GitHub API connection"""
        try:
            response = self.session.get(f"{self.api_base}/user", timeout=self.timeout)
            return response.ok
        except requests.RequestException as e:
            self.logger.error(f"GitHub connection test failed: {e}")
            return False

    def ensure_repository(self, name: str) -> RepositoryStatus:
        """Create the private repository if it doesn't exist"""
        try:
            response = self.session.get(
                f"{self.api_base}/repos/{self.username}/{name}", timeout=self.timeout
            )
            if response.ok:
                self.logger.info(f"Repository {name} already exists")
                return RepositoryStatus.EXISTS

            repo_data = {
                "name": name,
                "description": self.description,
                "private": True,
                "auto_init": True
            }
            response = self.session.post(
                f"{self.api_base}/user/repos", json=repo_data, timeout=self.timeout
            )
        except requests.Timeout as e:
            raise RemoteTimeoutError(f"GitHub did not respond within {self.timeout}s: {e}") from e
        except requests.RequestException as e:
            raise RepositoryError(f"Repository check/creation failed: {e}") from e

        if not response.ok:
            self.logger.error(f"Failed to create repository: {response.status_code} - {response.text}")
            raise RepositoryError(
                f"Failed to create repository {name} (HTTP {response.status_code})",
                status_code=response.status_code,
                body=response.text
            )

        self.logger.info(f"Created new repository: {self.username}/{name}")
        if self.settle_delay > 0:
            # New repositories are not immediately pushable
            self._sleep(self.settle_delay)
        return RepositoryStatus.CREATED

    def repository_url(self, name: str) -> str:
        return f"https://{self.host}/{self.username}/{name}.git"

    def authenticated_url(self, name: str) -> str:
        """Push URL with the token embedded; never log this"""
        return f"https://{self._token}@{self.host}/{self.username}/{name}.git"

    def close(self):
        self.session.close()
