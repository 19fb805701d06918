#!/usr/bin/env python3
"""
Local directory backups for Package Backup Tool
"""

import shutil
from pathlib import Path
from typing import Union
import logging

import psutil

from ..core.errors import CopyError
from .packages import directory_size

logger = logging.getLogger(__name__)

def backup_folder_name(backup_name: str, timestamp: str) -> str:
    return f"{backup_name}_{timestamp}"

def check_free_space(destination: Union[str, Path], required_bytes: int, margin_bytes: int = 0):
    """Raise CopyError if the destination volume can't hold ``required_bytes``"""
    probe = Path(destination)
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent

    try:
        free = psutil.disk_usage(str(probe)).free
    except OSError as e:
        logger.warning(f"Could not check free space on {probe}: {e}")
        return

    if free < required_bytes + margin_bytes:
        raise CopyError(
            f"Insufficient space for backup at {destination}: "
            f"{free / (1024**2):.1f} MB free, {(required_bytes + margin_bytes) / (1024**2):.1f} MB needed"
        )

def copy_package(source: Union[str, Path], destination_root: Union[str, Path],
                 backup_name: str, timestamp: str, min_free_space_mb: int = 0) -> Path:
    """Copy ``source`` to ``{destination_root}/{backup_name}_{timestamp}``

    Existing files in the target are overwritten. The target path is returned.
    """
    source = Path(source)
    if not source.is_dir():
        raise CopyError(f"Source package folder not found: {source}")
    if not backup_name:
        raise CopyError("A backup name is required for local backups")

    root = Path(destination_root).expanduser()
    destination = root / backup_folder_name(backup_name, timestamp)

    try:
        check_free_space(root, directory_size(source), min_free_space_mb * 1024 * 1024)
        destination.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, destination, dirs_exist_ok=True)
    except OSError as e:
        raise CopyError(f"Local backup failed: {e}") from e

    logger.info(f"Local backup created: {destination}")
    return destination
