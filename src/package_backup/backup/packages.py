#!/usr/bin/env python3
"""
Package discovery for Package Backup Tool
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union
import logging

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class PackageRef:
    """A directory that can be backed up"""
    name: str
    source_path: Path

@dataclass
class PackageInfo:
    """Display information about a package"""
    package: PackageRef
    size_bytes: int
    last_modified: datetime

    @property
    def size_display(self) -> str:
        return format_bytes(self.size_bytes)

def discover_packages(cache_dir: Union[str, Path]) -> List[PackageRef]:
    """List package directories in ``cache_dir``, skipping hidden ones"""
    cache_dir = Path(cache_dir)
    if not cache_dir.is_dir():
        logger.warning(f"Package folder not found: {cache_dir}")
        return []

    packages = sorted(
        (PackageRef(name=entry.name, source_path=entry)
         for entry in cache_dir.iterdir()
         if entry.is_dir() and not entry.name.startswith('.')),
        key=lambda ref: ref.name
    )
    logger.info(f"Found {len(packages)} packages in {cache_dir}")
    return packages

def find_package(cache_dir: Union[str, Path], name: str) -> Optional[PackageRef]:
    for package in discover_packages(cache_dir):
        if package.name == name:
            return package
    return None

def directory_size(path: Union[str, Path]) -> int:
    """Total size in bytes of all files below ``path``"""
    total = 0
    for item in Path(path).rglob('*'):
        if item.is_file() and not item.is_symlink():
            total += item.stat().st_size
    return total

def get_package_info(package: PackageRef) -> PackageInfo:
    stat = package.source_path.stat()
    return PackageInfo(
        package=package,
        size_bytes=directory_size(package.source_path),
        last_modified=datetime.fromtimestamp(stat.st_mtime)
    )

def format_bytes(size: int) -> str:
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    order = 0
    while value >= 1024 and order < len(units) - 1:
        order += 1
        value /= 1024
    return f"{value:.2f}".rstrip('0').rstrip('.') + f" {units[order]}"
