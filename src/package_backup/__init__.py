"""
Package Backup Tool

Backs up a package directory to a local folder and/or a GitHub repository.
"""

__version__ = "1.0.0"
