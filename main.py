#!/usr/bin/env python3
"""
Package Backup Tool
Entry point for running from a source checkout
"""

import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from package_backup.main import main

if __name__ == "__main__":
    sys.exit(main())
