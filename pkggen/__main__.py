"""
Main entry point for running the package as a module.

Usage:
    python -m pkggen plan assets/ui
    python -m pkggen sync assets/ui build/ui
    python -m pkggen build assets/ui build/ui
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
