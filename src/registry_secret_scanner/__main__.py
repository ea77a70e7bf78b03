"""
Main entry point for the scanner package.

Usage:
    python -m registry_secret_scanner scan REPOSITORY [TAG] [OPTIONS]
    python -m registry_secret_scanner search TERM
    python -m registry_secret_scanner tags REPOSITORY
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
