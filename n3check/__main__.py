"""
n3check CLI entry point.

Usage:
    python -m n3check proof.n3
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
