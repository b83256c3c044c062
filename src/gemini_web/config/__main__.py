"""CLI entry point for configuration introspection.

Usage:
    python -m gemini_web.config
    python -m gemini_web.config --json
"""

import sys

from .introspection import main

if __name__ == "__main__":
    sys.exit(main())
