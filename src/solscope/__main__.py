"""
Entry point for running solscope as a module.

Usage:
    python -m solscope lint Token.sol
"""

import sys

from solscope.cli import main

if __name__ == "__main__":
    sys.exit(main())
