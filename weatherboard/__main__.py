"""Entry point for `python -m weatherboard`."""

import sys

from weatherboard.cli import main

if __name__ == "__main__":
    sys.exit(main())
