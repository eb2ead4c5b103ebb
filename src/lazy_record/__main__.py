"""Entry point for ``python -m lazy_record``."""

import sys

from lazy_record.cli import main

if __name__ == "__main__":
    sys.exit(main())
