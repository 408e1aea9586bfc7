"""Allow ``python -m modsync``."""

import sys

from modsync.cli import main

if __name__ == "__main__":
    sys.exit(main())
