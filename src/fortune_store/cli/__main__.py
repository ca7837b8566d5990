"""Run the database administration CLI: ``python -m fortune_store.cli``."""

import sys

from fortune_store.cli.db import main

if __name__ == "__main__":
    sys.exit(main())
