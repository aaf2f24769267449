"""Console Entry Point - Root Module.

Allows running from a checkout with ``python main.py``.
It imports from the quakewatch package.
"""

import sys

from quakewatch.main import main

if __name__ == "__main__":
    sys.exit(main())
