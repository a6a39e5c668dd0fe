"""Run logsweep: python -m logsweep"""

import sys

from logsweep.cli import main

if __name__ == "__main__":
    sys.exit(main())
