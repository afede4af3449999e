"""Allow running kpackager as ``python -m kpackager``."""

import sys

from kpackager.cli import main

sys.exit(main())
