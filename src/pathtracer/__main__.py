"""Run the command-line renderer with ``python -m pathtracer``."""

import sys

from pathtracer.cli import main

sys.exit(main())
