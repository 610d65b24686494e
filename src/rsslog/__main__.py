"""Run the data logger: `python -m rsslog`."""

import sys

from .cli import main

sys.exit(main())
