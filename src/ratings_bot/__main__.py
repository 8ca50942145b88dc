"""Allow ``python -m ratings_bot`` as a shortcut for the runner."""

import sys

from .runner import main

sys.exit(main())
