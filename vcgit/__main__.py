"""Allow ``python -m vcgit``."""

import sys

from vcgit.cli import main

sys.exit(main())
