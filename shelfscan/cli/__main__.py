"""Allow ``python -m shelfscan.cli`` execution."""

import sys

from shelfscan.cli.scan import main

sys.exit(main())
