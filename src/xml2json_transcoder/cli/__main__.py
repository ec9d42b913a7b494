"""Allow ``python -m xml2json_transcoder.cli``."""

import sys

from .main import main

sys.exit(main())
