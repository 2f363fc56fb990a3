"""Allow ``python -m wavesynth``."""

import sys

from wavesynth.cli import main

sys.exit(main())
