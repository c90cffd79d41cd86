# Allows running ccswitch as `python -m ccswitch`
import sys

from ccswitch.cli import main

sys.exit(main())
