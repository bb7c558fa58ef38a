import sys

from tick_cooldown.cli import main

sys.exit(main())
