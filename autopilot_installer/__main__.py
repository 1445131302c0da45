import sys

from autopilot_installer.cli import main

sys.exit(main())
