#!/usr/bin/env python3
"""
Autopilot Template - Installer
Installs the .claude/ skills, agents, commands and hooks template into a project.

Features:
- downloads the template tarball from GitHub (or uses --source-dir)
- backup-before-overwrite (<name>.backup.<timestamp>) for every managed entry
- rollback on failure: the project is left exactly as it was found
- dry-run support

Usage:
  python install.py /path/to/target/project
  python install.py -y /path/to/target/project   # skip confirmations
"""

from __future__ import annotations

import sys

from autopilot_installer.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
