#!/usr/bin/env python3
"""
PageSync Entry Point Script

This script initializes the CLI handler and runs the requested command.
"""

import sys
from pagesync.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("PageSync requires Python 3.8 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    cli.run()
