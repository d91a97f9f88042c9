#!/usr/bin/env python3
"""Entry point for the home security system."""

import sys

from catpoint_security.main import main

if __name__ == "__main__":
    sys.exit(main())
