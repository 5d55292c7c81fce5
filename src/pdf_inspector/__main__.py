#!/usr/bin/env python3
"""Entry point for running pdf_inspector as a module.

This allows the converter to be executed as:
    python -m pdf_inspector INPUT [arguments]
"""

import sys

from .cli.convert import main

if __name__ == "__main__":
    sys.exit(main())
