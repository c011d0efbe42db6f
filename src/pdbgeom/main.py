#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDB Geometry Main Application

Entry point for ``python -m pdbgeom.main``.
"""

import sys

from .cli import main_cli


if __name__ == "__main__":
    exit_code = main_cli()
    sys.exit(exit_code)
