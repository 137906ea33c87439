#!/usr/bin/env python3
"""
Battle engine command-line entry point.

Thin wrapper around pokebattle.cli so the tool runs from a checkout:

    python main.py simulate --player pikachu:12 --location windy_ridge
    python main.py validate
"""
import sys

from pokebattle.cli import main

if __name__ == "__main__":
    sys.exit(main())
