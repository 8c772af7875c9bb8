#!/usr/bin/env python3
"""Convenience runner for trackkeeper.

Usage:
    python run.py --user alice sync
"""
import sys

from trackkeeper.main import main

if __name__ == "__main__":
    sys.exit(main())
