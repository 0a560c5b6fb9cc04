#!/usr/bin/env python3
"""Focusly entry point.

Run with:
    python main.py
    python -m focusly
"""

from focusly.__main__ import main


if __name__ == "__main__":
    main()
