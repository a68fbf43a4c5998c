#!/usr/bin/env python3
"""TwinTimer entry point.

Run with:
    python main.py
    python -m twintimer
"""

from twintimer.__main__ import main


if __name__ == "__main__":
    main()
