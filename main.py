#!/usr/bin/env python3
"""Tickdown — entry point.

Run with:
    python main.py run --minutes 5
    python -m tickdown run
"""

from tickdown.__main__ import main


if __name__ == "__main__":
    main()
