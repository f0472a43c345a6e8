#!/usr/bin/env python3
"""panscan main entry point.

Usage::

    python main.py probe --target example.com
    python main.py check --target example.com --record 1.2.3.4 --ttl 300
    python main.py version
    python main.py config
"""

from panscan.cli import main

if __name__ == "__main__":
    main()
