#!/usr/bin/python3
# -*- coding: utf-8 -*-
"""
Script that replaces straight quotes and apostrophes with curly quotes. It works directly in-place
and writes the changes back to the files (unless running with --simulate).

Example: Check the quotes of a page (simulation: don't make changes)
    python3 smart_quotes.py --simulate index.html

Configuration can be set in config.ini (see config.example.ini).

This is only the wrapper script, all main logic is in smartquotes/quotes/bot.py
"""
import sys

from smartquotes.cli import main


if __name__ == "__main__":
    sys.exit(main())
