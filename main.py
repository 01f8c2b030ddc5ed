#!/usr/bin/env python
"""CLI for biasfeed news deduplication."""

from biasfeed.cli import main

if __name__ == "__main__":
    main()
