#!/usr/bin/env python3
"""Infinite Wiki Hugging Face Spaces entry point."""

from infinite_wiki.app.app import main

if __name__ == "__main__":
    main()
