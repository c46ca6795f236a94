"""
Entry point for running devflake CLI as a module.

Usage: python -m devflake.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
