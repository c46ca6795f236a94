"""
Entry point for running devflake CLI as a module.

Usage: python -m devflake [command] [options]
"""

from devflake.cli.parser import main

if __name__ == "__main__":
    main()
