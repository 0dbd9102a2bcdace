"""
Entry point for running vksdk CLI as a module.

Usage: python -m vksdk [command] [options]
"""

from vksdk.cli.parser import main

if __name__ == "__main__":
    main()
