"""
Entry point for running vksdk CLI as a module.

Usage: python -m vksdk.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
