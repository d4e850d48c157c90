"""
Main entry point for running the package as a module.

Usage:
    python -m focalcrop crop -i image.jpg --viewport Mobile=375x667
    python -m focalcrop upload -i image.jpg --viewport Mobile=375x667 -d "/sitecore/media library/x"
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
