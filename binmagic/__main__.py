"""
binmagic Module Entry Point
============================

Allows running the CLI via: python -m binmagic
"""

from binmagic.cli import main

if __name__ == "__main__":
    main()
