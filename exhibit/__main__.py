"""
Exhibit Module Entry Point
==========================

Allows running the Exhibit CLI via: python -m exhibit
"""

from exhibit.cli import main

if __name__ == "__main__":
    main()
