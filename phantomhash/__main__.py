"""
PhantomHash Module Entry Point
===============================

Allows running the PhantomHash CLI via: python -m phantomhash
"""

from phantomhash.cli import main

if __name__ == "__main__":
    main()
