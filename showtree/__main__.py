"""
Module entry-point that makes the package runnable with

    python -m showtree
    python -m showtree.cli

The behaviour is identical to the *showtree-cli* console script because the
Click **group** imported below performs all CLI dispatching.
"""

from showtree.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
