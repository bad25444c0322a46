"""Module wrapper so running ``python -m showtree.cli`` matches the console script."""

from showtree.cli import main  # Re-exported Click command-group


if __name__ == "__main__":  # pragma: no cover
    main()
