"""Module entrypoint for ``python -m testtree``."""

from .cli import main


if __name__ == "__main__":
    main()
