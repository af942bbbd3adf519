"""Entrypoint for ``python -m hkctl``."""

from .cli import main

if __name__ == "__main__":
    main()
