"""Module entrypoint for ``python -m treesnap``."""

from .cli import main


if __name__ == "__main__":
    main()
