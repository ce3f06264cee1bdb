"""Allow ``python -m hashed_language_id``."""

from .cli import main

if __name__ == "__main__":
    main()
