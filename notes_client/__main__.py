"""Allow ``python -m notes_client``."""

from .cli import main

main()
