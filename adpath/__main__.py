"""Allow running as ``python -m adpath``."""

from .cli import main

main()
