"""Entry point for ``python -m sse_bridge``."""

from .cli import main

main()
