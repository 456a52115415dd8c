"""Allow `python -m folioboard`."""

from .cli.main import main

main()
