"""Allow ``python -m monoforge``."""

from monoforge.cli import main

main()
