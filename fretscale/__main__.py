"""Allow ``python -m fretscale``."""

from fretscale.cli import main

if __name__ == "__main__":
    main()
