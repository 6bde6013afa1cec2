"""Allow running vidshrink as ``python -m vidshrink``."""

from vidshrink.cli import main

if __name__ == "__main__":
    main()
