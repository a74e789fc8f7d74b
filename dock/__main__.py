"""Allow running Dock with ``python -m dock``."""

from .cli.main import cli

if __name__ == '__main__':
    cli()
