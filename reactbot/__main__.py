"""Entry point for ``python -m reactbot``."""

from reactbot.cli.commands import app

if __name__ == "__main__":
    app()
