"""Entry point for ``python -m steamdb_companion``."""

from steamdb_companion.cli.typer_app import app

if __name__ == "__main__":
    app()
