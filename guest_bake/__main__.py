"""Entry point for ``python -m guest_bake``."""

from guest_bake.cli import app

if __name__ == "__main__":
    app()
