"""Entry point for ``python -m vspherecli``."""

from .cli.main import app

app(prog_name="vspherecli")
