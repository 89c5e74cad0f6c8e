"""vspherecli - CLI for vSphere guest customization."""

__version__ = "0.1.0"
