"""Kernex Core - workspace sandbox and credentialed file-access gateway."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("kernex")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
