"""Relay adapter binding shielded transaction batches to atomic multicalls."""

from importlib import metadata


def __getattr__(name: str) -> str:
    """Expose the package version via ``relay_adapt.__version__``."""
    if name == "__version__":
        try:
            return metadata.version("relay-adapt")
        except metadata.PackageNotFoundError:
            return "0.0.0"
    raise AttributeError(name)


__all__ = ["__version__"]
