"""Save snapshots of your working directory, git state and recent shell commands, and restore them."""

__version__ = "0.1.0"
__all__ = ["__version__"]