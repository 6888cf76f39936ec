"""Settings synchronization through a GitHub Gist."""

__version__ = "0.1.0"
