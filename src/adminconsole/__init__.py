"""Admin console resource list controller."""

__version__ = "0.1.0"
