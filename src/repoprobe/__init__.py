"""repoprobe - structural analysis of source repositories."""

__version__ = "0.3.0"
