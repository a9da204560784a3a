"""Server-directory crawler: listing extraction from community directory sites."""

__version__ = "0.1.0"
