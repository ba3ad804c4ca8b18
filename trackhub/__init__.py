"""trackhub: documents kept in a GitHub repository, mirrored to local disk."""

__version__ = "0.1.0"
