"""Session and navigation state core for a document chat client."""

__version__ = "1.0.0"
