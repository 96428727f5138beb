"""filepeek - sandboxed file browsing and preview service."""

__version__ = "0.1.0"
