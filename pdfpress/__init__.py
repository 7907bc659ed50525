"""pdfpress - asynchronous PDF compression with webhook delivery."""

__version__ = "1.0.0"
