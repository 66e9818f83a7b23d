"""Building blocks for digital cinema and IMF post-production tools."""

__version__ = "0.1.0"