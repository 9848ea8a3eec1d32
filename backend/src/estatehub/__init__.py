"""EstateHub real-estate marketplace API."""

__version__ = "0.1.0"
