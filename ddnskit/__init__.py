"""Building blocks for dynamic DNS clients: request signers, address caching, network, HTTP and self-update helpers."""

__version__ = "0.1.0"