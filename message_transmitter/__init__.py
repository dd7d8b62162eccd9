"""In-memory cross-chain message transmitter: message format, attestations, nonces and admin rules."""

__version__ = "0.1.0"