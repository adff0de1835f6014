"""Redis-backed adapters."""
