"""Adapters binding service-layer ports to concrete backends."""
