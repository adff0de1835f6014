"""Building blocks shared by all services."""
