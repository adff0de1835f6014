"""Application services (use cases) and their ports."""
