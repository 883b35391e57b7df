"""Low-level network tooling."""
