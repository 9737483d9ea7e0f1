"""Runtime concerns shared across the gateway."""
