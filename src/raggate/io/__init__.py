"""I/O: streaming transport."""
