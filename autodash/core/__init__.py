"""Core computation modules."""
