"""Row filtering."""
