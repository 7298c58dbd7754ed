"""HTTP adapter around a tactical session."""
