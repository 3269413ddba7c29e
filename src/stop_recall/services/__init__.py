"""Service layer over the matching and progression engines."""
