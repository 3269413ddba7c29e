"""Dataset, configuration and persistence."""
