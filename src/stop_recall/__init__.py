"""Transit stop memory game: fuzzy stop matching and tiered progression."""

__version__ = "0.1.0"
