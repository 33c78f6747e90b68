"""Framework components built on trellis.core."""
