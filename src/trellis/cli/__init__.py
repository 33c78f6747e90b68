"""Command-line interface (``trellis``)."""
