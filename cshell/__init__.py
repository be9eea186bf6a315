"""Command shell and tools for CubeSat Space Protocol networks."""

__version__ = "0.1.0"