"""Forever Wall: an append-only public wall gated by proof-of-work."""

__version__ = "0.1.0"
