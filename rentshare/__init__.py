"""Peer-to-peer rental marketplace booking engine."""

__version__ = "1.0.0"
