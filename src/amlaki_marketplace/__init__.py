"""Amlaki marketplace lifecycle core: agents, listings and deals."""

__version__ = "0.1.0"
