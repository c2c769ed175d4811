"""Tempo Run - pace-adaptive music queueing for runners."""

__version__ = "0.1.0"
