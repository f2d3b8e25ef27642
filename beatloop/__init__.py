"""Beatloop: loop an animated GIF to the beat of an audio clip."""

__version__ = "0.1.0"
