"""Orientation, alignment and bubble-level core for camera overlays."""

__version__ = "0.1.0"
