"""Bitmap assets bundled with the renderer."""
