"""Display output for weatherboard."""
