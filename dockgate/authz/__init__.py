"""Access decisions over resource controls."""
