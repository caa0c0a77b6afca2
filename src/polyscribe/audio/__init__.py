"""Audio helpers."""
