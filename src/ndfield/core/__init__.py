"""Core modules for ndfield."""

__all__ = [
    "algebra",
    "buffers",
    "config",
    "exceptions",
    "fields",
    "strides",
    "structures",
]
