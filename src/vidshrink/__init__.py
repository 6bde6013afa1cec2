"""vidshrink - Resumable in-place video compression for large libraries."""

__version__ = "0.1.0"
