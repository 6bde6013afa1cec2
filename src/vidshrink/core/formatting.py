"""Formatting utilities.

Pure functions for formatting sizes and ratios for display.
"""

# Decimal (storage-marketing) gigabyte, not GiB.
BYTES_PER_GB = 1000**3


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable binary units.

    Args:
        size_bytes: File size in bytes.

    Returns:
        Formatted string (e.g., "4.2 GB", "128.0 MB", "1.5 KB").
    """
    if size_bytes >= 1024**3:
        return f"{size_bytes / (1024**3):.1f} GB"
    elif size_bytes >= 1024**2:
        return f"{size_bytes / (1024**2):.1f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_gigabytes(size_bytes: int, precision: int = 2) -> str:
    """Format a byte count as decimal gigabytes (1 GB = 10^9 bytes).

    Args:
        size_bytes: Size in bytes.
        precision: Number of decimal places.

    Returns:
        Formatted string (e.g., "12.35 GB").
    """
    return f"{size_bytes / BYTES_PER_GB:.{precision}f} GB"


def format_percent(ratio: float, precision: int = 1) -> str:
    """Format a 0..1 ratio as a percentage string.

    Examples:
        >>> format_percent(0.3666)
        '36.7%'
    """
    return f"{ratio * 100:.{precision}f}%"


def truncate_filename(filename: str, max_length: int = 40) -> str:
    """Truncate filename preserving start and extension.

    If truncation is needed, shows: beginning…extension

    Examples:
        >>> truncate_filename("some-very-long-movie-name.mkv", 25)
        'some-very-long-movie….mkv'
        >>> truncate_filename("short.mp4", 40)
        'short.mp4'
    """
    if not filename or len(filename) <= max_length:
        return filename

    dot_index = filename.rfind(".")
    if dot_index > 0:
        extension = filename[dot_index:]
        base = filename[:dot_index]
    else:
        extension = ""
        base = filename

    available_for_base = max_length - len(extension) - 1

    if available_for_base < 1:
        return filename[: max_length - 1] + "…"

    return base[:available_for_base] + "…" + extension
