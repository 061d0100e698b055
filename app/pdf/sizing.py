BYTES_PER_MB = 1024 * 1024


def size_mb(buffer: bytes) -> float:
    """Return the buffer length in megabytes (1 MB = 1024 * 1024 bytes)."""
    return len(buffer) / BYTES_PER_MB


def exceeds(buffer: bytes, limit_mb: float) -> bool:
    """True when the buffer is strictly larger than limit_mb."""
    return size_mb(buffer) > limit_mb


def format_mb(value: float) -> str:
    """Render a size in MB with two-decimal precision, e.g. '45.00 MB'."""
    return f"{value:.2f} MB"
