"""
Helper functions for formatting data into human-readable strings.
"""


def format_size(bytes_size: float) -> str:
    """Formats bytes into a human-readable size string (e.g., '7.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_duration(seconds: int) -> str:
    """Formats a track duration as ``m:ss`` (or ``h:mm:ss`` for long ones)."""
    s = max(int(seconds), 0)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02}:{secs:02}"
    return f"{minutes}:{secs:02}"
