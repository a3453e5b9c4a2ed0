"""Time formatting helpers."""


def format_time_spent(seconds: int | float) -> str:
    """
    Format seconds as a short human-readable duration.

    Examples: 0 -> "0s", 125 -> "2m 5s", 4225 -> "1h 10m 25s"
    """
    if not seconds or seconds <= 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    remaining = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{remaining}s")
    return " ".join(parts)
