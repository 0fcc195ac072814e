"""Conversion between byte counts and human readable sizes."""

BINARY_UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB"]

# Units printed by `docker history`, powers of 1000.
DECIMAL_UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def pretty_bytes(num_bytes: float) -> str:
    """Format a byte count with binary units and one decimal.

    Args:
        num_bytes: Byte count, may be negative (e.g. a size delta)

    Returns:
        Formatted size such as "1.5 KiB" or "-20 B"
    """
    value = abs(num_bytes)
    level = 0
    while value / 1024 > 1 and level < len(BINARY_UNITS) - 1:
        value /= 1024
        level += 1

    rounded = round(value * 10) / 10
    if num_bytes < 0:
        rounded = -rounded
    if rounded == int(rounded):
        rounded = int(rounded)
    return f"{rounded} {BINARY_UNITS[level]}"


def unpretty_bytes(human: str) -> int:
    """Parse a decimal-unit size string back into bytes.

    Args:
        human: Size string such as "5.59MB", "0B" or "1.2 kB"

    Returns:
        Byte count, or 0 when the unit is not recognised
    """
    text = human.strip()
    level = -1
    # Every unit ends in "B"; the last match is the longest suffix
    for index, unit in enumerate(DECIMAL_UNITS):
        if text.endswith(unit):
            level = index

    if level == -1:
        return 0

    try:
        value = float(text[: -len(DECIMAL_UNITS[level])].strip())
    except ValueError:
        return 0

    for _ in range(level):
        value *= 1000
    return int(round(value))
