import re

from devenvd.errors.metrics import StatsParseError

UNITS = {
    'B': 1,
    'kB': 1000,
    'KB': 1000,
    'MB': 1000 ** 2,
    'GB': 1000 ** 3,
    'TB': 1000 ** 4,
    'PB': 1000 ** 5,
    'KiB': 1024,
    'MiB': 1024 ** 2,
    'GiB': 1024 ** 3,
    'TiB': 1024 ** 4,
    'PiB': 1024 ** 5,
}

SIZE_PATTERN = re.compile(r'^\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>[A-Za-z]*)\s*$')


def parse_size(raw: str, field: str = 'size') -> int:
    """
    "1.5GiB" -> 1610612736, "20kB" -> 20000, "0B" -> 0.
    Unit is case sensitive, empty unit means bytes.
    """
    match = SIZE_PATTERN.match(raw)
    if match is None:
        raise StatsParseError(field, raw)
    unit = match.group('unit') or 'B'
    if unit not in UNITS:
        raise StatsParseError(field, raw)
    return int(float(match.group('value')) * UNITS[unit])


def parse_size_pair(raw: str, field: str = 'size pair') -> tuple[int, int]:
    parts = raw.split('/')
    if len(parts) != 2:
        raise StatsParseError(field, raw)
    return parse_size(parts[0], field), parse_size(parts[1], field)


def parse_percent(raw: str, field: str = 'percent') -> float:
    value = raw.strip().removesuffix('%').strip()
    try:
        return float(value)
    except ValueError:
        raise StatsParseError(field, raw) from None


def parse_count(raw: str, field: str = 'count') -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise StatsParseError(field, raw) from None
