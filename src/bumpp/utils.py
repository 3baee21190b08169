TIME_UNITS = [
    ("week", 604800),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
]

UNIT_ALIASES = {
    "second": "second",
    "seconds": "second",
    "sec": "second",
    "secs": "second",
    "minute": "minute",
    "minutes": "minute",
    "min": "minute",
    "mins": "minute",
    "hour": "hour",
    "hours": "hour",
    "day": "day",
    "days": "day",
    "week": "week",
    "weeks": "week",
}

UNIT_SECONDS = dict(TIME_UNITS)

ARTICLES = ("a", "an")

# Returned for unknown units, callers must not schedule on it
INVALID = (0, "seconds")


def pluralize(count: int, unit: str) -> str:
    return unit if count == 1 else f"{unit}s"


def parse_amount(value: str | int) -> int:
    if isinstance(value, int):
        return value

    value = value.strip().lower()

    if value in ARTICLES:
        return 1

    try:
        return int(value)
    except ValueError:
        return 0


def normalize(amount: str | int, unit_word: str) -> tuple[int, str]:
    """Convert an amount and a unit word into seconds and a display unit.

    "a" and "an" count as 1. The display unit is always the long form,
    singular for exactly one and plural otherwise.
    """
    unit = UNIT_ALIASES.get(unit_word.strip().lower())
    amount = parse_amount(amount)

    if unit is None or amount < 1:
        return INVALID

    return amount * UNIT_SECONDS[unit], pluralize(amount, unit)


def time_to_str(value: int) -> str:
    value = max(0, int(value))

    for unit, unit_sec in TIME_UNITS:
        if value >= unit_sec:
            count = value // unit_sec
            return f"{count} {pluralize(count, unit)}"

    return "0 seconds"
