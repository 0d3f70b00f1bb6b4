"""Duration parsing for timeouts written as numbers or unit strings."""

import re
from typing import Annotated

from pydantic import BeforeValidator, Field

DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")

UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: object) -> float:
    """Convert a duration to seconds.

    Numbers are taken as seconds. Strings take an optional unit suffix
    (e.g. "250ms", "3s", "5m"); a bare number string means seconds.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        if (match := DURATION_PATTERN.match(value)) is None:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        return float(amount) * UNIT_SECONDS[unit or "s"]
    raise ValueError(f"Invalid duration: {value!r}")


Duration = Annotated[float, BeforeValidator(parse_duration)]
PositiveDuration = Annotated[float, BeforeValidator(parse_duration), Field(gt=0)]
