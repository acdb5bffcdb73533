from datetime import datetime

import pendulum

from gamification.errors import ValidationError


def parse_finished_at(value: str | None) -> datetime | None:
    '''Parse an optional completion timestamp; naive values are taken as UTC.

    Accepts anything pendulum reads leniently, e.g. "2026-02-05T10:00:00",
    "2026-02-05 10:00:00" or "2026-02-05". Empty input means "now" and
    yields None.
    '''
    if value is None or not value.strip():
        return None
    try:
        parsed = pendulum.parse(value.strip(), strict=False, tz='UTC')
    except ValueError:
        raise ValidationError(f'Invalid timestamp: {value!r}') from None
    if not isinstance(parsed, datetime):
        raise ValidationError(f'Not a point in time: {value!r}')
    return parsed
