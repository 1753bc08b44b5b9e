import random
import string
from datetime import date, datetime, timezone
from typing import Optional, Union

BARCODE_LENGTH = 12


def current_time() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_year(batch: Union[str, int, None]) -> Optional[int]:
    if batch is None:
        return None
    try:
        year = int(str(batch).strip())
    except ValueError:
        return None
    return year if year > 0 else None


def ordinal_suffix(number: int) -> str:
    if number % 100 in (11, 12, 13):
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(number % 10, 'th')


def year_label(batch: Union[str, int, None]) -> str:
    """Render a stored batch value as a display label, e.g. '3' -> '3rd Year'."""
    year = parse_year(batch)
    if year is None:
        return 'N/A'
    return f'{year}{ordinal_suffix(year)} Year'


def academic_year(batch: Union[str, int, None], today: Optional[date] = None) -> str:
    """Label printed on ID cards: '<year label> / <current academic year>'."""
    current_year = (today or current_time()).year
    return f'{year_label(batch)} / {current_year}-{current_year + 1}'


def barcode_check_digit(digits: str) -> str:
    total = sum(int(d) * (3 if i % 2 == 0 else 1) for i, d in enumerate(digits))
    return str((10 - total % 10) % 10)


def generate_barcode_id() -> str:
    digits = ''.join(random.choices(string.digits, k=BARCODE_LENGTH))
    return digits + barcode_check_digit(digits)
