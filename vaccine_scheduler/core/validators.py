import re
from datetime import date, datetime

from .exceptions import InvalidInput

# Largest stock a vaccine may hold; the doses column is a 32-bit INTEGER
MAX_DOSES = 2**31 - 1

_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_COUNT_PATTERN = re.compile(r"^[0-9]+$")

def parse_date(value: str) -> date:
    """Parse a calendar date given strictly as YYYY-MM-DD."""
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise InvalidInput("Please enter a valid date! (Format YYYY-MM-DD)")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput("Please enter a valid date! (Format YYYY-MM-DD)")

def parse_dose_count(value) -> int:
    """Accept a base-10 integer between 0 and MAX_DOSES (or its string form)."""
    if isinstance(value, bool):
        raise InvalidInput("Please enter a non-negative number of doses!")
    if isinstance(value, int):
        count = value
    elif isinstance(value, str) and _COUNT_PATTERN.match(value):
        count = int(value)
    else:
        raise InvalidInput("Please enter a non-negative number of doses!")
    if count < 0:
        raise InvalidInput("Please enter a non-negative number of doses!")
    if count > MAX_DOSES:
        raise InvalidInput(f"Please enter at most {MAX_DOSES} doses!")
    return count
