import math
import re
from datetime import date
from typing import Iterator, Optional, Sequence

from sheetsync.models.schema import CanonicalMonth, MonthColumn
from sheetsync.services.coercion import serial_to_date


EN_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

ID_MONTHS = {
    "januari": 1, "februari": 2, "maret": 3, "april": 4, "mei": 5, "juni": 6,
    "juli": 7, "agustus": 8, "september": 9, "oktober": 10, "november": 11,
    "desember": 12,
}

ID_SHORT_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "mei": 5, "jun": 6,
    "jul": 7, "agu": 8, "sep": 9, "okt": 10, "nov": 11, "des": 12,
}

_EN = re.compile(r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\w*\s+(\d{4})$", re.I)
_ID = re.compile(r"^(" + "|".join(ID_MONTHS) + r")\s+(\d{4})$", re.I)
_ID_SHORT = re.compile(r"^(" + "|".join(ID_SHORT_MONTHS) + r")\s+(\d{4})$", re.I)
_ISO = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

# Serial header cells outside this window are row numbers, totals etc.
SERIAL_MONTH_MIN = 40000
SERIAL_MONTH_MAX = 50000


def _month(year, month) -> Optional[CanonicalMonth]:

    if 1 <= month <= 12:
        return CanonicalMonth(year=year, month=month)

    return None


def parse_month(val) -> Optional[CanonicalMonth]:
    """
    Recognise one header cell as a reporting month. Formats are tried in a
    fixed order and the first match wins.
    """

    if val is None or isinstance(val, bool):
        return None

    if isinstance(val, date):
        return CanonicalMonth(year=val.year, month=val.month)


    s = str(val).strip()

    if not s:
        return None


    m = _EN.match(s)
    if m:
        return _month(int(m.group(2)), EN_MONTHS[m.group(1).lower()])

    m = _ID.match(s)
    if m:
        return _month(int(m.group(2)), ID_MONTHS[m.group(1).lower()])

    m = _ID_SHORT.match(s)
    if m:
        return _month(int(m.group(2)), ID_SHORT_MONTHS[m.group(1).lower()])

    m = _ISO.search(s)
    if m:
        return _month(int(m.group(1)), int(m.group(2)))


    try:
        num = float(s)
    except ValueError:
        return None

    if math.isfinite(num) and SERIAL_MONTH_MIN < num < SERIAL_MONTH_MAX:
        d = serial_to_date(num)
        return CanonicalMonth(year=d.year, month=d.month)

    return None


def locate_months(row: Sequence, start: int = 0) -> Iterator[MonthColumn]:
    """
    Yield (column, month) for every header cell from `start` on that holds a
    month. Duplicate months are yielded once per column.
    """

    for col in range(start, len(row)):

        month = parse_month(row[col])

        if month is not None:
            yield MonthColumn(column=col, month=month)
