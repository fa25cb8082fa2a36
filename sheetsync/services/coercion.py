import math
import re
from datetime import date, datetime, timedelta
from typing import Optional


SERIAL_EPOCH = date(1899, 12, 30)

# 1970-01-01 .. 2100-01-01, half-open
SERIAL_DATE_MIN = 25569
SERIAL_DATE_MAX = 73051

_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")
_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_NUMBER_NOISE = re.compile(r"(?i)rp\.?|idr|%|\s")


# ---------------- Numbers ----------------

def is_blank(val) -> bool:

    if val is None:
        return True

    if isinstance(val, str) and not val.strip():
        return True

    return False


def _resolve_separators(s: str) -> str:

    has_dot = "." in s
    has_comma = "," in s

    # Both present: the right-most one is the decimal mark
    if has_dot and has_comma:

        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")

        return s.replace(",", "")


    if not has_dot and not has_comma:
        return s


    sep = "." if has_dot else ","

    if s.count(sep) > 1:
        return s.replace(sep, "")


    whole, frac = s.split(sep)

    if len(frac) == 3 and whole.lstrip("-").lstrip("0"):
        return whole + frac

    return whole + "." + frac


def to_number(val) -> float:
    """
    Coerce a raw cell into a float. Never raises: blanks, dashes and
    anything unparseable become 0.
    """

    if val is None or isinstance(val, bool):
        return 0.0

    if isinstance(val, (int, float)):
        n = float(val)
        return n if math.isfinite(n) else 0.0


    s = _NUMBER_NOISE.sub("", str(val))

    if not s or s in ("-", "--"):
        return 0.0


    negative = False

    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]

    s = _resolve_separators(s)

    try:
        n = float(s)
    except ValueError:
        return 0.0

    if not math.isfinite(n):
        return 0.0

    return -n if negative else n


# ---------------- Dates ----------------

def serial_to_date(serial) -> date:
    return SERIAL_EPOCH + timedelta(days=math.floor(serial))


def decode_date(val) -> Optional[str]:
    """
    Turn a date-ish cell into "YYYY-MM-DD".

    Accepts date objects, spreadsheet serial numbers, "MM/DD/YY(YY)"
    strings and ISO strings. Returns None for anything else.
    """

    if val is None or isinstance(val, bool):
        return None

    if isinstance(val, datetime):
        return val.date().isoformat()

    if isinstance(val, date):
        return val.isoformat()


    if isinstance(val, (int, float)):

        if not math.isfinite(val):
            return None

        if SERIAL_DATE_MIN <= val < SERIAL_DATE_MAX:
            return serial_to_date(val).isoformat()

        return None


    s = str(val).strip()

    if not s:
        return None


    m = _ISO_PREFIX.match(s)

    if m:
        return _safe_iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))


    m = _SLASH_DATE.match(s)

    if m:
        year = m.group(3)

        if len(year) == 2:
            year = "20" + year

        return _safe_iso(int(year), int(m.group(1)), int(m.group(2)))

    return None


def _safe_iso(year, month, day) -> Optional[str]:

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


# ---------------- Labels ----------------

def normalize_label(label) -> str:

    if not label:
        return ""

    s = str(label).strip().lower()
    s = re.sub(r"[^a-z0-9_\s]", "", s)
    s = re.sub(r"\s+", "_", s)
    s = re.sub(r"_+", "_", s)

    return s.strip("_")
