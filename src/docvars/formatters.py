"""
Value Formatters

Pure, total functions that turn one raw answer into the string a legal
document expects:
    - Numeral words (English and Korean), ordinals, currency words
    - Comma-grouped numbers and dollar amounts
    - Dates, times and phone numbers
    - Text case transforms

None of these raise on bad input. Unparseable values come back as an empty
string or, for dates and phones, as the original value.
"""

from __future__ import annotations

import logging
import math
import random
import re
import string
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from docvars.model import DataType

logger = logging.getLogger(__name__)

NumberLike = Union[int, float, str, None]


# =========================================================================
# Number parsing
# =========================================================================

_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_float(value: Any) -> Optional[float]:
    """
    Read the leading number of a value, ignoring trailing junk.

    ``"5 shares"`` reads as 5.0; ``"abc"`` and ``""`` read as None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    text = str(value).strip()
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        if text.lstrip("+-").startswith("Infinity"):
            return -math.inf if text.startswith("-") else math.inf
        return None
    try:
        return float(match.group(0))
    except (ValueError, OverflowError):
        return None


def parse_amount(value: Any) -> Optional[float]:
    """Parse a money-like string: everything but digits, ``.`` and ``-`` is dropped."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return parse_float(value)
    if value is None:
        return None
    return parse_float(_NON_NUMERIC.sub("", str(value)))


def _whole_number(value: NumberLike) -> Optional[int]:
    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()
    number = parse_float(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)


def number_text(value: Union[int, float]) -> str:
    """Shortest plain rendering of a number: ``12.0`` becomes ``"12"``."""
    if isinstance(value, int):
        return str(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


# =========================================================================
# Numeral words
# =========================================================================

KOREAN_NUMBERS = ["", "일", "이", "삼", "사", "오", "육", "칠", "팔", "구"]
KOREAN_UNITS = ["", "십", "백", "천"]
KOREAN_BIG_UNITS = ["", "만", "억", "조", "경"]

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]
SCALES = ["", "Thousand", "Million", "Billion", "Trillion"]

ORDINAL_ONES = [
    "", "First", "Second", "Third", "Fourth", "Fifth", "Sixth", "Seventh",
    "Eighth", "Ninth", "Tenth", "Eleventh", "Twelfth", "Thirteenth",
    "Fourteenth", "Fifteenth", "Sixteenth", "Seventeenth", "Eighteenth",
    "Nineteenth",
]
ORDINAL_TENS = [
    "", "", "Twentieth", "Thirtieth", "Fortieth", "Fiftieth", "Sixtieth",
    "Seventieth", "Eightieth", "Ninetieth",
]


def _chunks(n: int, base: int) -> list:
    """Split a non-negative integer into base-sized chunks, least significant first."""
    chunks = []
    while n:
        chunks.append(n % base)
        n //= base
    return chunks


def _korean_chunk(n: int) -> str:
    words = []
    digits = f"{n:04d}"
    for position, char in enumerate(digits):
        digit = int(char)
        if digit == 0:
            continue
        unit_index = 3 - position
        # 일십/일백/일천 are read as 십/백/천
        if digit == 1 and unit_index > 0:
            words.append(KOREAN_UNITS[unit_index])
        else:
            words.append(KOREAN_NUMBERS[digit] + KOREAN_UNITS[unit_index])
    return "".join(words)


def number_to_korean(num: NumberLike) -> str:
    """
    Korean numeral words in 만/억/조/경 groups.

    Examples:
        10000 -> "만", 10000000 -> "천만", 12345 -> "만이천삼백사십오"
    """
    n = _whole_number(num)
    if n is None or n == 0:
        return "영"
    if n < 0:
        return "마이너스 " + number_to_korean(-n)

    chunks = _chunks(n, 10000)
    if len(chunks) > len(KOREAN_BIG_UNITS):
        return str(n)

    words = []
    for big_index in range(len(chunks) - 1, -1, -1):
        chunk = chunks[big_index]
        if chunk == 0:
            continue
        big_unit = KOREAN_BIG_UNITS[big_index]
        if chunk == 1 and big_index > 0:
            words.append(big_unit)
        else:
            words.append(_korean_chunk(chunk) + big_unit)
    return "".join(words) or "영"


def number_to_korean_currency(num: NumberLike) -> str:
    return number_to_korean(num) + "원"


def _english_chunk(n: int) -> str:
    words = []
    hundreds, remainder = divmod(n, 100)
    if hundreds:
        words.append(ONES[hundreds] + " Hundred")
    if remainder:
        if remainder < 20:
            words.append(ONES[remainder])
        else:
            tens, ones = divmod(remainder, 10)
            words.append(TENS[tens] + (" " + ONES[ones] if ones else ""))
    return " ".join(words)


def number_to_english(num: NumberLike) -> str:
    """
    English numeral words, title-cased and without ``and``.

    Example:
        12345 -> "Twelve Thousand Three Hundred Forty Five"
    """
    n = _whole_number(num)
    if n is None:
        return ""
    if n == 0:
        return "Zero"
    if n < 0:
        return "Negative " + number_to_english(-n)

    chunks = _chunks(n, 1000)
    if len(chunks) > len(SCALES):
        return str(n)

    words = []
    for scale_index in range(len(chunks) - 1, -1, -1):
        chunk = chunks[scale_index]
        if chunk == 0:
            continue
        words.append(_english_chunk(chunk))
        if SCALES[scale_index]:
            words.append(SCALES[scale_index])
    return " ".join(words) or "Zero"


def number_to_english_currency(num: NumberLike) -> str:
    n = _whole_number(num)
    if n is None:
        return ""
    if n == 1:
        return "One Dollar"
    return number_to_english(n) + " Dollars"


def number_to_ordinal(num: NumberLike) -> str:
    """
    English ordinal words: 1 -> "First", 21 -> "Twenty First",
    100 -> "One Hundredth", 101 -> "One Hundred First". Below 1 gives "".
    """
    n = _whole_number(num)
    if n is None or n < 1:
        return ""
    if n < 20:
        return ORDINAL_ONES[n]
    if n < 100:
        tens, ones = divmod(n, 10)
        if ones == 0:
            return ORDINAL_TENS[tens]
        return TENS[tens] + " " + ORDINAL_ONES[ones]
    hundreds, remainder = divmod(n, 100)
    if remainder == 0:
        return number_to_english(hundreds) + " Hundredth"
    return number_to_english(hundreds) + " Hundred " + number_to_ordinal(remainder)


# =========================================================================
# Grouped numbers and currency
# =========================================================================


def _decimal_places(n: float) -> int:
    if isinstance(n, int) or n.is_integer():
        return 0
    try:
        exponent = Decimal(repr(n)).normalize().as_tuple().exponent
    except InvalidOperation:
        return 0
    return min(max(0, -exponent), 20)


def format_number_with_comma(num: NumberLike) -> str:
    """
    Comma-grouped number that keeps the value's own decimal precision.

    Examples:
        10000000 -> "10,000,000", 0.0001 -> "0.0001", "abc" -> "0"
    """
    n = parse_amount(num)
    if n is None:
        return "0"
    if not math.isfinite(n):
        return "∞" if n > 0 else "-∞"
    places = _decimal_places(n)
    return f"{n:,.{places}f}"


def format_currency(value: NumberLike) -> str:
    """Dollar amount, e.g. ``"$10,000"``. Missing or invalid input gives ``"$0"``."""
    if value is None or value == "":
        return "$0"
    n = parse_amount(value)
    if n is None:
        return "$0"
    return "$" + format_number_with_comma(n)


def format_currency_cents(value: NumberLike) -> str:
    n = parse_amount(value)
    if n is None or not math.isfinite(n):
        return "$0.00"
    return f"${n:,.2f}"


# =========================================================================
# Dates and times
# =========================================================================

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
MONTH_NAMES_SHORT = [name[:3] for name in MONTH_NAMES]

DATE_PRESETS = {
    "iso": "YYYY-MM-DD",
    "short": "MM/DD/YYYY",
    "long": "MMMM D, YYYY",
    "abbrev": "MMM D, YYYY",
    "korean": "YYYY년 MM월 DD일",
    "dotted": "YYYY.MM.DD",
    "european": "DD/MM/YYYY",
}

_DATE_TOKEN = re.compile(r"YYYY|MMMM|MMM|MM|M|DD|D")

_DATE_INPUT_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %B %Y",
)


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Read an ISO date/datetime or one of a few common written forms."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass
    for pattern in _DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, pattern).date()
        except ValueError:
            continue
    return None


def _render_date(moment: date, pattern: str) -> str:
    def token(match: "re.Match[str]") -> str:
        t = match.group(0)
        if t == "YYYY":
            return f"{moment.year:04d}"
        if t == "MMMM":
            return MONTH_NAMES[moment.month - 1]
        if t == "MMM":
            return MONTH_NAMES_SHORT[moment.month - 1]
        if t == "MM":
            return f"{moment.month:02d}"
        if t == "M":
            return str(moment.month)
        if t == "DD":
            return f"{moment.day:02d}"
        return str(moment.day)

    return _DATE_TOKEN.sub(token, pattern)


def format_date(value: Union[str, date, None], fmt: str = "YYYY-MM-DD") -> str:
    """
    Render a date with a token pattern (``YYYY MMMM MMM MM M DD D``) or a
    named preset (see DATE_PRESETS).

    Empty input gives ""; input that is not a date is returned unchanged.
    """
    if value is None or value == "":
        return ""
    moment = parse_date(value)
    if moment is None:
        logger.warning("Unparseable date %r; leaving it as is", value)
        return str(value)
    pattern = DATE_PRESETS.get(fmt or "", fmt or "YYYY-MM-DD")
    return _render_date(moment, pattern)


def format_time(moment: datetime, fmt: str = "HH:mm") -> str:
    """``HH:mm``, ``HH:mm:ss`` or ``h:mm A``."""
    if fmt == "HH:mm:ss":
        return f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    if fmt == "h:mm A":
        hour = moment.hour % 12 or 12
        meridiem = "AM" if moment.hour < 12 else "PM"
        return f"{hour}:{moment.minute:02d} {meridiem}"
    return f"{moment.hour:02d}:{moment.minute:02d}"


def generate_document_number(
    prefix: str = "DOC",
    include_date: bool = True,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """``PREFIX-YYYYMMDD-XXXXXX`` with six upper-case base-36 characters."""
    chooser = rng or random
    suffix = "".join(chooser.choice(string.digits + string.ascii_uppercase) for _ in range(6))
    if include_date:
        moment = now or datetime.now()
        return f"{prefix}-{moment:%Y%m%d}-{suffix}"
    return f"{prefix}-{suffix}"


# =========================================================================
# Phones
# =========================================================================


def format_phone(phone: Optional[str], fmt: str = "dashed") -> str:
    """
    Korean-style phone layout.

    ``02`` (Seoul) numbers split 2-3-4 or 2-4-4; other 10-digit numbers
    3-3-4; 11-digit numbers 3-4-4. ``fmt`` is ``dashed``, ``dotted`` or
    ``none`` (digits only). Fewer than 9 digits returns the input.
    """
    if not phone:
        return ""
    digits = re.sub(r"[^0-9]", "", phone)
    if len(digits) < 9:
        return phone

    if digits.startswith("02"):
        if len(digits) == 9:
            formatted = f"{digits[:2]}-{digits[2:5]}-{digits[5:]}"
        else:
            formatted = f"{digits[:2]}-{digits[2:6]}-{digits[6:]}"
    elif len(digits) == 10:
        formatted = f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    elif len(digits) == 11:
        formatted = f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    else:
        formatted = phone

    if fmt == "dotted":
        return formatted.replace("-", ".")
    if fmt == "none":
        return digits
    return formatted


# =========================================================================
# Text
# =========================================================================


def to_title_case(text: Optional[str]) -> str:
    """``"JOHN doe"`` -> ``"John Doe"``. Used for people's names."""
    if not text:
        return ""
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def corporate_capitalize(text: Optional[str]) -> str:
    """
    Capitalize each word but keep short all-caps words (``LLC``, ``INC``).

    The rest of each word is left alone, so ``"tech ventures LLC"`` becomes
    ``"Tech Ventures LLC"``.
    """
    if not text:
        return ""
    words = []
    for word in text.split(" "):
        if word == word.upper() and len(word) <= 4:
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:])
    return " ".join(words)


def transform_text(text: Optional[str], rule: str) -> str:
    if not text:
        return ""
    if rule == "uppercase":
        return text.upper()
    if rule == "lowercase":
        return text.lower()
    if rule == "capitalize":
        return corporate_capitalize(text)
    if rule == "title":
        return to_title_case(text)
    if rule == "trim":
        return text.strip()
    return text


# =========================================================================
# Dispatcher
# =========================================================================


def _format_number(value: str, rule: str) -> str:
    if rule == "comma":
        return format_number_with_comma(value)
    if rule == "number_english":
        return number_to_english(value)
    if rule == "ordinal_english":
        return number_to_ordinal(value)
    return value


def _format_money(value: str, rule: str) -> str:
    if rule == "number_english":
        return number_to_english_currency(value)
    if rule == "number_korean":
        return number_to_korean_currency(value)
    if rule == "comma_dollar_cents":
        return format_currency_cents(value)
    if rule == "comma_won":
        return format_number_with_comma(value) + "원"
    return "$" + format_number_with_comma(value)


def format_value(value: str, data_type: DataType, rule: Optional[str] = None) -> str:
    """
    Render one scalar according to a mapping's data type and transform rule.

    Empty values pass through untouched.
    """
    if not value:
        return value
    rule = rule or ""
    if data_type is DataType.NUMBER:
        return _format_number(value, rule)
    if data_type is DataType.CURRENCY:
        return _format_money(value, rule)
    if data_type is DataType.DATE:
        return format_date(value, rule or "YYYY-MM-DD")
    if data_type is DataType.PHONE:
        return format_phone(value, rule or "dashed")
    if data_type is DataType.EMAIL:
        return value.lower().strip()
    return transform_text(value, rule)
