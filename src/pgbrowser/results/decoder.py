"""
Cell decoding: driver-native column values to display strings.

The declared SQL type is ignored. Each decoder in ``CELL_DECODERS`` either
returns a display string or ``None`` ("not mine"), and the first success wins.
A value no decoder accepts, including SQL NULL, decodes to ``None``.
"""
import datetime
import ipaddress
import json
import logging
import numbers
import uuid
from decimal import Decimal
from typing import Any, Callable, Optional, Tuple

from pgbrowser.results.models import TabularValue

logger = logging.getLogger(__name__)

CellDecoder = Callable[[Any], Optional[str]]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_TEXTUAL_TYPES = (
    uuid.UUID,
    datetime.time,
    datetime.timedelta,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
)


def format_medium_datetime(value: datetime.datetime) -> str:
    """Formats a timestamp as medium date + medium time, e.g. ``Nov 30, 2024, 12:34:56 PM``.

    Month abbreviation and the AM/PM marker follow the process ``LC_TIME`` locale,
    which the caller selects (the command line adopts the environment locale).
    """
    hour = value.hour % 12 or 12
    return (
        f"{value.strftime('%b')} {value.day}, {value.year}, "
        f"{hour}:{value.minute:02d}:{value.second:02d} {value.strftime('%p')}"
    )


def decode_bool(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    return None


def decode_int64(value: Any) -> Optional[str]:
    if isinstance(value, int) and not isinstance(value, bool) and INT64_MIN <= value <= INT64_MAX:
        return str(value)
    return None


def decode_double(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (float, Decimal, numbers.Real)):
        return str(float(value))
    return None


def decode_timestamp(value: Any) -> Optional[str]:
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return format_medium_datetime(value)
    if isinstance(value, datetime.date):
        return format_medium_datetime(datetime.datetime.combine(value, datetime.time()))
    return None


def decode_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    if isinstance(value, _TEXTUAL_TYPES):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        # JSON documents and arrays are shown as opaque text
        return json.dumps(value, default=str)
    return None


CELL_DECODERS: Tuple[CellDecoder, ...] = (
    decode_bool,
    decode_int64,
    decode_double,
    decode_timestamp,
    decode_text,
)


def decode_cell(value: Any, decoders: Tuple[CellDecoder, ...] = CELL_DECODERS) -> TabularValue:
    """Decodes one driver value into its display string.

    Never raises: a decoder that fails is skipped, and exhausting every decoder
    yields ``None`` (SQL NULL or an unsupported type).
    """
    if value is None:
        return None
    for decoder in decoders:
        try:
            decoded = decoder(value)
        except Exception as e:
            logger.debug(f"{decoder.__name__} rejected {type(value).__name__}: {e}")
            continue
        if decoded is not None:
            return decoded
    return None
