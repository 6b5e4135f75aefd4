"""
日期处理工具
Date Utilities

将各种来源的最后修改时间统一转换为 HTTP-date 字符串，写入 XML 时再转换为 W3C Datetime。
Normalizes last-modified values from any source into HTTP-date strings, and into
W3C Datetime strings when written to XML.

支持的输入:
- datetime / date 对象
- 数字时间戳（秒，来自文件系统 mtime）
- ISO 8601 字符串: 2021-06-01, 2021-06-01T10:30:00Z, 2021-06-01T10:30:00+02:00
- HTTP-date / RFC 2822 字符串: Tue, 01 Jun 2021 00:00:00 GMT
"""

from datetime import date, datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any

# 尝试的日期格式（时区标记 Z 先被替换为 +00:00）
DATE_FORMATS = [
    '%Y-%m-%dT%H:%M:%S%z',      # ISO 8601 with timezone
    '%Y-%m-%dT%H:%M:%S.%f%z',   # ISO 8601 with microseconds and timezone
    '%Y-%m-%dT%H:%M:%S',        # ISO 8601 without timezone
    '%Y-%m-%dT%H:%M:%S.%f',     # ISO 8601 with microseconds
    '%Y-%m-%d %H:%M:%S',        # space separated
    '%Y-%m-%d',                  # Date only
]


def parse_datetime(value: Any) -> datetime | None:
    """
    解析最后修改时间
    Parse a last-modified value

    无时区信息的值按 UTC 处理。
    Values without timezone information are treated as UTC.

    Args:
        value: datetime、date、时间戳或字符串
               datetime, date, timestamp or string

    Returns:
        带时区的 datetime 对象，无法解析时返回 None
        Timezone-aware datetime, or None when the value cannot be parsed

    Examples:
        >>> parse_datetime('2021-06-01')
        datetime.datetime(2021, 6, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        parsed = _parse_string(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_string(text: str) -> datetime | None:
    if not text:
        return None

    iso_text = text.replace('Z', '+00:00')
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(iso_text, fmt)
        except ValueError:
            continue

    # HTTP-date / RFC 2822
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


def to_http_date(value: Any) -> str | None:
    """
    转换为 HTTP-date 字符串
    Convert to an HTTP-date string

    Args:
        value: 任意受支持的日期值
               Any supported date value

    Returns:
        HTTP-date 字符串，无法解析时返回 None
        HTTP-date string, or None when the value cannot be parsed

    Examples:
        >>> to_http_date('2021-06-01')
        'Tue, 01 Jun 2021 00:00:00 GMT'
    """
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return format_datetime(parsed.astimezone(timezone.utc), usegmt=True)


def to_w3c_datetime(value: Any) -> str | None:
    """
    转换为 W3C Datetime 字符串（sitemap 的 <lastmod> 只接受这种格式）
    Convert to a W3C Datetime string, the only format <lastmod> accepts

    Examples:
        >>> to_w3c_datetime('Tue, 01 Jun 2021 00:00:00 GMT')
        '2021-06-01T00:00:00+00:00'
    """
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return parsed.astimezone(timezone.utc).isoformat(timespec='seconds')
