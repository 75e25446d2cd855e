"""Text decoding and date formatting shared by the backends."""

import locale
import re
from typing import Optional

_SVN_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}).*$")


def determine_encoding(data: bytes) -> Optional[str]:
    """Guess the encoding of ``data`` from its byte-order mark.

    Returns None when no mark is present; callers fall back to a default.
    """
    if len(data) <= 2:
        return None
    if data[:2] in (b"\xff\xfe", b"\xfe\xff"):
        return "utf-16"
    if data[:2] == b"\xef\xbb":
        return "utf-8-sig"
    return None


def decode_contents(data: bytes, default: Optional[str] = None) -> str:
    """Decode file contents using the sniffed encoding or ``default``."""
    encoding = determine_encoding(data)
    if encoding is None:
        encoding = default or locale.getpreferredencoding(False)
    return data.decode(encoding, errors="replace")


def format_svn_date(date: str) -> str:
    """Shorten an svn timestamp to ``YYYY-MM-DD HH:MM``."""
    return _SVN_DATE.sub(r"\1 \2", date, count=1)
