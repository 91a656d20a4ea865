r"""
Stratum composite values (flag values that parse and render themselves).

Overview
- StringList: comma separated strings (a list subclass).
- IntList: comma separated base-10 integers (a list subclass).
- URL: a single parsed URL (urllib.parse.SplitResult underneath).
- Timestamp: a single RFC3339 instant (an aware datetime underneath).

Contract (shared by every value)
- set(text): parse text into the value; raises ConversionError on failure.
- str(value): canonical text form; a fresh or zero value never fails to render.
- get(): the underlying semantic value.

Parsing never partially commits
- IntList clears itself before raising, so a failed set() always leaves [].
- URL and Timestamp fall back to their zero value when set() fails and hold
  exactly one parsed value otherwise.

Display formats
- StringList: ['a','b','c']   (empty: [])
- IntList:    [1,2,3]         (empty: [])
- URL:        the URL string   (zero: "")
- Timestamp:  2002-10-02T15:00:00Z, fractional seconds dropped (zero: "")
"""
import re
from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit, urlunsplit

from .faults import ConversionError
from .utils import parse_integer, quote


class StringList(list):
    """
    A list of strings set from comma separated text.

    There is no escaping: "a,b" is always two elements. The empty string is a
    no-op, so it never produces a single empty element.
    """

    def set(self, text, /):
        if not text:
            return
        self[:] = text.split(",")

    def get(self):
        return list(self)

    def __str__(self):
        if not self:
            return "[]"
        return "['%s']" % "','".join(self)

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, list.__repr__(self))


class IntList(list):
    """
    A list of integers set from comma separated base-10 text.

    On the first token that is not a signed 64-bit integer the list is emptied
    and a ConversionError naming that token is raised.
    """

    def set(self, text, /):
        if not text:
            return
        values = []
        for token in text.split(","):
            try:
                values.append(parse_integer(token, 64))
            except ValueError as error:
                self.clear()
                raise ConversionError("parsing int: %s: %s" % (quote(token), error)) from error
        self[:] = values

    def get(self):
        return list(self)

    def __str__(self):
        if not self:
            return "[]"
        return "[%s]" % ",".join(map(str, self))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, list.__repr__(self))


_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


class URL:
    """
    A single URL.

    Attribute access falls through to the parsed urllib.parse.SplitResult, so
    url.scheme, url.netloc, url.hostname, url.port, url.path and friends work
    directly. The zero URL (fresh, or set from "") renders as "" and is falsy.
    """
    __slots__ = ("_value",)

    def __init__(self, text="", /):
        self._value = None
        self.set(text)

    def set(self, text, /):
        self._value = None
        if not text:
            return
        if match := _ESCAPE.search(text):
            raise ConversionError("parsing url: parse %s: invalid URL escape %s" % (
                quote(text), quote(text[match.start():match.start() + 3])
            ))
        if _CONTROL.search(text):
            raise ConversionError("parsing url: parse %s: invalid control character in URL" % quote(text))
        try:
            value = urlsplit(text)
            value.port  # validates the port range and digits
        except ValueError as error:
            raise ConversionError("parsing url: parse %s: %s" % (quote(text), error)) from error
        self._value = value

    def get(self):
        return self._value

    def __getattr__(self, name):
        if name.startswith("_") or self._value is None:
            raise AttributeError("%r object has no attribute %r" % (type(self).__name__, name))
        return getattr(self._value, name)

    def __bool__(self):
        return self._value is not None

    def __eq__(self, other):
        if not isinstance(other, URL):
            return NotImplemented
        return self._value == other._value

    def __str__(self):
        if self._value is None:
            return ""
        return urlunsplit(self._value)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, str(self))


_RFC3339 = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"[Tt](?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})(?:\.(?P<fraction>[0-9]+))?"
    r"(?P<offset>[Zz]|[+-][0-9]{2}:[0-9]{2})"
)


class Timestamp:
    """
    A single RFC3339 instant.

    Both "2002-10-02T15:00:00Z" and "2002-10-02T15:00:00.05Z" are accepted; the
    fractional part is kept in the datetime but not in the text form. There is
    no empty timestamp: set("") raises. The zero Timestamp (fresh) renders as ""
    and is falsy. Attribute access falls through to the datetime.
    """
    __slots__ = ("_value",)

    def __init__(self, text="", /):
        self._value = None
        if text:
            self.set(text)

    def set(self, text, /):
        self._value = None
        if not (match := _RFC3339.fullmatch(text)):
            raise ConversionError("parsing time: %s is not an RFC3339 timestamp" % quote(text))

        if (offset := match["offset"]) in ("Z", "z"):
            zone = timezone.utc
        else:
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            if hours > 23 or minutes > 59:
                raise ConversionError("parsing time: %s: time zone offset out of range" % quote(text))
            delta = timedelta(hours=hours, minutes=minutes)
            zone = timezone(-delta if offset[0] == "-" else delta)

        fraction = (match["fraction"] or "").ljust(6, "0")[:6]
        try:
            value = datetime(
                int(match["year"]),
                int(match["month"]),
                int(match["day"]),
                int(match["hour"]),
                int(match["minute"]),
                int(match["second"]),
                int(fraction),
                tzinfo=zone,
            )
        except ValueError as error:
            raise ConversionError("parsing time: %s: %s" % (quote(text), error)) from error
        self._value = value

    def get(self):
        return self._value

    def __getattr__(self, name):
        if name.startswith("_") or self._value is None:
            raise AttributeError("%r object has no attribute %r" % (type(self).__name__, name))
        return getattr(self._value, name)

    def __bool__(self):
        return self._value is not None

    def __eq__(self, other):
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._value == other._value

    def __str__(self):
        if (value := self._value) is None:
            return ""
        text = "%04d-%02d-%02dT%02d:%02d:%02d" % (
            value.year, value.month, value.day, value.hour, value.minute, value.second
        )
        if not (offset := value.utcoffset()):
            return text + "Z"
        sign = "-" if offset < timedelta(0) else "+"
        minutes = abs(offset) // timedelta(minutes=1)
        return "%s%s%02d:%02d" % (text, sign, minutes // 60, minutes % 60)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, str(self))


__all__ = (
    "StringList",
    "IntList",
    "URL",
    "Timestamp",
)
