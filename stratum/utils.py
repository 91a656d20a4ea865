"""
Stratum utilities: the small helpers shared by the binder, the flag set and
the value adapters.

Overview
- Unset / UnsetType
  • "No argument given" marker for keyword parameters where None, "" or 0 are
    meaningful values of their own (setting(default="") must stay distinct
    from no default at all).

- coalesce(value, default=None)
  • Unset becomes default; every other value (falsy ones included) is kept.

- mirror("attr")
  • Read-only property over self._attr; list, dict and set values are handed
    out as copies so FlagSet.args and friends cannot be mutated from outside.

- words(*parts) / kebab(*parts) / screaming_snake(*parts) / delimited(*parts)
  • Case conversion of field paths into flag names, environment names and help phrases.
  • Accepts snake_case, kebab-case, camelCase and PascalCase identifiers alike; digits
    form their own word ("number1" → "number-1").

- parse_bool / parse_integer / parse_float / parse_duration
  • Strict text grammars for scalar flag values. They raise ValueError with a short
    reason ("invalid syntax", "value out of range", ...); callers add the context.

- format_float / format_duration / quote
  • Canonical text forms used when rendering defaults.

Quick examples
    >>> kebab("mongo", "max_pool_size")
    'mongo-max-pool-size'
    >>> screaming_snake("cool", "mongo", "hosts")
    'COOL_MONGO_HOSTS'
    >>> format_duration(parse_duration("1h30m"))
    '1h30m0s'
"""
import functools
import json
import re
from collections.abc import Mapping, Sequence, Set
from datetime import timedelta
from fractions import Fraction
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. There is exactly one instance and the type cannot
    be subclassed; the marker is falsy and prints as "Unset".
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


def coalesce(object, default=None, /):
    """
    coalesce(Unset, "x") -> "x"; coalesce(None, "x") -> None; coalesce("", "x") -> "".
    """
    if object is Unset:
        return default
    return object


def _detach(object):
    # containers are copied recursively, strings and scalars pass through
    match object:
        case str():
            return object
        case Mapping():
            return {key: _detach(value) for key, value in object.items()}
        case Set():
            return {_detach(value) for value in object}
        case Sequence():
            return [_detach(value) for value in object]
        case _:
            return object


def mirror(name, /):
    """
    Build a read-only property exposing self._<name>.

        class FlagSet:
            args = mirror("args")  # returns a copy of self._args
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _detach(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


# Words are runs of lowercase letters (optionally led by one capital), runs of
# capitals not followed by a lowercase letter (acronyms), or runs of digits.
_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


@functools.cache
def _split(part, /):
    return tuple(_WORD.findall(part))


def words(*parts):
    """
    Split identifiers into words.

    Every separator that is not a letter or digit (underscores, hyphens, spaces)
    is dropped; case changes and letter/digit boundaries start a new word.

    Examples
    - words("LogLevel")            -> ("Log", "Level")
    - words("log_level")           -> ("log", "level")
    - words("HTTPServer", "port1") -> ("HTTP", "Server", "port", "1")
    """
    result = []
    for part in parts:
        if not isinstance(part, str):
            raise TypeError("words() arguments must be strings")
        result.extend(_split(part))
    return tuple(result)


def kebab(*parts):
    """
    Join identifiers into a lower-case, hyphen separated name ("mongo-hosts").
    """
    return "-".join(word.lower() for word in words(*parts))


def screaming_snake(*parts):
    """
    Join identifiers into an upper-case, underscore separated name ("COOL_MONGO_HOSTS").
    """
    return "_".join(word.upper() for word in words(*parts))


def delimited(*parts, delimiter=" "):
    """
    Join identifiers into a lower-case phrase ("mongo hosts").
    """
    return delimiter.join(word.lower() for word in words(*parts))


_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))


def parse_bool(text, /):
    """
    Parse a boolean literal.

    Accepted: 1, t, T, TRUE, true, True, 0, f, F, FALSE, false, False.
    Anything else is an "invalid syntax" ValueError.
    """
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError("invalid syntax")


def parse_integer(text, /, bits=64, *, signed=True):
    """
    Parse a base-10 integer constrained to a fixed bit width.

    Grammar
    - signed:   [+-]?[0-9]+
    - unsigned: [0-9]+

    Underscores, whitespace and base prefixes are rejected ("invalid syntax").
    Values outside the range of the given width raise "value out of range".
    """
    if not re.fullmatch(r"[+-]?[0-9]+" if signed else r"[0-9]+", text):
        raise ValueError("invalid syntax")
    value = int(text, 10)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise ValueError("value out of range")
    return value


def parse_float(text, /):
    """
    Parse a 64-bit floating point literal.

    Decimal and exponent forms are accepted, as are "inf", "infinity" and "nan"
    (any case, optionally signed). Surrounding whitespace and digit separators
    are rejected. Finite literals that overflow raise "value out of range".
    """
    if not re.fullmatch(r"[+-]?(([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|inf(inity)?|nan)", text, re.IGNORECASE):
        raise ValueError("invalid syntax")
    value = float(text)
    if value in (float("inf"), float("-inf")) and "inf" not in text.lower():
        raise ValueError("value out of range")
    return value


def format_float(value, /):
    """
    Render a float in its shortest form, without a trailing ".0" ("1", "1.2", "1e+21").
    """
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return text


# Units in microseconds (the resolution of datetime.timedelta); nanoseconds are
# accepted on input and truncated.
_UNITS = {
    "ns": Fraction(1, 1000),
    "us": Fraction(1),
    "µs": Fraction(1),  # U+00B5 micro sign
    "μs": Fraction(1),  # U+03BC greek letter mu
    "ms": Fraction(1000),
    "s": Fraction(1000000),
    "m": Fraction(60000000),
    "h": Fraction(3600000000),
}
_SEGMENT = re.compile(r"(?P<number>[0-9]+(\.[0-9]*)?|\.[0-9]+)(?P<unit>[^0-9.]*)")


def parse_duration(text, /):
    """
    Parse a duration string into a datetime.timedelta.

    Grammar
    - An optional sign followed by one or more "<number><unit>" segments,
      e.g. "300ms", "-1.5h", "2h45m", "1m30.5s".
    - Units: ns, us (or µs/μs), ms, s, m, h.
    - The bare literal "0" (optionally signed) is the zero duration.

    Errors (ValueError)
    - 'invalid duration "<text>"' for malformed input.
    - 'missing unit in duration "<text>"' when a number has no unit.
    - 'unknown unit "<unit>" in duration "<text>"' for unrecognized units.
    """
    original = text
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError("invalid duration %s" % quote(original))

    total = Fraction(0)
    position = 0
    while position < len(text):
        if not (match := _SEGMENT.match(text, position)):
            raise ValueError("invalid duration %s" % quote(original))
        unit = match["unit"]
        if not unit:
            raise ValueError("missing unit in duration %s" % quote(original))
        if unit not in _UNITS:
            raise ValueError("unknown unit %s in duration %s" % (quote(unit), quote(original)))
        total += Fraction(match["number"]) * _UNITS[unit]
        position = match.end()

    try:
        return timedelta(microseconds=sign * int(total))
    except OverflowError:
        raise ValueError("invalid duration %s" % quote(original)) from None


def _decimal(value, unit, /):
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    width = len(str(unit)) - 1
    return ("%d.%0*d" % (whole, width, fraction)).rstrip("0")


def format_duration(delta, /):
    """
    Render a timedelta in the compact "72h3m0.5s" form.

    Rules
    - Zero is "0s".
    - Below one second the largest fitting sub-second unit is used ("1.5ms", "300µs").
    - Otherwise hours and minutes are only shown once they are non-zero, and every
      smaller unit after the first shown one is always present ("1m0s", "24h0m0s").
    """
    micros = (delta.days * 86400 + delta.seconds) * 1000000 + delta.microseconds
    if not micros:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1000000:
        if micros < 1000:
            return "%s%dµs" % (sign, micros)
        return "%s%sms" % (sign, _decimal(micros, 1000))

    hours, micros = divmod(micros, 3600000000)
    minutes, micros = divmod(micros, 60000000)
    text = _decimal(micros, 1000000) + "s"
    if hours or minutes:
        text = "%dm%s" % (minutes, text)
    if hours:
        text = "%dh%s" % (hours, text)
    return sign + text


def quote(text, /):
    """
    Double-quote a string, escaping backslashes, quotes and control characters.
    """
    return json.dumps(str(text), ensure_ascii=False)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "words",
    "kebab",
    "screaming_snake",
    "delimited",
    "parse_bool",
    "parse_integer",
    "parse_float",
    "parse_duration",
    "format_float",
    "format_duration",
    "quote",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
