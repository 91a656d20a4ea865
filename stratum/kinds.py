"""
Field kinds: the closed set of leaf types the binder knows how to bind.

Python has a single int type, so the fixed-width integer kinds are spelled with
marker types:

    UInt    unsigned, 32-bit range
    UInt64  unsigned, 64-bit range
    int     signed, 32-bit range
    Int64   signed, 64-bit range

kindof(annotation) maps a field annotation to a Kind. Every Kind that is a
primitive knows how to convert text into a Python value, how to render that
value back, its zero value and the type hint shown in usage output.
"""
import dataclasses
from datetime import timedelta
from enum import Enum
from typing import NewType

from .faults import ConversionError
from .utils import *
from .values import StringList, IntList, URL, Timestamp

UInt = NewType("UInt", int)
UInt64 = NewType("UInt64", int)
Int64 = NewType("Int64", int)


class Kind(Enum):
    BOOL = "bool"
    STRING = "string"
    UINT = "uint"
    UINT64 = "uint64"
    INT = "int"
    INT64 = "int64"
    FLOAT64 = "float64"
    DURATION = "duration"
    STRING_LIST = "string-list"
    INT_LIST = "int-list"
    URL = "url"
    TIMESTAMP = "timestamp"
    RECORD = "record"
    UNSUPPORTED = "unsupported"

    @property
    def primitive(self):
        return self in _PRIMITIVES

    @property
    def adapter(self):
        return self in _ADAPTERS

    @property
    def typehint(self):
        """
        name of the value placeholder in usage lines ("" for booleans).
        """
        match self:
            case Kind.BOOL:
                return ""
            case Kind.STRING:
                return "string"
            case Kind.UINT | Kind.UINT64:
                return "uint"
            case Kind.INT | Kind.INT64:
                return "int"
            case Kind.FLOAT64:
                return "float"
            case Kind.DURATION:
                return "duration"
            case _:
                return "value"

    @property
    def zero(self):
        match self:
            case Kind.BOOL:
                return False
            case Kind.STRING:
                return ""
            case Kind.FLOAT64:
                return 0.0
            case Kind.DURATION:
                return timedelta(0)
            case Kind.UINT | Kind.UINT64 | Kind.INT | Kind.INT64:
                return 0
        raise TypeError("%s kind has no primitive zero value" % self.value)

    def convert(self, text, /):
        """
        Convert text into this kind's Python value.

        Only strings accept empty text; every other kind rejects it like any
        other malformed input. Failures raise ConversionError reading
        'parsing <kind> "<text>": <reason>'.
        """
        try:
            match self:
                case Kind.BOOL:
                    return parse_bool(text)
                case Kind.STRING:
                    return text
                case Kind.UINT:
                    return parse_integer(text, 32, signed=False)
                case Kind.UINT64:
                    return parse_integer(text, 64, signed=False)
                case Kind.INT:
                    return parse_integer(text, 32)
                case Kind.INT64:
                    return parse_integer(text, 64)
                case Kind.FLOAT64:
                    return parse_float(text)
                case Kind.DURATION:
                    return parse_duration(text)
        except ValueError as error:
            raise ConversionError("parsing %s %s: %s" % (self.value, quote(text), error)) from error
        raise TypeError("%s kind cannot be converted from text" % self.value)

    def format(self, value, /):
        match self:
            case Kind.BOOL:
                return "true" if value else "false"
            case Kind.FLOAT64:
                return format_float(value)
            case Kind.DURATION:
                return format_duration(value)
            case _:
                return str(value)


_PRIMITIVES = frozenset((
    Kind.BOOL,
    Kind.STRING,
    Kind.UINT,
    Kind.UINT64,
    Kind.INT,
    Kind.INT64,
    Kind.FLOAT64,
    Kind.DURATION,
))

_ADAPTERS = frozenset((
    Kind.STRING_LIST,
    Kind.INT_LIST,
    Kind.URL,
    Kind.TIMESTAMP,
))

_SCALARS = {
    bool: Kind.BOOL,
    str: Kind.STRING,
    UInt: Kind.UINT,
    UInt64: Kind.UINT64,
    int: Kind.INT,
    Int64: Kind.INT64,
    float: Kind.FLOAT64,
    timedelta: Kind.DURATION,
}


def kindof(annotation, /):
    """
    Classify a field annotation.

    Scalars match by identity (a NewType other than the markers above is not an
    int). Adapters match by subclass, dataclass types are records, and
    everything else is UNSUPPORTED.
    """
    try:
        return _SCALARS[annotation]
    except (KeyError, TypeError):
        pass

    if isinstance(annotation, type):
        if issubclass(annotation, StringList):
            return Kind.STRING_LIST
        if issubclass(annotation, IntList):
            return Kind.INT_LIST
        if issubclass(annotation, URL):
            return Kind.URL
        if issubclass(annotation, Timestamp):
            return Kind.TIMESTAMP
        if dataclasses.is_dataclass(annotation):
            return Kind.RECORD

    return Kind.UNSUPPORTED


__all__ = (
    "UInt",
    "UInt64",
    "Int64",
    "Kind",
    "kindof",
)
