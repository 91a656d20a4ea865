"""
Stratum faults (errors and signals) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain to keep logs/searches predictable.
- Handling: the three error-handling policies a binder can run under
  (continue, exit, panic).
- Fault: base type that carries a message + options and knows how to render
  itself through rich and how to surface itself under a given policy.
- BindingError and its family: everything that can go wrong while binding a
  record (bad target, unsupported field type, bad env/default text) or while
  parsing command-line flags.
- HelpRequested: the help sentinel; a fault, but not an error.
- trigger(): central entry point to surface any fault with runtime options.

Policies
- CONTINUE: errors are raised to the caller; help is swallowed (the caller
  receives a normal return).
- EXIT: help terminates with status 0; any other fault is printed as
  "<prog>: <message>" to the configured console and terminates with status 2.
- PANIC: every fault, help included, is raised as an Abort chained from it.

Integration
- The binder and flag set raise faults; the binder catches them at the top of
  parse() and calls trigger(fault, handling=..., console=..., prog=...).
- Rendering honors a __styles__ mapping and a __codes__ mapping defined in the
  host's __main__ module.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binder (stable identifiers).

    grouping (by high-level domain)
    - binding (2110x)
      • INVALID_CONFIG_TYPE, UNSUPPORTED_TYPE, FIELD_VALUE, CONVERSION, DUPLICATED_FLAG
    - flag parsing (2111x)
      • BAD_FLAG_SYNTAX, UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE
    - signals (2210x)
      • HELP_REQUESTED

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- binding errors (21xxx) ---
    INVALID_CONFIG_TYPE     = 21101
    UNSUPPORTED_TYPE        = 21102
    FIELD_VALUE             = 21103
    CONVERSION              = 21104
    DUPLICATED_FLAG         = 21105

    # --- flag parsing errors (21xxx) ---
    BAD_FLAG_SYNTAX         = 21111
    UNKNOWN_FLAG            = 21112
    MISSING_FLAG_VALUE      = 21113
    INVALID_FLAG_VALUE      = 21114

    # --- signals (22xxx) ---
    HELP_REQUESTED          = 22101

    def normalize(self):
        """
        label shown next to a fault in colorful output.

        a __codes__ mapping in __main__ may relabel codes (FaultCode.UNKNOWN_FLAG:
        "E-FLAG"); unmapped codes render as their number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class Handling(IntEnum):
    """
    error-handling policy applied when a fault is triggered.
    """
    CONTINUE = 0
    EXIT = 1
    PANIC = 2


class Abort(Exception):
    """
    Raised under Handling.PANIC; carries (and is chained from) the triggering fault.
    """

    def __init__(self, fault, /):
        super().__init__(str(fault))
        self.fault = fault


class Fault(Exception):
    code = Unset

    def __init__(self, message, /, *, hint=Unset, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-message": "#FF4DA6",  # friendly pinky message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

        def styler(style):
            return styles[style] if colorful else ""

        line = Text()
        if prog := self.options.get("prog"):
            line.append(prog, styler("prog-name")).append(": ")
        line.append(self.message, styler("error-message"))
        if colorful and self.code:
            line.append(" ").append("[%s]" % self.code.normalize(), styler("code"))

        if not self.hint:
            return line
        return Group(line, Text.assemble((" → ", styler("hint-arrow")), (self.hint, styler("hint"))))

    def __trigger__(self):
        match self.options.get("handling", Handling.CONTINUE):
            case Handling.CONTINUE:
                raise self
            case Handling.EXIT:
                if self.options.get("help"):
                    sys.exit(0)
                self.options.get("console", console).print(self)
                sys.exit(2)
            case Handling.PANIC:
                raise Abort(self) from self


class BindingError(Fault):
    """
    Base class of every error raised while binding or parsing.
    """


class InvalidConfigTypeError(BindingError, TypeError):
    code = FaultCode.INVALID_CONFIG_TYPE

    def __init__(self, message="invalid config type", /, **options):
        super().__init__(message, **options)


class UnsupportedTypeError(BindingError, TypeError):
    code = FaultCode.UNSUPPORTED_TYPE

    def __init__(self, type, /, **options):
        self.type = type
        super().__init__("parsing value: type not supported: %s" % getattr(type, "__name__", type), **options)


class ConversionError(BindingError, ValueError):
    code = FaultCode.CONVERSION


class FieldError(BindingError):
    """
    A field's baseline text (from the environment or from its default) failed to parse.

    str(error) is "<field> env: <cause>" or "<field> def: <cause>".
    """
    code = FaultCode.FIELD_VALUE

    def __init__(self, field, source, cause, /, **options):
        assert source in ("env", "def")
        self.field = field
        self.source = source
        self.cause = cause
        super().__init__("%s %s: %s" % (field, source, cause), **options)


class DuplicateFlagError(BindingError, ValueError):
    code = FaultCode.DUPLICATED_FLAG

    def __init__(self, flag, /, **options):
        self.flag = flag
        super().__init__("flag redefined: %s" % flag, **options)


class FlagError(BindingError):
    """
    Base class of command-line parsing errors; .flag is the offending flag or token.
    """

    def __init__(self, message, flag, /, **options):
        self.flag = flag
        super().__init__(message, **options)


class BadFlagSyntaxError(FlagError):
    code = FaultCode.BAD_FLAG_SYNTAX


class UnknownFlagError(FlagError):
    code = FaultCode.UNKNOWN_FLAG


class MissingFlagValueError(FlagError):
    code = FaultCode.MISSING_FLAG_VALUE


class InvalidFlagValueError(FlagError):
    code = FaultCode.INVALID_FLAG_VALUE


class HelpRequested(Fault):
    """
    Signal raised when -h/-help/--h/--help was given and no such flag is defined.

    Not an error: under Handling.CONTINUE it is absorbed, under Handling.EXIT it
    terminates successfully, under Handling.PANIC it still aborts.
    """
    code = FaultCode.HELP_REQUESTED

    def __init__(self, message="flag: help requested", /, **options):
        super().__init__(message, **options)

    def __trigger__(self):
        match self.options.get("handling", Handling.CONTINUE):
            case Handling.CONTINUE:
                return
            case Handling.EXIT:
                sys.exit(0)
            case Handling.PANIC:
                raise Abort(self) from self


def trigger(fault, /, **options):
    """
    merge runtime options into a fault and apply its policy.

    contract
    - fault must provide a __trigger__ method (see Fault).
    - options are merged into the fault's options before triggering.

    typical options
    - handling, console, prog, colorful, help.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must have a __trigger__ method")
    fault.options = MappingProxyType(fault.options | options)
    return fault.__trigger__()


__all__ = (
    "FaultCode",
    "Handling",
    "Abort",
    "Fault",
    "BindingError",
    "InvalidConfigTypeError",
    "UnsupportedTypeError",
    "ConversionError",
    "FieldError",
    "DuplicateFlagError",
    "FlagError",
    "BadFlagSyntaxError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagValueError",
    "HelpRequested",
    "trigger",
)
