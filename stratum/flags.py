r"""
Stratum flag set: register named values, parse command-line tokens into them,
and render a "Usage of <command>:" listing.

What this module provides
- FlagSet: a registry of named flags scoped to one command.
  • var(value, name, usage): register any value implementing set()/str()/get().
  • parse(arguments): apply tokens to the registered values.
  • usage()/print_defaults(): rich-rendered usage output on the flag set's console.
- Flag: one registration (name, usage, value, default text).
- Variable: a primitive value writing through to a record attribute, converting
  text with a Kind (stratum.kinds).

Token grammar
- "-name" and "--name" are equivalent; "-name=value" and "-name value" both
  assign. Boolean flags only take inline values ("-verbose=false").
- "--" ends flag parsing and is consumed; the first non-flag token ("x", "-")
  ends flag parsing and is kept. Remaining tokens are available as .args.
- The same flag may be given several times; the last occurrence wins.
- "-h", "-help", "--h" and "--help", when not registered, print the usage and
  raise HelpRequested.

Faults
- Every parse error is printed (followed by the usage) on the console, then
  raised: BadFlagSyntaxError, UnknownFlagError, MissingFlagValueError,
  InvalidFlagValueError. Registering a name twice raises DuplicateFlagError.

Usage layout (one entry per flag, sorted by name)

    Usage of cool:
      -mongo-hosts value
        	mongo hosts (env COOL_MONGO_HOSTS) (default ['mongo'])
      -v	verbose (env COOL_V)

A back-quoted word in the usage text replaces the type hint ("a `path` to" →
"-out path").

Plain usage is written to the output stream verbatim, tabs included; colorful
usage is rendered by rich, which expands tabs to spaces.
"""
import difflib
import re
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .faults import *
from .kinds import Kind
from .utils import *


class Variable:
    """
    A primitive flag value bound to one attribute of a record.

    Construction stores the initial (baseline) value on the record; set()
    converts text with the kind and stores the result; str() renders the
    attribute's current value.
    """

    def __init__(self, kind, record, attribute, value, /):
        if not kind.primitive:
            raise TypeError("variable kind must be primitive, not %s" % kind.value)
        self._kind = kind
        self._record = record
        self._attribute = attribute
        setattr(record, attribute, value)

    kind = mirror("kind")

    @property
    def isbool(self):
        return self._kind is Kind.BOOL

    @property
    def typehint(self):
        return self._kind.typehint

    @property
    def zero(self):
        return self._kind.format(self._kind.zero)

    def set(self, text, /):
        setattr(self._record, self._attribute, self._kind.convert(text))

    def get(self):
        return getattr(self._record, self._attribute)

    def __str__(self):
        return self._kind.format(self.get())

    def __repr__(self):
        return "%s(%s, %s.%s)" % (type(self).__name__, self._kind.value, type(self._record).__name__, self._attribute)


class Flag:
    """
    One registered flag.

    default is the text form of the value at registration time; it is what the
    usage listing shows, independently of any later assignment.
    """

    def __init__(self, name, usage, value, /):
        self._name = name
        self._usage = usage
        self._value = value
        self._default = str(value)

    name = mirror("name")
    usage = mirror("usage")
    default = mirror("default")

    @property
    def value(self):
        return self._value

    @property
    def isbool(self):
        return getattr(self._value, "isbool", False)

    @property
    def zero(self):
        """
        Text form of the zero value of this flag's type.
        """
        if (zero := getattr(self._value, "zero", Unset)) is not Unset:
            return zero
        return str(type(self._value)())

    def unquote(self):
        """
        Split the usage into (typehint, usage).

        A back-quoted word in the usage becomes the type hint and loses its
        quotes; otherwise the value's own type hint is used.
        """
        if match := re.search(r"`([^`]*)`", self._usage):
            return match[1], self._usage[:match.start()] + match[1] + self._usage[match.end():]
        return getattr(self._value, "typehint", "value"), self._usage

    def __repr__(self):
        return "%s(name=%r, default=%r)" % (type(self).__name__, self._name, self._default)


_HELP = frozenset(("h", "help"))


class FlagSet:
    """
    A named set of flags.

    Parameters
    - name: str
      Command name shown in the usage header.
    - output: text stream | None
      Where usage and parse errors are printed; standard error when None.
    - parent: str | None
      Parent command name; the usage header becomes "Usage of <parent> <name>:".
    - colorful: bool
      Style names, type hints and descriptions. Palette entries can be
      overridden with a __styles__ mapping in __main__.

    Notes
    - A flag set is meant to parse once; parse() records the flags that were
      actually given (see .actual) and the remaining positional tokens (.args).
    """

    def __init__(self, name, /, *, output=None, parent=None, colorful=False):
        if not isinstance(name, str):
            raise TypeError("flag set 'name' must be a string")
        self._name = name
        self._parent = parent
        self._colorful = bool(colorful)
        self._console = Console(
            file=output,
            stderr=output is None,
            no_color=not colorful,
            soft_wrap=True,
            highlight=False,
            markup=False,
            emoji=False,
        )
        self._formal = {}
        self._actual = {}
        self._args = []
        self._parsed = False

    name = mirror("name")
    parent = mirror("parent")
    args = mirror("args")
    parsed = mirror("parsed")

    @property
    def console(self):
        return self._console

    @property
    def formal(self):
        return dict(self._formal)

    @property
    def actual(self):
        return dict(self._actual)

    def var(self, value, name, usage, /):
        """
        Register value under name.

        The value must provide set(text), str() and get(). Names cannot be
        empty, start with "-" or contain "=".
        """
        if not isinstance(name, str) or not isinstance(usage, str):
            raise TypeError("flag name and usage must be strings")
        if not name or name.startswith("-") or "=" in name:
            raise ValueError("flag %r begins with - or contains =" % name)
        if not callable(getattr(value, "set", None)):
            raise TypeError("flag value must provide a set() method")
        if name in self._formal:
            raise DuplicateFlagError(name)
        self._formal[name] = flag = Flag(name, usage, value)
        return flag

    def lookup(self, name, /):
        return self._formal.get(name)

    def set(self, name, text, /):
        """
        Assign text to a registered flag as if it was given on the command line.
        """
        try:
            flag = self._formal[name]
        except KeyError:
            raise UnknownFlagError("no such flag -%s" % name, name) from None
        flag.value.set(text)
        self._actual[name] = flag

    def parse(self, arguments, /):
        """
        Parse flag tokens from arguments (which must not include the command name).
        """
        self._parsed = True
        tokens = list(arguments)
        while tokens:
            if not self._parse_one(tokens):
                break
        self._args = tokens

    def _parse_one(self, tokens):
        token = tokens[0]
        if len(token) < 2 or token[0] != "-":
            return False

        dashes = 1
        if token[1] == "-":
            dashes = 2
            if len(token) == 2:
                del tokens[0]
                return False

        name = token[dashes:]
        if not name or name[0] in ("-", "="):
            self._fail(BadFlagSyntaxError("bad flag syntax: %s" % token, token))
        del tokens[0]

        name, assigned, value = name.partition("=")

        if not (flag := self._formal.get(name)):
            if name in _HELP:
                self.usage()
                raise HelpRequested()
            suggestions = difflib.get_close_matches(name, self._formal.keys(), 1)
            self._fail(UnknownFlagError(
                "flag provided but not defined: -%s" % name,
                name,
                hint="did you mean -%s?" % suggestions[0] if suggestions else Unset,
            ))

        if flag.isbool:
            text = value if assigned else "true"
            try:
                flag.value.set(text)
            except ConversionError as error:
                self._fail(InvalidFlagValueError(
                    "invalid boolean value %s for -%s: %s" % (quote(text), name, error), name
                ), error)
        else:
            if not assigned:
                if not tokens:
                    self._fail(MissingFlagValueError("flag needs an argument: -%s" % name, name))
                value = tokens.pop(0)
            try:
                flag.value.set(value)
            except ConversionError as error:
                self._fail(InvalidFlagValueError(
                    "invalid value %s for flag -%s: %s" % (quote(value), name, error), name
                ), error)

        self._actual[name] = flag
        return True

    def _fail(self, fault, cause=None):
        self._console.print(fault)
        self.usage()
        raise fault from cause

    def _styles(self):
        return defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "option-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "default": "italic #A3A3A3",
        } | getattr(__import__("__main__"), "__styles__", {}))

    def usage(self):
        """
        Print the usage header followed by every flag's defaults.
        """
        styles = self._styles()

        def styler(style):
            return styles[style] if self._colorful else ""

        header = Text()
        if name := " ".join(part for part in (self._parent, self._name) if part):
            header.append("Usage of ", styler("usage-label"))
            header.append(name, styler("program-name"))
            header.append(":", styler("usage-label"))
        else:
            header.append("Usage:", styler("usage-label"))
        self._emit(header)
        self.print_defaults()

    def defaults(self):
        """
        Build the defaults listing (one entry per flag, sorted by name) as rich Text.
        """
        styles = self._styles()

        def styler(style):
            return styles[style] if self._colorful else ""

        listing = Text()
        for name in sorted(self._formal):
            flag = self._formal[name]
            typehint, usage = flag.unquote()

            entry = Text("  -")
            entry.append(name, styler("flag-name" if flag.isbool else "option-name"))
            if typehint:
                entry.append(" ").append(typehint, styler("metavar"))

            # short entries keep the description on the same line
            if len(entry) <= 4:
                entry.append("\t")
            else:
                entry.append("\n    \t")
            entry.append(usage.replace("\n", "\n    \t"), styler("argument-description"))

            if not self._iszero(flag):
                if isinstance(flag.value, Variable) and flag.value.kind is Kind.STRING:
                    entry.append(" (default %s)" % quote(flag.default), styler("default"))
                else:
                    entry.append(" (default %s)" % flag.default, styler("default"))

            listing.append(entry).append("\n")
        listing.rstrip()
        return listing

    def print_defaults(self):
        if listing := self.defaults():
            self._emit(listing)

    def _emit(self, text):
        # rich expands tabs while rendering, plain output keeps them
        if self._colorful:
            self._console.print(text)
        else:
            self._console.file.write(text.plain + "\n")

    @staticmethod
    def _iszero(flag):
        return flag.default == flag.zero

    def __repr__(self):
        return "%s(%r, flags=%r)" % (type(self).__name__, self._name, sorted(self._formal))


__all__ = (
    "Variable",
    "Flag",
    "FlagSet",
)
