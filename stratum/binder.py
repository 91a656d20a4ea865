"""
Stratum binder: populate a dataclass from command-line flags, environment
variables and declared defaults, in that order of precedence.

What this module provides
- Binder: walks a dataclass instance depth-first, derives a flag name and an
  environment variable name for every leaf field, registers the field with a
  FlagSet using the environment value (or the declared default) as baseline,
  then parses the command line on top.
- setting(...): declare per-field metadata (flag, env, help, default).
- Outcome: what parse() reports back when it returns.

Naming
- flag:  kebab-case of the field path            mongo.hosts → mongo-hosts
- env:   SCREAMING_SNAKE of (name, *field path)  cool + mongo.hosts → COOL_MONGO_HOSTS
- usage: help text (or the field path as lower-case words) + " (env <ENV>)"
  An explicit flag/env in the field's metadata replaces the derived name outright.

Precedence
- A leaf's baseline is the environment value when the variable is set and the
  command line does not ask for help, otherwise its "def" text (possibly empty).
- The baseline is stored on the record and registered as the flag's default;
  a flag on the command line overrides it during the final flag-set parse.
- While help was requested the environment is not consulted, so the usage
  shows static defaults rather than the current environment.

Quick example
    from dataclasses import dataclass, field
    from datetime import timedelta
    from stratum import Binder, Handling, StringList, UInt, setting

    @dataclass
    class Mongo:
        hosts: StringList = setting(default="mongo")
        timeout: timedelta = setting(default="10s")

    @dataclass
    class Config:
        port: UInt = setting(default="3000", help="listen port")
        mongo: Mongo = field(default_factory=Mongo)

    config = Config()
    Binder("cool", handling=Handling.CONTINUE).parse(config, ["-mongo-hosts", "a,b"])
"""
import dataclasses
import os
import typing
from enum import Enum

from .faults import *
from .flags import FlagSet, Variable
from .kinds import Kind, kindof
from .utils import *

_HELP = frozenset(("-h", "--h", "-help", "--help"))

_METADATA = ("flag", "env", "help", "def")


class Outcome(Enum):
    """
    Result of a Binder.parse() call that returned normally.

    CONTINUE: the record is populated, carry on.
    HELP: usage was printed (only returned under Handling.CONTINUE).
    """
    CONTINUE = "continue"
    HELP = "help"


def setting(*, flag=Unset, env=Unset, help=Unset, default=Unset, factory=Unset):
    """
    Declare a dataclass field with binder metadata.

    Parameters
    - flag: str
      Flag name (without dashes) replacing the derived kebab-case name.
    - env: str
      Environment variable name replacing the derived one.
    - help: str
      Usage description replacing the derived phrase.
    - default: str
      Default value as text, parsed like an environment value would be.
    - factory: callable
      Python-level default factory for the field (for example a nested dataclass);
      without it the field defaults to None until the binder fills it.

    Returns
    - dataclasses.Field carrying the metadata under the keys flag/env/help/def.

    Raises
    - TypeError: when a provided value is not a string (factory: not callable).
    - ValueError: when flag/env/help is empty, or flag starts with "-" or contains "=".
    """
    metadata = {}
    for key, object in zip(_METADATA, (flag, env, help, default)):
        if object is Unset:
            continue
        if not isinstance(object, str):
            raise TypeError("setting %r must be a string" % key)
        if key != "def" and not (object := object.strip()):
            raise ValueError("setting %r cannot be empty" % key)
        metadata[key] = object

    if "flag" in metadata and (metadata["flag"].startswith("-") or "=" in metadata["flag"]):
        raise ValueError("setting 'flag' cannot begin with - or contain =")

    if factory is not Unset:
        if not callable(factory):
            raise TypeError("setting 'factory' must be callable")
        return dataclasses.field(default_factory=factory, metadata=metadata)
    return dataclasses.field(default=None, metadata=metadata)


def _lookup(name, /):
    try:
        return os.environ[name], True
    except KeyError:
        return "", False


class Binder:
    """
    Bind flags, environment variables and defaults into a dataclass instance.

    Parameters
    - name: str
      Command name; prefixes derived environment names and titles the usage.
    - handling: Handling
      What parse() does with faults (default Handling.EXIT):
        • CONTINUE: raise errors to the caller; help returns Outcome.HELP.
        • EXIT: help exits 0; other faults print "<name>: <message>" and exit 2.
        • PANIC: every fault, help included, raises Abort.
    - output: text stream | None
      Where usage and faults are printed; standard error when None.
    - lookup: callable(name) -> (value, found) | None
      Environment lookup; os.environ when None.
    - parent: str | None
      Parent command name for the usage header ("Usage of <parent> <name>:").
    - colorful: bool
      Style usage and fault output.

    Lifecycle
    - A binder parses exactly once; build a fresh one per command (or per
      subcommand). A second parse() raises RuntimeError.
    """

    def __init__(self, name, /, *, handling=Handling.EXIT, output=None, lookup=None, parent=None, colorful=False):
        if not isinstance(name, str):
            raise TypeError("binder 'name' must be a string")
        if not isinstance(handling, Handling):
            raise TypeError("binder 'handling' must be a Handling member")
        if lookup is not None and not callable(lookup):
            raise TypeError("binder 'lookup' must be callable")
        self._name = name
        self._handling = handling
        self._lookup = lookup or _lookup
        self._colorful = bool(colorful)
        self._flags = FlagSet(name, output=output, parent=parent, colorful=colorful)
        self._help = False
        self._used = False

    name = mirror("name")
    handling = mirror("handling")
    help = mirror("help")

    @property
    def flags(self):
        return self._flags

    @property
    def args(self):
        """
        Positional arguments left over after flag parsing.
        """
        return self._flags.args

    def parse(self, config, arguments=(), /):
        """
        Populate config from arguments, the environment and field defaults.

        Parameters
        - config: a dataclass instance (not the class), mutated in place.
        - arguments: command-line tokens without the program name.

        Returns
        - Outcome.CONTINUE once the record is populated.
        - Outcome.HELP when help was requested (Handling.CONTINUE only).

        Raises
        - BindingError subclasses under Handling.CONTINUE.
        - SystemExit under Handling.EXIT, Abort under Handling.PANIC.
        """
        if self._used:
            raise RuntimeError("binder %r has already parsed" % self._name)
        self._used = True

        arguments = list(arguments)
        self._help = any(argument in _HELP for argument in arguments)

        try:
            self._walk(config, ())
            self._flags.parse(arguments)
        except HelpRequested as fault:
            self._trigger(fault)
            return Outcome.HELP
        except BindingError as fault:
            self._trigger(fault)
        return Outcome.CONTINUE

    def _trigger(self, fault):
        return trigger(
            fault,
            handling=self._handling,
            console=self._flags.console,
            prog=self._name,
            colorful=self._colorful,
            help=self._help,
        )

    def _walk(self, record, path):
        if not dataclasses.is_dataclass(record) or isinstance(record, type):
            raise InvalidConfigTypeError()

        hints = typing.get_type_hints(type(record))

        for field in dataclasses.fields(record):
            annotation = hints.get(field.name, field.type)
            metadata = field.metadata
            route = path + (field.name,)

            flag = self._flag_name(metadata, route)
            env = self._env_name(metadata, route)
            usage = self._usage(metadata, route, env)

            if (kind := kindof(annotation)) is Kind.RECORD:
                self._walk(self._child(record, field.name, annotation), route)
                continue

            value, found = self._lookup(env)
            if found and not self._help:
                source, text = "env", value
            else:
                source, text = "def", metadata.get("def", "")

            try:
                value = self._value(kind, annotation, record, field.name, text)
            except (ConversionError, UnsupportedTypeError) as error:
                raise FieldError(field.name, source, error) from error

            self._flags.var(value, flag, usage)

    @staticmethod
    def _child(record, name, annotation):
        child = getattr(record, name, None)
        if isinstance(child, annotation):
            return child
        try:
            child = annotation()
        except TypeError as error:
            raise InvalidConfigTypeError("invalid config type: cannot construct %s for field %r: %s" % (
                annotation.__name__, name, error
            )) from error
        setattr(record, name, child)
        return child

    def _flag_name(self, metadata, route):
        if flag := metadata.get("flag"):
            return flag
        return kebab(*route)

    def _env_name(self, metadata, route):
        if env := metadata.get("env"):
            return env
        return screaming_snake(self._name, *route)

    def _usage(self, metadata, route, env):
        return "%s (env %s)" % (metadata.get("help") or delimited(*route), env)

    def _value(self, kind, annotation, record, attribute, text):
        """
        Build the flag value for one leaf from its baseline text.

        An empty baseline is the zero value of the kind. Primitives are
        converted and written through a Variable. Adapters are
        created fresh; an empty baseline leaves them at their zero value
        without calling set(), since Timestamp rejects empty text.
        """
        if kind.primitive:
            return Variable(kind, record, attribute, kind.convert(text) if text else kind.zero)

        if kind.adapter:
            value = annotation()
            if text:
                value.set(text)
            setattr(record, attribute, value)
            return value

        raise UnsupportedTypeError(annotation)

    def __repr__(self):
        return "%s(%r, handling=%s)" % (type(self).__name__, self._name, self._handling.name)


__all__ = (
    "Binder",
    "Outcome",
    "setting",
)
