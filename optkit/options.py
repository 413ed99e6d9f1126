r"""
Optkit option registry.

Overview
- OptionDetails: immutable descriptor of one declared option (short name, long
  name, description, value prototype, argument label). Its key is the
  (long, short) pair; short-only, long-only and combined options never collide.
- Option: declaration record for the list forms of add_options/add_option.
- HelpOptionDetails / HelpGroupDetails: metadata captured at declaration time for
  help renderers (see optkit.usage).
- OptionAdder: the chaining callable returned by Options.add_options(group).
- Options: the registry itself, plus program metadata and parser switches.

Declaring
    options = Options("tester", "a test program")
    (options.add_options()
        ("v,verbose", "print more")
        ("o,output", "output file", value(str).default_value("a.out"), "FILE")
        ("level", "log level", value(int8).implicit_value("1")))
    options.parse_positional("files")

Name rules
- short: one character, [A-Za-z0-9?].
- long: two or more characters, [A-Za-z0-9][-_A-Za-z0-9]+.
- at least one of them; a name may be declared once (OptionExistsError).

Parsing
- parse(argv) builds a fresh OptionParser; the registry is never changed by it.
- argv may be a sequence (index 0 is the program name) or a single string,
  split with shlex.split and prefixed with the program name.
"""
import copy
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from .faults import InvalidOptionFormatError, OptionExistsError
from .grammar import LONG_NAME, SHORT_NAME, specifier
from .parser import OptionParser
from .usage import render
from .utils import *
from .values import Value, nameof


class OptionDetails(metaclass=RecordType):
    """
    descriptor of one declared option.

    value returns a copy of the prototype: configure prototypes before declaring them.
    """
    __introspectable__ = ("short", "long", "descr", "arg_help")
    __displayable__ = ("short", "long", "descr", "value", "arg_help")

    def __init__(self, short, long, descr, value, arg_help="", /):
        self._short = short
        self._long = long
        self._descr = descr
        self._value = copy.copy(value)
        self._arg_help = arg_help

    @property
    def value(self):
        return copy.copy(self._value)

    @property
    def key(self):
        return self._long, self._short

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        if not isinstance(other, OptionDetails):
            return NotImplemented
        return self.key == other.key


class Option(metaclass=RecordType):
    """
    declaration record: Option("v,verbose", "print more", value(bool), "").
    """
    __introspectable__ = ("opts", "descr", "value", "arg_help")

    def __init__(self, opts, descr="", value=Unset, arg_help="", /):
        if not isinstance(opts, str):
            raise TypeError("Option() first argument must be a string")
        self._opts = opts
        self._descr = descr
        self._value = value
        self._arg_help = arg_help


class HelpOptionDetails(metaclass=RecordType):
    """
    help metadata of one option, captured when it is declared.
    """
    __introspectable__ = (
        "short",
        "long",
        "descr",
        "default",
        "implicit",
        "arg_help",
        "kind",
        "has_default",
        "has_implicit",
        "is_container",
        "is_boolean",
    )
    __displayable__ = ("short", "long", "descr", "default", "implicit", "arg_help", "kind")

    def __init__(self, details, /):
        value = details.value
        self._short = details.short
        self._long = details.long
        self._descr = details.descr
        self._default = coalesce(value.default, "")
        self._implicit = coalesce(value.implicit, "")
        self._arg_help = details.arg_help
        self._kind = nameof(value.kind)
        self._has_default = value.has_default
        self._has_implicit = value.has_implicit
        self._is_container = value.is_container
        self._is_boolean = value.is_boolean


class HelpGroupDetails(metaclass=RecordType):
    """
    help metadata of one group: its name and its options in declaration order.
    """
    __introspectable__ = ("name", "options")

    def __init__(self, name, options, /):
        self._name = name
        self._options = tuple(options)


class OptionAdder:
    """
    Chaining declarer bound to one group.

    adder("s,long", descr="", value=value(bool), arg_help="") declares one option
    and returns the adder, so declarations can be written one per line.
    """

    def __init__(self, options, group, /):
        self._options = options
        self._group = group

    def __call__(self, opts, descr="", value=Unset, arg_help="", /):
        short, long = specifier(opts)
        self._options.add_option(self._group, short, long, descr, value, arg_help)
        return self

    def __repr__(self):
        return "option-adder(group=%r)" % self._group


class Options:
    """
    Registry of declared options.

    Settings (constructor keywords, or the chaining setters)
    - custom_help: usage text after the program name ("[OPTION...]").
    - positional_help: usage text for positional arguments ("positional parameters").
    - allow_unrecognised: unknown or malformed options go to unmatched instead of raising.
    - stop_on_positional: stop at the first positional token (or "--"), leaving the
      rest for a subcommand; ParseResult.consumed tells where.
    - width: help width in columns (76).
    - tab_expansion: expand tabs in descriptions to 8-column stops.
    - show_positional_help: list positional-bound options in help.
    """

    def __init__(
            self,
            program,
            help_string="",
            /,
            *,
            custom_help="[OPTION...]",
            positional_help="positional parameters",
            allow_unrecognised=False,
            stop_on_positional=False,
            width=76,
            tab_expansion=False,
            show_positional_help=False,
    ):
        if not isinstance(program, str):
            raise TypeError("Options() program must be a string")
        if not isinstance(help_string, str):
            raise TypeError("Options() help string must be a string")

        self._options = {}
        self._positional = ()
        self._groups = {}
        self._settings = {
            "program": program,
            "help_string": help_string,
            "custom_help": "",
            "positional_help": "",
            "allow_unrecognised": False,
            "stop_on_positional": False,
            "width": 0,
            "tab_expansion": False,
            "show_positional_help": False,
        }

        self.custom_help(custom_help)
        self.positional_help(positional_help)
        self.allow_unrecognised_options(allow_unrecognised)
        self.stop_on_positional(stop_on_positional)
        self.set_width(width)
        self.set_tab_expansion(tab_expansion)
        self.show_positional_help(show_positional_help)

    settings = mirror("settings")
    positional = mirror("positional")

    @property
    def program(self):
        return self._settings["program"]

    def custom_help(self, text, /):
        if not isinstance(text, str):
            raise TypeError("custom_help() argument must be a string")
        self._settings["custom_help"] = text
        return self

    def positional_help(self, text, /):
        if not isinstance(text, str):
            raise TypeError("positional_help() argument must be a string")
        self._settings["positional_help"] = text
        return self

    def allow_unrecognised_options(self, value=True, /):
        self._settings["allow_unrecognised"] = bool(value)
        return self

    def stop_on_positional(self, value=True, /):
        self._settings["stop_on_positional"] = bool(value)
        return self

    def set_width(self, width, /):
        if not isinstance(width, int) or isinstance(width, bool):
            raise TypeError("set_width() argument must be an integer")
        if width < 1:
            raise ValueError("set_width() argument must be positive")
        self._settings["width"] = width
        return self

    def set_tab_expansion(self, value=True, /):
        self._settings["tab_expansion"] = bool(value)
        return self

    def show_positional_help(self, value=True, /):
        self._settings["show_positional_help"] = bool(value)
        return self

    def add_options(self, group="", options=Unset, /):
        """
        Declare options in a group.

        Forms
        - add_options(group) -> OptionAdder for chained calls.
        - add_options(group, [Option(...), ...]) declares every record, then
          returns the adder as well.
        """
        if not isinstance(group, str):
            raise TypeError("add_options() group must be a string")
        if options is not Unset:
            for option in options:
                self.add_option(group, option)
        return OptionAdder(self, group)

    def add_option(self, group, /, *parameters):
        """
        Declare one option and return its OptionDetails.

        Forms
        - add_option(group, Option("s,long", descr, value, arg_help))
        - add_option(group, short, long, descr="", value=value(bool), arg_help="")

        Raises
        - InvalidOptionFormatError: a name breaks the short/long name rules.
        - OptionExistsError: a name is already declared (nothing is registered then).
        """
        match parameters:
            case [Option() as option]:
                short, long = specifier(option.opts)
                return self.add_option(group, short, long, option.descr, option.value, option.arg_help)
            case [str() as short, str() as long, *rest] if len(rest) <= 3:
                return self._declare(group, short, long, *rest)
            case _:
                raise TypeError("add_option() takes an Option or short and long names")

    def _declare(self, group, short, long, descr="", value=Unset, arg_help="", /):
        if not isinstance(group, str):
            raise TypeError("add_option() group must be a string")
        if not isinstance(descr, str):
            raise TypeError("add_option() description must be a string")
        if not isinstance(arg_help, str):
            raise TypeError("add_option() argument help must be a string")
        if value is Unset:
            value = Value(bool)
        elif not isinstance(value, Value):
            raise TypeError("add_option() value must be built with value()")

        if (
            not (short or long) or
            short and not SHORT_NAME.fullmatch(short) or
            long and not LONG_NAME.fullmatch(long)
        ):
            text = ",".join(filter(None, (short, long)))
            raise InvalidOptionFormatError("Invalid option format ‘%s’" % text, option=text)

        for name in filter(None, (short, long)):
            if name in self._options:
                raise OptionExistsError("Option ‘%s’ already exists" % name, option=name)

        details = OptionDetails(short, long, descr, value, arg_help)
        for name in filter(None, (short, long)):
            self._options[name] = details

        self._groups.setdefault(group, []).append(HelpOptionDetails(details))
        return details

    def parse_positional(self, *names):
        """
        Bind positional tokens to options, in order; replaces any earlier binding.

        Accepts parse_positional("a", "b"), parse_positional(["a", "b"]) or
        parse_positional("files"). Names are resolved when parsing, where an
        undeclared name raises OptionNotExistsError.
        """
        match names:
            case [Iterable() as iterable] if not isinstance(iterable, str):
                names = tuple(iterable)
        if not all(isinstance(name, str) for name in names):
            raise TypeError("parse_positional() names must be strings")
        self._positional = tuple(names)
        return self

    def parse(self, argv=Unset, /):
        """
        Parse an argument vector into a ParseResult.

        Parameters
        - argv:
          • Unset: sys.argv.
          • str: shell-like string, split with shlex.split; the program name is prepended.
          • Iterable[str]: the vector itself, program name first.

        Raises
        - ParseError subclasses (see optkit.faults).
        """
        if argv is Unset:
            argv = list(sys.argv)
        elif isinstance(argv, str):
            argv = [self._settings["program"], *shlex.split(argv)]
        elif isinstance(argv, Iterable):
            argv = list(argv)
            if not all(isinstance(token, str) for token in argv):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        return OptionParser(
            self._options,
            self._positional,
            allow_unrecognised=self._settings["allow_unrecognised"],
            stop_on_positional=self._settings["stop_on_positional"],
        ).parse(argv)

    def groups(self):
        """
        declared group names, sorted.
        """
        return tuple(sorted(self._groups))

    def group_help(self, group, /):
        """
        HelpGroupDetails of one group; KeyError when it was never declared.
        """
        return HelpGroupDetails(group, self._groups[group])

    def help(self, groups=(), /):
        """
        plain help text for the given groups (all groups when empty).
        """
        return render(self, groups).plain

    def print_help(self, groups=(), /, *, stderr=False, colorful=False, fancy=False):
        """
        print help through rich (colors and panel when asked).
        """
        Console(stderr=stderr).print(render(self, groups, colorful=colorful, fancy=fancy, strip=True))

    def __repr__(self):
        return "options(program=%r, groups=%r)" % (self._settings["program"], self.groups())


__all__ = (
    "OptionDetails",
    "Option",
    "HelpOptionDetails",
    "HelpGroupDetails",
    "OptionAdder",
    "Options",
)
