"""
Optkit faults and their rendering.

Scope
- FaultCode: stable numeric identifiers for every failure the library can raise.
- OptionError and its taxonomy:
  • SpecError: malformed or conflicting declarations (registry build time).
  • ParseError: problems found while walking argv.
  • OptionHasNoValueError / OptionTypeMismatchError: result access failures.
- trigger(): the embedding-side policy (raise, or print to stderr and exit).
- getdoc(): optional documentation lookup provided by the host application.

Contract
- The core only raises. It never prints and never exits; printing and exiting
  happen in trigger(..., shell=True) which the host calls on purpose.
- Every fault keeps its message (str(fault)) plus keyword context in .options
  (option, text, expected ...). Presentation switches (shell, colorful, fancy,
  program, hint) are merged in through copy.replace().

Customization
- __styles__ in __main__ overrides palette entries.
- __codes__ in __main__ remaps codes to host labels.
- __docs__ in __main__ maps FaultCode to documentation strings.
- __prog__ in __main__ names the program in rendered headers.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declarations (2110x)
      • OPTION_EXISTS, INVALID_OPTION_FORMAT
    - parsing (2111x)
      • OPTION_SYNTAX, OPTION_NOT_EXISTS, MISSING_ARGUMENT,
        OPTION_NOT_PRESENT, ARGUMENT_INCORRECT_TYPE
    - result access (2112x)
      • OPTION_HAS_NO_VALUE, OPTION_TYPE_MISMATCH
    """
    # --- declaration errors (2110x) ---
    OPTION_EXISTS           = 21101
    INVALID_OPTION_FORMAT   = 21102

    # --- parse errors (2111x) ---
    OPTION_SYNTAX           = 21111
    OPTION_NOT_EXISTS       = 21112
    MISSING_ARGUMENT        = 21113
    OPTION_NOT_PRESENT      = 21114
    ARGUMENT_INCORRECT_TYPE = 21115

    # --- access errors (2112x) ---
    OPTION_HAS_NO_VALUE     = 21121
    OPTION_TYPE_MISMATCH    = 21122

    def normalize(self):
        """
        return the host label for this code (__codes__ in __main__), or the number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionError(Exception):
    """
    base of every optkit fault.

    subclasses declare their code, title and default hint as class keywords:

        class MissingArgumentError(ParseError, code=..., title=..., hint=...): ...
    """
    __fault__ = Unset
    __title__ = "option error"
    __hint__ = Unset

    def __init_subclass__(cls, *, code=Unset, title=Unset, hint=Unset, **options):
        super().__init_subclass__(**options)
        if code is not Unset:
            cls.__fault__ = FaultCode(code)
        if title is not Unset:
            cls.__title__ = title
        if hint is not Unset:
            cls.__hint__ = hint

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    @property
    def code(self):
        return self.options.get("code", type(self).__fault__)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        header = Text("[ ")
        if prog := getattr(main, "__prog__", self.options.get("program", "")):
            header.append(text(prog, styler("prog-name"))).append(" — ")
        if self.code is not Unset:
            header.append(text(self.code.normalize(), styler("code"))).append(" | ")
        header.append(text(self.options.get("title", type(self).__title__).title(), styler("error-title")))
        header.append(" ]")

        message = text(self.message, styler("error-message"))

        renders = [message]
        if hint := self.options.get("hint", type(self).__hint__):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SpecError(OptionError, title="specification error"): ...
class ParseError(OptionError, title="parse error"): ...


class OptionExistsError(
    SpecError,
    code=FaultCode.OPTION_EXISTS,
    title="option exists",
    hint="every short and long name may be declared once",
): ...
class InvalidOptionFormatError(
    SpecError,
    code=FaultCode.INVALID_OPTION_FORMAT,
    title="invalid option format",
    hint="use 's', 's,long' or 'long' (long names need two or more characters)",
): ...


class OptionSyntaxError(
    ParseError,
    code=FaultCode.OPTION_SYNTAX,
    title="option syntax",
    hint="write '-s', '-abc', '--long' or '--long=value'",
): ...
class OptionNotExistsError(
    ParseError,
    code=FaultCode.OPTION_NOT_EXISTS,
    title="unknown option",
    hint="check the spelling or list the options with --help",
): ...
class MissingArgumentError(
    ParseError,
    code=FaultCode.MISSING_ARGUMENT,
    title="missing argument",
    hint="pass a value after the option or attach it with '='",
): ...
class OptionNotPresentError(
    ParseError,
    code=FaultCode.OPTION_NOT_PRESENT,
    title="option not present",
): ...
class ArgumentIncorrectTypeError(
    ParseError,
    code=FaultCode.ARGUMENT_INCORRECT_TYPE,
    title="incorrect argument type",
): ...


class OptionHasNoValueError(
    OptionError,
    code=FaultCode.OPTION_HAS_NO_VALUE,
    title="option has no value",
    hint="check count() or declare a default value",
): ...
class OptionTypeMismatchError(
    OptionError,
    TypeError,
    code=FaultCode.OPTION_TYPE_MISMATCH,
    title="option type mismatch",
): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given presentation options.

    contract
    - fault must provide __trigger__ and __replace__ (see OptionError).
    - options are merged through copy.replace() before triggering.
    - shell=True prints the fault on the stderr console and exits with status 1;
      otherwise the fault is raised.

    typical options
    - shell, fancy, colorful, program, title, hint, code.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation for a fault code from __docs__ in __main__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "OptionError",
    "SpecError",
    "ParseError",
    "OptionExistsError",
    "InvalidOptionFormatError",
    "OptionSyntaxError",
    "OptionNotExistsError",
    "MissingArgumentError",
    "OptionNotPresentError",
    "ArgumentIncorrectTypeError",
    "OptionHasNoValueError",
    "OptionTypeMismatchError",
    "trigger",
    "getdoc",
)
