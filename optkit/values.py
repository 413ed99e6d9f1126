r"""
Optkit value kinds, converters and value prototypes.

Overview
- Kinds
  • Python types stand for themselves: bool, str, float, int (64-bit signed range).
  • Integer widths without a Python type are Integer instances: int8 .. uint64.
  • char is a Kind instance (exactly one character).
  • list[T] is a container kind; list[list[T]] is the deepest nesting accepted.

- Converters
  • A registration table maps a kind to its converter: register(kind, function).
  • convert(text, kind, delimiter=",") is the single entry point used by the parser.
  • Any ValueError/TypeError raised by a converter surfaces as ArgumentIncorrectTypeError.

- Value prototypes
  • value(kind) builds a Value; default_value/implicit_value/no_implicit_value/env/delimiter
    configure it in place and return it, so declarations chain:
        value(int8).default_value("3").env("LEVEL")
  • Booleans start with default "false" and implicit "true".

Integer syntax
- Optional "+" or "-", then decimal digits or "0x" followed by hex digits (any case).
- Overflow is found while accumulating: the 64-bit partial value wrapping below the
  previous partial value is an error. The magnitude is then checked against the width,
  with one extra unit on the negative side of signed kinds (-128 is a valid int8).
- A sign of "-" on an unsigned kind is an error, "-0" included.
"""
import collections
import copy
import functools
import typing

from .faults import ArgumentIncorrectTypeError
from .utils import *

_MASK = (1 << 64) - 1
_DIGITS = {10: "0123456789", 16: "0123456789abcdef"}


class Kind:
    """
    named value kind for values without a python type of their own.
    """
    __slots__ = ("_name",)

    def __init__(self, name, /):
        if not isinstance(name, str) or not name:
            raise TypeError("Kind() argument must be a non-empty string")
        self._name = name

    name = mirror("name")

    def __repr__(self):
        return self._name


class Integer(Kind):
    """
    fixed-width integer kind (bits in 8/16/32/64, signed or unsigned).
    """
    __slots__ = ("_bits", "_signed")

    def __init__(self, name, bits, /, *, signed):
        super().__init__(name)
        if bits not in (8, 16, 32, 64):
            raise ValueError("Integer() bits must be 8, 16, 32 or 64")
        self._bits = bits
        self._signed = bool(signed)

    bits = mirror("bits")
    signed = mirror("signed")

    @property
    def min(self):
        return -(1 << (self._bits - 1)) if self._signed else 0

    @property
    def max(self):
        return (1 << (self._bits - 1)) - 1 if self._signed else (1 << self._bits) - 1


int8 = Integer("int8", 8, signed=True)
int16 = Integer("int16", 16, signed=True)
int32 = Integer("int32", 32, signed=True)
int64 = Integer("int64", 64, signed=True)
uint8 = Integer("uint8", 8, signed=False)
uint16 = Integer("uint16", 16, signed=False)
uint32 = Integer("uint32", 32, signed=False)
uint64 = Integer("uint64", 64, signed=False)

char = Kind("char")

Converter = collections.namedtuple("Converter", ("name", "function", "default"))

_converters = {}


def _incorrect(text, expected, /):
    return ArgumentIncorrectTypeError(
        "Argument ‘%s’ failed to parse" % text,
        text=text,
        expected=expected,
        hint="expected %s" % expected,
    )


def element(kind, /):
    """
    return T for list[T], Unset for anything else.
    """
    if typing.get_origin(kind) is not list:
        return Unset
    if len(arguments := typing.get_args(kind)) != 1:
        raise TypeError("container kinds take exactly one element kind")
    return arguments[0]


def is_container(kind, /):
    return element(kind) is not Unset


def nameof(kind, /):
    """
    human label of a kind, as used in messages ("int8", "list[str]", ...).
    """
    if (inner := element(kind)) is not Unset:
        return "list[%s]" % nameof(inner)
    if (converter := _converters.get(kind)) is not None:
        return converter.name
    return getattr(kind, "__name__", repr(kind))


def check(kind, /):
    """
    Validate a kind for use in a value prototype.

    Raises
    - TypeError: nesting deeper than list[list[T]], or no converter registered
      for the innermost kind.
    """
    depth, inner = 0, kind
    while (nested := element(inner)) is not Unset:
        depth += 1
        inner = nested
    if depth > 2:
        raise TypeError("%s nests deeper than two lists" % nameof(kind))
    if inner not in _converters:
        raise TypeError("no converter registered for %s" % nameof(inner))
    return kind


def register(kind, function=Unset, /, *, name=Unset, default=Unset):
    """
    Register the converter for a kind (plain call or decorator).

    Parameters
    - kind: any hashable tag; usually a class or a Kind instance.
    - function: callable(text) -> value. ValueError/TypeError raised inside are
      reported as ArgumentIncorrectTypeError naming this kind.
    - name: label for messages and help; defaults to the kind's __name__ or repr.
    - default: element used when an empty list text is converted; defaults to kind().

    Returns
    - the function (so the decorator form leaves it usable).

    Examples
        register(Path, Path)

        @register(Pair)
        def pair(text):
            left, right = text.split("=")
            return Pair(left, right)
    """
    if function is Unset:
        @rename("register")
        def wrapper(function, /):
            return register(kind, function, name=name, default=default)
        return wrapper

    if is_container(kind):
        raise TypeError("register() cannot take a container kind, register its element instead")
    if not callable(function):
        raise TypeError("register() converter must be callable")
    if not isinstance(name, str | Unset):
        raise TypeError("register() name must be a string")

    _converters[kind] = Converter(coalesce(name, getattr(kind, "__name__", repr(kind))), function, default)
    return function


def default_of(kind, /):
    """
    default-constructed element of a kind (0, False, "", "\0", [] ...).
    """
    if is_container(kind):
        return []
    try:
        converter = _converters[kind]
    except KeyError:
        raise TypeError("no converter registered for %s" % nameof(kind)) from None
    if converter.default is not Unset:
        return copy.deepcopy(converter.default)
    if not callable(kind):
        raise TypeError("%s has no default element" % nameof(kind))
    return kind()


def convert(text, kind, /, *, delimiter=","):
    """
    Convert one textual token into a value of the given kind.

    Containers
    - list[T]: "" gives [default_of(T)]; otherwise the text is split on delimiter,
      one trailing empty segment is dropped ("a,b," -> a, b) and every segment is
      converted as T.
    - list[list[T]]: the whole text becomes one inner list, returned wrapped in a
      list so the caller always extends its storage with the result.

    Raises
    - ArgumentIncorrectTypeError: the text is not a valid value of the kind.
    - TypeError: the kind has no registered converter.
    """
    if (inner := element(kind)) is not Unset:
        if is_container(inner):
            return [convert(text, inner, delimiter=delimiter)]
        if not text:
            return [default_of(inner)]
        segments = text.split(delimiter)
        if not segments[-1]:
            segments.pop()
        return [convert(segment, inner, delimiter=delimiter) for segment in segments]

    try:
        converter = _converters[kind]
    except KeyError:
        raise TypeError("no converter registered for %s" % nameof(kind)) from None

    try:
        return converter.function(text)
    except ArgumentIncorrectTypeError:
        raise
    except (ValueError, TypeError) as error:
        raise _incorrect(text, converter.name) from error


def parse_integer(text, /, kind=int64):
    """
    Parse text into an integer of the given width.

    Behavior
    - "+"/"-" prefix is optional; "0x" switches to hex; leading zeros are fine.
    - "", "+", "-" and "0x" alone are rejected.
    - Accumulation happens in a 64-bit register; a partial value smaller than the
      previous one means the register wrapped.
    - Magnitudes above the width's unsigned maximum are rejected, then signed kinds
      accept up to max (positive) or |min| (negative).

    Returns
    - int within [kind.min, kind.max].
    """
    if not isinstance(kind, Integer):
        raise TypeError("parse_integer() kind must be an Integer")

    digits, negative = text, False
    if digits[:1] in ("+", "-"):
        negative = digits[0] == "-"
        digits = digits[1:]

    base = 10
    if digits.startswith("0x"):
        base = 16
        digits = digits[2:]

    if not digits:
        raise _incorrect(text, kind.name)

    value = 0
    for digit in digits:
        if (number := _DIGITS[base].find(digit.lower())) < 0:
            raise _incorrect(text, kind.name)
        following = (value * base + number) & _MASK
        if following < value:
            raise _incorrect(text, kind.name)
        value = following

    if value > (1 << kind.bits) - 1:
        raise _incorrect(text, kind.name)

    if not kind.signed:
        if negative:
            raise _incorrect(text, kind.name)
        return value

    if value > (-kind.min if negative else kind.max):
        raise _incorrect(text, kind.name)
    return -value if negative else value


def parse_bool(text, /):
    """
    "1", "t", "T", "true", "True" -> True; "0", "f", "F", "false", "False" -> False.
    """
    match text:
        case "1" | "t" | "T" | "true" | "True":
            return True
        case "0" | "f" | "F" | "false" | "False":
            return False
    raise _incorrect(text, "bool")


def parse_char(text, /):
    if len(text) != 1:
        raise _incorrect(text, "char")
    return text


for _kind in (int8, int16, int32, int64, uint8, uint16, uint32, uint64):
    register(_kind, functools.partial(parse_integer, kind=_kind), name=_kind.name, default=0)
del _kind

register(int, functools.partial(parse_integer, kind=int64), name="int", default=0)
register(bool, parse_bool, name="bool", default=False)
register(char, parse_char, name="char", default="\0")
register(str, str, name="str", default="")
register(float, float, name="float", default=0.0)


class Value(metaclass=RecordType):
    """
    Value prototype: the kind an option takes and how missing values are filled.

    Fields (read-only; configure through the chaining methods)
    - kind: the declared kind (bool, int8, list[str], a registered custom kind ...).
    - default: default text, or Unset.
    - implicit: text bound when the option is given without a value, or Unset.
    - envvar: environment variable consulted when the option is absent, or Unset.
    - separator: list delimiter (one character, "," by default).
    """
    __introspectable__ = ("kind", "default", "implicit", "envvar", "separator")

    def __init__(self, kind=bool, /):
        self._kind = check(kind)
        self._default = Unset
        self._implicit = Unset
        self._envvar = Unset
        self._separator = ","
        if kind is bool:
            self._default = "false"
            self._implicit = "true"

    def default_value(self, text, /):
        if not isinstance(text, str):
            raise TypeError("default_value() argument must be a string")
        self._default = text
        return self

    def implicit_value(self, text, /):
        if not isinstance(text, str):
            raise TypeError("implicit_value() argument must be a string")
        self._implicit = text
        return self

    def no_implicit_value(self):
        self._implicit = Unset
        return self

    def env(self, name, /):
        if not isinstance(name, str):
            raise TypeError("env() argument must be a string")
        if not name:
            raise ValueError("env() argument cannot be empty")
        self._envvar = name
        return self

    def delimiter(self, character, /):
        if not isinstance(character, str):
            raise TypeError("delimiter() argument must be a string")
        if len(character) != 1:
            raise ValueError("delimiter() argument must be a single character")
        self._separator = character
        return self

    @property
    def has_default(self):
        return self._default is not Unset

    @property
    def has_implicit(self):
        return self._implicit is not Unset

    @property
    def has_env(self):
        return self._envvar is not Unset

    @property
    def is_boolean(self):
        return self._kind is bool

    @property
    def is_container(self):
        return is_container(self._kind)

    @property
    def is_flag(self):
        """
        a boolean with an implicit value never takes the following token.
        """
        return self.is_boolean and self.has_implicit

    def convert(self, text, /):
        return convert(text, self._kind, delimiter=self._separator)

    def __rich_repr__(self):
        yield "kind", nameof(self._kind)
        for field in ("default", "implicit", "envvar"):
            if (object := getattr(self, "_" + field)) is not Unset:
                yield field, object
        if self._separator != ",":
            yield "separator", self._separator


def value(kind=bool, /):
    """
    build a value prototype for kind (bool when omitted).
    """
    return Value(kind)


__all__ = (
    "Kind",
    "Integer",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "char",
    "Converter",
    "register",
    "convert",
    "nameof",
    "parse_integer",
    "parse_bool",
    "parse_char",
    "Value",
    "value",
)
