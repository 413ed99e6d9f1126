"""
Optkit token grammar.

One fixed lexical grammar, compiled once at import:

- "--"                      terminator
- "--name" / "--name=value" long option; name is [A-Za-z0-9][-_A-Za-z0-9]+
- "-c"                      single short option; c is [A-Za-z0-9?]
- "-abc"                    short cluster (two or more alphanumerics)
- anything else             plain token (a lone "-" included)

classify() never consults the registry: deciding whether "-abc" is three flags
or "-a" with value "bc" is the parser's job.
"""
import collections
import enum
import re

from .faults import InvalidOptionFormatError

SHORT_NAME = re.compile(r"[A-Za-z0-9?]")
LONG_NAME = re.compile(r"[A-Za-z0-9][-_A-Za-z0-9]+")
LONG = re.compile(r"--([A-Za-z0-9][-_A-Za-z0-9]+)(?:=(.*))?", re.DOTALL)
SHORT = re.compile(r"-([A-Za-z0-9?])")
CLUSTER = re.compile(r"-([A-Za-z0-9]{2,})")
SPECIFIER = re.compile(r"(?:([A-Za-z0-9?]),[ ]*)?([A-Za-z0-9][-_A-Za-z0-9]+)|([A-Za-z0-9?]),?")
TERMINATOR = "--"


class Shape(enum.Enum):
    LONG = "long"
    SHORT = "short"
    TERMINATOR = "terminator"


Token = collections.namedtuple("Token", ("shape", "name", "value"), defaults=(None,))
Token.__doc__ = """\
classified option token.

- shape: Shape.LONG, Shape.SHORT (single or cluster) or Shape.TERMINATOR.
- name: long name, or the short characters ("v", "xva").
- value: text after "=" for long options, None when absent.
"""


def classify(token, /):
    """
    Classify one raw token; None means a plain (positional) token.
    """
    if token == TERMINATOR:
        return Token(Shape.TERMINATOR, "")
    if match := LONG.fullmatch(token):
        return Token(Shape.LONG, match[1], match[2])
    if match := SHORT.fullmatch(token) or CLUSTER.fullmatch(token):
        return Token(Shape.SHORT, match[1])
    return None


def malformed(token, /):
    """
    True for plain tokens that start with "-" and are not a lone "-".
    """
    return len(token) > 1 and token.startswith("-") and classify(token) is None


def specifier(text, /):
    """
    Split a declaration shorthand into (short, long).

    Accepted forms
    - "v"            -> ("v", "")
    - "v,"           -> ("v", "")
    - "verbose"      -> ("", "verbose")
    - "v,verbose"    -> ("v", "verbose")
    - "v, verbose"   -> ("v", "verbose")

    Raises
    - InvalidOptionFormatError: anything else ("", ",v", "v,", "verbose,v", ...).
    """
    if not isinstance(text, str):
        raise TypeError("specifier() argument must be a string")
    if not (match := SPECIFIER.fullmatch(text)):
        raise InvalidOptionFormatError("Invalid option format ‘%s’" % text, option=text)
    if match[3] is not None:
        return match[3], ""
    return match[1] or "", match[2]


__all__ = (
    "Shape",
    "Token",
    "TERMINATOR",
    "SHORT_NAME",
    "LONG_NAME",
    "classify",
    "malformed",
    "specifier",
)
