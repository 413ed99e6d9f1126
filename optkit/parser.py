"""
Optkit parse engine.

One OptionParser instance runs exactly one parse: the registry hands it the
name map and the positional bindings, it walks argv once and returns a
ParseResult. Nothing it mutates is shared with the registry, so any number of
parses can run against the same Options.

Token walk (index 0 is the program name and is skipped)
- "--": skipped; stop-on-positional halts here, otherwise every following
  token goes to positional binding until one is refused, the rest is unmatched.
- plain token: a malformed option ("-x?", "--a") is an OptionSyntaxError unless
  unrecognised options are allowed; stop-on-positional halts on it; otherwise it
  goes to positional binding, and to unmatched when refused.
- "--name=value": bound as is.
- "--name" and the last letter of a cluster: see _checked().
- "-abc": letters left to right; a letter with an implicit value binds it, a
  letter without one takes the rest of the cluster as its value.

After the walk every option never given gets its default (not counted), then
its environment value when the variable exists (counted, not logged).
"""
import os

from .faults import MissingArgumentError, OptionNotExistsError, OptionSyntaxError
from .grammar import TERMINATOR, Shape, Token, classify, malformed
from .results import KeyValue, OptionValue, ParseResult


class OptionParser:
    def __init__(self, options, positional=(), /, *, allow_unrecognised=False, stop_on_positional=False):
        self._options = options
        self._positional = tuple(positional)
        self._allow_unrecognised = allow_unrecognised
        self._stop_on_positional = stop_on_positional

        # one prototype copy per declared option, keyed like the result
        self._declared = {}
        self._prototypes = {}
        for details in options.values():
            if details.key not in self._declared:
                self._declared[details.key] = details
                self._prototypes[details.key] = details.value

        self._values = {}
        self._arguments = []
        self._unmatched = []
        self._cursor = 0

    def _slot(self, details):
        if (slot := self._values.get(details.key)) is None:
            slot = self._values[details.key] = OptionValue(details.long, self._prototypes[details.key])
        return slot

    def _bind(self, details, text):
        self._slot(details)._bind(text)
        self._arguments.append(KeyValue(details.long, text))

    def _lookup(self, name):
        if (details := self._options.get(name)) is None:
            raise OptionNotExistsError("Option ‘%s’ does not exist" % name, option=name)
        return details

    def _is_option(self, token):
        """
        whether token would be read as "--" or as a declared option.
        """
        if not token.startswith("-"):
            return False
        match classify(token):
            case None:
                return False
            case Token(shape=Shape.TERMINATOR):
                return True
            case Token(shape=Shape.LONG, name=name):
                return name in self._options
            case Token(name=name):
                return name[0] in self._options

    def _checked(self, details, name, argv, current):
        """
        Bind the value of an option written without "=".

        - flags (booleans with an implicit value) never take the next token;
        - with no next token, or when the next token is "--" or a declared
          option, the implicit value is bound (MissingArgumentError without one);
        - otherwise the next token is the value.

        Returns the index of the last token used.
        """
        prototype = self._prototypes[details.key]
        if current + 1 == len(argv) or prototype.is_flag or self._is_option(argv[current + 1]):
            if not prototype.has_implicit:
                raise MissingArgumentError("Option ‘%s’ is missing an argument" % name, option=name)
            self._bind(details, prototype.implicit)
            return current
        self._bind(details, argv[current + 1])
        return current + 1

    def _cluster(self, cluster, argv, current):
        for index, letter in enumerate(cluster):
            if letter not in self._options and self._allow_unrecognised:
                self._unmatched.append("-" + letter)
                continue
            details = self._lookup(letter)
            if index + 1 == len(cluster):
                return self._checked(details, letter, argv, current)
            if (prototype := self._prototypes[details.key]).has_implicit:
                self._bind(details, prototype.implicit)
            else:
                self._bind(details, cluster[index + 1:])
                break
        return current

    def _consume_positional(self, token):
        while self._cursor < len(self._positional):
            details = self._lookup(self._positional[self._cursor])
            if self._prototypes[details.key].is_container:
                self._bind(details, token)
                return True
            if self._slot(details).count == 0:
                self._bind(details, token)
                self._cursor += 1
                return True
            self._cursor += 1
        return False

    def _finalize(self):
        for key, details in self._declared.items():
            slot = self._slot(details)
            prototype = self._prototypes[key]
            if prototype.has_default and slot.count == 0 and not slot.has_default:
                slot._apply_default()
            if prototype.has_env and slot.count == 0:
                if (text := os.environ.get(prototype.envvar)) is not None:
                    slot._apply_env(text)

        keys = {}
        for key, details in self._declared.items():
            for name in filter(None, (details.short, details.long)):
                keys[name] = key
        return keys

    def parse(self, argv, /):
        """
        Walk argv and return the ParseResult.

        Raises
        - OptionSyntaxError, OptionNotExistsError, MissingArgumentError,
          ArgumentIncorrectTypeError: the parse is abandoned, no result exists.
        """
        argv = list(argv)
        current = 1

        while current < len(argv):
            token = argv[current]

            if token == TERMINATOR:
                current += 1
                if self._stop_on_positional:
                    break
                while current < len(argv) and self._consume_positional(argv[current]):
                    current += 1
                self._unmatched.extend(argv[current:])
                current = len(argv)
                break

            match classify(token):
                case None:
                    if malformed(token) and not self._allow_unrecognised:
                        raise OptionSyntaxError(
                            "Argument ‘%s’ starts with a - but has incorrect syntax" % token,
                            option=token,
                        )
                    if self._stop_on_positional:
                        break
                    if not self._consume_positional(token):
                        self._unmatched.append(token)
                case Token(shape=Shape.SHORT, name=cluster):
                    current = self._cluster(cluster, argv, current)
                case Token(shape=Shape.LONG, name=name, value=value):
                    if name not in self._options and self._allow_unrecognised:
                        self._unmatched.append(token)
                    elif value is not None:
                        self._bind(self._lookup(name), value)
                    else:
                        current = self._checked(self._lookup(name), name, argv, current)

            current += 1

        keys = self._finalize()
        return ParseResult(keys, self._values, self._arguments, self._unmatched, current)


__all__ = (
    "OptionParser",
)
