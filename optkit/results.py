"""
Optkit parse results.

Scope
- OptionValue: the per-parse slot of one declared option (occurrences, whether
  the default was applied, lazily materialized storage).
- KeyValue: one (long name, raw text) pair of the consumed log.
- ParseResult: the immutable outcome of one parse, queried by short or long name.

Ownership
- A ParseResult owns every slot and copies every name it needs, so it stays valid
  when the Options registry that produced it is changed or dropped.
- Values handed out by OptionValue.as_() are copies; editing them never changes
  the stored result.

Binding (parser side)
- _bind(text): convert, then store (containers extend) and count the occurrence.
- _apply_default(): convert the default text, mark has_default, count unchanged.
- _apply_env(text): replace any default storage with the environment text and
  count it as one occurrence.
"""
import collections
import copy
from types import MappingProxyType

from .faults import OptionHasNoValueError, OptionNotPresentError, OptionTypeMismatchError
from .utils import *
from .values import convert, nameof


class OptionValue(metaclass=RecordType):
    """
    per-parse storage of one option.

    fields
    - long: long name copied at creation ("" for short-only options).
    - kind: the declared kind.
    - count: explicit occurrences (argv, positional binding, environment).
    - has_default: the default text was applied because nothing else was given.
    - has_value: storage was materialized at least once.
    """
    __introspectable__ = ("long", "kind", "count", "has_default")

    def __init__(self, long, prototype, /):
        self._long = long
        self._prototype = prototype
        self._kind = prototype.kind
        self._count = 0
        self._has_default = False
        self._storage = Unset

    @property
    def has_value(self):
        return self._storage is not Unset

    @property
    def value(self):
        """
        stored value without the kind check of as_().
        """
        if self._storage is Unset:
            raise self._no_value()
        return copy.deepcopy(self._storage)

    def as_(self, kind=Unset, /):
        """
        Return the stored value, checking it against the declared kind.

        Raises
        - OptionHasNoValueError: no occurrence, no default and no environment value.
        - OptionTypeMismatchError: kind differs from the kind the option was declared with.
        """
        if self._storage is Unset:
            raise self._no_value()
        if kind is not Unset and kind != self._kind:
            subject = "Option ‘%s’" % self._long if self._long else "Option"
            raise OptionTypeMismatchError(
                "%s holds %s, not %s" % (subject, nameof(self._kind), nameof(kind)),
                option=self._long,
                expected=nameof(kind),
                hint="read it with as_(%s)" % nameof(self._kind),
            )
        return copy.deepcopy(self._storage)

    def _no_value(self):
        if not self._long:
            return OptionHasNoValueError("Option has no value", option=self._long)
        return OptionHasNoValueError("Option ‘%s’ has no value" % self._long, option=self._long)

    def _store(self, text):
        converted = self._prototype.convert(text)
        if not self._prototype.is_container:
            self._storage = converted
        elif self._storage is Unset:
            self._storage = converted
        else:
            self._storage.extend(converted)

    def _bind(self, text, /):
        self._store(text)
        self._count += 1

    def _apply_default(self):
        self._storage = self._prototype.convert(self._prototype.default)
        self._has_default = True

    def _apply_env(self, text, /):
        self._storage = Unset
        self._has_default = False
        self._bind(text)

    def __rich_repr__(self):
        yield "long", self._long
        yield "kind", nameof(self._kind)
        yield "count", self._count
        if self._has_default:
            yield "has_default", True
        if self._storage is not Unset:
            yield "value", self._storage


class KeyValue(collections.namedtuple("KeyValue", ("key", "value"))):
    """
    one consumed (long name, raw text) pair, in argv order.
    """
    __slots__ = ()

    def as_(self, kind=str, /, *, delimiter=","):
        """
        convert the raw text on demand.
        """
        return convert(self.value, kind, delimiter=delimiter)


class ParseResult(metaclass=RecordType):
    """
    Immutable outcome of one parse.

    Queries
    - count(name): occurrences; 0 for unknown names or options never given.
    - has(name) / name in result: count(name) != 0.
    - result[name] / get(name): the OptionValue; OptionNotPresentError for
      names that were never declared.
    - arguments: KeyValue pairs in the order they were consumed (defaults and
      environment values excluded).
    - unmatched: tokens no option or positional binding absorbed.
    - consumed: argv index where parsing stopped (len(argv) unless it stopped
      at a positional token or "--" in stop-on-positional mode).
    """
    __introspectable__ = ("arguments", "unmatched", "consumed")

    def __init__(self, keys, values, arguments, unmatched, consumed, /):
        self._keys = MappingProxyType(dict(keys))
        self._values = MappingProxyType(dict(values))
        self._arguments = list(arguments)
        self._unmatched = list(unmatched)
        self._consumed = consumed

    def count(self, name, /):
        try:
            return self._values[self._keys[name]].count
        except KeyError:
            return 0

    def has(self, name, /):
        return self.count(name) != 0

    def __contains__(self, name, /):
        return self.has(name)

    def __getitem__(self, name, /):
        try:
            return self._values[self._keys[name]]
        except KeyError:
            raise OptionNotPresentError("Option ‘%s’ not present" % name, option=name) from None

    def get(self, name, /):
        return self[name]


__all__ = (
    "OptionValue",
    "KeyValue",
    "ParseResult",
)
