"""
Optkit utilities shared by the registry, the parser and the result layer.

Overview
- UnsetType / Unset
  • Singleton sentinel meaning “not provided”, distinct from None, "" and 0.
  • Default texts, implicit texts and lazily materialized storages all start as Unset.

- coalesce(value, default=None)
  • Materialize Unset into a concrete fallback while keeping every other value.

- rename(callable, name) / @rename("name")
  • Give generated callables (decorators, adders) a stable __name__ for tracebacks.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are
    handed out as fresh copies so callers cannot edit registry or result state.

Quick examples
    >>> coalesce(Unset, ",")
    ','
    >>> coalesce("", ",")
    ''
    >>> class Slot:
    ...     _values = [1, 2]
    ...     values = mirror("values")
    >>> Slot().values
    [1, 2]
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for “no value was provided”.

    Optkit needs this because the empty string is a meaningful default text
    (an option may default to ""), so neither None nor "" can mark absence.

    Characteristics
    - Falsey, printable as "Unset", sealed against subclassing.
    - UnsetType() always returns the same instance.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values such as "", 0 or [] are kept; only the sentinel is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator

    Raises
    - TypeError: wrong arity, non-callable target, non-string name, or a
      callable whose name attributes are read-only.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Recursively copy containers so the caller receives storage it may mutate freely.

    Strings, tuples of names and scalars are returned unchanged; lists, mappings
    and sets are rebuilt level by level.
    """
    if isinstance(object, list):
        return list(map(_detach, object))
    if isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    if isinstance(object, Set) and not isinstance(object, frozenset):
        return set(map(_detach, object))
    if isinstance(object, Sequence) and not isinstance(object, str | tuple):
        return list(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property exposing self._{name}.

    Container values are detached copies, everything else is returned as is.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


class RecordType(type):
    """
    Metaclass for read-only records (descriptors, help metadata, option values).

    Responsibilities
    - Publish every name listed in __introspectable__ as mirror(name).
    - Derive __typename__ from the class name (OptionDetails -> option-details).
    - Provide __repr__/__rich_repr__ unless the class defines its own; the
      fields shown come from __displayable__ when set, else __introspectable__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return f"{type(self).__typename__}({
                    ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
                })"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield field, getattr(self, field)
            self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "RecordType",
)
