r"""
Argfield argument definitions and decorators.

Overview
- Definitions
  • Subcommand: named, value-capturing token (e.g., "say"). When matched it
    captures the following tokens according to its arity policy ('takes').
  • Flag: named, presence-only token (e.g., "-kill"). No payload; its presence
    is the signal.

- Decorators
  • @subcommand(...): build a Subcommand and bind a handler function to it.
  • @flag(...): build a Flag and bind a handler function to it.
  Each decorator returns the configured definition whose __call__ forwards to
  the bound handler (or no-ops when nothing was bound).

Arity policy ('takes')
- takes >= 1: capture exactly that many following tokens, or everything that
  is left when the input ends first (never an error).
- takes < 1 (default -1): greedy, capture every following token to end of input,
  including tokens that would otherwise match other flags or subcommands.

Names
- Exact strings. A leading dash is part of the name, not syntax: "-kill" and
  "kill" are different names. Names must be non-empty; nothing is stripped.

Parse state
- Definitions do not store parse results. 'passed' and 'values' are read from
  the latest parse of the parser the definition is registered on; unregistered
  definitions report passed=False and values=().

Quick example:
    >>> from argfield import subcommand, flag, Parser
    >>> @subcommand("say", takes=3)
    >>> def say(context, values): ...
    ...
    >>> @flag("-kill")
    >>> def kill(context): ...
    ...
    >>> Parser(say, kill).parse(["-kill", "say", "a", "b", "c"])

Public API
- Classes: Subcommand, Flag
- Decorators: subcommand, flag
"""
import functools
import operator
import re

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns definitions into introspectable objects.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages and representations.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - subcommand(name='say', takes=3, callback=<function say ...>)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate metadata shared by Subcommand and Flag.

    - name: required non-empty string. It is kept verbatim (no trimming, no dash
      normalization) because matching is exact string equality.
    - callback: Unset or a callable.

    Raises
    - TypeError: when name is not a string or callback is not callable.
    - ValueError: when name is the empty string.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

    if (callback := metadata["callback"]) is not Unset and not callable(callback):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")


def _sanitize_arity_metadata(cls, metadata, /):
    """
    Internal: validate the arity policy of a Subcommand.

    - takes: any integer; values below 1 select the greedy policy. Booleans are
      rejected even though they are integers, to catch takes=True typos.
    """
    if isinstance(takes := metadata["takes"], bool) or not isinstance(takes, int):
        raise TypeError(f"{cls.__typename__} 'takes' must be an integer")


class Subcommand(metaclass=ArgumentType):
    """
    Named, value-capturing definition.

    At most one subcommand is active per parse. When the scanner matches its
    name, the subcommand captures following tokens according to 'takes' and,
    after all flags ran, its callback is invoked as callback(context, values).

    Properties
    - name, takes: read-only mirrors of the sanitized metadata.
    - callback: the bound handler, or None.
    - greedy: True when 'takes' selects the capture-to-end policy.
    - passed / values: results of the latest parse of the owning parser.
    """

    __introspectable__ = (
        "name",
        "takes",
    )

    __displayable__ = (
        "name",
        "takes",
        "callback",
    )

    def __init__(self, name, /, callback=Unset, takes=-1):
        """
        Construct a Subcommand definition.

        Parameters
        - name: str
          Exact token that selects this subcommand.
        - callback: Unset | Callable[[Context, tuple[str, ...]], Any]
          Handler invoked with the parse context and the captured values.
          When Unset, invocation is a no-op.
        - takes: int
          Arity policy; see module docs. Defaults to -1 (greedy).
        """
        metadata = {
            "name": name,
            "callback": callback,
            "takes": takes,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_arity_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._parser = Unset  # Bound on registration.

    @property
    def callback(self):
        return coalesce(self._callback)

    @property
    def greedy(self):
        return self._takes < 1

    @property
    def passed(self):
        """
        Whether this subcommand was the final match of the owning parser's latest parse.
        """
        return self._parser is not Unset and self._parser.passed(self)

    @property
    def values(self):
        """
        Values captured by the latest parse, or () when this subcommand did not match.
        """
        if self._parser is Unset:
            return ()
        return self._parser.values(self)

    def __call__(self, context, values, /):
        """
        Invoke the callback with (context, values).

        A single str is accepted as shorthand for a one-value tuple.
        """
        if isinstance(values, str):
            values = (values,)
        # No callback bound: matching still counts, invocation is a no-op.
        if self._callback is Unset:
            return
        return self._callback(context, values)

    def __subcommand__(self):
        """
        Introspection hook: identify this definition as a Subcommand.
        """
        return self


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only definition.

    Any number of flags can be active per parse; each one is recorded once no
    matter how often its token appears. Active flags run before the subcommand,
    in registration order, as callback(context).
    """

    __introspectable__ = (
        "name",
    )

    __displayable__ = (
        "name",
        "callback",
    )

    def __init__(self, name, /, callback=Unset):
        """
        Construct a Flag definition.

        Parameters
        - name: str
          Exact token that activates this flag (include any leading dash).
        - callback: Unset | Callable[[Context], Any]
          Handler invoked with the parse context. When Unset, invocation is a no-op.
        """
        metadata = {
            "name": name,
            "callback": callback,
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._parser = Unset  # Bound on registration.

    @property
    def callback(self):
        return coalesce(self._callback)

    @property
    def passed(self):
        """
        Whether this flag was active in the owning parser's latest parse.
        """
        return self._parser is not Unset and self._parser.passed(self)

    def __call__(self, context, /):
        if self._callback is Unset:
            return
        return self._callback(context)

    def __flag__(self):
        """
        Introspection hook: identify this definition as a Flag.
        """
        return self


def subcommand(*args, **kwargs):
    """
    Decorator/factory for defining a subcommand handler.

    Usage
        @subcommand("say", takes=3)
        def say(context, values): ...

    Behavior
    - Validates that it decorates a callable and enforces single application.
    - Binds the provided function as the Subcommand's callback.
    - Returns the configured (still unregistered) Subcommand.
    """
    subcommand = Subcommand(*args, **kwargs)

    @rename("subcommand")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@subcommand() must be applied to a callable")
        if subcommand._callback is not Unset:
            raise TypeError("@subcommand() must be applied only once")
        subcommand._callback = callback
        return subcommand

    return wrapper


def flag(*args, **kwargs):
    """
    Decorator/factory for defining a flag handler.

    Usage
        @flag("-kill")
        def kill(context): ...

    Behavior
    - Validates that it decorates a callable and enforces single application.
    - Binds the provided function as the Flag's callback.
    - Returns the configured (still unregistered) Flag.
    """
    flag = Flag(*args, **kwargs)

    @rename("flag")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@flag() must be applied to a callable")
        if flag._callback is not Unset:
            raise TypeError("@flag() must be applied only once")
        flag._callback = callback
        return flag

    return wrapper


__all__ = (
    # Classes (definitions)
    "Subcommand",
    "Flag",

    # Decorators (user-facing helpers to bind handlers)
    "subcommand",
    "flag",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
