"""
Per-parse context snapshot.

A Context is built exactly once at the end of every parse and handed to every
callback of that parse. It records which flags were active (references to the
registered Flag objects, in registration order) and which tokens matched
nothing (the overflow, in encounter order).

Contexts are immutable. A later parse builds a new one; a Context kept by a
caller never changes afterwards.
"""
from .arguments import Flag
from .utils import mirror


class Context:
    __slots__ = ("_flags", "_overflow")

    flags = mirror("flags")
    overflow = mirror("overflow")

    def __init__(self, flags=(), overflow=(), /):
        flags = tuple(flags)
        overflow = tuple(overflow)
        for flag in flags:
            if not isinstance(flag, Flag):
                raise TypeError("context 'flags' must contain flags")
        for token in overflow:
            if not isinstance(token, str):
                raise TypeError("context 'overflow' must contain strings")
        self._flags = flags
        self._overflow = overflow

    @property
    def names(self):
        """
        Names of the active flags, in registration order.
        """
        return tuple(flag.name for flag in self._flags)

    def __contains__(self, item, /):
        # Names compare by value, flags by identity.
        if isinstance(item, str):
            return item in self.names
        return any(flag is item for flag in self._flags)

    def __eq__(self, other):
        if not isinstance(other, Context):
            return NotImplemented
        return (
            len(self._flags) == len(other._flags) and
            all(a is b for a, b in zip(self._flags, other._flags)) and
            self._overflow == other._overflow
        )

    def __hash__(self):
        return hash((tuple(map(id, self._flags)), self._overflow))

    def __repr__(self):
        return f"context(flags={self.names!r}, overflow={self._overflow!r})"

    def __rich_repr__(self):
        yield "flags", self.names
        yield "overflow", self._overflow


__all__ = (
    "Context",
)
