"""
Ordered, name-keyed storage for argument definitions.

A Registry holds the definitions of a single kind (all subcommands, or all
flags) of one parser. Iteration follows insertion order, which is the order
flags are invoked in; lookup is by exact name equality.

Duplicates
- The registry itself does not decide whether duplicate names are allowed;
  the parser checks find() before add() and faults according to its policy.
- When a duplicate is stored anyway, the first registration keeps winning
  lookups and the later one is shadowed (kept for ordering/introspection only).
"""


class Registry:
    """
    Insertion-ordered collection of definitions with first-wins name lookup.

    Parameters
    - kind: str
      Human label of the stored definitions ("subcommand", "flag"), used in
      messages and representations.
    """

    def __init__(self, kind, /):
        if not isinstance(kind, str):
            raise TypeError("registry 'kind' must be a string")
        self._kind = kind
        self._entries = []
        self._lookup = {}

    @property
    def kind(self):
        return self._kind

    def add(self, definition, /):
        """
        Append a definition and return whichever definition now owns its name.

        The returned object is the definition itself unless an earlier entry
        already claimed the name, in which case that earlier entry is returned
        and the new one is shadowed.
        """
        if any(entry is definition for entry in self._entries):
            raise ValueError(f"{self._kind} {definition.name!r} is already registered")
        self._entries.append(definition)
        return self._lookup.setdefault(definition.name, definition)

    def find(self, name, /):
        """
        Return the first definition registered under 'name', or None.
        """
        return self._lookup.get(name)

    def index(self, definition, /):
        """
        Return the insertion position of 'definition' (identity based).
        """
        for index, entry in enumerate(self._entries):
            if entry is definition:
                return index
        raise ValueError(f"{self._kind} {getattr(definition, 'name', definition)!r} is not registered")

    def shadowed(self, definition, /):
        """
        Whether 'definition' is stored but unreachable by name lookup.
        """
        return self._lookup.get(definition.name) is not definition and any(
            entry is definition for entry in self._entries
        )

    def __getitem__(self, name, /):
        try:
            return self._lookup[name]
        except KeyError:
            raise KeyError(f"unknown {self._kind} {name!r}") from None

    def __contains__(self, item, /):
        if isinstance(item, str):
            return item in self._lookup
        return any(entry is item for entry in self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"registry(kind={self._kind!r}, names={[entry.name for entry in self._entries]!r})"

    def __rich_repr__(self):
        yield "kind", self._kind
        yield "names", [entry.name for entry in self._entries]


__all__ = (
    "Registry",
)
