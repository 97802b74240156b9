"""
Argfield parser layer: register definitions, scan tokens, dispatch handlers.

What this module provides
- Parser: owns two registries (subcommands and flags), walks a token stream
  once, selects the active subcommand, collects flags and overflow, builds the
  Context and invokes the handlers.
- invoke(obj, prompt): convenience runner for anything implementing __invoke__.

Scanning rules (one left-to-right pass)
- A token naming a registered flag marks that flag as passed (once per parse;
  repeats are no-ops). Flags are tested before subcommands.
- Otherwise a token naming a registered subcommand is accepted when no
  subcommand is locked yet, or when disable_lock is set (then the last match
  wins and earlier captures are dropped). The accepted subcommand captures
  'takes' following tokens, or all remaining tokens when 'takes' < 1 or when
  fewer than 'takes' remain. Captured tokens are never scanned.
- Any other token, including a subcommand name met while the lock holds,
  goes to the overflow.

Dispatch
- The Context is built from the passed flags (registration order) and the
  overflow, published on the parser, then every passed flag runs with the
  Context, then the matched subcommand runs with (Context, values).
- Callback errors propagate to the caller of parse() untouched.

Quick start
    from argfield import Parser

    parser = Parser(disable_lock=True)

    @parser.subcommand("say", takes=3)
    def say(context, values):
        print(*values, sep="\\n")

    @parser.flag("-kill")
    def kill(context):
        print("kill all humanz!")

    if __name__ == "__main__":
        parser.parse(sys.argv, index=1)
"""
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .arguments import Subcommand, Flag
from .context import Context
from .faults import *
from .registry import Registry
from .utils import *


class _Scan:
    """
    Mutable state of a single parse call.

    Lives only inside parse() until the pass completes, then it is published as
    the parser's latest result. Registered definitions are never mutated.
    """
    __slots__ = ("matched", "values", "flags", "overflow")

    def __init__(self):
        self.matched = None
        self.values = ()
        self.flags = {}  # Ordered set of passed flags (first encounter wins).
        self.overflow = []


def _resolve(object, hook, cls, /):
    """
    Return the definition 'object' resolves to through its '__subcommand__'/'__flag__' hook.

    Returns Unset when the object has no such hook. The hook must return an
    instance of 'cls'.
    """
    if not (hasattr(object, hook) and callable(getattr(object, hook))):
        return Unset
    definition = getattr(object, hook)()
    if not isinstance(definition, cls):
        raise TypeError(f"{hook}() returned non-{cls.__typename__}")
    return definition


class Parser:
    """
    Subcommand-based argument parser.

    Responsibilities
    - Registration: add_subcommand/add_flag (or the decorator forms) store
      definitions in insertion order; names are unique per kind when strict.
    - Scanning: parse() walks the tokens once and is total over any input.
    - Dispatch: flags first (registration order), then the subcommand.
    - Read-back: context, matched, passed(), values() reflect the latest parse.

    Runtime options
    - name: program label used when rendering faults (defaults to argv[0]).
    - disable_lock: when True, every subcommand match replaces the previous one.
    - strict: when True, duplicate names are rejected with DuplicateNameError;
      when False, they are stored shadowed and a ShadowedNameWarning is surfaced.
    - shell: render faults with rich (and exit on errors) instead of raising.
    - fancy: render faults inside a panel.
    - colorful: colorize rendered faults.
    """

    name = mirror("name")
    strict = mirror("strict")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(
            self,
            *definitions,
            name=Unset,
            disable_lock=False,
            strict=True,
            shell=False,
            fancy=False,
            colorful=True,
    ):
        if not isinstance(name, str | Unset):
            raise TypeError("parser 'name' must be a string")
        elif isinstance(name, str) and not name:
            raise ValueError("parser 'name' cannot be empty")

        self._name = coalesce(name, os.path.basename(sys.argv[0] if sys.argv else "") or "argfield")
        self._strict = bool(strict)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self.disable_lock = bool(disable_lock)

        self._subcommands = Registry("subcommand")
        self._flags = Registry("flag")

        self._scan = _Scan()
        self._context = Context()

        for object in definitions:
            if sum((
                hasattr(object, "__subcommand__") and callable(object.__subcommand__),
                hasattr(object, "__flag__") and callable(object.__flag__),
            )) != 1:
                raise TypeError("parser() arguments must be subcommand- or flag-resoluble")
            elif hasattr(object, "__subcommand__"):
                self.add_subcommand(object)
            else:
                self.add_flag(object)

    @property
    def subcommands(self):
        """
        Registered subcommands, in registration order.
        """
        return tuple(self._subcommands)

    @property
    def flags(self):
        """
        Registered flags, in registration order (the order they are invoked in).
        """
        return tuple(self._flags)

    @property
    def context(self):
        """
        Context produced by the latest parse (empty before the first one).
        """
        return self._context

    @property
    def matched(self):
        """
        Subcommand matched by the latest parse, or None.
        """
        return self._scan.matched

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's runtime options merged in.
        """
        trigger(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _register(self, definition, registry, duplicate, shadowed):
        """
        Attach a definition to one of the registries, enforcing ownership and the duplicate policy.

        Behavior
        - A definition belongs to exactly one parser; re-registration raises ValueError.
        - A name collision triggers DuplicateNameError in strict mode, before anything
          is stored. Otherwise the new definition is stored and, being shadowed by
          the earlier registration, a ShadowedNameWarning is triggered.
        """
        if definition._parser is not Unset:
            where = "this" if definition._parser is self else "another"
            raise ValueError(f"{registry.kind} {definition.name!r} is already registered on {where} parser")

        if self.strict and (existing := registry.find(definition.name)) is not None:
            self.trigger(DuplicateNameError(
                "%s name %r is already in use" % (registry.kind, definition.name),
                title="duplicate %s" % registry.kind,
                code=duplicate,
                name=definition.name,
                definition=definition,
                existing=existing,
                hint="pick another name or pass strict=False to let the first registration shadow it",
                docs=getdoc(duplicate),
            ))

        existing = registry.add(definition)
        definition._parser = self

        if registry.shadowed(definition):
            self.trigger(ShadowedNameWarning(
                "%s name %r is shadowed by an earlier registration" % (registry.kind, definition.name),
                title="shadowed %s" % registry.kind,
                code=shadowed,
                name=definition.name,
                definition=definition,
                existing=existing,
                position=registry.index(definition),
                hint="the first %s registered as %r keeps matching" % (registry.kind, definition.name),
                docs=getdoc(shadowed),
            ))
        return definition

    def add_subcommand(self, source, /, callback=Unset, takes=-1):
        """
        Register a subcommand and return it.

        Forms
        - add_subcommand(name, callback=..., takes=...): build and register.
        - add_subcommand(Subcommand(...)): register a prebuilt definition, or any
          object whose __subcommand__() returns one.
        """
        if (definition := _resolve(source, "__subcommand__", Subcommand)) is not Unset:
            if callback is not Unset or takes != -1:
                raise TypeError("add_subcommand() takes no options when given a subcommand")
        else:
            definition = Subcommand(source, callback, takes)
        return self._register(
            definition,
            self._subcommands,
            FaultCode.DUPLICATE_SUBCOMMAND,
            FaultCode.SHADOWED_SUBCOMMAND,
        )

    def add_flag(self, source, /, callback=Unset):
        """
        Register a flag and return it.

        Forms
        - add_flag(name, callback=...): build and register.
        - add_flag(Flag(...)): register a prebuilt definition, or any object whose
          __flag__() returns one.
        """
        if (definition := _resolve(source, "__flag__", Flag)) is not Unset:
            if callback is not Unset:
                raise TypeError("add_flag() takes no options when given a flag")
        else:
            definition = Flag(source, callback)
        return self._register(
            definition,
            self._flags,
            FaultCode.DUPLICATE_FLAG,
            FaultCode.SHADOWED_FLAG,
        )

    def subcommand(self, name, /, takes=-1):
        """
        Decorator form of add_subcommand: @parser.subcommand("say", takes=3).
        """
        @rename("subcommand")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError("@subcommand() must be applied to a callable")
            return self.add_subcommand(name, callback, takes)
        return wrapper

    def flag(self, name, /):
        """
        Decorator form of add_flag: @parser.flag("-kill").
        """
        @rename("flag")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError("@flag() must be applied to a callable")
            return self.add_flag(name, callback)
        return wrapper

    def find_subcommand(self, name, /):
        return self._subcommands.find(name)

    def find_flag(self, name, /):
        return self._flags.find(name)

    def passed(self, target, /):
        """
        Whether a flag or subcommand was passed in the latest parse.

        'target' is a definition or a name. Names are resolved like tokens are:
        flags first, then subcommands. A subcommand counts as passed only when it
        is the final match (earlier matches discarded under disable_lock do not).
        """
        if isinstance(target, str):
            target = self.find_flag(target) or self.find_subcommand(target)
            if target is None:
                return False
        if isinstance(target, Flag):
            return target in self._scan.flags
        if isinstance(target, Subcommand):
            return self._scan.matched is target
        raise TypeError("passed() argument must be a name, a subcommand or a flag")

    def values(self, target, /):
        """
        Values captured by a subcommand (definition or name) in the latest parse.

        Returns () when the subcommand is unknown or was not the final match.
        """
        if isinstance(target, str):
            target = self.find_subcommand(target)
        elif not isinstance(target, Subcommand):
            raise TypeError("values() argument must be a name or a subcommand")
        if target is None or self._scan.matched is not target:
            return ()
        return self._scan.values

    def _consume(self, subcommand, tokens):
        """
        Take the value span of a freshly matched subcommand off the token queue.

        - fixed arity with enough input: exactly 'takes' tokens.
        - greedy arity, or fewer tokens than 'takes' left: everything left.
        """
        if subcommand.takes >= 1 and len(tokens) >= subcommand.takes:
            return tuple(tokens.popleft() for _ in range(subcommand.takes))
        values = tuple(tokens)
        tokens.clear()
        return values

    def parse(self, tokens, /, *, index=0):
        """
        scan argv-like tokens, build the context, then dispatch handlers.

        phases
        - setup
          • validate tokens (strings only) and skip the first 'index' of them
            (index=1 skips the program name of a raw sys.argv).
          • start a fresh per-parse scan state.
        - loop (scanning)
          • flag match: record once, move on.
          • subcommand match (unlocked, or disable_lock): become the active
            subcommand and consume its value span (see _consume).
          • anything else: overflow.
        - post-scan
          • build the Context (passed flags in registration order + overflow).
          • publish scan and Context on the parser.
          • run passed flags, then the matched subcommand.

        invariants
        - every token after 'index' is visited exactly once: as a flag, a subcommand
          name, a captured value or an overflow value.
        - the pass always reaches end of input; parse() never faults on its own.

        returns
        - the matched Subcommand, or None.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError("parse() 'index' must be an integer")
        if index < 0:
            raise ValueError("parse() 'index' cannot be negative")

        tokens = deque(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be an iterable of strings")
        for _ in range(min(index, len(tokens))):
            tokens.popleft()

        scan = _Scan()
        while tokens:
            token = tokens.popleft()

            if (flag := self._flags.find(token)) is not None:
                # Repeated flags are no-ops; the first encounter is kept.
                scan.flags.setdefault(flag, None)
                continue

            subcommand = self._subcommands.find(token)
            if subcommand is not None and (scan.matched is None or self.disable_lock):
                # Last match wins when unlocked; earlier captures are dropped here.
                scan.matched = subcommand
                scan.values = self._consume(subcommand, tokens)
                continue

            scan.overflow.append(token)

        context = Context((flag for flag in self._flags if flag in scan.flags), scan.overflow)
        self._scan = scan
        self._context = context

        for flag in context.flags:
            flag(context)
        if scan.matched is not None:
            scan.matched(context, scan.values)

        return scan.matched

    def __invoke__(self, prompt=Unset):
        """
        Parse a prompt and return the matched subcommand.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used verbatim.

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        return self.parse(tokens)

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self.name
        yield "subcommands", tuple(subcommand.name for subcommand in self._subcommands)
        yield "flags", tuple(flag.name for flag in self._flags)
        yield "disable_lock", self.disable_lock
        yield "strict", self.strict


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for parsers.

    Parameters
    - object: an instance providing __invoke__(prompt).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    Returns
    - whatever __invoke__ returns (the matched subcommand for a Parser).

    Raises
    - TypeError: when 'object' does not implement __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Parser",
    "invoke",
)
