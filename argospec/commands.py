"""
Argospec command layer: declare commands, compose them, inspect the result.

What this module provides
- command(...): class decorator recording the command-level attributes of a
  class (name, version, headings, ...). Bare @command works too.
- CommandSpec: the composed, read-only specification of one command:
  • merged options and positionals (own members and every mixin's, in
    declaration order), with an identifier → option map;
  • resolved command attributes, each from its nearest declaring source;
  • mixin registry (name → binding) and subcommand registry (name → spec);
  • help payload helpers (synopsis, sections, usage, print_help).
- build(receiver, ...): functional spelling of CommandSpec(receiver, ...).

Quick start
    from argospec import command, Option, Positional, Mixin, build

    class Verbosity:
        verbose = Option("-v", "--verbose", type=bool, descr="talk more")

    @command(name="tool", version="tool 1.0")
    class Tool:
        output = Option("-o", "--output", descr="where to write")
        logging = Mixin(Verbosity)
        files = Positional(nargs="*", descr="inputs")

    spec = build(Tool)
    spec.options_map["-v"].site        # 'Verbosity.verbose'
    spec.lookup_mixin("logging")       # the Verbosity instance on spec.object
    print(spec.usage())

Design notes
- A failed composition never yields a spec: faults are raised (or, with
  shell=True, rendered and the process exits).
- Specs are read-only after composition; add_mixin() is the only mutation and
  it is all-or-nothing.
"""
import re

from .attributes import DEFAULTS, FIELDS, AttributeSet
from .composition import compose, attach
from .faults import *
from .sources import ClassSource
from .usage import synopsis, sections, usage_string, print_help
from .utils import *

DEFAULT_LIMIT = 64


def _attribute(name, /):
    """
    Read-only property returning the effective value of a command attribute.
    """
    @rename(name)
    def getter(self):
        return coalesce(self._attributes[name], DEFAULTS[name])

    return property(getter, doc=f"effective {name!r} (declared, inherited, mixed in, or default)")


class CommandType(type):
    """
    Metaclass for command specifications.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property over its
      "_<name>" field (see mirror()).
    - Expose every command attribute in __attributes__ as a read-only property
      returning its effective value, unless the class body defines it.
    - Provide stable __repr__/__rich_repr__ (restricted to __displayable__).
    """
    __introspectable__ = ()
    __attributes__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: _attribute(name) for name in namespace.get("__attributes__", ()) if name not in namespace
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(f"{name}={object!r}" for name, object in self.__rich_repr__())
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _surface(fault, options, /):
    """
    Route a composition fault according to the runtime options of the build.
    """
    if not options.get("shell", False):
        raise fault
    trigger(fault, **options)
    raise RuntimeError("unreachable")


def _guarded(function, limit, /, *args, **kwargs):
    """
    Run a composition step, turning interpreter recursion exhaustion into a
    composition cycle fault.
    """
    try:
        return function(*args, **kwargs)
    except RecursionError:
        raise CompositionCycleError(
            "composition exhausted the interpreter recursion limit",
            chain=(),
            limit=limit,
        ) from None


class CommandSpec(metaclass=CommandType):
    """
    Composed specification of one command.

    Construction
    - CommandSpec(receiver, *, source=Unset, limit=Unset, shell=False,
      fancy=False, colorful=False)
      • receiver: the user object (a class is instantiated first).
      • source: element source, ClassSource() by default (see argospec.sources).
      • limit: maximum mixin/subcommand nesting depth (64 by default).
      • shell/fancy/colorful: when shell is True a composition fault is
        rendered to stderr (in a panel when fancy, styled when colorful) and
        the process exits with status 1; otherwise it is raised.

    Command attributes
    - Every attribute in argospec.attributes.FIELDS is a read-only property
      returning the effective value; spec.attributes keeps the resolved set
      with Unset for undeclared fields; spec.origin(name) names the site that
      supplied a value (None when the default applies).
    - version: the provider's lines when a version_provider is in effect.

    Structure
    - object, parent, root, path, qualified_name
    - options, positionals, options_map, posix_options_map, mixins, subcommands
    """

    __introspectable__ = (
        "parent",
        "options",
        "positionals",
        "options_map",
        "posix_options_map",
        "mixins",
        "subcommands",
    )

    __attributes__ = FIELDS

    __displayable__ = (
        "name",
        "options",
        "positionals",
        "mixins",
        "subcommands",
    )

    _shell = False
    _fancy = False
    _colorful = False

    def __new__(
            cls,
            receiver,
            /,
            *,
            source=Unset,
            limit=Unset,
            shell=False,
            fancy=False,
            colorful=False,
    ):
        source = coalesce(source, ClassSource())
        limit = coalesce(limit, DEFAULT_LIMIT)
        if not all(callable(getattr(source, name, None)) for name in ("attributes", "members")):
            raise TypeError(f"{cls.__typename__} 'source' must provide attributes() and members() methods")
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise TypeError(f"{cls.__typename__} 'limit' must be an integer")
        elif limit < 1:
            raise ValueError(f"{cls.__typename__} 'limit' must be a positive integer")

        options = dict(shell=bool(shell), fancy=bool(fancy), colorful=bool(colorful))
        try:
            self = _guarded(compose, limit, cls, receiver, source=source, limit=limit)
        except CompositionError as fault:
            _surface(fault, options)
        self._shell = options["shell"]
        self._fancy = options["fancy"]
        self._colorful = options["colorful"]
        return self

    # ── Structure ─────────────────────────────────────────────────────────

    @property
    def object(self):
        """
        The user object this spec was composed from.
        """
        return self._object

    @property
    def attributes(self):
        """
        Resolved attribute set (Unset for every field nothing declared).
        """
        return self._attributes

    @property
    def root(self):
        """
        Return the topmost spec of the subcommand hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from the root down to this spec as a tuple.
        """
        path = [spec := self]
        while spec.parent:
            path.append(spec := spec.parent)
        return tuple(reversed(path))

    @property
    def qualified_name(self):
        """
        Space-separated route from the root, e.g. "git remote add".

        Each subcommand contributes the name it is registered under.
        """
        return " ".join(coalesce(spec._label, spec.name) for spec in self.path)

    def origin(self, name, /):
        """
        Return the declaration site that supplied attribute `name`, or None
        when its built-in default applies.
        """
        if name not in DEFAULTS:
            raise KeyError(name)
        return self._attributes.origin(name)

    @property
    def version(self):
        """
        Version lines: the version provider's output when one is in effect,
        otherwise the declared (or default) version.

        A provider wins over a plain version even when the provider comes
        from a mixin and the version from the receiver itself.
        """
        if (provider := coalesce(self._attributes["version_provider"])) is not None:
            lines = provider()
            if isinstance(lines, str):
                return (lines,)
            lines = tuple(lines)
            if not all(isinstance(line, str) for line in lines):
                raise TypeError(f"{self.name} version provider must return strings")
            return lines
        return coalesce(self._attributes["version"], DEFAULTS["version"])

    # ── Registries ────────────────────────────────────────────────────────

    def add_mixin(self, name, object, /):
        """
        Attach a mixin to this already composed spec.

        The mixin's options and positionals are appended after every existing
        element, its attributes fill whatever is still unset, and its
        subcommands are attached here. Duplicate identifiers or names fail and
        leave the spec untouched.

        Returns this spec, so calls can be chained.
        """
        options = dict(shell=self.root._shell, fancy=self.root._fancy, colorful=self.root._colorful)
        try:
            _guarded(attach, self._limit, self, name, object)
        except CompositionError as fault:
            _surface(fault, options)
        return self

    def lookup_mixin(self, name, /):
        """
        Return the user object registered as mixin `name`, or None.
        """
        if (binding := self._mixins.get(name)) is None:
            return None
        return binding.object

    def lookup_subcommand(self, name, /):
        """
        Return the subcommand spec registered under `name`, or None.
        """
        return self._subcommands.get(name)

    # ── Help ──────────────────────────────────────────────────────────────

    def synopsis(self, *, width=80):
        return synopsis(self, width=width)

    def sections(self, *, width=80):
        return sections(self, width=width)

    def usage(self, *, width=80):
        """
        Return the plain help text (see argospec.usage.usage_string).
        """
        return usage_string(self, width=width)

    def print_help(self, *, fancy=Unset, colorful=Unset, width=None, console=None):
        """
        Print the help text through rich, honoring the spec's runtime options
        unless overridden.
        """
        print_help(
            self,
            fancy=coalesce(fancy, self.root._fancy),
            colorful=coalesce(colorful, self.root._colorful),
            width=width,
            console=console,
        )


def command(source=Unset, /, **attributes):
    """
    Record command-level attributes on a class.

    Invocation modes
    - Bare decorator:
        @command
        class Tool: ...
    - Decorator factory:
        @command(name="tool", version="tool 1.0", subcommands=[Status])
        class Tool: ...

    Parameters
    - attributes: any of argospec.attributes.FIELDS, plus 'subcommands' (an
      iterable of classes or factories attached as subcommands).

    Raises
    - TypeError when applied to a non-class or given an unknown attribute.
    - MalformedAttributeError when a value is outside its domain.
    """
    @rename("command")
    def wrapper(source, /):
        if not isinstance(source, type):
            raise TypeError("@command() must be applied to a class")
        source.__command__ = AttributeSet(source.__qualname__, **attributes)
        return source

    return wrapper(source) if source is not Unset else wrapper


def build(receiver, /, **options):
    """
    Compose `receiver` into a CommandSpec (same keywords as CommandSpec).
    """
    return CommandSpec(receiver, **options)


__all__ = (
    "CommandSpec",
    "command",
    "build",
)

del CommandType
