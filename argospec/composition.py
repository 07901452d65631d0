"""
Argospec composition engine: from declarations to one merged CommandSpec.

Pipeline (per command node)
1. Walk the receiver's declared members in order. Options and positionals
   become element specs bound to the receiver; each mixin slot is composed
   recursively (exactly like a top-level receiver), registered by name and
   kept in the member stream at its position; each subcommand slot is
   composed as a child node.
2. Resolve attributes: own class → superclasses (nearest first) → mixins in
   declaration order (see attributes.resolve).
3. Collect elements: flatten the member stream, splicing every mixin's
   already-flattened options/positionals in at the slot position.
4. Validate: option identifiers must be disjoint across the merged node; the
   single-character short options are also indexed by their character.

The same collector and validator run again, for the affected node only, when
a mixin is attached late through CommandSpec.add_mixin(); the late mixin
behaves as if it were declared after every existing member.

Nothing here keeps global state: mixin and subcommand registries live on the
node that owns them.
"""
import copy
import logging

from .faults import (
    CompositionCycleError,
    DuplicateMixinError,
    DuplicateOptionError,
    DuplicateSubcommandError,
    MalformedAttributeError,
)
from .attributes import resolve
from .elements import OptionSpec, PositionalSpec, MixinBinding
from .sources import MemberKind
from .utils import Unset

logger = logging.getLogger(__name__)


def _obtain(receiver, member):
    """
    Return the object living in a mixin/subcommand slot of the receiver.

    An object the user already placed on the instance wins; otherwise (slot
    absent or None) the slot's source is called and the result is stored on
    the receiver so the user can reach it through the attribute afterwards.
    """
    if (object := getattr(receiver, "__dict__", {}).get(member.name)) is not None:
        return object
    object = member.declaration.create()
    setattr(receiver, member.name, object)
    return object


def _instantiate(attributes):
    """
    Instantiate a version provider given as a class (once per composition).
    """
    if isinstance(provider := attributes["version_provider"], type):
        return copy.replace(attributes, version_provider=provider())
    return attributes


def _register(mixins, binding, site):
    if binding.name in mixins:
        raise DuplicateMixinError(
            f"mixin name {binding.name!r} is already registered on {site}",
            name=binding.name,
            site=site,
        )
    mixins[binding.name] = binding
    logger.debug("registered mixin %r on %s", binding.name, site)


def _mount(subcommands, name, child, site):
    if name in subcommands and subcommands[name] is not child:
        raise DuplicateSubcommandError(
            f"subcommand name {name!r} is already in use on {site}",
            name=name,
            site=site,
        )
    subcommands[name] = child
    child._label = name
    logger.debug("attached subcommand %r to %s", name, site)


def _subcommand(cls, self, target, name, site, **options):
    """
    Compose a subcommand under self and return (name, child).
    """
    child = compose(cls, target, parent=self, **options)
    if (name := name or child.attributes["name"]) is Unset:
        raise MalformedAttributeError(
            f"{site} subcommand {type(child.object).__qualname__} must declare a name",
            attribute="name",
            value=Unset,
            site=site,
        )
    return name, child


def collect(entries):
    """
    Element Collector: flatten a member stream into (options, positionals).

    Entries are OptionSpec, PositionalSpec or MixinBinding items in
    declaration order; a binding contributes its spec's flattened elements
    at its own position.
    """
    options = []
    positionals = []
    for entry in entries:
        match entry.kind:
            case MemberKind.OPTION:
                options.append(entry)
            case MemberKind.POSITIONAL:
                positionals.append(entry)
            case MemberKind.MIXIN:
                options.extend(entry.spec.options)
                positionals.extend(entry.spec.positionals)
    return tuple(options), tuple(positionals)


def trace(entries, owner, /):
    """
    Map every collected option to its route from `owner`.

    An option declared on the owner is reached through its own site; one
    brought in by a mixin is prefixed with the mixin slot, e.g.
    "Tool.logging → Verbosity.verbose", so two slots sharing a mixin class
    stay distinguishable.
    """
    routes = {}
    for entry in entries:
        match entry.kind:
            case MemberKind.OPTION:
                routes[entry] = entry.site
            case MemberKind.MIXIN:
                for option in entry.spec.options:
                    routes[option] = f"{owner}.{entry.name} → {entry.spec._routes.get(option, option.site)}"
    return routes


def validate(options, /, routes=None):
    """
    Duplicate Validator: map every identifier to its option, failing on the
    first identifier claimed twice (in option-sequence order).

    Returns (identifiers, posix) where posix maps the character of every
    single-character short option ("-v" → "v") to its option.
    """
    routes = routes or {}
    identifiers = {}
    for option in options:
        for identifier in option.names:
            if (other := identifiers.setdefault(identifier, option)) is not option:
                first, second = routes.get(other, other.site), routes.get(option, option.site)
                raise DuplicateOptionError(
                    f"option name {identifier!r} is used by both {first} and {second}",
                    identifier=identifier,
                    sites=(other.site, option.site),
                    routes=(first, second),
                )
    posix = {
        identifier[1]: option
        for identifier, option in identifiers.items()
        if len(identifier) == 2 and not identifier.startswith("--")
    }
    return identifiers, posix


def compose(cls, receiver, /, *, parent=None, source, limit, chain=()):
    """
    Mixin Graph Walker + Specification Assembler for one node.

    Parameters
    - cls: the CommandSpec class to instantiate.
    - receiver: the user object (a class is instantiated first).
    - parent: the owning CommandSpec for subcommands, None otherwise.
    - source: the element source (see argospec.sources).
    - limit: maximum nesting depth before failing with CompositionCycleError.
    - chain: qualnames of the nodes being composed above this one.
    """
    if isinstance(receiver, type):
        receiver = receiver()
    kind = type(receiver)

    if len(chain := (*chain, kind.__qualname__)) > limit:
        raise CompositionCycleError(
            f"composition nests deeper than {limit} levels: {" → ".join(chain[:8])} → ...",
            chain=chain,
            limit=limit,
        )
    logger.debug("composing %s (depth %d)", kind.__qualname__, len(chain))

    self = object.__new__(cls)
    self._object = receiver
    self._parent = parent
    self._source = source
    self._limit = limit
    self._chain = chain
    self._label = Unset

    options = dict(source=source, limit=limit, chain=chain)
    declared = source.attributes(kind)
    entries = []
    mixins = {}
    subcommands = {}
    contributions = []

    for attributes in declared:
        for target in attributes.subcommands:
            name, child = _subcommand(cls, self, target, Unset, attributes.site, **options)
            _mount(subcommands, name, child, kind.__qualname__)

    for index, member in enumerate(source.members(kind)):
        match member.kind:
            case MemberKind.OPTION:
                entries.append(OptionSpec(member, receiver, index))
            case MemberKind.POSITIONAL:
                entries.append(PositionalSpec(member, receiver, index))
            case MemberKind.MIXIN:
                mixin = _obtain(receiver, member)
                spec = compose(cls, mixin, **options)
                binding = MixinBinding(member.declaration.name or member.name, spec, mixin)
                _register(mixins, binding, kind.__qualname__)
                entries.append(binding)
                contributions.append(spec.attributes)
                for name, child in spec.subcommands.items():
                    _mount(subcommands, name, child, kind.__qualname__)
            case MemberKind.SUBCOMMAND:
                target = _obtain(receiver, member)
                name, child = _subcommand(cls, self, target, member.declaration.name, member.site, **options)
                _mount(subcommands, name, child, kind.__qualname__)

    self._attributes = _instantiate(resolve(declared, contributions))
    self._entries = entries
    self._options, self._positionals = collect(entries)
    self._routes = trace(entries, kind.__qualname__)
    self._options_map, self._posix_options_map = validate(self._options, self._routes)
    self._mixins = mixins
    self._subcommands = subcommands
    for child in subcommands.values():
        child._parent = self
    return self


def attach(self, name, mixin, /):
    """
    Late mixin registration on an already composed node.

    The new mixin is composed, its elements are appended after every existing
    member, its attributes fill what is still unset, and its subcommands are
    mounted. All checks run before the node is touched: on failure the node
    is left exactly as it was.
    """
    kind = type(self._object).__qualname__
    if not isinstance(name, str):
        raise TypeError("mixin name must be a string")
    elif not (name := name.strip()):
        raise ValueError("mixin name cannot be empty")
    if isinstance(mixin, type):
        mixin = mixin()

    mixins = dict(self._mixins)
    spec = compose(type(self), mixin, source=self._source, limit=self._limit, chain=self._chain)
    _register(mixins, binding := MixinBinding(name, spec, mixin), kind)

    entries = [*self._entries, binding]
    options, positionals = collect(entries)
    routes = trace(entries, kind)
    identifiers, posix = validate(options, routes)

    subcommands = dict(self._subcommands)
    for label, child in spec.subcommands.items():
        _mount(subcommands, label, child, kind)

    self._attributes = self._attributes.fill(spec.attributes)
    self._entries = entries
    self._options, self._positionals = options, positionals
    self._routes = routes
    self._options_map = identifiers
    self._posix_options_map = posix
    self._mixins = mixins
    self._subcommands = subcommands
    for child in subcommands.values():
        child._parent = self
    logger.debug("late mixin %r added to %s", name, kind)
    return binding


__all__ = (
    "compose",
    "attach",
    "collect",
    "trace",
    "validate",
)
