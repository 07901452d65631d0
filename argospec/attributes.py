"""
Argospec command-level attributes and their precedence resolution.

What this module provides
- FIELDS / DEFAULTS: the command attributes every CommandSpec carries and the
  built-in value each falls back to.
- AttributeSet: an immutable mapping of attribute → value, where a field that
  was not declared holds Unset (never its default). Each declared value also
  remembers its origin (the declaration site that supplied it).
- resolve(chain, mixins): the per-attribute precedence merge.

Precedence (per attribute, independently)
1. the receiver's own class,
2. its superclasses, nearest to farthest,
3. its mixins, in declaration order (each already resolved recursively),
4. otherwise the attribute stays Unset and the built-in default applies.

A receiver can therefore take its name from itself, its footer from one mixin
and its synopsis heading from another at the same time.
"""
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .faults import MalformedAttributeError
from .utils import Unset

DEFAULTS = MappingProxyType({
    # ── Identity ───────────────────────────────────────────────────────────
    "name": "<main class>",
    "version": (),
    "version_provider": None,
    "separator": "=",
    # ── Help sections ──────────────────────────────────────────────────────
    "description": (),
    "description_heading": "",
    "header": (),
    "header_heading": "",
    "footer": (),
    "footer_heading": "",
    "option_list_heading": "",
    "parameter_list_heading": "",
    "command_list_heading": "Commands:\n",
    "synopsis_heading": "Usage: ",
    "custom_synopsis": (),
    # ── Rendering flags ────────────────────────────────────────────────────
    "required_option_marker": "*",
    "abbreviate_synopsis": False,
    "show_default_values": False,
    "sort_options": True,
})

FIELDS = tuple(DEFAULTS)

_NAMES = ("name", "separator")
_HEADINGS = (
    "description_heading",
    "header_heading",
    "footer_heading",
    "option_list_heading",
    "parameter_list_heading",
    "command_list_heading",
    "synopsis_heading",
)
_LINES = ("version", "description", "header", "footer", "custom_synopsis")
_SWITCHES = ("abbreviate_synopsis", "show_default_values", "sort_options")


def _malformed(site, attribute, value, message):
    return MalformedAttributeError(
        f"{site} attribute {attribute!r} {message}",
        attribute=attribute,
        value=value,
        site=site,
    )


def _sanitize(site, values):
    """
    Validate declared attribute values in place.

    - name: non-empty string (trimmed); separator: non-empty string (kept as-is).
    - headings: strings (empty allowed, meaning "no heading").
    - line attributes: a string (one line) or an iterable of strings → tuple.
    - required_option_marker: exactly one character.
    - switches: real booleans.
    - version_provider: a class (instantiated at composition) or a callable
      returning an iterable of strings.
    """
    for name in _NAMES:
        if (value := values[name]) is Unset:
            continue
        if not isinstance(value, str):
            raise _malformed(site, name, value, "must be a string")
        if name == "name":
            value = value.strip()
        if not value:
            raise _malformed(site, name, value, "cannot be empty")
        values[name] = value

    for name in _HEADINGS:
        if (value := values[name]) is not Unset and not isinstance(value, str):
            raise _malformed(site, name, value, "must be a string")

    for name in _LINES:
        if (value := values[name]) is Unset:
            continue
        if isinstance(value, str):
            value = (value,)
        if not isinstance(value, Iterable):
            raise _malformed(site, name, value, "must be a string or an iterable of strings")
        value = tuple(value)
        if not all(isinstance(line, str) for line in value):
            raise _malformed(site, name, value, "must be an iterable of strings")
        values[name] = value

    if (marker := values["required_option_marker"]) is not Unset:
        if not isinstance(marker, str):
            raise _malformed(site, "required_option_marker", marker, "must be a character")
        if len(marker) != 1:
            raise _malformed(site, "required_option_marker", marker, "must be exactly one character")

    for name in _SWITCHES:
        if (value := values[name]) is not Unset and not isinstance(value, bool):
            raise _malformed(site, name, value, "must be a boolean")

    if (provider := values["version_provider"]) is not Unset and provider is not None:
        if not callable(provider):
            raise _malformed(site, "version_provider", provider, "must be a class or a callable")


class AttributeSet(Mapping):
    """
    Immutable mapping of command attribute → declared value (or Unset).

    Construction
    - AttributeSet(site, **values) validates the declared values; unknown
      attribute names raise TypeError, out-of-domain values raise
      MalformedAttributeError.
    - site is the label of the declaration (usually a class qualname) and is
      recorded as the origin of every value it declares.

    Extras
    - subcommands: the subcommand sources declared next to the attributes.
      They are not subject to precedence: every class in a chain contributes
      its own.
    """
    __slots__ = ("_values", "_origins", "_site", "_subcommands")

    def __init__(self, site=Unset, /, *, subcommands=(), **values):
        if not isinstance(site, str | Unset):
            raise TypeError("AttributeSet() site must be a string")
        if unknown := set(values) - set(FIELDS):
            raise TypeError(f"unknown command attribute(s): {", ".join(sorted(unknown))}")
        if isinstance(subcommands, str) or not isinstance(subcommands, Iterable):
            raise TypeError(f"{site} 'subcommands' must be an iterable of commands")

        values = dict.fromkeys(FIELDS, Unset) | values
        _sanitize(site, values)

        self._site = site
        self._values = values
        self._origins = {name: site for name, value in values.items() if value is not Unset}
        self._subcommands = tuple(subcommands)

    @classmethod
    def _assemble(cls, values, origins, site=Unset):
        """
        Internal: wrap already-validated values (used by resolve()).
        """
        self = cls.__new__(cls)
        self._site = site
        self._values = dict(values)
        self._origins = dict(origins)
        self._subcommands = ()
        return self

    @property
    def site(self):
        return self._site

    @property
    def subcommands(self):
        return self._subcommands

    def origin(self, name, /):
        """
        Return the declaration site that supplied `name`, or None when unset.
        """
        if name not in self._values:
            raise KeyError(name)
        return self._origins.get(name)

    def declared(self):
        """
        Return the names of the attributes holding a value (in FIELDS order).
        """
        return tuple(name for name in FIELDS if self._values[name] is not Unset)

    def fill(self, other, /):
        """
        Return a new set where every Unset field takes its value from `other`.

        This is the step that lets a later source (a superclass, then each
        mixin in turn) contribute only what nothing closer has declared.
        """
        values = dict(self._values)
        origins = dict(self._origins)
        for name in FIELDS:
            if values[name] is Unset and (value := other[name]) is not Unset:
                values[name] = value
                origins[name] = other.origin(name)
        return type(self)._assemble(values, origins, self._site)

    def __replace__(self, /, **overrides):
        """
        Return a copy with `overrides` applied; origins of untouched fields are kept.
        """
        if unknown := set(overrides) - set(FIELDS):
            raise TypeError(f"unknown command attribute(s): {", ".join(sorted(unknown))}")
        values = self._values | overrides
        origins = self._origins | {name: self._origins.get(name, self._site) for name in overrides}
        return type(self)._assemble(values, origins, self._site)

    def __getitem__(self, name, /):
        return self._values[name]

    def __iter__(self):
        return iter(FIELDS)

    def __len__(self):
        return len(FIELDS)

    def __repr__(self):
        declared = ", ".join(f"{name}={self._values[name]!r}" for name in self.declared())
        return f"attribute-set({declared})"


EMPTY = AttributeSet()


def resolve(chain, mixins=(), /):
    """
    Merge command attributes by precedence.

    Parameters
    - chain: attribute sets of the receiver's class chain, root-most first and
      own class last (classes without a declaration are simply absent).
    - mixins: each mixin's resolved attribute set, in mixin-declaration order.

    Returns
    - AttributeSet where each field comes from the nearest declaring class,
      else from the first mixin declaring it, else stays Unset.
    """
    resolved = EMPTY
    for attributes in (*reversed(tuple(chain)), *mixins):
        if not isinstance(attributes, AttributeSet):
            raise TypeError("resolve() expects attribute sets")
        resolved = resolved.fill(attributes)
    return resolved


__all__ = (
    "DEFAULTS",
    "FIELDS",
    "AttributeSet",
    "resolve",
)
