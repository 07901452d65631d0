"""
Argospec element specs: declarations bound to the object that owns them.

A declaration (Option, Positional) lives on a class and is shared by every
instance. Composition binds it to one owner object, giving an element spec
that knows:
- owner / slot: where a parsed value goes (see bind());
- site: "Class.attribute", the declaration site quoted in diagnostics;
- index: the declaration position within its own source.

MixinBinding pairs a registered mixin name with the mixin's own CommandSpec
and the user object it was built from.
"""
from collections import namedtuple

from .sources import MemberKind
from .utils import mirror, slugify


def _delegate(name, /):
    """
    Read-only property forwarding to the underlying declaration.
    """
    return property(lambda self: getattr(self._declaration, name), doc=f"declared {name}")


class _Element:
    __slots__ = ("_declaration", "_owner", "_slot", "_site", "_index")

    declaration = mirror("declaration")
    owner = property(lambda self: self._owner, doc="object owning the slot")
    slot = mirror("slot")
    site = mirror("site")
    index = mirror("index")

    descr = _delegate("descr")
    type = _delegate("type")
    nargs = _delegate("nargs")
    default = _delegate("default")
    hidden = _delegate("hidden")

    def __init__(self, member, owner, index, /):
        self._declaration = member.declaration
        self._owner = owner
        self._slot = member.name
        self._site = member.site
        self._index = index
        # the owner starts out holding the declared default
        if self._slot not in getattr(owner, "__dict__", {}):
            setattr(owner, self._slot, self.default)

    def bind(self, value, /):
        """
        Store a parsed value on the owning object's slot.
        """
        setattr(self._owner, self._slot, value)

    def __repr__(self):
        return f"{type(self).__name__.lower()}(site={self._site!r}, index={self._index!r})"


class OptionSpec(_Element):
    """
    Option bound to its owner.

    - names: identifiers in declared order.
    - metavar: the declared metavar, else "<slot-name>".
    - flag / required: presence-only and required markers.
    """
    __slots__ = ()
    kind = MemberKind.OPTION

    names = _delegate("names")
    required = _delegate("required")
    flag = _delegate("flag")

    @property
    def metavar(self):
        return self._declaration.metavar or f"<{slugify(self._slot)}>"


class PositionalSpec(_Element):
    """
    Positional parameter bound to its owner.

    - label: the declared label, else "<slot-name>".
    - range: the declared (start, stop) index range, or None.
    - variadic: True for "*" and "+" arities.
    """
    __slots__ = ()
    kind = MemberKind.POSITIONAL

    variadic = _delegate("variadic")

    @property
    def label(self):
        return self._declaration.label or f"<{slugify(self._slot)}>"

    @property
    def range(self):
        return self._declaration.index


class MixinBinding(namedtuple("MixinBinding", ("name", "spec", "object"))):
    """
    A registered mixin: name → (its own CommandSpec, the user object).
    """
    __slots__ = ()
    kind = MemberKind.MIXIN


__all__ = (
    "OptionSpec",
    "PositionalSpec",
    "MixinBinding",
)
