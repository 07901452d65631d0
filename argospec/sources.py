"""
Argospec element sources: where declarations come from.

The composition engine never looks at classes directly. It asks an element
source two questions about a type:

- attributes(type) → the command-level AttributeSets of the class chain,
  root-most first, own class last (classes without one are skipped);
- members(type) → the declared members, in declaration order, each a Member
  tagged OPTION, POSITIONAL, MIXIN or SUBCOMMAND.

ClassSource is the default: it reads @command declarations from
"__command__" in each class's own namespace and members from the class
bodies, walking the MRO from the root down. A member redeclared in a subclass
replaces the inherited one and takes the subclass's position.

Any object with the same two methods can be handed to CommandSpec(source=...)
to feed the engine from somewhere else (a config file, a registry, ...).
"""
import builtins
from collections import namedtuple
from enum import Enum

from .arguments import Option, Positional, Mixin, Subcommand
from .attributes import AttributeSet


class MemberKind(Enum):
    OPTION = "option"
    POSITIONAL = "positional"
    MIXIN = "mixin"
    SUBCOMMAND = "subcommand"


Member = namedtuple("Member", ("kind", "name", "declaration", "site"))
Member.__doc__ = """
A declared member.

- kind: MemberKind
- name: the declaring attribute name (slot identity)
- declaration: the Option / Positional / Mixin / Subcommand instance
- site: "Class.attribute", used in diagnostics
"""

_KINDS = (
    (Option, MemberKind.OPTION),
    (Positional, MemberKind.POSITIONAL),
    (Mixin, MemberKind.MIXIN),
    (Subcommand, MemberKind.SUBCOMMAND),
)


def _kindof(object):
    for type, kind in _KINDS:
        if isinstance(object, type):
            return kind
    return None


class ClassSource:
    """
    Default element source reading class namespaces.
    """

    def attributes(self, type, /):
        if not isinstance(type, builtins.type):
            raise TypeError("attributes() argument must be a class")
        chain = []
        for cls in reversed(type.__mro__):
            if isinstance(attributes := vars(cls).get("__command__"), AttributeSet):
                chain.append(attributes)
        return tuple(chain)

    def members(self, type, /):
        if not isinstance(type, builtins.type):
            raise TypeError("members() argument must be a class")
        members = {}
        for cls in reversed(type.__mro__):
            for name, object in vars(cls).items():
                if (kind := _kindof(object)) is None:
                    continue
                members.pop(name, None)
                members[name] = Member(kind, name, object, f"{cls.__qualname__}.{name}")
        return tuple(members.values())


__all__ = (
    "MemberKind",
    "Member",
    "ClassSource",
)
