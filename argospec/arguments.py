r"""
Argospec member declarations.

Overview
- Elements
  • Option: named, value-bearing (or presence-only) member, e.g. -a/--alpha.
  • Positional: position-based member, e.g. FILE or FILE... .
- Slots
  • Mixin: pulls a reusable fragment (its options, positionals, subcommands
    and attribute contributions) into the declaring command.
  • Subcommand: mounts a nested command under the declaring one.

Declarations are plain class attributes; the order of the class body is the
declaration order the composition engine preserves:

    >>> class Verbosity:
    ...     verbose = Option("-v", "--verbose", type=bool, descr="talk more")
    ...
    >>> @command(name="tool")
    ... class Tool:
    ...     output = Option("-o", "--output", descr="where to write")
    ...     logging = Mixin(Verbosity)
    ...     files = Positional(nargs="*", descr="inputs")

Metadata (sanitized on construction)
- descr: Unset | str (short help), non-empty when provided.
- hidden: bool (suppresses the element from help and synopsis).
- Option names: shell-style identifiers r"--?[^\W\d_](-?[^\W_]+)*", unique,
  kept in declared order.
- nargs: Unset | 0 (options only, presence-only) | int >= 1 | "?" | "*" | "+".
  An Option with type=bool and no nargs is presence-only.
- metavar/label: Unset | non-empty str; when Unset, help derives "<slot-name>".
- Positional index: Unset | int >= 0 | "start..stop" | "start..*".
- Mixin/Subcommand source: a class (instantiated when composed) or a
  zero-argument factory; name: Unset | non-empty str.
"""
import builtins
import functools
import operator
import re

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns declarations into introspectable, read-only specs.

    Responsibilities
    - Expose the names listed in __introspectable__ as read-only properties
      backed by "_<name>" fields (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for consistent error messages.
    """
    __introspectable__ = ()

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
            - option(names=('-a', '--alpha'), ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, metadata, /):
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_label(cls, metadata, key, /):
    if not isinstance(label := metadata[key], str | Unset):
        raise TypeError(f"{cls.__typename__} {key!r} must be a string")
    elif isinstance(label, str) and not (label := label.strip()):
        raise ValueError(f"{cls.__typename__} {key!r} cannot be empty")
    metadata[key] = coalesce(label)


def _sanitize_nargs(cls, metadata, /, *, flags=False):
    """
    Validate 'nargs' and 'type'.

    - type must be callable (converter); only callability is enforced.
    - nargs: Unset | "?" | "*" | "+" | int (>= 1, or 0 when flags is True).
    """
    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    if isinstance(nargs := metadata["nargs"], bool) or not isinstance(nargs, str | int | Unset):
        raise TypeError(f"{cls.__typename__} 'nargs' must be a string or an integer")
    if isinstance(nargs, str) and nargs not in ("?", "+", "*"):
        raise ValueError(f"{cls.__typename__} 'nargs' must be one of '?', '+', or '*'")
    if isinstance(nargs, int) and nargs < (0 if flags else 1):
        if flags:
            raise ValueError(f"{cls.__typename__} 'nargs' must be a non-negative integer")
        raise ValueError(f"{cls.__typename__} 'nargs' must be a positive integer")

    if nargs is Unset:
        nargs = 0 if flags and metadata["type"] is bool else 1
    metadata["nargs"] = nargs


def _sanitize_index(cls, metadata, /):
    """
    Normalize 'index' into Unset or a (start, stop) pair where stop may be None.

    Accepted forms: 3, "3", "1..2", "1..*".
    """
    if (index := metadata["index"]) is Unset:
        return
    if isinstance(index, bool) or not isinstance(index, str | int):
        raise TypeError(f"{cls.__typename__} 'index' must be an integer or a range string")
    if isinstance(index, int):
        if index < 0:
            raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")
        metadata["index"] = (index, index)
        return
    if not (match := re.fullmatch(r"\s*(\d+)\s*(?:\.\.\s*(\d+|\*)\s*)?", index)):
        raise ValueError(f"{cls.__typename__} 'index' must look like 'n', 'n..m' or 'n..*'")
    start = int(match[1])
    stop = start if match[2] is None else None if match[2] == "*" else int(match[2])
    if stop is not None and stop < start:
        raise ValueError(f"{cls.__typename__} 'index' range cannot end before it starts")
    metadata["index"] = (start, stop)


class Option(metaclass=ArgumentType):
    """
    Named option declaration.

    Highlights
    - One or more aliases via 'names' (e.g., "-o", "--output"), validated and
      kept in declared order (the first short name leads in the synopsis).
    - Arity through 'nargs'; nargs=0 (or type=bool) makes a presence-only flag.
    - required options are rendered without brackets and carry the command's
      required-option marker in the option list.
    """

    __introspectable__ = (
        "names",
        "metavar",
        "type",
        "nargs",
        "default",
        "required",
        "descr",
        "hidden",
    )

    def __new__(
            cls,
            *names,
            metavar=Unset,
            type=str,
            nargs=Unset,
            default=None,
            required=False,
            descr=Unset,
            hidden=False,
    ):
        metadata = {
            "names": names,
            "metavar": metavar,
            "type": type,
            "nargs": nargs,
            "default": default,
            "required": bool(required),
            "descr": descr,
            "hidden": bool(hidden),
        }
        cls._sanitize_names(metadata)
        _sanitize_label(cls, metadata, "metavar")
        _sanitize_nargs(cls, metadata, flags=True)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.nargs == 0 and self.metavar is not None:
            raise TypeError(f"presence-only {cls.__typename__} cannot specify a 'metavar'")
        if self.required and self.hidden:
            raise TypeError(f"required {cls.__typename__} cannot be hidden")
        return self

    @classmethod
    def _sanitize_names(cls, metadata, /):
        names = []
        if not metadata["names"]:
            raise TypeError(f"{cls.__typename__} must specify at least one name")

        for name in metadata["names"]:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif not (name := name.strip()):
                raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
            elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
                raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
            elif name in names:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            names.append(name)

        metadata["names"] = tuple(names)

    @property
    def flag(self):
        """
        True when the option takes no value.
        """
        return self.nargs == 0


class Positional(metaclass=ArgumentType):
    """
    Positional parameter declaration.

    The label shown in help defaults to "<slot-name>" (underscores become
    hyphens); 'index' optionally pins the positions it consumes.
    """

    __introspectable__ = (
        "label",
        "type",
        "nargs",
        "index",
        "default",
        "descr",
        "hidden",
    )

    def __new__(
            cls,
            label=Unset,
            /,
            type=str,
            nargs=Unset,
            index=Unset,
            default=None,
            descr=Unset,
            hidden=False,
    ):
        metadata = {
            "label": label,
            "type": type,
            "nargs": nargs,
            "index": index,
            "default": default,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_label(cls, metadata, "label")
        _sanitize_nargs(cls, metadata)
        _sanitize_index(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    @property
    def variadic(self):
        """
        True when the positional accepts an open-ended number of values.
        """
        return self.nargs in ("*", "+")


class _Slot(metaclass=ArgumentType):
    """
    Shared shape of Mixin and Subcommand: a source to compose plus an optional name.
    """

    __introspectable__ = (
        "source",
        "name",
    )

    def __new__(cls, source, /, name=Unset):
        if not builtins.callable(source):
            raise TypeError(f"{cls.__typename__} source must be a class or a factory")
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        self = super().__new__(cls)
        self._source = source
        self._name = coalesce(name)
        return self

    def create(self):
        """
        Produce the object to compose: instantiate a class, or call a factory.
        """
        return self.source()


class Mixin(_Slot):
    """
    Mixin slot declaration.

    The mixin's options and positionals are spliced into the declaring
    command at the slot's position; its attributes fill whatever the command
    (and its superclasses) left unset; its subcommands attach to the command.
    The mixin is registered under 'name', or the slot's attribute name.
    """


class Subcommand(_Slot):
    """
    Subcommand slot declaration.

    The nested command is registered under 'name', or its own resolved name.
    """


__all__ = (
    "Option",
    "Positional",
    "Mixin",
    "Subcommand",
)
