"""
Argospec faults (composition errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every composition
  fault. Codes are grouped by domain to keep logs and searches predictable.
- CompositionError: base type carrying a message plus options (the identity
  a user needs to locate the problem: identifiers, declaration sites, the
  chain of types being composed) that knows how to render itself.
- trigger(): central entry point to surface a fault (raise, or render and
  exit when running in shell mode).

When faults fire
- Every fault is detected eagerly while a CommandSpec is being composed
  (construction or add_mixin). Nothing is deferred to parse or render time,
  and a failed composition never yields a usable specification.

Integration
- The composition engine raises faults directly.
- CommandSpec(..., shell=True) catches them and calls trigger(fault, shell=True,
  ...) so a misconfigured tool prints a friendly panel and exits with status 1.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the composition engine (stable identifiers).

    grouping (by high-level domain)
    - elements (2110x)
      • DUPLICATE_OPTION_IDENTIFIER
    - registrations (2120x)
      • DUPLICATE_MIXIN_NAME, DUPLICATE_SUBCOMMAND_NAME
    - attributes (2130x)
      • MALFORMED_ATTRIBUTE_OVERRIDE
    - graph (2140x)
      • COMPOSITION_CYCLE

    normalize() allows the host to remap codes to custom labels while keeping
    the numeric values stable.
    """
    # --- element errors (21xxx) ---
    DUPLICATE_OPTION_IDENTIFIER  = 21101

    # --- registration errors (21xxx) ---
    DUPLICATE_MIXIN_NAME         = 21201
    DUPLICATE_SUBCOMMAND_NAME    = 21202

    # --- attribute errors (21xxx) ---
    MALFORMED_ATTRIBUTE_OVERRIDE = 21301

    # --- graph errors (21xxx) ---
    COMPOSITION_CYCLE            = 21401

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CompositionError(Exception):
    """
    base class for every fault raised while composing a command specification.

    subclasses pin a FaultCode, a short title and a default hint; the options
    mapping carries the identity of the failure (see each subclass).
    """
    __code__ = Unset
    __title__ = "composition error"
    __hint__ = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)
        super().__init__(message)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "argospec")), styler("prog-name"))
        code = self.options.get("code", self.__code__)

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "", styler("code")),
            " | ",
            text(self.options.get("title", self.__title__).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        hint = Text.assemble(
            text(" → ", styler("hint-arrow")),
            text(self.options.get("hint", self.__hint__), styler("hint")),
        )

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateOptionError(CompositionError):
    """
    two options of the same merged command share an identifier.

    options: identifier (str), sites (tuple of the two declaration sites,
    first declared first).
    """
    __code__ = FaultCode.DUPLICATE_OPTION_IDENTIFIER
    __title__ = "duplicate option"
    __hint__ = "rename one of the options or drop it from the mixin"


class DuplicateMixinError(CompositionError):
    """
    a mixin name is registered twice on the same command.

    options: name (str), site (where the receiver was being composed).
    """
    __code__ = FaultCode.DUPLICATE_MIXIN_NAME
    __title__ = "duplicate mixin"
    __hint__ = "give the mixin an explicit, unique name"


class DuplicateSubcommandError(CompositionError):
    """
    two subcommands of the same command share a name.

    options: name (str), site.
    """
    __code__ = FaultCode.DUPLICATE_SUBCOMMAND_NAME
    __title__ = "duplicate subcommand"
    __hint__ = "subcommand names must be unique per command, including those brought in by mixins"


class MalformedAttributeError(CompositionError):
    """
    a command attribute was given a value outside its domain.

    options: attribute (str), value, site.
    """
    __code__ = FaultCode.MALFORMED_ATTRIBUTE_OVERRIDE
    __title__ = "malformed attribute"
    __hint__ = "check the value passed to @command(...)"


class CompositionCycleError(CompositionError):
    """
    the mixin/subcommand graph nests deeper than the configured limit.

    options: chain (tuple of type names from the receiver down), limit (int).
    """
    __code__ = FaultCode.COMPOSITION_CYCLE
    __title__ = "composition cycle"
    __hint__ = "a mixin or subcommand refers back to one of its owners"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CompositionError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is rendered via rich and the process exits;
      otherwise the fault is raised.

    typical options
    - shell, fancy, colorful, prog, title, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CompositionError",
    "DuplicateOptionError",
    "DuplicateMixinError",
    "DuplicateSubcommandError",
    "MalformedAttributeError",
    "CompositionCycleError",
    "trigger",
)
