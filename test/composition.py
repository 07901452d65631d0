"""
Composition engine behavioral tests (precedence, merge order, registries).

Scope
- Validate per-attribute precedence: own class, superclasses, then mixins.
- Validate declaration-order splicing of mixin options and positionals.
- Validate mixin/subcommand registration, lookup and late add_mixin().
- Validate eager faults: duplicate identifiers/names, cycles, nameless
  subcommands, and that a failing add_mixin() leaves the spec untouched.

Conventions
- Test method names follow CamelCase per project convention.
- Fixture classes live at module level so declaration sites read
  "Class.attribute" in assertions.
"""

import unittest
from unittest import TestCase

from argospec import (
    build,
    command,
    Option,
    Positional,
    Mixin,
    Subcommand,
    CompositionCycleError,
    DuplicateMixinError,
    DuplicateOptionError,
    DuplicateSubcommandError,
    MalformedAttributeError,
)
from argospec.utils import Unset


# ── Attribute fixtures ────────────────────────────────────────────────────

def _attributes(prefix):
    return dict(
        name=f"{prefix.lower()}-name",
        version=f"{prefix} 1.0",
        separator=":",
        description=f"description from {prefix}",
        description_heading=f"{prefix} Description Heading\n",
        header=f"{prefix} Header",
        header_heading=f"{prefix} Header Heading\n",
        footer=f"{prefix} Footer",
        footer_heading=f"{prefix} Footer Heading\n",
        option_list_heading=f"{prefix} Option List Heading\n",
        parameter_list_heading=f"{prefix} Parameter List Heading\n",
        command_list_heading=f"{prefix} Command List Heading\n",
        required_option_marker="%",
        synopsis_heading=f"{prefix} Synopsis Heading\n",
        abbreviate_synopsis=True,
        custom_synopsis=f"{prefix} custom synopsis",
        show_default_values=True,
        sort_options=False,
    )


def _expected(prefix):
    return (
        f"{prefix} Header Heading\n"
        f"{prefix} Header\n"
        f"{prefix} Synopsis Heading\n"
        f"{prefix} custom synopsis\n"
        f"{prefix} Description Heading\n"
        f"description from {prefix}\n"
        f"{prefix} Footer Heading\n"
        f"{prefix} Footer\n"
    )


@command(**_attributes("Mixin"))
class MixMeIn:
    pass


class ReceiverOfMixin:
    mix_me_in = Mixin(MixMeIn)


class PlainReceiver:
    pass


@command(**_attributes("Receiver"))
class FullReceiver:
    mix_me_in = Mixin(MixMeIn)


@command(**_attributes("Receiver"))
class FullPlainReceiver:
    pass


@command(**_attributes("MixinSuper"))
class MixinSuper:
    pass


@command(**_attributes("MixinSub"))
class MixinSub(MixinSuper):
    pass


class ReceiverOfMixinSub:
    mix_me_in = Mixin(MixinSub)


# ── Combined attribute fixtures ───────────────────────────────────────────

@command(
    name="superName",
    version="MixMeInSuper 1.0",
    separator="$",
    description="33",
    description_heading="333",
    header="3333",
    header_heading="33333",
    parameter_list_heading="333 333 3",
    command_list_heading="333 333 33",
    required_option_marker="3",
    synopsis_heading="3333 3",
)
class CombinedMixinSuper:
    pass


@command(
    description="description from mixinSub",
    description_heading="MixinSub Description Heading\n",
    header="MixinSub Header",
    header_heading="MixinSub Header Heading\n",
    parameter_list_heading="2 22",
    command_list_heading="222 2",
    required_option_marker="2",
    synopsis_heading="22222",
)
class CombinedMixinSub(CombinedMixinSuper):
    pass


@command(
    footer="ReceiverSuper Footer",
    footer_heading="ReceiverSuper Footer Heading\n",
    option_list_heading="ReceiverSuper Option List Heading\n",
    parameter_list_heading="-1-1-1",
    command_list_heading="--1--1--1",
    required_option_marker="1",
    synopsis_heading="---1---1---1",
)
class CombinedReceiverSuper:
    pass


_COMBINED = dict(
    parameter_list_heading="Receiver Parameter List Heading\n",
    command_list_heading="Receiver Command List Heading\n",
    required_option_marker="#",
    synopsis_heading="Receiver Synopsis Heading\n",
    show_default_values=True,
    sort_options=False,
)


@command(**_COMBINED)
class CombinedReceiver(CombinedReceiverSuper):
    mix_me_in = Mixin(CombinedMixinSub)
    files = Positional(nargs="*", descr="some files")


@command(**_COMBINED)
class CombinedLateReceiver(CombinedReceiverSuper):
    files = Positional(nargs="*", descr="some files")


# ── Element fixtures ──────────────────────────────────────────────────────

class ElementsMixin:
    alpha = Option("-a", "--alpha", type=int, descr="option from mixin")
    files = Positional(nargs="*", descr="parameters from mixin")


@command(sort_options=False)
class ElementsReceiver:
    beta = Option("-b", "--beta", type=int, descr="Receiver option")
    receiver_files = Positional(nargs="*", descr="parameters from receiver")
    mix_me_in = Mixin(ElementsMixin)


@command(sort_options=False)
class ElementsLateReceiver:
    beta = Option("-b", "--beta", type=int, descr="Receiver option")
    receiver_files = Positional(nargs="*", descr="parameters from receiver")


@command(sort_options=False)
class ElementsLeadingReceiver:
    mix_me_in = Mixin(ElementsMixin)
    beta = Option("-b", "--beta", type=int, descr="Receiver option")
    receiver_files = Positional(nargs="*", descr="parameters from receiver")


class DuplicateMixin:
    alpha = Option("-a", "--alpha", descr="option from mixin")


class DuplicateReceiver:
    beta = Option("-a", descr="Receiver option")
    mix_me_in = Mixin(DuplicateMixin)


class SharedSlotsReceiver:
    first = Mixin(DuplicateMixin)
    second = Mixin(DuplicateMixin)


class NestedDuplicateMixin:
    inner = Mixin(DuplicateMixin)


class NestedDuplicateReceiver:
    beta = Option("--alpha")
    outer = Mixin(NestedDuplicateMixin)


# ── Subcommand fixtures ───────────────────────────────────────────────────

@command(name="mixinsub")
class MixedInSubcommand:
    pass


@command(subcommands=[MixedInSubcommand])
class SubcommandsMixin:
    pass


class SubcommandsReceiver:
    mix_me_in = Mixin(SubcommandsMixin)


class NamelessSubcommand:
    pass


# ── Version fixtures ──────────────────────────────────────────────────────

class LinesVersionProvider:
    def __call__(self):
        return ["line 1", "line 2"]


@command(version="Mixin 1.0", version_provider=LinesVersionProvider)
class VersionedMixin:
    pass


class VersionedReceiver:
    mix_me_in = Mixin(VersionedMixin)


class TestAttributePrecedence(TestCase):
    """Per-attribute precedence across receivers, superclasses and mixins."""

    def testCommandAttributesFromMixinAnnotation(self):
        spec = build(ReceiverOfMixin)
        self.assertEqual(spec.name, "mixin-name")
        self.assertEqual(spec.version, ("Mixin 1.0",))
        self.assertEqual(spec.separator, ":")
        self.assertEqual(spec.required_option_marker, "%")
        self.assertTrue(spec.abbreviate_synopsis)
        self.assertTrue(spec.show_default_values)
        self.assertFalse(spec.sort_options)
        self.assertEqual(spec.custom_synopsis, ("Mixin custom synopsis",))
        self.assertEqual(spec.usage(), _expected("Mixin"))

    def testCommandAttributesFromAddMixin(self):
        spec = build(PlainReceiver)
        spec.add_mixin("mix_me_in", MixMeIn())
        self.assertEqual(spec.name, "mixin-name")
        self.assertEqual(spec.option_list_heading, "Mixin Option List Heading\n")
        self.assertEqual(spec.usage(), _expected("Mixin"))

    def testMixinAttributesDontOverwriteReceiverAttributes(self):
        spec = build(FullReceiver)
        self.assertEqual(spec.name, "receiver-name")
        self.assertEqual(spec.header, ("Receiver Header",))
        self.assertEqual(spec.usage(), _expected("Receiver"))
        for name in spec.attributes.declared():
            self.assertEqual(spec.origin(name), FullReceiver.__qualname__)

    def testAddMixinDoesntOverwriteReceiverAttributes(self):
        spec = build(FullPlainReceiver)
        spec.add_mixin("mix_me_in", MixMeIn())
        self.assertEqual(spec.usage(), _expected("Receiver"))

    def testSuperclassAttributesDontOverwriteSubclassAttributes(self):
        spec = build(ReceiverOfMixinSub)
        self.assertEqual(spec.name, "mixinsub-name")
        self.assertEqual(spec.usage(), _expected("MixinSub"))

    def testMixinCombinesAttributes(self):
        self._verifyCombinedAttributes(build(CombinedReceiver))

    def testAddMixinCombinesAttributes(self):
        spec = build(CombinedLateReceiver)
        spec.add_mixin("mix_me_in", CombinedMixinSub())
        self._verifyCombinedAttributes(spec)

    def _verifyCombinedAttributes(self, spec):
        self.assertEqual(spec.name, "superName")
        self.assertEqual(spec.version, ("MixMeInSuper 1.0",))
        self.assertEqual(spec.separator, "$")
        self.assertEqual(spec.description, ("description from mixinSub",))
        self.assertEqual(spec.description_heading, "MixinSub Description Heading\n")
        self.assertEqual(spec.header, ("MixinSub Header",))
        self.assertEqual(spec.header_heading, "MixinSub Header Heading\n")
        self.assertEqual(spec.footer, ("ReceiverSuper Footer",))
        self.assertEqual(spec.footer_heading, "ReceiverSuper Footer Heading\n")
        self.assertEqual(spec.option_list_heading, "ReceiverSuper Option List Heading\n")
        self.assertEqual(spec.parameter_list_heading, "Receiver Parameter List Heading\n")
        self.assertEqual(spec.command_list_heading, "Receiver Command List Heading\n")
        self.assertEqual(spec.required_option_marker, "#")
        self.assertEqual(spec.synopsis_heading, "Receiver Synopsis Heading\n")
        self.assertEqual(spec.custom_synopsis, ())

        self.assertEqual(spec.origin("name"), CombinedMixinSuper.__qualname__)
        self.assertEqual(spec.origin("header"), CombinedMixinSub.__qualname__)
        self.assertEqual(spec.origin("footer"), CombinedReceiverSuper.__qualname__)
        self.assertIsNone(spec.origin("custom_synopsis"))

        expected = (
            "MixinSub Header Heading\n"
            "MixinSub Header\n"
            "Receiver Synopsis Heading\n"
            "superName [<files>]...\n"
            "MixinSub Description Heading\n"
            "description from mixinSub\n"
            "Receiver Parameter List Heading\n"
            "  [<files>]...  some files\n"
            "ReceiverSuper Footer Heading\n"
            "ReceiverSuper Footer\n"
        )
        self.assertEqual(spec.usage(), expected)

    def testUnsetAttributesKeepTheirSentinel(self):
        spec = build(PlainReceiver)
        self.assertIs(spec.attributes["footer"], Unset)
        self.assertEqual(spec.footer, ())
        self.assertEqual(spec.name, "<main class>")
        self.assertEqual(spec.synopsis_heading, "Usage: ")
        self.assertIsNone(spec.origin("name"))

    def testExplicitDefaultValueBlocksMixinFallback(self):
        @command(sort_options=True)
        class Receiver:
            mix_me_in = Mixin(MixMeIn)

        spec = build(Receiver)
        self.assertTrue(spec.sort_options)
        self.assertEqual(spec.origin("sort_options"), Receiver.__qualname__)
        self.assertTrue(spec.show_default_values)

    def testMixinsFallBackInDeclarationOrder(self):
        @command(footer="first footer")
        class First:
            pass

        @command(footer="second footer", header="second header")
        class Second:
            pass

        class Receiver:
            first = Mixin(First)
            second = Mixin(Second)

        spec = build(Receiver)
        self.assertEqual(spec.footer, ("first footer",))
        self.assertEqual(spec.header, ("second header",))

    def testNestedMixinsResolveRecursively(self):
        @command(footer="inner footer", header="inner header")
        class Inner:
            pass

        @command(header="outer header")
        class Outer:
            inner = Mixin(Inner)

        class Receiver:
            outer = Mixin(Outer)

        spec = build(Receiver)
        self.assertEqual(spec.header, ("outer header",))
        self.assertEqual(spec.footer, ("inner footer",))
        self.assertEqual(spec.origin("footer"), Inner.__qualname__)

    def testVersionProviderFromMixin(self):
        spec = build(VersionedReceiver)
        self.assertIsInstance(spec.version_provider, LinesVersionProvider)
        self.assertEqual(spec.version, ("line 1", "line 2"))
        self.assertEqual(spec.attributes["version"], ("Mixin 1.0",))

    def testVersionProviderAsFactory(self):
        @command(version_provider=lambda: "tool 2.1")
        class Receiver:
            pass

        self.assertEqual(build(Receiver).version, ("tool 2.1",))


class TestElementMerge(TestCase):
    """Declaration-order splicing of mixin elements."""

    def _verifyInjected(self, spec):
        self.assertEqual(len(spec.options), 2)
        self.assertEqual(spec.options[0].names, ("-b", "--beta"))
        self.assertEqual(spec.options[1].names, ("-a", "--alpha"))
        for identifier in ("-a", "--alpha", "-b", "--beta"):
            self.assertIn(identifier, spec.options_map)
        self.assertEqual(sorted(spec.posix_options_map), ["a", "b"])
        self.assertIs(spec.posix_options_map["a"], spec.options_map["--alpha"])

        self.assertEqual([positional.label for positional in spec.positionals], ["<receiver-files>", "<files>"])

        expected = (
            "Usage: <main class> [-b=<beta>] [-a=<alpha>] [<receiver-files>]... [<files>]...\n"
            + "  [<receiver-files>]...".ljust(25) + "parameters from receiver\n"
            + "  [<files>]...".ljust(25) + "parameters from mixin\n"
            + "  -b, --beta=<beta>".ljust(25) + "Receiver option\n"
            + "  -a, --alpha=<alpha>".ljust(25) + "option from mixin\n"
        )
        self.assertEqual(spec.usage(), expected)

    def testMixinInjectsOptionsAndPositionals(self):
        self._verifyInjected(build(ElementsReceiver))

    def testAddMixinInjectsOptionsAndPositionals(self):
        spec = build(ElementsLateReceiver)
        spec.add_mixin("mix_me_in", ElementsMixin())
        self._verifyInjected(spec)

    def testDeclaredAndAddedCompositionsMatch(self):
        declared = build(ElementsReceiver)
        added = build(ElementsLateReceiver).add_mixin("mix_me_in", ElementsMixin())
        self.assertEqual(declared.usage(), added.usage())
        self.assertEqual(
            [option.names for option in declared.options],
            [option.names for option in added.options],
        )
        self.assertEqual(tuple(declared.mixins), tuple(added.mixins))

    def testMixinInjectsInDeclarationOrder(self):
        spec = build(ElementsLeadingReceiver)
        self.assertEqual(spec.options[0].names, ("-a", "--alpha"))
        self.assertEqual(spec.options[1].names, ("-b", "--beta"))
        self.assertEqual([positional.label for positional in spec.positionals], ["<files>", "<receiver-files>"])
        self.assertTrue(spec.usage().startswith(
            "Usage: <main class> [-a=<alpha>] [-b=<beta>] [<files>]... [<receiver-files>]...\n"
        ))

    def testElementsBindToTheirOwners(self):
        spec = build(ElementsReceiver)
        receiver = spec.object
        mixin = spec.lookup_mixin("mix_me_in")

        self.assertIsNone(receiver.beta)
        self.assertIsNone(mixin.alpha)

        spec.options_map["-a"].bind(111)
        spec.options_map["--beta"].bind(222)
        spec.positionals[0].bind(["a", "b"])
        self.assertEqual(mixin.alpha, 111)
        self.assertEqual(receiver.beta, 222)
        self.assertEqual(receiver.receiver_files, ["a", "b"])

        self.assertEqual(spec.options_map["-a"].site, "ElementsMixin.alpha")
        self.assertIs(spec.options_map["-a"].owner, mixin)

    def testSubclassRedeclarationTakesSubclassPosition(self):
        class Base:
            alpha = Option("-a")
            beta = Option("-b")

        class Derived(Base):
            alpha = Option("-x", "--alpha")

        spec = build(Derived)
        self.assertEqual([option.slot for option in spec.options], ["beta", "alpha"])
        self.assertEqual(spec.options[1].names, ("-x", "--alpha"))
        self.assertNotIn("-a", spec.options_map)

    def testSuperclassMembersComeFirst(self):
        class Base:
            alpha = Option("-a")

        class Derived(Base):
            beta = Option("-b")

        spec = build(Derived)
        self.assertEqual(
            [option.site for option in spec.options],
            [f"{Base.__qualname__}.alpha", f"{Derived.__qualname__}.beta"],
        )

    def testDuplicateOptionsRejected(self):
        with self.assertRaises(DuplicateOptionError) as context:
            build(DuplicateReceiver)
        self.assertEqual(
            str(context.exception),
            "option name '-a' is used by both DuplicateReceiver.beta and DuplicateReceiver.mix_me_in → DuplicateMixin.alpha",
        )
        self.assertEqual(context.exception.options["identifier"], "-a")
        self.assertEqual(context.exception.options["sites"], ("DuplicateReceiver.beta", "DuplicateMixin.alpha"))

    def testDuplicateOptionsNameTheirSlots(self):
        with self.assertRaises(DuplicateOptionError) as context:
            build(SharedSlotsReceiver)
        self.assertEqual(
            str(context.exception),
            "option name '-a' is used by both SharedSlotsReceiver.first → DuplicateMixin.alpha"
            " and SharedSlotsReceiver.second → DuplicateMixin.alpha",
        )
        self.assertEqual(context.exception.options["sites"], ("DuplicateMixin.alpha", "DuplicateMixin.alpha"))

    def testDuplicateOptionsNameNestedSlots(self):
        with self.assertRaises(DuplicateOptionError) as context:
            build(NestedDuplicateReceiver)
        self.assertEqual(context.exception.options["identifier"], "--alpha")
        self.assertEqual(
            context.exception.options["routes"],
            (
                "NestedDuplicateReceiver.beta",
                "NestedDuplicateReceiver.outer → NestedDuplicateMixin.inner → DuplicateMixin.alpha",
            ),
        )

    def testPosixOptionsMapIndexesShortOptions(self):
        class Receiver:
            verbose = Option("-v", "--verbose", type=bool)
            level = Option("--level")
            quiet = Option("-q")

        spec = build(Receiver)
        self.assertEqual(sorted(spec.posix_options_map), ["q", "v"])
        self.assertIs(spec.posix_options_map["v"], spec.options_map["--verbose"])
        with self.assertRaises(TypeError):
            spec.posix_options_map["x"] = spec.options[0]

    def testSubcommandTreesValidateIndependently(self):
        @command(name="child")
        class Child:
            alpha = Option("-a")

        class Parent:
            alpha = Option("-a")
            child = Subcommand(Child)

        spec = build(Parent)
        self.assertIn("-a", spec.options_map)
        self.assertIn("-a", spec.lookup_subcommand("child").options_map)


class TestRegistries(TestCase):
    """Mixin and subcommand registration and lookup."""

    def testMixinRetrievedByExplicitName(self):
        @command
        class Receiver:
            mix_me_in = Mixin(MixMeIn, name="aMixin")

        spec = build(Receiver)
        self.assertIsInstance(spec.lookup_mixin("aMixin"), MixMeIn)
        self.assertIs(spec.lookup_mixin("aMixin"), spec.object.mix_me_in)
        self.assertIs(spec.mixins["aMixin"].object, spec.object.mix_me_in)
        self.assertIsNone(spec.lookup_mixin("mix_me_in"))

    def testMixinRetrievedBySlotName(self):
        spec = build(ReceiverOfMixin)
        self.assertIsInstance(spec.lookup_mixin("mix_me_in"), MixMeIn)
        self.assertIs(spec.lookup_mixin("mix_me_in"), spec.object.mix_me_in)
        self.assertIs(spec.mixins["mix_me_in"].object, spec.object.mix_me_in)

    def testPresetMixinObjectIsUsed(self):
        receiver = ReceiverOfMixin()
        receiver.mix_me_in = preset = MixMeIn()
        spec = build(receiver)
        self.assertIs(spec.object, receiver)
        self.assertIs(spec.lookup_mixin("mix_me_in"), preset)

    def testAddMixinLookupIsIdempotent(self):
        spec = build(PlainReceiver)
        mixin = MixMeIn()
        spec.add_mixin("mixin", mixin)
        self.assertIs(spec.lookup_mixin("mixin"), mixin)
        self.assertIs(spec.lookup_mixin("mixin"), mixin)
        self.assertIs(spec.mixins["mixin"].object, mixin)

    def testAddMixinAcceptsClass(self):
        spec = build(PlainReceiver).add_mixin("mixin", MixMeIn)
        self.assertIsInstance(spec.lookup_mixin("mixin"), MixMeIn)

    def testAddMixinRejectsEmptyName(self):
        spec = build(PlainReceiver)
        with self.assertRaises(ValueError):
            spec.add_mixin("  ", MixMeIn())
        with self.assertRaises(TypeError):
            spec.add_mixin(1, MixMeIn())

    def testLookupMissingReturnsNone(self):
        spec = build(PlainReceiver)
        self.assertIsNone(spec.lookup_mixin("missing"))
        self.assertIsNone(spec.lookup_subcommand("missing"))

    def testMixinRegistrationOrder(self):
        class Receiver:
            second = Mixin(MixMeIn)
            first = Mixin(MixinSub)

        spec = build(Receiver).add_mixin("third", PlainReceiver())
        self.assertEqual(tuple(spec.mixins), ("second", "first", "third"))

    def testDuplicateMixinNameRejected(self):
        class Receiver:
            one = Mixin(MixMeIn, name="same")
            two = Mixin(MixinSub, name="same")

        with self.assertRaises(DuplicateMixinError) as context:
            build(Receiver)
        self.assertEqual(context.exception.options["name"], "same")

    def testSubcommandsFromMixinAttachToReceiver(self):
        spec = build(SubcommandsReceiver)
        self.assertEqual(tuple(spec.subcommands), ("mixinsub",))
        child = spec.lookup_subcommand("mixinsub")
        self.assertIs(child, spec.subcommands["mixinsub"])
        self.assertIsInstance(child.object, MixedInSubcommand)
        self.assertIs(child.parent, spec)
        self.assertIs(child.root, spec)
        self.assertEqual(child.qualified_name, "<main class> mixinsub")

    def testAddMixinAttachesSubcommands(self):
        spec = build(PlainReceiver).add_mixin("subs", SubcommandsMixin())
        self.assertIs(spec.lookup_subcommand("mixinsub").parent, spec)

    def testSubcommandSlotNameOverride(self):
        @command(name="status", header="Show the working tree status")
        class Status:
            pass

        @command(name="git")
        class Git:
            st = Subcommand(Status, name="st")

        spec = build(Git)
        child = spec.lookup_subcommand("st")
        self.assertEqual(child.name, "status")
        self.assertEqual(child.qualified_name, "git st")
        self.assertEqual(child.path, (spec, child))
        self.assertIs(spec.object.st, child.object)

    def testDuplicateSubcommandNameRejected(self):
        @command(name="same")
        class One:
            pass

        @command(name="same")
        class Two:
            pass

        @command(subcommands=[One])
        class Receiver:
            two = Subcommand(Two)

        with self.assertRaises(DuplicateSubcommandError) as context:
            build(Receiver)
        self.assertEqual(context.exception.options["name"], "same")

    def testNamelessSubcommandRejected(self):
        @command(subcommands=[NamelessSubcommand])
        class Receiver:
            pass

        with self.assertRaises(MalformedAttributeError) as context:
            build(Receiver)
        self.assertEqual(context.exception.options["attribute"], "name")


class TestFailures(TestCase):
    """Eager faults and all-or-nothing late registration."""

    def testMixinCycleDetected(self):
        class Loop:
            pass

        Loop.again = Mixin(Loop)

        with self.assertRaises(CompositionCycleError) as context:
            build(Loop)
        self.assertEqual(context.exception.options["limit"], 64)
        self.assertEqual(len(context.exception.options["chain"]), 65)

    def testCycleLimitIsConfigurable(self):
        class Loop:
            pass

        Loop.again = Mixin(Loop)

        with self.assertRaises(CompositionCycleError) as context:
            build(Loop, limit=5)
        self.assertEqual(context.exception.options["chain"], (Loop.__qualname__,) * 6)

    def testRecursionExhaustionReportedAsCycle(self):
        class Loop:
            pass

        Loop.again = Mixin(Loop)

        with self.assertRaises(CompositionCycleError) as context:
            build(Loop, limit=10 ** 6)
        self.assertEqual(context.exception.options["chain"], ())
        self.assertEqual(context.exception.options["limit"], 10 ** 6)

    def testSubcommandCycleDetected(self):
        @command(name="loop")
        class Loop:
            pass

        Loop.child = Subcommand(Loop)

        with self.assertRaises(CompositionCycleError):
            build(Loop, limit=8)

    def testInvalidLimitRejected(self):
        with self.assertRaises(ValueError):
            build(PlainReceiver, limit=0)
        with self.assertRaises(TypeError):
            build(PlainReceiver, limit="64")
        with self.assertRaises(TypeError):
            build(PlainReceiver, limit=True)

    def testFailedAddMixinLeavesSpecUntouched(self):
        class Receiver:
            beta = Option("-a", descr="Receiver option")

        spec = build(Receiver)
        before = (spec.options, spec.positionals, dict(spec.options_map), dict(spec.mixins), spec.usage())

        with self.assertRaises(DuplicateOptionError):
            spec.add_mixin("dup", DuplicateMixin())

        self.assertEqual(before, (spec.options, spec.positionals, dict(spec.options_map), dict(spec.mixins), spec.usage()))
        self.assertIsNone(spec.lookup_mixin("dup"))

    def testAddMixinDuplicateNameLeavesSpecUntouched(self):
        spec = build(ReceiverOfMixin)
        with self.assertRaises(DuplicateMixinError):
            spec.add_mixin("mix_me_in", ElementsMixin())
        self.assertEqual(spec.options, ())
        self.assertIsInstance(spec.lookup_mixin("mix_me_in"), MixMeIn)


if __name__ == "__main__":
    unittest.main()
