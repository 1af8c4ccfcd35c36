# python
"""
Descriptor builder behavioral tests.

Scope
- Kinds, names, defaults and requiredness derived from dataclass fields.
- Shape errors raised eagerly (collisions, positional ordering, malformed subcommands).
- Embedded dataclasses, subcommand levels, caching and immutability.
"""

import dataclasses
import unittest
from dataclasses import dataclass, field
from unittest import TestCase

from argshape import FieldKind, ShapeError, describe, option, positional, subcommand


@dataclass
class Sample:
    input: str = positional()
    verbose: bool = option("-v", help="verbosity level")
    dry_run: bool = option(env=True)
    output: list[str] = positional(default_factory=list)
    dataset: str = option(help="dataset to use", default="")
    optimize: int = option("-O", help="optimization level", default=0)
    tags: dict[str, int] = option(default_factory=dict)
    level: int | None = None


@dataclass
class Database:
    host: str = "localhost"
    port: int = option("-p", default=5432)


@dataclass
class Service:
    name: str = positional()
    database: Database = field(default_factory=Database)


@dataclass
class Get:
    item: str = positional(help="item to fetch")


@dataclass
class Root:
    quiet: bool = option("-q")
    get: Get | None = subcommand("get", "fetch", help="fetch an item")


class TestKinds(TestCase):
    def setUp(self):
        self.level = describe(Sample)
        self.by_name = {descriptor.name: descriptor for descriptor in self.level.fields}

    def testDeclarationOrder(self):
        self.assertEqual(
            [descriptor.name for descriptor in self.level.fields],
            ["input", "verbose", "dry_run", "output", "dataset", "optimize", "tags", "level"],
        )

    def testKindsFromAnnotations(self):
        kinds = {name: descriptor.kind for name, descriptor in self.by_name.items()}
        self.assertEqual(kinds["input"], FieldKind.POSITIONAL)
        self.assertEqual(kinds["output"], FieldKind.POSITIONAL_MULTI)
        self.assertEqual(kinds["verbose"], FieldKind.BOOLEAN)
        self.assertEqual(kinds["dataset"], FieldKind.SCALAR)
        self.assertEqual(kinds["tags"], FieldKind.MULTI)
        self.assertEqual(kinds["level"], FieldKind.SCALAR)

    def testElementTypes(self):
        self.assertIs(self.by_name["output"].type, str)
        self.assertIs(self.by_name["output"].container, list)
        self.assertIs(self.by_name["tags"].container, dict)
        self.assertIs(self.by_name["tags"].key, str)
        self.assertIs(self.by_name["tags"].type, int)
        self.assertIs(self.by_name["level"].type, int)

    def testNamesAndMetavars(self):
        optimize = self.by_name["optimize"]
        self.assertEqual((optimize.long, optimize.short, optimize.metavar), ("optimize", "O", "OPTIMIZE"))
        self.assertEqual(self.by_name["dry_run"].long, "dry-run")
        self.assertEqual(self.by_name["input"].display, "INPUT")
        self.assertEqual(optimize.display, "--optimize")

    def testOptionLookup(self):
        self.assertIs(self.level.lookup("-O"), self.by_name["optimize"])
        self.assertIs(self.level.lookup("--optimize"), self.by_name["optimize"])
        self.assertIsNone(self.level.lookup("--missing"))

    def testRequiredness(self):
        self.assertTrue(self.by_name["input"].required)
        self.assertFalse(self.by_name["output"].required)
        self.assertFalse(self.by_name["verbose"].required)
        self.assertFalse(self.by_name["dataset"].required)
        self.assertFalse(self.by_name["level"].required)

    def testImplicitDefaults(self):
        self.assertIs(self.by_name["verbose"].initial(), False)
        tags = self.by_name["tags"]
        self.assertEqual(tags.initial(), {})
        self.assertIsNot(tags.initial(), tags.initial())

    def testDerivedEnvironmentName(self):
        dry_run = self.by_name["dry_run"]
        self.assertEqual(dry_run.envvar(), "DRY_RUN")
        self.assertEqual(dry_run.envvar("APP_"), "APP_DRY_RUN")
        self.assertIsNone(self.by_name["dataset"].envvar("APP_"))

    def testExplicitEnvironmentNameIsNotPrefixed(self):
        @dataclass
        class Args:
            token: str = option(env="TOKEN", default="")

        self.assertEqual(describe(Args).fields[0].envvar("APP_"), "TOKEN")

    def testPositionalWithDefaultIsOptional(self):
        @dataclass
        class Args:
            input: str = positional(default="-")

        self.assertFalse(describe(Args).fields[0].required)


class TestShapeErrors(TestCase):
    def testNotADataclass(self):
        class Plain:
            pass

        with self.assertRaises(ShapeError):
            describe(Plain)
        with self.assertRaises(ShapeError):
            describe(Get(item="x"))

    def testUnhashableShapeIsShapeError(self):
        for shape in (Get(item="x"), [], {"item": str}):
            with self.subTest(shape=shape):
                with self.assertRaises(ShapeError):
                    describe(shape)

    def testShapeErrorIsTypeError(self):
        self.assertTrue(issubclass(ShapeError, TypeError))

    def testLongNameCollision(self):
        @dataclass
        class Args:
            first: int = option("--same", default=0)
            same: int = 0

        with self.assertRaises(ShapeError):
            describe(Args)

    def testShortAliasCollision(self):
        @dataclass
        class Args:
            first: bool = option("-x")
            second: bool = option("-x")

        with self.assertRaises(ShapeError):
            describe(Args)

    def testReservedHelpName(self):
        @dataclass
        class Args:
            help: bool = False

        with self.assertRaises(ShapeError):
            describe(Args)

    def testTwoMultiPositionals(self):
        @dataclass
        class Args:
            first: list[str] = positional(default_factory=list)
            second: list[str] = positional(default_factory=list)

        with self.assertRaises(ShapeError):
            describe(Args)

    def testMultiPositionalMustBeLast(self):
        @dataclass
        class Args:
            files: list[str] = positional(default_factory=list)
            target: str = positional(default="out")

        with self.assertRaises(ShapeError):
            describe(Args)

    def testRequiredWithDefault(self):
        @dataclass
        class Args:
            count: int = option(required=True, default=1)

        with self.assertRaises(ShapeError):
            describe(Args)

    def testDictPositional(self):
        @dataclass
        class Args:
            pairs: dict[str, str] = positional(default_factory=dict)

        with self.assertRaises(ShapeError):
            describe(Args)

    def testSeparateScalar(self):
        @dataclass
        class Args:
            count: int = option(separate=True, default=0)

        with self.assertRaises(ShapeError):
            describe(Args)

    def testSubcommandMustBeOptional(self):
        @dataclass
        class Args:
            get: Get = subcommand()

        with self.assertRaises(ShapeError):
            describe(Args)

    def testSubcommandNameCollision(self):
        @dataclass
        class Args:
            get: Get | None = subcommand("get")
            fetch: Get | None = subcommand("get")

        with self.assertRaises(ShapeError):
            describe(Args)

    def testEmbeddedCollision(self):
        @dataclass
        class Args:
            host: str = ""
            database: Database = field(default_factory=Database)

        with self.assertRaises(ShapeError):
            describe(Args)


class TestLevels(TestCase):
    def testCached(self):
        self.assertIs(describe(Sample), describe(Sample))

    def testImmutable(self):
        level = describe(Sample)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            level.fields = ()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            level.fields[0].long = "other"
        with self.assertRaises(TypeError):
            level.options["--new"] = level.fields[0]

    def testEmbeddedFieldsJoinLevel(self):
        level = describe(Service)
        self.assertEqual([descriptor.path for descriptor in level.fields], [
            ("name",),
            ("database", "host"),
            ("database", "port"),
        ])
        self.assertEqual(level.lookup("-p").path, ("database", "port"))
        self.assertEqual(level.embedded, ((("database",), Database),))

    def testSubcommandLevels(self):
        level = describe(Root)
        command = level.subcommands["get"]
        self.assertIs(level.subcommands["fetch"], command)
        self.assertEqual(command.kind, FieldKind.SUBCOMMAND)
        self.assertEqual(command.names, ("get", "fetch"))
        self.assertIs(command.level, describe(Get))
        self.assertEqual(level.commands, (command,))
        self.assertNotIn(command, level.flags)

    def testDescend(self):
        levels = describe(Root).descend(("get",))
        self.assertEqual([level.shape for level in levels], [Root, Get])

    def testSubcommandNameDefaultsToFieldName(self):
        @dataclass
        class Args:
            set_upstream: Get | None = subcommand()

        self.assertIn("set-upstream", describe(Args).subcommands)


if __name__ == "__main__":
    unittest.main()
