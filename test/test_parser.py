# python
"""
Parse engine tests, driven through Options.parse().

Scope
- Long/short options, clusters, "--name=value" and next-token values.
- Positional binding, the "--" terminator and stop-on-positional mode.
- Boolean flags, implicit values and options that look like values.
- Unrecognised-option tolerance and syntax errors.
- Defaults and environment fallbacks.
- Delimiters, nested lists and custom kinds.

Conventions
- Test method names follow CamelCase per project convention.
- argv always starts with the program name, as sys.argv does.
"""

from __future__ import annotations

import collections
import os
import sys
import unittest
from unittest import TestCase, mock

from optkit import (
    ArgumentIncorrectTypeError,
    KeyValue,
    MissingArgumentError,
    OptionHasNoValueError,
    OptionNotExistsError,
    OptionNotPresentError,
    OptionSyntaxError,
    OptionTypeMismatchError,
    Options,
    char,
    parse_char,
    register,
    uint32,
    value,
)

Point = collections.namedtuple("Point", ("x", "y"))


@register(Point, name="point")
def _point(text):
    x, y = text.split("=")
    return Point(parse_char(x), parse_char(y))


class TestBasicOptions(TestCase):
    """Long, short and valued options."""

    def setUp(self):
        self.options = Options("tester", " - test basic options")
        (self.options.add_options()
            ("long", "a long option")
            ("s,short", "a short option")
            ("value", "an option with a value", value(str))
            ("a,av", "a short option with a value", value(str))
            ("6,six", "a number option")
            ("p, space", "an option with space between short and long"))

    def testBasics(self):
        result = self.options.parse([
            "tester", "--long", "-s", "--value", "value", "-a", "b", "-6", "-p", "--space",
        ])

        self.assertEqual(result.count("long"), 1)
        self.assertEqual(result.count("s"), 1)
        self.assertEqual(result.count("short"), 1)
        self.assertEqual(result.count("value"), 1)
        self.assertEqual(result.count("a"), 1)
        self.assertEqual(result.count("6"), 1)
        self.assertEqual(result.count("p"), 2)
        self.assertEqual(result.count("space"), 2)

        self.assertEqual(result["value"].as_(str), "value")
        self.assertEqual(result["a"].as_(str), "b")
        self.assertIs(result["six"].as_(bool), True)

        self.assertEqual(len(result.arguments), 7)
        self.assertEqual(result.arguments[0], KeyValue("long", "true"))
        self.assertEqual(result.arguments[0].key, "long")
        self.assertEqual(result.arguments[0].as_(bool), True)
        self.assertEqual(result.arguments[2], KeyValue("value", "value"))
        self.assertEqual(result.arguments[3], KeyValue("av", "b"))
        self.assertEqual(result.unmatched, [])
        self.assertEqual(result.consumed, 10)

    def testAttachedLongValue(self):
        result = self.options.parse(["tester", "--value=a b", "--av=", "--value=x=y"])
        self.assertEqual(result["value"].as_(str), "x=y")
        self.assertEqual(result["av"].as_(str), "")
        self.assertEqual(result.count("value"), 2)

    def testMembership(self):
        result = self.options.parse(["tester", "--long"])
        self.assertIn("long", result)
        self.assertNotIn("short", result)
        self.assertNotIn("nothing", result)
        self.assertTrue(result.has("long"))
        self.assertEqual(result.count("nothing"), 0)

    def testUnknownLongOption(self):
        with self.assertRaises(OptionNotExistsError) as context:
            self.options.parse(["tester", "--unknown"])
        self.assertEqual(str(context.exception), "Option ‘unknown’ does not exist")

    def testUnknownShortOption(self):
        with self.assertRaises(OptionNotExistsError):
            self.options.parse(["tester", "-z"])

    def testUnknownLetterInCluster(self):
        with self.assertRaises(OptionNotExistsError) as context:
            self.options.parse(["tester", "-sz"])
        self.assertEqual(context.exception.options["option"], "z")

    def testMissingArgument(self):
        with self.assertRaises(MissingArgumentError) as context:
            self.options.parse(["tester", "--value"])
        self.assertEqual(str(context.exception), "Option ‘value’ is missing an argument")

    def testIncorrectType(self):
        options = Options("tester")
        options.add_options()("n,number", "a number", value(int))
        with self.assertRaises(ArgumentIncorrectTypeError):
            options.parse(["tester", "--number", "ten"])

    def testDefaultedBooleanIsNotPresent(self):
        result = self.options.parse(["tester"])
        self.assertEqual(result.count("long"), 0)
        self.assertIs(result["long"].as_(bool), False)
        self.assertTrue(result["long"].has_default)
        self.assertEqual(result.arguments, [])

    def testUndeclaredNameIsNotPresent(self):
        result = self.options.parse(["tester"])
        with self.assertRaises(OptionNotPresentError) as context:
            result["nothing"]
        self.assertEqual(str(context.exception), "Option ‘nothing’ not present")
        with self.assertRaises(OptionNotPresentError):
            result.get("nothing")

    def testValueWithoutDefaultHasNoValue(self):
        result = self.options.parse(["tester"])
        self.assertFalse(result["value"].has_value)
        with self.assertRaises(OptionHasNoValueError) as context:
            result["value"].as_(str)
        self.assertEqual(str(context.exception), "Option ‘value’ has no value")

    def testTypeMismatch(self):
        result = self.options.parse(["tester", "--value", "x"])
        with self.assertRaises(OptionTypeMismatchError) as context:
            result["value"].as_(int)
        self.assertIsInstance(context.exception, TypeError)
        self.assertEqual(result["value"].value, "x")


class TestClusters(TestCase):
    """Grouped short options."""

    def setUp(self):
        self.options = Options("tester")
        (self.options.add_options()
            ("x", "a flag")
            ("a", "a short option with a value", value(str))
            ("i", "implicit", value(int).implicit_value("3")))

    def testFlagsThenValue(self):
        result = self.options.parse(["tester", "-xxavalue"])
        self.assertEqual(result.count("x"), 2)
        self.assertEqual(result["a"].as_(str), "value")

    def testImplicitLetterInsideCluster(self):
        result = self.options.parse(["tester", "-ixa", "b"])
        self.assertEqual(result["i"].as_(int), 3)
        self.assertEqual(result.count("x"), 1)
        self.assertEqual(result["a"].as_(str), "b")

    def testLastLetterTakesNextToken(self):
        result = self.options.parse(["tester", "-xa", "value"])
        self.assertEqual(result["a"].as_(str), "value")
        self.assertEqual(result.consumed, 3)

    def testShortOnlyOptionKeysByShortName(self):
        result = self.options.parse(["tester", "-a", "v"])
        self.assertEqual(result.arguments, [KeyValue("", "v")])
        with self.assertRaises(OptionHasNoValueError) as context:
            self.options.parse(["tester"])["a"].as_(str)
        self.assertEqual(str(context.exception), "Option has no value")


class TestPositional(TestCase):
    """Binding of plain tokens to declared options."""

    def testInOrderThenContainer(self):
        options = Options("tester")
        (options.add_options()
            ("input", "input", value(str))
            ("output", "output", value(str))
            ("positional", "positional", value(list[str])))
        options.parse_positional(["input", "output", "positional"])

        result = options.parse(["tester", "--output", "a", "b", "c", "d"])
        self.assertEqual(result["input"].as_(str), "b")
        self.assertEqual(result["output"].as_(str), "a")
        self.assertEqual(result["positional"].as_(list[str]), ["c", "d"])
        self.assertEqual(result.count("positional"), 2)
        self.assertEqual(len(result.arguments), 4)

    def testScalarsOnlyLeaveUnmatched(self):
        options = Options("tester")
        (options.add_options()
            ("a", "a", value(int))
            ("b", "b", value(int))
            ("c", "c", value(int)))
        options.parse_positional("a", "b", "c")

        result = options.parse(["tester", "1", "2", "3", "4"])
        self.assertEqual(result["a"].as_(int), 1)
        self.assertEqual(result["b"].as_(int), 2)
        self.assertEqual(result["c"].as_(int), 3)
        self.assertEqual(result.unmatched, ["4"])

    def testWithoutBindingEverythingIsUnmatched(self):
        options = Options("tester")
        options.add_options()("v,verbose", "verbose")
        result = options.parse(["tester", "a", "-v", "b"])
        self.assertEqual(result.unmatched, ["a", "b"])
        self.assertEqual(result.count("verbose"), 1)

    def testLoneDashIsPositional(self):
        options = Options("tester")
        options.add_options()("file", "file", value(str))
        options.parse_positional("file")
        self.assertEqual(options.parse(["tester", "-"])["file"].as_(str), "-")

    def testUndeclaredTargetFailsAtFirstPositional(self):
        options = Options("tester")
        options.add_options()("v", "verbose")
        options.parse_positional("missing")
        self.assertEqual(options.parse(["tester", "-v"]).count("v"), 1)
        with self.assertRaises(OptionNotExistsError):
            options.parse(["tester", "file"])

    def testExplicitValueFillsPositionalSlot(self):
        options = Options("tester")
        (options.add_options()
            ("first", "first", value(str))
            ("second", "second", value(str)))
        options.parse_positional("first", "second")
        result = options.parse(["tester", "--first", "x", "y"])
        self.assertEqual(result["first"].as_(str), "x")
        self.assertEqual(result["second"].as_(str), "y")


class TestTerminator(TestCase):
    """Tokens after "--"."""

    def testOptionLookingTokensArePositional(self):
        options = Options("tester")
        (options.add_options()
            ("s", "a flag")
            ("positional", "positional", value(list[str])))
        options.parse_positional("positional")

        result = options.parse(["tester", "--", "-s", "--long", "--"])
        self.assertEqual(result.count("s"), 0)
        self.assertEqual(result["positional"].as_(list[str]), ["-s", "--long", "--"])

    def testRefusedTokensGoUnmatched(self):
        options = Options("tester")
        options.add_options()("file", "file", value(str))
        options.parse_positional("file")

        result = options.parse(["tester", "--", "a", "b", "c"])
        self.assertEqual(result["file"].as_(str), "a")
        self.assertEqual(result.unmatched, ["b", "c"])
        self.assertEqual(result.consumed, 5)

    def testIntegersAfterTerminator(self):
        options = Options("tester")
        options.add_options()("positional", "integers", value(list[int]))
        options.parse_positional("positional")

        result = options.parse(["tester", "--", "5", "6", "-6", "0", "0xab", "0xAf", "0x0"])
        self.assertEqual(result["positional"].as_(list[int]), [5, 6, -6, 0, 0xab, 0xaf, 0])

    def testUnsignedRejectsNegativeAfterTerminator(self):
        options = Options("tester")
        options.add_options()("positional", "integers", value(list[uint32]))
        options.parse_positional("positional")

        with self.assertRaises(ArgumentIncorrectTypeError):
            options.parse(["tester", "--", "10", "-2"])

    def testNegativeNumberWithoutTerminatorIsAnOption(self):
        options = Options("tester")
        options.add_options()("positional", "integers", value(list[int]))
        options.parse_positional("positional")

        with self.assertRaises(OptionNotExistsError):
            options.parse(["tester", "-6"])


class TestBooleans(TestCase):
    """Boolean flags and explicit boolean texts."""

    def testBooleanForms(self):
        options = Options("tester")
        (options.add_options()
            ("bool", "a boolean", value(bool))
            ("debug", "debugging", value(bool))
            ("timing", "timing", value(bool))
            ("verbose", "verbose", value(bool))
            ("dry-run", "dry run", value(bool))
            ("noExplicitDefault", "no explicit default", value(bool))
            ("defaults", "has a true default", value(bool).default_value("true"))
            ("other_defaults", "has a false default", value(bool).default_value("false"))
            ("others", "other arguments", value(list[str])))
        options.parse_positional("others")

        result = options.parse([
            "tester", "--bool=false", "--debug=true", "--timing", "--verbose=1", "--dry-run=0", "extra",
        ])

        self.assertEqual(result.count("bool"), 1)
        self.assertEqual(result.count("debug"), 1)
        self.assertEqual(result.count("timing"), 1)
        self.assertEqual(result.count("verbose"), 1)
        self.assertEqual(result.count("dry-run"), 1)
        self.assertEqual(result.count("noExplicitDefault"), 0)
        self.assertEqual(result.count("defaults"), 0)

        self.assertIs(result["bool"].as_(bool), False)
        self.assertIs(result["debug"].as_(bool), True)
        self.assertIs(result["timing"].as_(bool), True)
        self.assertIs(result["verbose"].as_(bool), True)
        self.assertIs(result["dry-run"].as_(bool), False)
        self.assertIs(result["noExplicitDefault"].as_(bool), False)
        self.assertIs(result["defaults"].as_(bool), True)
        self.assertIs(result["other_defaults"].as_(bool), False)
        self.assertEqual(result["others"].as_(list[str]), ["extra"])

    def testFlagNeverTakesNextToken(self):
        options = Options("tester")
        (options.add_options()
            ("f,flag", "a flag")
            ("name", "a name", value(str)))
        options.parse_positional("name")

        result = options.parse(["tester", "-f", "name"])
        self.assertEqual(result.count("flag"), 1)
        self.assertEqual(result["name"].as_(str), "name")

        result = options.parse(["tester", "--flag", "false"])
        self.assertIs(result["flag"].as_(bool), True)
        self.assertEqual(result["name"].as_(str), "false")

    def testNoImplicitValue(self):
        options = Options("tester")
        options.add_options()("bool", "a boolean", value(bool).no_implicit_value())

        with self.assertRaises(MissingArgumentError):
            options.parse(["tester", "--bool"])
        self.assertIs(options.parse(["tester", "--bool", "true"])["bool"].as_(bool), True)
        self.assertIs(options.parse(["tester", "--bool=false"])["bool"].as_(bool), False)

    def testInvalidBooleanText(self):
        options = Options("tester")
        options.add_options()("bool", "a boolean")
        with self.assertRaises(ArgumentIncorrectTypeError):
            options.parse(["tester", "--bool=yes"])


class TestImplicitValues(TestCase):
    """Options with an implicit value."""

    def setUp(self):
        self.options = Options("tester")
        (self.options.add_options()
            ("implicit", "implicit", value(str).implicit_value("foo"))
            ("other", "another flag"))

    def testAtEnd(self):
        self.assertEqual(self.options.parse(["tester", "--implicit"])["implicit"].as_(str), "foo")

    def testBeforeDeclaredOption(self):
        result = self.options.parse(["tester", "--implicit", "--other"])
        self.assertEqual(result["implicit"].as_(str), "foo")
        self.assertEqual(result.count("other"), 1)

    def testBeforeTerminator(self):
        result = self.options.parse(["tester", "--implicit", "--", "rest"])
        self.assertEqual(result["implicit"].as_(str), "foo")
        self.assertEqual(result.unmatched, ["rest"])

    def testExplicitValues(self):
        self.assertEqual(self.options.parse(["tester", "--implicit", "bar"])["implicit"].as_(str), "bar")
        self.assertEqual(self.options.parse(["tester", "--implicit="])["implicit"].as_(str), "")


class TestOptionAsValue(TestCase):
    """A value that looks like an option."""

    def testDeclaredOptionIsNotTaken(self):
        options = Options("tester")
        (options.add_options()
            ("output", "output", value(str))
            ("test", "a flag"))
        with self.assertRaises(MissingArgumentError):
            options.parse(["tester", "--output", "--test"])

    def testUndeclaredOptionIsTaken(self):
        options = Options("tester")
        options.add_options()("output", "output", value(str))
        result = options.parse(["tester", "--output", "--test"])
        self.assertEqual(result["output"].as_(str), "--test")

    def testDeclaredShortLetterIsNotTaken(self):
        options = Options("tester")
        (options.add_options()
            ("o,output", "output", value(str))
            ("x", "a flag"))
        with self.assertRaises(MissingArgumentError):
            options.parse(["tester", "-o", "-xyz"])
        self.assertEqual(options.parse(["tester", "-o", "-yx"])["o"].as_(str), "-yx")


class TestUnrecognised(TestCase):
    """Tolerance of unknown and malformed options."""

    def setUp(self):
        self.options = Options("tester")
        (self.options.add_options()
            ("long", "a long option")
            ("s,short", "a short option"))

    def testRaisesByDefault(self):
        with self.assertRaises(OptionNotExistsError):
            self.options.parse(["tester", "--unknown"])

    def testUnknownOptionsAreUnmatched(self):
        self.options.allow_unrecognised_options()
        result = self.options.parse(["tester", "--unknown", "-u", "--another_unknown", "-a"])
        self.assertEqual(result.unmatched, ["--unknown", "-u", "--another_unknown", "-a"])

    def testUnknownLettersInsideCluster(self):
        self.options.allow_unrecognised_options()
        result = self.options.parse(["tester", "--unknown", "--long", "-su"])
        self.assertEqual(result.unmatched, ["--unknown", "-u"])
        self.assertEqual(result.count("long"), 1)
        self.assertEqual(result.count("s"), 1)

    def testSyntaxErrors(self):
        for token in ("--a", "-v?", "---long"):
            with self.subTest(token=token), self.assertRaises(OptionSyntaxError) as context:
                self.options.parse(["tester", token])
            self.assertEqual(
                str(context.exception),
                "Argument ‘%s’ starts with a - but has incorrect syntax" % token,
            )

    def testSyntaxErrorsAreToleratedToo(self):
        self.options.allow_unrecognised_options()
        result = self.options.parse(["tester", "--a", "-v?"])
        self.assertEqual(result.unmatched, ["--a", "-v?"])


class TestStopOnPositional(TestCase):
    """Parsing that halts for subcommands."""

    def setUp(self):
        self.options = Options("tester", stop_on_positional=True)
        (self.options.add_options()
            ("a", "a value", value(str))
            ("x", "a flag"))

    def testStopsAtFirstPositional(self):
        argv = ["tester", "-a", "value", "subcmd", "-a", "-x"]
        result = self.options.parse(argv)
        self.assertEqual(result.consumed, 3)
        self.assertEqual(argv[result.consumed:], ["subcmd", "-a", "-x"])
        self.assertEqual(result["a"].as_(str), "value")
        self.assertEqual(result.count("x"), 0)
        self.assertEqual(result.unmatched, [])

    def testStopsAfterTerminator(self):
        result = self.options.parse(["tester", "-x", "--", "-a", "b"])
        self.assertEqual(result.consumed, 3)
        self.assertEqual(result.count("a"), 0)

    def testConsumesEverythingWithoutPositional(self):
        result = self.options.parse(["tester", "-x", "-a", "b"])
        self.assertEqual(result.consumed, 4)


class TestEnvironment(TestCase):
    """Defaults and environment fallbacks."""

    def setUp(self):
        self.options = Options("tester")
        (self.options.add_options()
            ("l,level", "level", value(int).default_value("1").env("OPTKIT_TEST_LEVEL"))
            ("names", "names", value(list[str]).default_value("a,b").env("OPTKIT_TEST_NAMES"))
            ("token", "token", value(str).env("OPTKIT_TEST_TOKEN")))

    def testDefaultWithoutEnvironment(self):
        with mock.patch.dict(os.environ):
            for name in ("OPTKIT_TEST_LEVEL", "OPTKIT_TEST_NAMES", "OPTKIT_TEST_TOKEN"):
                os.environ.pop(name, None)
            result = self.options.parse(["tester"])

        self.assertEqual(result["level"].as_(int), 1)
        self.assertEqual(result.count("level"), 0)
        self.assertTrue(result["level"].has_default)
        self.assertEqual(result["names"].as_(list[str]), ["a", "b"])
        self.assertFalse(result["token"].has_value)
        self.assertNotIn("token", result)

    def testEnvironmentBeatsDefault(self):
        with mock.patch.dict(os.environ, {"OPTKIT_TEST_LEVEL": "7", "OPTKIT_TEST_NAMES": "x,y"}):
            result = self.options.parse(["tester"])

        self.assertEqual(result["level"].as_(int), 7)
        self.assertEqual(result.count("level"), 1)
        self.assertFalse(result["level"].has_default)
        self.assertEqual(result["names"].as_(list[str]), ["x", "y"])
        self.assertEqual(result.arguments, [])

    def testExplicitBeatsEnvironment(self):
        with mock.patch.dict(os.environ, {"OPTKIT_TEST_LEVEL": "7", "OPTKIT_TEST_TOKEN": "secret"}):
            result = self.options.parse(["tester", "-l", "3"])

        self.assertEqual(result["level"].as_(int), 3)
        self.assertEqual(result.count("level"), 1)
        self.assertEqual(result["token"].as_(str), "secret")

    def testInvalidEnvironmentText(self):
        with mock.patch.dict(os.environ, {"OPTKIT_TEST_LEVEL": "seven"}):
            with self.assertRaises(ArgumentIncorrectTypeError):
                self.options.parse(["tester"])


class TestKinds(TestCase):
    """Delimiters, nested lists and custom kinds."""

    def testCustomDelimiter(self):
        options = Options("tester")
        options.add_options()("test", "a list", value(list[str]).delimiter(";"))
        result = options.parse(["tester", "--test=a;b;c", "--test=x,y,z"])
        self.assertEqual(result["test"].as_(list[str]), ["a", "b", "c", "x,y,z"])

    def testListOfLists(self):
        options = Options("tester")
        options.add_options()("vector", "vectors", value(list[list[float]]))
        result = options.parse(["tester", "--vector=1,2", "--vector", "3.5"])
        self.assertEqual(result["vector"].as_(list[list[float]]), [[1.0, 2.0], [3.5]])

    def testCharOption(self):
        options = Options("tester")
        options.add_options()("c,char", "a char", value(char))
        self.assertEqual(options.parse(["tester", "-c", "z"])["char"].as_(char), "z")
        with self.assertRaises(ArgumentIncorrectTypeError):
            options.parse(["tester", "-czz"])

    def testCustomKind(self):
        options = Options("tester")
        options.add_options()("foo", "a point", value(Point))
        result = options.parse(["tester", "--foo=5=4"])
        self.assertEqual(result["foo"].as_(Point), Point("5", "4"))
        with self.assertRaises(ArgumentIncorrectTypeError):
            options.parse(["tester", "--foo=5"])

    def testValuesAreCopies(self):
        options = Options("tester")
        options.add_options()("names", "names", value(list[str]))
        result = options.parse(["tester", "--names=a,b"])
        result["names"].as_(list[str]).append("c")
        self.assertEqual(result["names"].as_(list[str]), ["a", "b"])


class TestArgv(TestCase):
    """Accepted argv forms and repeated parses."""

    def setUp(self):
        self.options = Options("tester")
        (self.options.add_options()
            ("d,debug", "debug")
            ("n,name", "name", value(str)))

    def testStringIsSplitLikeAShell(self):
        result = self.options.parse("-d --name 'a b'")
        self.assertEqual(result.count("debug"), 1)
        self.assertEqual(result["name"].as_(str), "a b")
        self.assertEqual(result.consumed, 4)

    def testDefaultsToSysArgv(self):
        with mock.patch.object(sys, "argv", ["tester", "-n", "x"]):
            result = self.options.parse()
        self.assertEqual(result["name"].as_(str), "x")

    def testRejectsOtherTypes(self):
        for argv in (42, ["tester", 3], None):
            with self.subTest(argv=argv), self.assertRaises(TypeError):
                self.options.parse(argv)

    def testParsingIsRepeatable(self):
        first = self.options.parse(["tester", "-d", "-n", "x"])
        second = self.options.parse(["tester", "-n", "y"])
        self.assertEqual(first.count("debug"), 1)
        self.assertEqual(first["name"].as_(str), "x")
        self.assertEqual(second.count("debug"), 0)
        self.assertEqual(second["name"].as_(str), "y")

    def testResultOutlivesRegistryChanges(self):
        result = self.options.parse(["tester", "-d"])
        self.options.add_options()("extra", "added later", value(str).default_value("x"))
        self.options.parse_positional("extra")
        self.assertEqual(result.count("debug"), 1)
        self.assertEqual(result.count("extra"), 0)
        with self.assertRaises(OptionNotPresentError):
            result["extra"]


if __name__ == "__main__":
    unittest.main()
