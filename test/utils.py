"""
Utilities behavioral tests.

Scope
- Unset sentinel and coalesce().
- Naming helpers used to derive flag names, environment names and help phrases.
- Scalar text grammars (booleans, fixed-width integers, floats, durations) and
  their canonical renderings.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from datetime import timedelta
from unittest import TestCase

from stratum.utils import *


class TestUnset(TestCase):

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testCoalescePreservesFalsyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class TestNaming(TestCase):
    """Case conversion of field paths."""

    def testWordsSplitsCaseAndDigits(self):
        self.assertEqual(words("LogLevel"), ("Log", "Level"))
        self.assertEqual(words("log_level"), ("log", "level"))
        self.assertEqual(words("HTTPServer", "port1"), ("HTTP", "Server", "port", "1"))
        self.assertEqual(words("TLS"), ("TLS",))

    def testWordsRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            words("a", 1)

    def testKebab(self):
        self.assertEqual(kebab("mongo", "max_pool_size"), "mongo-max-pool-size")
        self.assertEqual(kebab("number1"), "number-1")
        self.assertEqual(kebab("jwt", "token_expiration"), "jwt-token-expiration")

    def testScreamingSnake(self):
        self.assertEqual(screaming_snake("cool", "mongo", "hosts"), "COOL_MONGO_HOSTS")
        self.assertEqual(screaming_snake("test", "number2"), "TEST_NUMBER_2")

    def testDelimited(self):
        self.assertEqual(delimited("log", "log_level"), "log log level")
        self.assertEqual(delimited("daily_temperatures"), "daily temperatures")
        self.assertEqual(delimited("a", "b", delimiter="."), "a.b")


class TestScalars(TestCase):
    """Strict scalar grammars."""

    def testParseBoolLiterals(self):
        for text in ("1", "t", "T", "TRUE", "true", "True"):
            self.assertIs(parse_bool(text), True)
        for text in ("0", "f", "F", "FALSE", "false", "False"):
            self.assertIs(parse_bool(text), False)

    def testParseBoolRejectsOthers(self):
        for text in ("yes", "tRUE", "", " true"):
            with self.assertRaises(ValueError):
                parse_bool(text)

    def testParseIntegerRanges(self):
        self.assertEqual(parse_integer("2147483647", 32), 2147483647)
        self.assertEqual(parse_integer("-2147483648", 32), -2147483648)
        self.assertEqual(parse_integer("4294967295", 32, signed=False), 4294967295)
        self.assertEqual(parse_integer("+7"), 7)

    def testParseIntegerOutOfRange(self):
        with self.assertRaisesRegex(ValueError, "value out of range"):
            parse_integer("2147483648", 32)
        with self.assertRaisesRegex(ValueError, "value out of range"):
            parse_integer("18446744073709551616", 64, signed=False)

    def testParseIntegerInvalidSyntax(self):
        for text in ("a", "1_000", " 1", "0x10", "-1.0"):
            with self.assertRaisesRegex(ValueError, "invalid syntax"):
                parse_integer(text)
        with self.assertRaisesRegex(ValueError, "invalid syntax"):
            parse_integer("-1", signed=False)

    def testParseFloat(self):
        self.assertEqual(parse_float("1.2"), 1.2)
        self.assertEqual(parse_float("-.5e1"), -5.0)
        self.assertEqual(parse_float("Inf"), float("inf"))
        with self.assertRaisesRegex(ValueError, "invalid syntax"):
            parse_float("a")
        with self.assertRaisesRegex(ValueError, "value out of range"):
            parse_float("1e400")
        with self.assertRaisesRegex(ValueError, "invalid syntax"):
            parse_float("\uff11.5")

    def testFormatFloat(self):
        self.assertEqual(format_float(1.0), "1")
        self.assertEqual(format_float(0.0), "0")
        self.assertEqual(format_float(1.2), "1.2")

    def testQuote(self):
        self.assertEqual(quote("debug"), '"debug"')
        self.assertEqual(quote('a"b'), '"a\\"b"')


class TestDurations(TestCase):

    def testParseDuration(self):
        self.assertEqual(parse_duration("300ms"), timedelta(milliseconds=300))
        self.assertEqual(parse_duration("1h30m"), timedelta(minutes=90))
        self.assertEqual(parse_duration("-1.5h"), -timedelta(minutes=90))
        self.assertEqual(parse_duration("1m30.5s"), timedelta(seconds=90.5))
        self.assertEqual(parse_duration("2us"), timedelta(microseconds=2))
        self.assertEqual(parse_duration("2µs"), timedelta(microseconds=2))
        self.assertEqual(parse_duration("0"), timedelta(0))

    def testParseDurationErrors(self):
        with self.assertRaisesRegex(ValueError, 'invalid duration "a"'):
            parse_duration("a")
        with self.assertRaisesRegex(ValueError, 'invalid duration ""'):
            parse_duration("")
        with self.assertRaisesRegex(ValueError, 'missing unit in duration "1"'):
            parse_duration("1")
        with self.assertRaisesRegex(ValueError, 'unknown unit "x" in duration "1x"'):
            parse_duration("1x")

    def testFormatDuration(self):
        self.assertEqual(format_duration(timedelta(0)), "0s")
        self.assertEqual(format_duration(timedelta(seconds=1)), "1s")
        self.assertEqual(format_duration(timedelta(seconds=10)), "10s")
        self.assertEqual(format_duration(timedelta(seconds=90)), "1m30s")
        self.assertEqual(format_duration(timedelta(minutes=1)), "1m0s")
        self.assertEqual(format_duration(timedelta(hours=24)), "24h0m0s")
        self.assertEqual(format_duration(timedelta(hours=168)), "168h0m0s")
        self.assertEqual(format_duration(timedelta(microseconds=1500)), "1.5ms")
        self.assertEqual(format_duration(timedelta(microseconds=300)), "300µs")
        self.assertEqual(format_duration(timedelta(seconds=1.5)), "1.5s")
        self.assertEqual(format_duration(-timedelta(seconds=1)), "-1s")


if __name__ == "__main__":
    unittest.main()
