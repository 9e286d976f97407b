import os
import unittest

from PyLocalise.Helpers import FormatErrorMessages, GetDiffPath
from PyLocalise.Helpers.Parse import ExtractJsonObjectText, ParseDelayFromHeader, ParseErrorMessageFromText, StripCodeFence
from PyLocalise.Helpers.Tests import log_input_expected_result, log_test_name
from PyLocalise.LocaliseError import ExtractionError, PatchError

class TestParseDelayFromHeader(unittest.TestCase):
    test_cases = [
        ("5", 5.0),
        ("10s", 10.0),
        ("5m", 300.0),
        ("500ms", 1.0),
        ("1500ms", 1.5),
        ("abc", 32.1),
        ("12x", 6.66),
    ]

    def test_ParseDelayFromHeader(self):
        log_test_name("ParseDelayFromHeader")
        for value, expected in self.test_cases:
            with self.subTest(value=value):
                result = ParseDelayFromHeader(value)
                log_input_expected_result(value, expected, result)
                self.assertEqual(result, expected)

class TestStripCodeFence(unittest.TestCase):
    test_cases = [
        ("```json\n{\"a\": 1}\n```", "{\"a\": 1}"),
        ("```\nplain\n```", "plain"),
        ("  ```diff\r\n@@ -1 +1 @@\r\n```  ", "@@ -1 +1 @@"),
        ("no fence", "no fence"),
        ("text before ```json\n{}\n```", "text before ```json\n{}\n```"),
    ]

    def test_StripCodeFence(self):
        log_test_name("StripCodeFence")
        for value, expected in self.test_cases:
            with self.subTest(value=value):
                result = StripCodeFence(value)
                log_input_expected_result(value, expected, result)
                self.assertEqual(result, expected)

class TestExtractJsonObjectText(unittest.TestCase):
    test_cases = [
        ('{"d": "", "e": []}', '{"d": "", "e": []}'),
        ('```json\n{"d": ""}\n```', '{"d": ""}'),
        ('Here you go: {"e": []} Hope that helps', '{"e": []}'),
        ("No JSON here", None),
        ("", None),
        (None, None),
    ]

    def test_ExtractJsonObjectText(self):
        log_test_name("ExtractJsonObjectText")
        for value, expected in self.test_cases:
            with self.subTest(value=value):
                result = ExtractJsonObjectText(value)
                log_input_expected_result(value, expected, result)
                self.assertEqual(result, expected)

class TestParseErrorMessageFromText(unittest.TestCase):
    test_cases = [
        ('{"error": {"message": "Invalid API key", "type": "auth"}}', "Invalid API key"),
        ('{"message": "Overloaded"}', "Overloaded"),
        ('Error 500: {"error": {"detail": "Server error"}}', "Server error"),
        ('garbage "message": "Escaped \\"quote\\"" garbage', 'Escaped "quote"'),
        ("Not an error payload", None),
    ]

    def test_ParseErrorMessageFromText(self):
        log_test_name("ParseErrorMessageFromText")
        for value, expected in self.test_cases:
            with self.subTest(value=value):
                result = ParseErrorMessageFromText(value)
                log_input_expected_result(value, expected, result)
                self.assertEqual(result, expected)

class TestHelpers(unittest.TestCase):
    def test_GetDiffPath(self):
        log_test_name("GetDiffPath")
        result = GetDiffPath("src/components/App.tsx")
        log_input_expected_result("src/components/App.tsx", os.path.normpath("src/components/App.tsx.diff"), result)
        self.assertEqual(result, os.path.normpath("src/components/App.tsx.diff"))

    def test_FormatErrorMessages(self):
        log_test_name("FormatErrorMessages")
        errors = [ExtractionError("Request failed"), PatchError("Patch did not apply"), "plain"]
        result = FormatErrorMessages(errors)
        log_input_expected_result(errors, "Request failed, Patch did not apply, plain", result)
        self.assertEqual(result, "Request failed, Patch did not apply, plain")

if __name__ == '__main__':
    unittest.main()
