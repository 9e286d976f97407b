import os
import tempfile
import unittest

from PyLocalise.ExtractionPrompt import ExtractionPrompt, LoadPromptTemplate, default_prompt_template
from PyLocalise.Helpers.Tests import log_input_expected_error, log_input_expected_result, log_test_name, write_text_file
from PyLocalise.LocaliseError import PromptTemplateError

class TestExtractionPrompt(unittest.TestCase):
    def test_FormatPrompt(self):
        log_test_name("Format prompt")

        prompt = ExtractionPrompt("Path: {file_path}\nContent:\n{file_content}")
        prompt.GenerateMessages("src/App.tsx", "<h1>Hello</h1>")

        expected = "Path: src/App.tsx\nContent:\n<h1>Hello</h1>"
        log_input_expected_result(prompt.template, expected, prompt.user_prompt)
        self.assertEqual(prompt.user_prompt, expected)
        self.assertEqual(prompt.messages, [ { 'role': 'user', 'content': expected } ])

    def test_PlaceholdersSubstitutedOnce(self):
        log_test_name("Placeholders substituted once")

        template = "{file_path} {file_content} {file_path} {file_content}"
        prompt = ExtractionPrompt(template)
        result = prompt.FormatPrompt("a.tsx", "content")

        expected = "a.tsx content {file_path} {file_content}"
        log_input_expected_result(template, expected, result)
        self.assertEqual(result, expected)

    def test_PlaceholdersInContentUntouched(self):
        log_test_name("Placeholders in file content are left alone")

        content = "const template = '{file_path}';"
        prompt = ExtractionPrompt("{file_content} from {file_path}")
        result = prompt.FormatPrompt("src/template.ts", content)

        expected = "const template = '{file_path}'; from src/template.ts"
        log_input_expected_result(content, expected, result)
        self.assertEqual(result, expected)

    def test_DefaultTemplate(self):
        log_test_name("Default template")

        prompt = ExtractionPrompt()
        prompt.GenerateMessages("src/App.tsx", "<h1>Hello</h1>")

        self.assertEqual(prompt.template, default_prompt_template)
        self.assertIn("src/App.tsx", prompt.user_prompt or "")
        self.assertIn("<h1>Hello</h1>", prompt.user_prompt or "")
        self.assertIn('{"k": "translation key", "m": "default message"}', prompt.user_prompt or "")

class TestLoadPromptTemplate(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_NoPath(self):
        log_test_name("Load prompt template without a path")
        self.assertEqual(LoadPromptTemplate(None), default_prompt_template)

    def test_LoadTemplate(self):
        log_test_name("Load prompt template")

        template = "Extract strings from {file_path}:\n{file_content}\n"
        path = write_text_file(self.temp_dir.name, "prompt.txt", template)

        result = LoadPromptTemplate(path)
        log_input_expected_result(path, template, result)
        self.assertEqual(result, template)

    def test_MissingTemplate(self):
        log_test_name("Missing prompt template")

        path = os.path.join(self.temp_dir.name, "missing.txt")
        with self.assertRaises(PromptTemplateError) as context:
            LoadPromptTemplate(path)

        log_input_expected_error(path, PromptTemplateError, context.exception)
        self.assertEqual(context.exception.path, path)

    def test_TemplateMissingPlaceholder(self):
        log_test_name("Prompt template missing a placeholder")

        for template in ["Only {file_path}", "Only {file_content}", "Neither"]:
            with self.subTest(template=template):
                path = write_text_file(self.temp_dir.name, "prompt.txt", template)
                with self.assertRaises(PromptTemplateError) as context:
                    LoadPromptTemplate(path)

                log_input_expected_error(template, PromptTemplateError, context.exception)

if __name__ == '__main__':
    unittest.main()
