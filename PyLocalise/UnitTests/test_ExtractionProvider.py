import os
import unittest
from unittest.mock import patch

from PyLocalise.ExtractionProvider import ExtractionProvider
from PyLocalise.Helpers.TestCases import DummyExtractionClient, DummyProvider
from PyLocalise.Helpers.Tests import log_input_expected_error, log_input_expected_result, log_test_name
from PyLocalise.LocaliseError import NoProviderError, ProviderError
from PyLocalise.Options import Options
from PyLocalise.SettingsType import SettingsType

class TestExtractionProvider(unittest.TestCase):
    def test_GetProviders(self):
        log_test_name("Available providers")

        providers = ExtractionProvider.get_providers()
        log_input_expected_result("providers", True, "OpenAI" in providers and "Claude" in providers)
        self.assertIn("OpenAI", providers)
        self.assertIn("Claude", providers)
        self.assertIs(providers.get("Dummy Provider"), DummyProvider)

    def test_UnknownProvider(self):
        log_test_name("Unknown provider")

        with self.assertRaises(ProviderError) as context:
            ExtractionProvider.create_provider("Nonexistent", SettingsType())

        log_input_expected_error("Nonexistent", ProviderError, context.exception)
        self.assertIn("OpenAI", str(context.exception))

    def test_NoProvider(self):
        log_test_name("No provider")

        with self.assertRaises(NoProviderError) as context:
            ExtractionProvider.get_provider(Options({ 'provider': "" }))

        log_input_expected_error("", NoProviderError, context.exception)

    def test_GetProviderFromOptions(self):
        log_test_name("Provider from options")

        options = Options({ 'provider': "Dummy Provider", 'model': "dummy-2", 'max_retries': 0 })
        provider = ExtractionProvider.get_provider(options)

        log_input_expected_result("model", "dummy-2", provider.selected_model)
        self.assertIsInstance(provider, DummyProvider)
        self.assertEqual(provider.selected_model, "dummy-2")
        self.assertEqual(options.model, "dummy-2")

        client = provider.GetExtractionClient(options.GetSettings())
        self.assertIsInstance(client, DummyExtractionClient)
        self.assertEqual(client.model, "dummy-2")
        self.assertEqual(client.max_retries, 0)

    def test_OpenAISettings(self):
        log_test_name("OpenAI provider settings")

        provider = ExtractionProvider.create_provider("OpenAI", SettingsType({ 'api_key': "sk-test", 'model': "gpt-test", 'temperature': 0.2 }))
        self.assertTrue(provider.ValidateSettings())
        self.assertEqual(provider.selected_model, "gpt-test")

        client = provider.GetExtractionClient(SettingsType({ 'max_retries': 1 }))
        self.assertEqual(client.model, "gpt-test")
        self.assertEqual(client.temperature, 0.2)
        self.assertEqual(client.max_retries, 1)

        provider = ExtractionProvider.create_provider("OpenAI", SettingsType({ 'api_key': "" }))
        self.assertFalse(provider.ValidateSettings())
        log_input_expected_result("validation message", True, bool(provider.validation_message))
        self.assertIn("API Key", provider.validation_message or "")

        provider = ExtractionProvider.create_provider("OpenAI", SettingsType({ 'api_key': "sk-test", 'api_base': "", 'use_httpx': True }))
        self.assertFalse(provider.ValidateSettings())

    def test_ClaudeSettings(self):
        log_test_name("Claude provider settings")

        with patch.dict(os.environ, { 'CLAUDE_API_KEY': "" }):
            provider = ExtractionProvider.create_provider("Claude", SettingsType({ 'api_key': "" }))
            self.assertFalse(provider.ValidateSettings())

        provider = ExtractionProvider.create_provider("Claude", SettingsType({ 'api_key': "test-key", 'model': "claude-test", 'max_tokens': 1024 }))
        self.assertTrue(provider.ValidateSettings())

        client = provider.GetExtractionClient(SettingsType())
        log_input_expected_result("model", "claude-test", client.model)
        self.assertEqual(client.model, "claude-test")
        self.assertEqual(getattr(client, 'max_tokens'), 1024)

if __name__ == '__main__':
    unittest.main()
