import importlib.util
import logging
import os

if not importlib.util.find_spec("openai"):
    logging.info("OpenAI SDK is not installed. OpenAI provider will not be available")
else:
    from PyLocalise.ExtractionClient import ExtractionClient
    from PyLocalise.ExtractionProvider import ExtractionProvider
    from PyLocalise.Helpers.Settings import GetStrSetting, GetFloatSetting, GetBoolSetting
    from PyLocalise.Options import env_float
    from PyLocalise.Providers.OpenAI.OpenAIClient import OpenAIClient
    from PyLocalise.SettingsType import SettingsType

    class OpenAiProvider(ExtractionProvider):
        name = "OpenAI"

        default_model = "gpt-4o-mini"

        def __init__(self, settings : SettingsType):
            super().__init__(self.name, {
                "api_key": GetStrSetting(settings, 'api_key', os.getenv('OPENAI_API_KEY')),
                "api_base": GetStrSetting(settings, 'api_base', os.getenv('OPENAI_API_BASE')),
                "model": GetStrSetting(settings, 'model', os.getenv('OPENAI_MODEL', self.default_model)),
                'temperature': GetFloatSetting(settings, 'temperature', env_float('OPENAI_TEMPERATURE', 0.0)),
                'rate_limit': GetFloatSetting(settings, 'rate_limit', env_float('OPENAI_RATE_LIMIT')),
                'use_httpx': GetBoolSetting(settings, 'use_httpx', os.getenv('OPENAI_USE_HTTPX', "False") == "True"),
                'proxy': GetStrSetting(settings, 'proxy', os.getenv('OPENAI_PROXY')),
            })

        @property
        def api_key(self) -> str|None:
            return GetStrSetting(self.settings, 'api_key')

        @property
        def api_base(self) -> str|None:
            return GetStrSetting(self.settings, 'api_base')

        def GetExtractionClient(self, settings : SettingsType) -> ExtractionClient:
            client_settings = SettingsType(self.settings.copy())
            client_settings.update(settings)
            return OpenAIClient(client_settings)

        def ValidateSettings(self) -> bool:
            """
            Validate the settings for the provider
            """
            if not self.api_key:
                self.validation_message = "API Key is required. Set OPENAI_API_KEY or use --apikey"
                return False

            if GetBoolSetting(self.settings, 'use_httpx') and not self.api_base:
                self.validation_message = "API base must be set when using httpx"
                return False

            return True
