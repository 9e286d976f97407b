import importlib.util
import logging
import os

if not importlib.util.find_spec("anthropic"):
    logging.info("Anthropic SDK is not installed. Claude provider will not be available")
else:
    from PyLocalise.ExtractionClient import ExtractionClient
    from PyLocalise.ExtractionProvider import ExtractionProvider
    from PyLocalise.Helpers.Settings import GetStrSetting, GetFloatSetting, GetIntSetting
    from PyLocalise.Options import env_float, env_int
    from PyLocalise.Providers.Anthropic.AnthropicClient import AnthropicClient
    from PyLocalise.SettingsType import SettingsType

    class Provider_Claude(ExtractionProvider):
        name = "Claude"

        default_model = "claude-3-5-haiku-latest"

        def __init__(self, settings : SettingsType):
            super().__init__(self.name, {
                "api_key": GetStrSetting(settings, 'api_key') or os.getenv('CLAUDE_API_KEY'),
                "model": GetStrSetting(settings, 'model') or os.getenv('CLAUDE_MODEL', self.default_model),
                "max_tokens": GetIntSetting(settings, 'max_tokens') or env_int('CLAUDE_MAX_TOKENS', 8192),
                'temperature': GetFloatSetting(settings, 'temperature', env_float('CLAUDE_TEMPERATURE', 0.0)),
                'rate_limit': GetFloatSetting(settings, 'rate_limit', env_float('CLAUDE_RATE_LIMIT')),
                'proxy': GetStrSetting(settings, 'proxy') or os.getenv('CLAUDE_PROXY'),
            })

        @property
        def api_key(self) -> str|None:
            return GetStrSetting(self.settings, 'api_key')

        def GetExtractionClient(self, settings : SettingsType) -> ExtractionClient:
            client_settings = SettingsType(self.settings.copy())
            client_settings.update(settings)
            return AnthropicClient(client_settings)

        def ValidateSettings(self) -> bool:
            """
            Validate the settings for the provider
            """
            if not self.api_key:
                self.validation_message = "API Key is required. Set CLAUDE_API_KEY or use --apikey"
                return False

            return True
