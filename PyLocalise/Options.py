from __future__ import annotations
from collections.abc import Mapping
from copy import deepcopy
import json
import logging
import os
import dotenv

from PyLocalise.Helpers.Resources import config_dir
from PyLocalise.SettingsType import SettingType, SettingsType
from PyLocalise.version import __version__

settings_path = os.path.join(config_dir, 'settings.json')

# Load environment variables from .env file
dotenv.load_dotenv()

def env_bool(key : str, default : bool = False) -> bool:
    var = os.getenv(key, default)
    return True if var and str(var).lower() in ('true', 'yes', '1') else False

def env_int(key : str, default : int|None = None) -> int|None:
    value = os.getenv(key, default)
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return int(value)

def env_float(key : str, default : float|None = None) -> float|None:
    value = os.getenv(key, default)
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return float(value)

def env_str(key : str, default : str|None = None) -> str|None:
    value = os.getenv(key, default)
    return str(value) if value is not None else None

default_settings = {
    'version': __version__,
    'provider': env_str('PROVIDER', "OpenAI"),
    'provider_settings': SettingsType({}),
    'output_file': env_str('OUTPUT_FILE', "extraction.json"),
    'prompt_file': env_str('PROMPT_FILE', None),
    'file_extension': env_str('FILE_EXTENSION', ".tsx"),
    'extract_messages': env_bool('EXTRACT_MESSAGES', True),
    'generate_diff': env_bool('GENERATE_DIFF', True),
    'apply_diff': env_bool('APPLY_DIFF', False),
    'delete_applied_diff': env_bool('DELETE_APPLIED_DIFF', True),
    'overwrite': env_bool('OVERWRITE', False),
    'reset_corrupt_output': env_bool('RESET_CORRUPT_OUTPUT', False),
    'max_files': env_int('MAX_FILES', 100),
    'max_retries': env_int('MAX_RETRIES', 2),
    'backoff_time': env_float('BACKOFF_TIME', 4.0),
    'stop_on_error': env_bool('STOP_ON_ERROR', False),
}

class Options(SettingsType):
    def __init__(self, settings : SettingsType|Mapping[str, SettingType]|None = None, **kwargs : SettingType):
        """ Initialise the Options object with default options and any provided options. """
        super().__init__()

        self.update(deepcopy(default_settings))

        if settings:
            self.Update(settings)

        # Apply any explicit parameters
        self.update(kwargs)

    @property
    def provider(self) -> str:
        """ the name of the extraction provider """
        return self.get_str('provider') or ''

    @provider.setter
    def provider(self, value: str):
        self['provider'] = value

    @property
    def provider_settings(self) -> dict[str, SettingsType]:
        """ Settings for each provider, keyed by provider name """
        provider_settings = self.get_dict('provider_settings')
        for name, settings in provider_settings.items():
            if not isinstance(settings, SettingsType):
                provider_settings[name] = SettingsType(settings) # type: ignore[arg-type]
        return provider_settings # type: ignore[return-value]

    @property
    def current_provider_settings(self) -> SettingsType|None:
        if not self.provider or not self.provider in self.provider_settings:
            return None

        return self.provider_settings.get(self.provider)

    @property
    def model(self) -> str|None:
        current_provider_settings = self.current_provider_settings
        if not current_provider_settings:
            return None

        return current_provider_settings.get_str('model')

    @property
    def output_file(self) -> str:
        return self.get_str('output_file') or str(default_settings['output_file'])

    @property
    def prompt_file(self) -> str|None:
        return self.get_str('prompt_file')

    @property
    def max_files(self) -> int|None:
        return self.get_int('max_files')

    def Update(self, settings : Mapping[str, SettingType]) -> None:
        """ Merge settings, ignoring None values """
        filtered_settings = { k: deepcopy(v) for k, v in settings.items() if v is not None }
        self.update(filtered_settings)

    def GetSettings(self) -> SettingsType:
        """
        Get a copy of the settings dictionary with only the default keys included
        """
        return SettingsType({ key: deepcopy(self.get(key)) for key in self.keys() & default_settings.keys() })

    def LoadSettings(self, path : str|None = None) -> bool:
        """
        Load the settings from a JSON file. Settings in the file override the defaults.
        """
        path = path or settings_path
        if not os.path.exists(path):
            return False

        try:
            with open(path, "r", encoding="utf-8") as settings_file:
                settings = json.load(settings_file)

            if not settings or not isinstance(settings, dict):
                return False

            settings.pop('version', None)
            self.Update(settings)
            logging.debug(f"Loaded settings from {path}")
            return True

        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Error loading settings from {path}: {e}")
            return False

    def InitialiseProviderSettings(self, provider : str, settings : SettingsType) -> None:
        """
        Create or update the settings for a provider
        """
        if provider not in self.provider_settings:
            self.provider_settings[provider] = SettingsType(deepcopy(settings))

        self.MoveSettingsToProvider(provider, list(settings.keys()))

    def MoveSettingsToProvider(self, provider : str, keys : list[str]) -> None:
        """
        Move settings from the main options to a provider's settings
        """
        if provider not in self.provider_settings:
            self.provider_settings[provider] = SettingsType()

        settings_to_move : dict[str,SettingType] = {key: self.pop(key) for key in keys if key in self}
        if settings_to_move:
            self.provider_settings[provider].update(settings_to_move)
