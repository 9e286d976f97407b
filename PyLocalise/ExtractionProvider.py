import importlib
import logging
import pkgutil
from typing import cast

from PyLocalise.ExtractionClient import ExtractionClient
from PyLocalise.LocaliseError import NoProviderError, ProviderError
from PyLocalise.Options import Options
from PyLocalise.SettingsType import SettingsType

class ExtractionProvider:
    """
    Base class for extraction service providers.
    """
    name : str = ""
    _providers_imported : bool = False

    def __init__(self, name : str, settings : dict):
        self.name : str = name
        self.settings : SettingsType = SettingsType(settings)
        self.validation_message : str|None = None

    @property
    def selected_model(self) -> str|None:
        """
        The currently selected model for the provider
        """
        name = self.settings.get_str('model')
        return name.strip() if name else None

    def GetExtractionClient(self, settings : SettingsType) -> ExtractionClient:
        """
        Returns a new instance of the extraction client for this provider
        """
        raise NotImplementedError

    def ValidateSettings(self) -> bool:
        """
        Validate the settings for the provider
        """
        return True

    def UpdateSettings(self, settings : SettingsType|Options):
        """
        Update the settings for the provider
        """
        if isinstance(settings, Options):
            settings.InitialiseProviderSettings(self.name, self.settings)
            settings = settings.provider_settings.get(self.name, SettingsType())

        for k, v in settings.items():
            if k in self.settings and v is not None:
                self.settings[k] = v

    @classmethod
    def get_providers(cls) -> dict:
        """
        Return a dictionary of all available providers
        """
        if not ExtractionProvider._providers_imported:
            ExtractionProvider._providers_imported = True
            try:
                cls.import_providers(f"{__package__}.Providers")

            except ImportError as e:
                logging.error(f"Error importing providers: {str(e)}")

        providers = { cast(ExtractionProvider, provider).name : provider for provider in cls.__subclasses__() }

        return providers

    @classmethod
    def get_provider(cls, options : Options) -> 'ExtractionProvider':
        """
        Create a new instance of the provider selected in the options
        """
        if not isinstance(options, Options):
            raise ValueError("Options object required")

        if not options.provider:
            raise NoProviderError()

        provider_settings = options.current_provider_settings or SettingsType()

        extraction_provider : ExtractionProvider = cls.create_provider(options.provider, provider_settings)

        extraction_provider.UpdateSettings(options)

        return extraction_provider

    @classmethod
    def create_provider(cls, name : str, provider_settings : SettingsType) -> 'ExtractionProvider':
        providers = cls.get_providers().items()
        for provider_name, provider in providers:
            if provider_name == name:
                return provider(provider_settings)

        available = ", ".join(sorted(name for name, _ in providers))
        raise ProviderError(f"Unknown extraction provider: {name} (available: {available or 'none'})")

    @classmethod
    def import_providers(cls, package_name : str):
        """
        Dynamically import all modules in the providers package.
        """
        package = importlib.import_module(package_name)
        for loader, module_name, is_pkg in pkgutil.iter_modules(package.__path__, package.__name__ + '.'): # type: ignore[ignore-unused]
            if is_pkg:
                continue
            logging.debug(f"Importing provider: {module_name}")
            importlib.import_module(module_name)
