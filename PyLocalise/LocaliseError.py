from typing import Any

class LocaliseError(Exception):
    def __init__(self, message : str|None = None, error : Exception|None = None):
        super().__init__(message)
        self.error = error
        self.message = message

    def __str__(self) -> str:
        if self.message and self.error:
            return f"{self.message}: {self.error}"
        elif self.error:
            return str(self.error)
        elif self.message:
            return self.message
        return super().__str__()

class ConfigurationError(LocaliseError):
    """ Fatal error detected before any file is processed """
    pass

class NoProviderError(ConfigurationError):
    def __init__(self):
        super().__init__("Provider not specified in options")

class TooManyFilesError(ConfigurationError):
    def __init__(self, file_count : int, max_files : int):
        super().__init__(f"Found {file_count} files, which is more than the limit of {max_files}. Use a narrower pattern or raise --maxfiles")
        self.file_count = file_count
        self.max_files = max_files

class PromptTemplateError(ConfigurationError):
    def __init__(self, message : str, path : str|None = None, error : Exception|None = None):
        super().__init__(message, error)
        self.path = path

class ExtractionStoreError(ConfigurationError):
    """ The persisted extraction file exists but cannot be used """
    def __init__(self, message : str, path : str, error : Exception|None = None):
        super().__init__(message, error)
        self.path = path

class ProviderError(LocaliseError):
    def __init__(self, message : str|None = None, provider : Any = None):
        super().__init__(message)
        self.provider = provider

class ProviderConfigurationError(ProviderError):
    def __init__(self, message : str, provider : Any, error : Exception|None = None):
        super().__init__(message, provider)
        self.error = error

class ExtractionError(LocaliseError):
    def __init__(self, message : str, extraction : Any = None, error : Exception|None = None):
        super().__init__(message)
        self.extraction = extraction
        self.error = error

class ExtractionImpossibleError(ExtractionError):
    """ No chance of retry succeeding """
    def __init__(self, message : str, error : Exception|None = None):
        super().__init__(message, error=error)

class ExtractionResponseError(ExtractionError):
    def __init__(self, message : str, response : Any):
        super().__init__(message)
        self.response = response

class PatchError(LocaliseError):
    def __init__(self, message : str, filepath : str|None = None, error : Exception|None = None):
        super().__init__(message, error)
        self.filepath = filepath

class PersistenceError(LocaliseError):
    """ The extraction results could not be written """
    def __init__(self, message : str, path : str, error : Exception|None = None):
        super().__init__(message, error)
        self.path = path
