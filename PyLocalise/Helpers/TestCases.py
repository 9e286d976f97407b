import json
from copy import deepcopy
from typing import Any

from PyLocalise.ExtractionClient import ExtractionClient
from PyLocalise.ExtractionPrompt import ExtractionPrompt
from PyLocalise.ExtractionProvider import ExtractionProvider
from PyLocalise.LocaliseError import ExtractionError
from PyLocalise.SettingsType import SettingsType

def BuildResponseText(messages : list[tuple[str,str]], diff_patch : str = "") -> str:
    """
    Build a provider answer in the compact form requested by the default prompt
    """
    return json.dumps({ 'd': diff_patch, 'e': [ { 'k': key, 'm': message } for key, message in messages ] })

class DummyProvider(ExtractionProvider):
    name = "Dummy Provider"

    def __init__(self, settings : SettingsType):
        super().__init__("Dummy Provider", {
            "model": "dummy",
            "data": settings.get('data', {}),
        })

    def GetExtractionClient(self, settings : SettingsType) -> ExtractionClient:
        client_settings = SettingsType(deepcopy(self.settings))
        client_settings.update(settings)
        return DummyExtractionClient(settings=client_settings)

class DummyExtractionClient(ExtractionClient):
    """
    Returns canned responses keyed by the file being processed, recording each request
    """
    def __init__(self, settings : SettingsType|dict|None = None, responses : dict[str,str]|None = None, failures : list[str]|None = None):
        super().__init__(settings or SettingsType())
        data : dict[str,Any] = self.settings.get('data') or {}    # type: ignore[assignment]
        self.responses : dict[str,str] = responses if responses is not None else data.get('responses', {})
        self.failures : list[str] = failures if failures is not None else data.get('failures', [])
        self.requests : list[str] = []
        self.current_file : str|None = None

    def BuildExtractionPrompt(self, template : str|None, file_path : str, file_content : str) -> ExtractionPrompt:
        self.current_file = file_path
        return super().BuildExtractionPrompt(template, file_path, file_content)

    def _request_extraction(self, prompt : ExtractionPrompt, temperature : float|None = None) -> dict[str,Any]|None:
        file_path = self.current_file or ""
        self.requests.append(file_path)

        if file_path in self.failures:
            raise ExtractionError(f"Dummy failure for {file_path}")

        text = self.responses.get(file_path, "")
        return { 'text': text, 'finish_reason': "stop" }
