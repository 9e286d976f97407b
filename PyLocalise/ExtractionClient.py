import logging
import time
from collections.abc import Mapping
from typing import Any

from PyLocalise.ExtractionPrompt import ExtractionPrompt
from PyLocalise.Helpers.Settings import GetFloatSetting, GetIntSetting, GetStrSetting
from PyLocalise.SettingsType import SettingType, SettingsType

class ExtractionClient:
    """
    Handles communication with the extraction provider
    """
    def __init__(self, settings : SettingsType|Mapping[str, SettingType]):
        self.settings: SettingsType = SettingsType(settings)
        self.aborted: bool = False

    @property
    def model(self) -> str|None:
        return GetStrSetting(self.settings, 'model')

    @property
    def rate_limit(self) -> float|None:
        return GetFloatSetting(self.settings, 'rate_limit')

    @property
    def temperature(self) -> float:
        return GetFloatSetting(self.settings, 'temperature') or 0.0

    @property
    def max_retries(self) -> int:
        max_retries = GetIntSetting(self.settings, 'max_retries')
        return max_retries if max_retries is not None else 2

    @property
    def backoff_time(self) -> float:
        return GetFloatSetting(self.settings, 'backoff_time') or 4.0

    def BuildExtractionPrompt(self, template : str|None, file_path : str, file_content : str) -> ExtractionPrompt:
        """
        Generate the prompt for a source file
        """
        prompt = ExtractionPrompt(template)
        prompt.GenerateMessages(file_path, file_content)
        return prompt

    def RequestExtraction(self, prompt : ExtractionPrompt, temperature : float|None = None) -> dict[str,Any]|None:
        """
        Send the prompt to the provider and return the response, respecting the rate limit
        """
        start_time = time.monotonic()

        response = self._request_extraction(prompt, temperature)

        if self.aborted or response is None:
            return None

        if response.get('text'):
            logging.debug(f"Response:\n{response['text']}")

        # If a rate limit is specified ensure a minimum duration for each request
        rate_limit = self.rate_limit
        if rate_limit and rate_limit > 0.0:
            minimum_duration = 60.0 / rate_limit

            elapsed_time = time.monotonic() - start_time
            if elapsed_time < minimum_duration:
                sleep_time = minimum_duration - elapsed_time
                logging.debug(f"Sleeping for {sleep_time:.2f} seconds to respect rate limit")
                time.sleep(sleep_time)

        return response

    def AbortExtraction(self) -> None:
        self.aborted = True
        self._abort()

    def _request_extraction(self, prompt : ExtractionPrompt, temperature : float|None = None) -> dict[str,Any]|None:
        """
        Make a request to the API, returning a dictionary with the response 'text' and metadata
        """
        _ = prompt, temperature  # Mark as accessed to avoid lint warnings
        raise NotImplementedError

    def _abort(self) -> None:
        # Try to terminate ongoing requests
        pass
