from json import JSONDecodeError
import logging
import time
from typing import Any

import httpx
import openai
from openai.types.chat import ChatCompletion

from PyLocalise.ExtractionClient import ExtractionClient
from PyLocalise.ExtractionPrompt import ExtractionPrompt
from PyLocalise.Helpers import FormatMessages
from PyLocalise.Helpers.Parse import ParseDelayFromHeader
from PyLocalise.Helpers.Settings import GetStrSetting, GetBoolSetting
from PyLocalise.LocaliseError import ExtractionError, ExtractionImpossibleError, ExtractionResponseError
from PyLocalise.SettingsType import SettingsType

class OpenAIClient(ExtractionClient):
    """
    Handles chat communication with OpenAI to request extractions
    """
    def __init__(self, settings : SettingsType):
        super().__init__(settings)

        if not self.api_key:
            raise ExtractionImpossibleError("API key must be set in .env or provided as an argument")

        logging.info(f"Extracting with model {self.model or 'default'}, using API base: {self.api_base or 'default'}")

        self.client: openai.OpenAI|None = None

    @property
    def api_key(self) -> str|None:
        return GetStrSetting(self.settings, 'api_key')

    @property
    def api_base(self) -> str|None:
        return GetStrSetting(self.settings, 'api_base')

    @property
    def reuse_client(self) -> bool:
        return GetBoolSetting(self.settings, 'reuse_client', True)

    def _request_extraction(self, prompt : ExtractionPrompt, temperature : float|None = None) -> dict[str,Any]|None:
        """
        Request an extraction based on the provided prompt
        """
        logging.debug(f"Messages:\n{FormatMessages(prompt.messages)}")

        temperature = temperature or self.temperature

        response = self._try_send_messages(prompt, temperature)

        if response:
            if response.get('finish_reason') == "quota_reached":
                raise ExtractionImpossibleError("Account quota reached, please upgrade your plan or wait until it renews")

            if response.get('finish_reason') == "length":
                raise ExtractionError("Too many tokens in response", extraction=response)

        return response

    def _send_messages(self, prompt : ExtractionPrompt, temperature : float) -> dict[str, Any]|None:
        """
        Make a request to an OpenAI-compatible chat API
        """
        response = {}

        if not self.client:
            raise ExtractionError("Client is not initialized")

        if not self.model:
            raise ExtractionError("No model specified")

        if not prompt.messages:
            raise ExtractionError("No content provided for extraction")

        result : ChatCompletion = self.client.chat.completions.create(
            model=self.model,
            messages=prompt.messages,      # type: ignore[arg-type]
            temperature=temperature if temperature else openai.NOT_GIVEN,
        )

        if self.aborted:
            return None

        if not isinstance(result, ChatCompletion):
            raise ExtractionResponseError(f"Unexpected response type: {type(result).__name__}", response=result)

        if not result.choices:
            raise ExtractionResponseError("No choices returned in the response", response=result)

        if result.usage:
            response['prompt_tokens'] = result.usage.prompt_tokens
            response['output_tokens'] = result.usage.completion_tokens
            response['total_tokens'] = result.usage.total_tokens

        choice = result.choices[0]
        response['finish_reason'] = choice.finish_reason
        response['text'] = choice.message.content

        return response

    def _abort(self) -> None:
        if self.client:
            self.client.close()
        return super()._abort()

    def _try_send_messages(self, prompt : ExtractionPrompt, temperature : float) -> dict[str, Any]|None:
        for retry in range(self.max_retries + 1):
            if self.aborted:
                return None

            backoff_time = self.backoff_time * 2.0**retry

            try:
                if not self.client or not self.reuse_client:
                    self._create_client()

                start_time = time.monotonic()
                response = self._send_messages(prompt, temperature)
                if response is not None:
                    response['response_time'] = round(time.monotonic() - start_time, 2)

                return response

            except ExtractionResponseError as e:
                if retry < self.max_retries and not self.aborted:
                    logging.warning(f"Extraction response error: {e}, retrying in {backoff_time} seconds...")
                    time.sleep(backoff_time)
                    continue
                raise

            except openai.RateLimitError as e:
                if self.aborted:
                    return None

                retry_after = e.response.headers.get('x-ratelimit-reset-requests') or e.response.headers.get('Retry-After')
                if retry_after and retry < self.max_retries:
                    backoff_time = ParseDelayFromHeader(retry_after)
                    logging.warning(f"Rate limit hit, retrying in {backoff_time} seconds...")
                    time.sleep(backoff_time)
                    continue

                raise ExtractionImpossibleError("Rate limit or account quota reached", error=e)

            except openai.APITimeoutError as e:
                if retry < self.max_retries and not self.aborted:
                    logging.warning(f"API Timeout, retrying in {backoff_time} seconds...")
                    time.sleep(backoff_time)
                    continue
                raise ExtractionError("API timeout", error=e)

            except JSONDecodeError as e:
                if retry < self.max_retries and not self.aborted:
                    logging.warning(f"Invalid response received, retrying in {backoff_time} seconds...")
                    time.sleep(backoff_time)
                    continue
                raise ExtractionError("Invalid response received", error=e)

            except openai.AuthenticationError as e:
                raise ExtractionImpossibleError("Authentication failed, check the API key", error=e)

            except openai.APIConnectionError as e:
                raise ExtractionError("Unable to connect to the provider", error=e)

            except openai.APIStatusError as e:
                raise ExtractionError(f"Provider returned status {e.status_code}", error=e)

            except ExtractionError:
                raise

            except Exception as e:
                raise ExtractionImpossibleError("Unexpected error communicating with the provider", error=e)

        return None

    def _create_client(self) -> None:
        http_client: httpx.Client|None = None
        proxy = GetStrSetting(self.settings, 'proxy')
        if proxy:
            http_client = httpx.Client(proxy=proxy)

        elif GetBoolSetting(self.settings, 'use_httpx'):
            if self.api_base is None:
                raise ExtractionImpossibleError("API base must be set when using httpx")

            http_client = httpx.Client(base_url=self.api_base, follow_redirects=True)

        self.client = openai.OpenAI(api_key=self.api_key, base_url=self.api_base or None, http_client=http_client)
