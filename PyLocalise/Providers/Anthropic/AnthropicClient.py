import logging
import time
from typing import Any

import anthropic

from PyLocalise.ExtractionClient import ExtractionClient
from PyLocalise.ExtractionPrompt import ExtractionPrompt
from PyLocalise.Helpers import FormatMessages
from PyLocalise.Helpers.Settings import GetStrSetting, GetIntSetting
from PyLocalise.LocaliseError import ExtractionError, ExtractionImpossibleError, ExtractionResponseError
from PyLocalise.SettingsType import SettingsType

class AnthropicClient(ExtractionClient):
    """
    Handles communication with Claude via the anthropic SDK
    """
    def __init__(self, settings : SettingsType):
        super().__init__(settings)

        if not self.api_key:
            raise ExtractionImpossibleError("API key must be set in .env or provided as an argument")

        logging.info(f"Extracting with Anthropic {self.model or 'default model'}")

        self.client : anthropic.Anthropic|None = None

    @property
    def api_key(self) -> str|None:
        return GetStrSetting(self.settings, 'api_key')

    @property
    def max_tokens(self) -> int:
        return GetIntSetting(self.settings, 'max_tokens') or 8192

    def _request_extraction(self, prompt : ExtractionPrompt, temperature : float|None = None) -> dict[str,Any]|None:
        """
        Request an extraction based on the provided prompt
        """
        if not self.client:
            self._create_client()

        logging.debug(f"Messages:\n{FormatMessages(prompt.messages)}")

        temperature = temperature or self.temperature

        if not prompt.messages:
            raise ExtractionError("No content provided for extraction")

        response = self._send_messages(prompt.messages, temperature)

        if response and response.get('finish_reason') == "length":
            raise ExtractionError("Too many tokens in response", extraction=response)

        return response

    def _send_messages(self, messages : list[dict[str,str]], temperature : float) -> dict[str, Any]|None:
        """
        Make a request to the LLM to provide an extraction
        """
        result : dict[str,Any] = {}

        for retry in range(self.max_retries + 1):
            if self.aborted:
                return None

            if not self.client:
                raise ExtractionImpossibleError("Client is not initialized")

            if self.model is None:
                raise ExtractionError("No model specified")

            try:
                start_time = time.monotonic()
                api_response = self.client.messages.create(
                    model=self.model,
                    messages=messages,          # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=self.max_tokens
                )

                if self.aborted:
                    return None

                if not api_response.content:
                    raise ExtractionResponseError("No content returned in the response", response=api_response)

                result['response_time'] = round(time.monotonic() - start_time, 2)

                if api_response.stop_reason == 'max_tokens':
                    result['finish_reason'] = "length"
                else:
                    result['finish_reason'] = api_response.stop_reason

                if api_response.usage:
                    result['prompt_tokens'] = api_response.usage.input_tokens
                    result['output_tokens'] = api_response.usage.output_tokens

                result['text'] = "".join(piece.text for piece in api_response.content if piece.type == 'text')

                return result

            except (anthropic.APITimeoutError, anthropic.RateLimitError) as e:
                if retry < self.max_retries and not self.aborted:
                    sleep_time = self.backoff_time * 2.0**retry
                    logging.warning(f"Anthropic API error: {self._get_error_message(e)}, retrying in {sleep_time} seconds...")
                    time.sleep(sleep_time)
                    continue

                raise ExtractionError(self._get_error_message(e), error=e)

            except anthropic.AuthenticationError as e:
                raise ExtractionImpossibleError(self._get_error_message(e), error=e)

            except anthropic.APIError as e:
                raise ExtractionError(self._get_error_message(e), error=e)

            except ExtractionError:
                raise

            except Exception as e:
                raise ExtractionError("Error communicating with provider", error=e)

        return None

    def _create_client(self) -> None:
        try:
            self.client = anthropic.Anthropic(api_key=self.api_key)

            # Try to add proxy settings if specified
            proxy = GetStrSetting(self.settings, 'proxy')
            if proxy:
                http_client = anthropic.DefaultHttpxClient(proxy = proxy)
                self.client = self.client.with_options(http_client=http_client)

        except anthropic.AnthropicError as e:
            raise ExtractionImpossibleError("Failed to initialize Anthropic client", error=e)

    def _abort(self) -> None:
        if self.client:
            self.client.close()
        return super()._abort()

    def _get_error_message(self, e : anthropic.APIError) -> str:
        """
        Extract a user-friendly error message from the API error
        """
        if hasattr(e, 'body') and isinstance(e.body, dict):
            if 'error' in e.body and isinstance(e.body['error'], dict):
                return str(e.body['error'].get('message', str(e)))
            elif 'message' in e.body:
                return str(e.body['message'])

        return str(e)
