import json
import logging
from typing import Any

from PyLocalise.Extraction import Extraction, ExtractedMessage
from PyLocalise.Helpers.Parse import ExtractJsonObjectText

# Compact field names requested by the default prompt, with the long form as a fallback
patch_fields : list[str] = ['d', 'diffPatch', 'diff_patch', 'diff']
messages_fields : list[str] = ['e', 'extractedTranslationKeys', 'extracted', 'messages']
key_fields : list[str] = ['k', 'translationKey', 'key']
message_fields : list[str] = ['m', 'text', 'defaultMessage', 'message']

def _first_field(data : dict[str,Any], fields : list[str]) -> Any:
    for field in fields:
        if field in data:
            return data[field]
    return None

def DecodeMessages(items : Any) -> list[ExtractedMessage]:
    """
    Convert the list of extracted items into messages, dropping items without a usable key
    """
    if not isinstance(items, list):
        if items is not None:
            logging.warning(f"Expected a list of extracted messages, got {type(items).__name__}")
        return []

    messages : list[ExtractedMessage] = []
    for item in items:
        if not isinstance(item, dict):
            logging.debug(f"Ignoring extracted item that is not an object: {item!r}")
            continue

        key = _first_field(item, key_fields)
        if not isinstance(key, str) or not key:
            logging.debug(f"Ignoring extracted item without a translation key: {item!r}")
            continue

        message = _first_field(item, message_fields)
        messages.append(ExtractedMessage(key, message if message is not None else ""))

    return messages

def DecodeExtraction(text : str|None, content : dict[str,Any]|None = None) -> Extraction:
    """
    Decode a provider response into an Extraction.

    Empty or malformed responses decode to an empty Extraction instead of raising,
    so one bad answer cannot stop a batch.
    """
    json_text = ExtractJsonObjectText(text)
    if not json_text:
        if text and text.strip():
            logging.warning("Response did not contain a JSON object")
        return Extraction(content=content)

    try:
        data = json.loads(json_text)

    except json.JSONDecodeError as e:
        logging.warning(f"Unable to decode response as JSON: {e}")
        return Extraction(content=content)

    if not isinstance(data, dict):
        logging.warning(f"Expected a JSON object in the response, got {type(data).__name__}")
        return Extraction(content=content)

    diff_patch = _first_field(data, patch_fields)
    if not isinstance(diff_patch, str):
        if diff_patch is not None:
            logging.warning(f"Expected the diff patch to be a string, got {type(diff_patch).__name__}")
        diff_patch = ""

    messages = DecodeMessages(_first_field(data, messages_fields))

    return Extraction(diff_patch, messages, content=content)

def DecodeResponse(response : dict[str,Any]|None) -> Extraction:
    """
    Decode the response dictionary returned by an extraction client
    """
    if not response:
        return Extraction()

    return DecodeExtraction(response.get('text'), content=response)
