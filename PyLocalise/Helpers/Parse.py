import json
import logging
import regex

_code_fence_pattern = regex.compile(r"^\s*```[\w+-]*[ \t]*\r?\n(?P<body>.*?)\r?\n?```\s*$", regex.DOTALL)

def StripCodeFence(text : str) -> str:
    """
    Remove a markdown code fence wrapped around the whole text, if there is one
    """
    match = _code_fence_pattern.match(text)
    return match.group('body') if match else text

def ExtractJsonObjectText(text : str|None) -> str|None:
    """
    Find the JSON object in a model response, which may be fenced or surrounded by prose
    """
    if not text or not isinstance(text, str):
        return None

    text = StripCodeFence(text.strip()).strip()
    if text.startswith('{') and text.endswith('}'):
        return text

    brace_start = text.find('{')
    brace_end = text.rfind('}')
    if brace_start != -1 and brace_end > brace_start:
        return text[brace_start:brace_end + 1]

    return None

def ParseDelayFromHeader(value : str) -> float:
    """
    Try to figure out how long a suggested retry-after is
    """
    if not isinstance(value, str):
        return 12.3

    match = regex.match(r"([0-9\.]+)(\w+)?", value)
    if not match:
        return 32.1

    try:
        delay, unit = match.groups()
        delay = float(delay)
        unit = unit.lower() if unit else 's'
        if unit == 's':
            pass
        elif unit == 'm':
            delay *= 60
        elif unit == 'ms':
            delay /= 1000
        else:
            logging.error(f"Unexpected time unit '{unit}'")
            return 6.66

        return max(1, delay)  # ensure at least 1 second

    except ValueError as e:
        logging.error(f"Unexpected time value '{value}' ({e})")
        return 6.66

def ParseErrorMessageFromText(value: str) -> str|None:
    """
    Try to extract a human-friendly error message from an HTTP response body.

    Accepts raw text which may be:
    - A JSON object (e.g. {"error": {"message": "..."}})
    - A quoted JSON string
    - Text containing an embedded JSON object

    Returns the extracted message string if found, otherwise None.
    """
    if not isinstance(value, str):
        return None

    text = value.strip()

    # If wrapped in single or double quotes, strip them
    if len(text) > 1 and ((text.startswith("'") and text.endswith("'")) or (text.startswith('"') and text.endswith('"'))):
        text = text[1:-1]

    data = None
    json_text = ExtractJsonObjectText(text)
    if json_text:
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError:
            data = None

    if isinstance(data, dict):
        # Common: {"error": {"message": "..."}}
        err = data.get('error')
        if isinstance(err, dict):
            for key in ('message', 'Message', 'msg', 'description', 'detail', 'error_message'):
                val = err.get(key)
                if isinstance(val, str) and val.strip():
                    return val.strip()

        # Sometimes the message is at top-level
        for key in ('message', 'error_message', 'detail', 'description'):
            val = data.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()

    # Regex fallback: find "message":"..." handling escaped quotes
    match = regex.search(r'"message"\s*:\s*"((?:[^"\\]|\\.)*)"', text)
    if match:
        raw = match.group(1)
        try:
            return json.loads(f'"{raw}"')
        except json.JSONDecodeError:
            return raw

    return None
