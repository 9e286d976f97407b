"""
Typed access to settings read from the environment, settings.json or the command line.

Values arrive as strings from the environment and as native JSON types from the
settings file, so each getter accepts either and raises SettingsError for anything
it cannot interpret.
"""
from collections.abc import Mapping
from typing import Any

true_values = ('true', 'yes', '1')
false_values = ('false', 'no', '0', '')

class SettingsError(Exception):
    """ A setting has a value that cannot be used as the expected type """
    def __init__(self, key : str, value : Any, expected : str):
        super().__init__(f"Setting '{key}' should be {expected}, got {type(value).__name__} {value!r}")
        self.key = key
        self.value = value

def GetBoolSetting(settings : Mapping[str,Any], key : str, default : bool|None = False) -> bool:
    value = settings.get(key, default)
    if value is None or isinstance(value, bool):
        return bool(value)

    if isinstance(value, str):
        if value.strip().lower() in true_values:
            return True
        if value.strip().lower() in false_values:
            return False

    raise SettingsError(key, value, "a boolean")

def GetIntSetting(settings : Mapping[str,Any], key : str, default : int|None = None) -> int|None:
    value = settings.get(key, default)
    if value is None:
        return None

    # bool is an int subclass, but a flag is never a count
    if isinstance(value, bool):
        raise SettingsError(key, value, "an integer")

    if isinstance(value, (int, float)):
        return int(value)

    try:
        return int(value)
    except (TypeError, ValueError):
        raise SettingsError(key, value, "an integer")

def GetFloatSetting(settings : Mapping[str,Any], key : str, default : float|None = None) -> float|None:
    value = settings.get(key, default)
    if value is None:
        return None

    if isinstance(value, bool):
        raise SettingsError(key, value, "a number")

    try:
        return float(value)
    except (TypeError, ValueError):
        raise SettingsError(key, value, "a number")

def GetStrSetting(settings : Mapping[str,Any], key : str, default : str|None = None) -> str|None:
    """
    Strings are returned as they are, lists are joined with commas and anything else is converted with str
    """
    value = settings.get(key, default)
    if value is None or isinstance(value, str):
        return value

    if isinstance(value, list):
        return ', '.join(str(item) for item in value)

    return str(value)
