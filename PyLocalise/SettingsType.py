from __future__ import annotations
from collections.abc import Mapping
from typing import TypeAlias

from PyLocalise.Helpers.Settings import GetBoolSetting, GetFloatSetting, GetIntSetting, GetStrSetting

BasicType: TypeAlias = str | int | float | bool | list[str] | None
SettingType: TypeAlias = BasicType | dict[str, 'SettingType'] | dict[str, 'SettingsType']

class SettingsType(dict[str, SettingType]):
    """
    Dictionary of settings that can be stored as JSON, with typed getters
    """
    def __init__(self, settings : Mapping[str,SettingType]|None = None):
        super().__init__(settings or {})

    def get_bool(self, key : str, default : bool|None = False) -> bool:
        return GetBoolSetting(self, key, default)

    def get_int(self, key : str, default : int|None = None) -> int|None:
        return GetIntSetting(self, key, default)

    def get_float(self, key : str, default : float|None = None) -> float|None:
        return GetFloatSetting(self, key, default)

    def get_str(self, key : str, default : str|None = None) -> str|None:
        return GetStrSetting(self, key, default)

    def get_dict(self, key : str) -> dict[str, SettingType]:
        """
        Get a nested settings dictionary, stored back as SettingsType so changes to it are kept
        """
        value = self.get(key)
        if value is None:
            value = SettingsType()
            self[key] = value

        if not isinstance(value, dict):
            raise TypeError(f"Setting '{key}' should be a dictionary, got {type(value).__name__}")

        if not isinstance(value, SettingsType):
            value = SettingsType(value)
            self[key] = value

        return value
