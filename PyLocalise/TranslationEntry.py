from typing import Any

class TranslationEntry:
    """
    A translation key with its default message and the file it was extracted from
    """
    def __init__(self, key : str, default_message : Any, source : str):
        self.key : str = key
        self.default_message : Any = default_message
        self.source : str = source

    def serialize(self) -> dict[str,Any]:
        return {
            'defaultMessage': self.default_message,
            'source': self.source
        }

    @classmethod
    def deserialize(cls, key : str, data : Any) -> 'TranslationEntry':
        """
        Rebuild an entry from its persisted form, raising ValueError if it is not one
        """
        if not isinstance(data, dict):
            raise ValueError(f"Entry '{key}' should be an object, found {type(data).__name__}")

        if 'defaultMessage' not in data:
            raise ValueError(f"Entry '{key}' has no defaultMessage")

        source = data.get('source')
        if source is not None and not isinstance(source, str):
            raise ValueError(f"Entry '{key}' has an invalid source")

        return cls(key, data['defaultMessage'], source or "")

    def __eq__(self, other : object) -> bool:
        if not isinstance(other, TranslationEntry):
            return NotImplemented
        return (self.key, self.default_message, self.source) == (other.key, other.default_message, other.source)

    def __repr__(self) -> str:
        return f"TranslationEntry({self.key!r}, {self.default_message!r}, {self.source!r})"
