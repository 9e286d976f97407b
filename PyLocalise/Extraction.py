from typing import Any

class ExtractedMessage:
    """
    A translation key and default message identified by the provider
    """
    def __init__(self, key : str, message : Any):
        self.key : str = key
        self.message : Any = message

    def __eq__(self, other : object) -> bool:
        if not isinstance(other, ExtractedMessage):
            return NotImplemented
        return self.key == other.key and self.message == other.message

    def __repr__(self) -> str:
        return f"ExtractedMessage({self.key!r}, {self.message!r})"

class Extraction:
    """
    The decoded answer for one source file: a patch and a list of extracted messages
    """
    def __init__(self, diff_patch : str|None = None, messages : list[ExtractedMessage]|None = None, content : dict[str,Any]|None = None):
        self.diff_patch : str = diff_patch or ""
        self.messages : list[ExtractedMessage] = messages or []
        self.content : dict[str,Any] = content or {}

    @property
    def empty(self) -> bool:
        return not self.messages and not self.has_patch

    @property
    def has_patch(self) -> bool:
        return bool(self.diff_patch.strip())

    @property
    def text(self) -> str|None:
        return self.content.get('text')

    @property
    def finish_reason(self) -> str|None:
        return self.content.get('finish_reason')

    @property
    def response_time(self):
        return self.content.get('response_time')

    def FormatResponse(self) -> str:
        """
        Format the response metadata for display
        """
        metadata = [ f"{k}: {v}" for k, v in self.content.items() if k != 'text' and v ]
        metadata.append(f"messages: {len(self.messages)}")
        metadata.append(f"patch: {'yes' if self.has_patch else 'no'}")
        return '\n'.join(metadata)

    def __repr__(self) -> str:
        return f"Extraction(messages={len(self.messages)}, patch={self.has_patch})"
