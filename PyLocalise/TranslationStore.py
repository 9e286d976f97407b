import json
import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from typing import Any

from PyLocalise.Extraction import ExtractedMessage
from PyLocalise.LocaliseError import ExtractionStoreError, PersistenceError
from PyLocalise.TranslationEntry import TranslationEntry

default_encoding = 'utf-8'

class TranslationStore:
    """
    Map of translation keys to entries, persisted as a JSON object.

    Entries are merged last-write-wins: upserting a key that already exists replaces
    both its message and its source. The store is written in full on every Persist,
    via a temporary file that is renamed over the target so readers never see a
    partially written file.
    """
    def __init__(self, path : str, reset_corrupt : bool = False):
        self.path : str = path
        self.reset_corrupt : bool = reset_corrupt
        self._entries : dict[str, TranslationEntry] = {}

    @property
    def entries(self) -> list[TranslationEntry]:
        return list(self._entries.values())

    @property
    def keys(self) -> list[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key : object) -> bool:
        return key in self._entries

    def Get(self, key : str) -> TranslationEntry|None:
        return self._entries.get(key)

    def Reset(self) -> None:
        """
        Discard all entries
        """
        self._entries = {}

    def Load(self) -> None:
        """
        Read the persisted entries, replacing anything in memory.

        A missing file gives an empty store. A file that cannot be read or is not a valid
        extraction map raises ExtractionStoreError, unless reset_corrupt is set, in which
        case the problem is logged and the store starts empty.
        """
        self._entries = {}

        if not os.path.exists(self.path):
            logging.debug(f"No existing extraction file at {self.path}")
            return

        try:
            with open(self.path, 'r', encoding=default_encoding) as f:
                data = json.load(f)

            self._entries = self._decode(data)
            logging.info(f"Loaded {len(self._entries)} existing entries from {self.path}")

        except (OSError, ValueError) as e:
            if not self.reset_corrupt:
                raise ExtractionStoreError(f"{self.path} is not a valid extraction file. Fix or remove it, or use --overwrite", path=self.path, error=e)

            logging.warning(f"{self.path} is not a valid extraction file ({e}), starting with an empty store")
            self._entries = {}

    def Upsert(self, entries : Iterable[TranslationEntry]) -> None:
        """
        Insert or overwrite each entry by key
        """
        for entry in entries:
            self._entries[entry.key] = entry

    def UpsertMessages(self, messages : Iterable[ExtractedMessage], source : str) -> int:
        """
        Insert or overwrite entries for messages extracted from a source file, returning the number of messages
        """
        entries = [ TranslationEntry(message.key, message.message, source) for message in messages ]
        self.Upsert(entries)
        return len(entries)

    def ToDict(self) -> dict[str, dict[str,Any]]:
        return { key : entry.serialize() for key, entry in self._entries.items() }

    def Persist(self) -> None:
        """
        Write all entries to the extraction file, replacing its previous content
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        temp_path : str|None = None
        try:
            os.makedirs(directory, exist_ok=True)

            with tempfile.NamedTemporaryFile('w', encoding=default_encoding, dir=directory, prefix=".extraction-", suffix=".tmp", delete=False) as f:
                temp_path = f.name
                json.dump(self.ToDict(), f, ensure_ascii=False, indent=2)
                f.write('\n')

            _set_file_mode(temp_path, self.path)
            os.replace(temp_path, self.path)
            temp_path = None

        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Unable to write extraction results to {self.path}", path=self.path, error=e)

        finally:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)

        logging.debug(f"Wrote {len(self._entries)} entries to {self.path}")

    def _decode(self, data : Any) -> dict[str, TranslationEntry]:
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, found {type(data).__name__}")

        return { key : TranslationEntry.deserialize(key, value) for key, value in data.items() }

def _set_file_mode(temp_path : str, path : str) -> None:
    """
    Give the replacement file the mode of the file it replaces, or the umask default for a new file
    """
    if os.path.exists(path):
        shutil.copymode(path, temp_path)
    else:
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(temp_path, 0o666 & ~umask)
