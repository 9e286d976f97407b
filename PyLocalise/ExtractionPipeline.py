import logging
import os
from collections.abc import Callable
from enum import Enum

from PyLocalise.Extraction import Extraction
from PyLocalise.ExtractionClient import ExtractionClient
from PyLocalise.ExtractionParser import DecodeResponse
from PyLocalise.Helpers import FormatErrorMessages, GetDiffPath
from PyLocalise.LocaliseError import ExtractionError, LocaliseError, PatchError, TooManyFilesError
from PyLocalise.Options import Options
from PyLocalise.PatchApplier import PatchApplier
from PyLocalise.TranslationStore import TranslationStore

default_encoding = 'utf-8'

class FileState(Enum):
    Pending = "pending"
    Requested = "requested"
    RequestFailed = "request failed"
    Decoded = "decoded"
    Stored = "stored"
    Skipped = "skipped"
    Patched = "patched"
    PatchFailed = "patch failed"
    PatchSkipped = "patch skipped"
    Done = "done"

class FileResult:
    """
    Record of the states a source file passed through
    """
    def __init__(self, filepath : str):
        self.filepath : str = filepath
        self.states : list[FileState] = [FileState.Pending]
        self.entries : int = 0
        self.error : LocaliseError|None = None

    @property
    def state(self) -> FileState:
        return self.states[-1]

    @property
    def failed(self) -> bool:
        return FileState.RequestFailed in self.states

    @property
    def patched(self) -> bool:
        return FileState.Patched in self.states

    @property
    def patch_failed(self) -> bool:
        return FileState.PatchFailed in self.states

    def Advance(self, state : FileState) -> None:
        self.states.append(state)

    def Fail(self, state : FileState, error : LocaliseError) -> None:
        self.error = error
        self.Advance(state)

    def __repr__(self) -> str:
        return f"FileResult({self.filepath!r}, {self.state.name})"

class ExtractionSummary:
    def __init__(self):
        self.results : list[FileResult] = []

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> list[FileResult]:
        return [ result for result in self.results if result.failed ]

    @property
    def patched(self) -> list[FileResult]:
        return [ result for result in self.results if result.patched ]

    @property
    def patch_failed(self) -> list[FileResult]:
        return [ result for result in self.results if result.patch_failed ]

    @property
    def entries(self) -> int:
        return sum(result.entries for result in self.results)

    def FormatSummary(self) -> str:
        summary = f"Processed {self.processed} files, extracted {self.entries} messages"
        if self.patched or self.patch_failed:
            summary += f", patched {len(self.patched)} files"
        if self.patch_failed:
            summary += f", {len(self.patch_failed)} patches did not apply"
        if self.failed:
            summary += f", {len(self.failed)} files failed"
        return summary

FileHandler = Callable[[str], FileResult]

class ExtractionPipeline:
    """
    Sends source files for extraction one at a time, in order, merging the extracted
    messages into the store and routing patches to the patch applier.

    Errors for a single file are logged and recorded in its FileResult, then the next
    file is processed. Only configuration and persistence errors stop the run.
    """
    def __init__(self, options : Options, client : ExtractionClient, store : TranslationStore, prompt_template : str|None = None, patch_applier : PatchApplier|None = None):
        self.client : ExtractionClient = client
        self.store : TranslationStore = store
        self.prompt_template : str|None = prompt_template
        self.patch_applier : PatchApplier = patch_applier or PatchApplier()

        self.extract_messages : bool = options.get_bool('extract_messages', True)
        self.generate_diff : bool = options.get_bool('generate_diff', True)
        self.apply_diff : bool = options.get_bool('apply_diff', False)
        self.delete_applied_diff : bool = options.get_bool('delete_applied_diff', True)
        self.overwrite : bool = options.get_bool('overwrite', False)
        self.stop_on_error : bool = options.get_bool('stop_on_error', False)
        self.max_files : int|None = options.max_files

        self.aborted : bool = False
        self.errors : list[LocaliseError] = []

    def AbortExtraction(self) -> None:
        self.aborted = True
        self.client.AbortExtraction()

    def CheckFileLimit(self, filepaths : list[str]) -> None:
        """
        Refuse to start if more files were found than the safety limit allows
        """
        if self.max_files and len(filepaths) > self.max_files:
            raise TooManyFilesError(len(filepaths), self.max_files)

    def InitialiseStore(self) -> None:
        """
        Start from an empty store if overwriting, otherwise load the existing extraction file
        """
        if self.overwrite:
            logging.info(f"Overwriting {self.store.path}")
            self.store.Reset()
            self.store.Persist()
        else:
            self.store.Load()

    def ProcessFiles(self, filepaths : list[str], handler : FileHandler|None = None) -> ExtractionSummary:
        """
        Process each file in order with the handler, which defaults to ProcessFile
        """
        self.CheckFileLimit(filepaths)

        if self.extract_messages:
            self.InitialiseStore()

        handler = handler or self.ProcessFile
        summary = ExtractionSummary()

        for filepath in filepaths:
            if self.aborted:
                logging.info("Extraction aborted")
                break

            logging.info(f"Processing: {filepath}")

            result = handler(filepath)
            summary.results.append(result)

            if result.error:
                self.errors.append(result.error)

            if result.failed and self.stop_on_error:
                logging.error(f"Failed to process {filepath}... stopping")
                break

        logging.info(summary.FormatSummary())

        if self.errors:
            logging.warning(f"Errors encountered: {FormatErrorMessages(self.errors)}")

        return summary

    def ProcessFile(self, filepath : str) -> FileResult:
        """
        Request, decode, store and patch a single file
        """
        result = FileResult(filepath)

        extraction = self.RequestExtraction(filepath, result)
        if extraction is None:
            return result

        if self.extract_messages:
            result.entries = self.store.UpsertMessages(extraction.messages, filepath)
            self.store.Persist()
            result.Advance(FileState.Stored)
        else:
            result.Advance(FileState.Skipped)

        patch_written = False
        if self.generate_diff:
            patch_written = self.WritePatchFile(filepath, extraction)

        if self.apply_diff:
            self.ApplyPatch(filepath, extraction, result, patch_written)
        else:
            result.Advance(FileState.PatchSkipped)

        result.Advance(FileState.Done)
        return result

    def RequestExtraction(self, filepath : str, result : FileResult) -> Extraction|None:
        """
        Ask the provider for an extraction and decode it, returning None if the request failed
        """
        try:
            with open(filepath, 'r', encoding=default_encoding, newline='') as f:
                content = f.read()

            prompt = self.client.BuildExtractionPrompt(self.prompt_template, filepath, content)

            result.Advance(FileState.Requested)
            response = self.client.RequestExtraction(prompt)

        except (OSError, UnicodeDecodeError) as e:
            logging.error(f"Unable to read {filepath}: {e}")
            result.Fail(FileState.RequestFailed, ExtractionError(f"Unable to read {filepath}", error=e))
            return None

        except ExtractionError as e:
            logging.error(f"Error extracting messages from {filepath}: {e}")
            result.Fail(FileState.RequestFailed, e)
            return None

        if self.aborted:
            return None

        extraction = DecodeResponse(response)
        result.Advance(FileState.Decoded)

        logging.debug(extraction.FormatResponse())

        if extraction.empty:
            logging.info(f"Nothing to extract from {filepath}")
        else:
            logging.info(f"Found {len(extraction.messages)} messages in {filepath}")

        return extraction

    def WritePatchFile(self, filepath : str, extraction : Extraction) -> bool:
        """
        Write the patch to the side artifact next to the source file, returning True if it was written.
        An artifact left by an earlier run is removed when there is no patch.
        """
        diff_path = GetDiffPath(filepath)
        try:
            if not extraction.has_patch:
                logging.debug(f"No patch generated for {filepath}")
                if os.path.exists(diff_path):
                    os.remove(diff_path)
                    logging.debug(f"Removed stale patch file {diff_path}")
                return False

            with open(diff_path, 'w', encoding=default_encoding, newline='') as f:
                f.write(extraction.diff_patch)

            logging.debug(f"Wrote patch to {diff_path}")
            return True

        except OSError as e:
            logging.error(f"Unable to write patch file {diff_path}: {e}")
            self.errors.append(PatchError(f"Unable to write patch file {diff_path}", filepath=filepath, error=e))
            return False

    def ApplyPatch(self, filepath : str, extraction : Extraction, result : FileResult, patch_written : bool = False) -> None:
        """
        Apply the patch to the source file, keeping the original if no hunk applies.
        The artifact is only read back if it was written for this extraction.
        """
        diff_path = GetDiffPath(filepath)
        try:
            patch_text = extraction.diff_patch
            if patch_written and os.path.exists(diff_path):
                with open(diff_path, 'r', encoding=default_encoding, newline='') as f:
                    patch_text = f.read()

            if not patch_text or not patch_text.strip():
                result.Advance(FileState.PatchSkipped)
                return

            with open(filepath, 'r', encoding=default_encoding, newline='') as f:
                content = f.read()

            patch_result = self.patch_applier.ApplyWithReport(content, patch_text)
            if not patch_result.applied:
                raise PatchError(f"No hunks of the patch could be applied to {filepath}", filepath=filepath)

            if patch_result.hunks_applied < patch_result.hunks_total:
                logging.warning(f"Applied {patch_result.hunks_applied} of {patch_result.hunks_total} hunks to {filepath}")

            if patch_result.text != content:
                with open(filepath, 'w', encoding=default_encoding, newline='') as f:
                    f.write(patch_result.text)

            logging.info(f"Patched {filepath}")
            result.Advance(FileState.Patched)

            if self.delete_applied_diff and os.path.exists(diff_path):
                os.remove(diff_path)

        except PatchError as e:
            logging.warning(str(e))
            result.Fail(FileState.PatchFailed, e)

        except (OSError, UnicodeDecodeError) as e:
            logging.error(f"Unable to apply patch to {filepath}: {e}")
            result.Fail(FileState.PatchFailed, PatchError(f"Unable to apply patch to {filepath}", filepath=filepath, error=e))
