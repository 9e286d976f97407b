import logging

import regex
from unidiff import PatchSet
from unidiff.errors import UnidiffParseError
from unidiff.patch import Hunk

from PyLocalise.Helpers.Parse import StripCodeFence

_hunk_header_pattern = regex.compile(r"^@@ -(?P<source_start>\d+)(?:,\d+)? \+(?P<target_start>\d+)(?:,\d+)? @@(?P<section>.*)$")
_diff_header_pattern = regex.compile(r"^(diff |index )")

class PatchResult:
    """
    Outcome of applying a patch: the resulting text and how many hunks applied
    """
    def __init__(self, text : str, hunks_total : int = 0, hunks_applied : int = 0):
        self.text : str = text
        self.hunks_total : int = hunks_total
        self.hunks_applied : int = hunks_applied

    @property
    def applied(self) -> bool:
        return self.hunks_applied > 0

    def __repr__(self) -> str:
        return f"PatchResult(hunks_applied={self.hunks_applied}/{self.hunks_total})"

class PatchApplier:
    """
    Applies unified-diff patches to file content, tolerating hunks that do not match.

    Every hunk is applied on its own against the original content and the result of the
    last hunk that applied is returned. Hunks whose context cannot be found are skipped.
    A patch that is empty or cannot be parsed has no hunks, so the original content is
    returned unchanged.
    """
    def Apply(self, original : str, patch_text : str|None) -> str:
        return self.ApplyWithReport(original, patch_text).text

    def ApplyWithReport(self, original : str, patch_text : str|None) -> PatchResult:
        hunks = self.ParseHunks(patch_text)
        if not hunks:
            return PatchResult(original)

        newline = "\r\n" if "\r\n" in original else "\n"
        trailing_newline = original.endswith("\n") or not original
        lines = _split_lines(original)

        result = PatchResult(original, hunks_total=len(hunks))
        for number, hunk in enumerate(hunks, start=1):
            patched_lines = self.ApplyHunk(lines, hunk, newline)
            if patched_lines is None:
                logging.debug(f"Hunk {number} of {len(hunks)} does not match the content, skipping")
                continue

            result.text = _join_lines(patched_lines, newline, trailing_newline)
            result.hunks_applied += 1

        return result

    def ParseHunks(self, patch_text : str|None) -> list[Hunk]:
        """
        Parse the hunks of a unified-diff patch, for any number of files
        """
        if not patch_text or not patch_text.strip():
            return []

        patch_text = self.NormalisePatch(patch_text)

        try:
            patch_set = PatchSet.from_string(patch_text)

        except UnidiffParseError as e:
            logging.warning(f"Unable to parse patch: {e}")
            return []

        return [ hunk for patched_file in patch_set for hunk in patched_file ]

    def NormalisePatch(self, patch_text : str) -> str:
        """
        Make model-written patches parseable: remove a surrounding code fence, add a file
        header when the patch only has hunks, and recount the hunk line counts.
        """
        lines = _split_patch_lines(StripCodeFence(patch_text))

        first_content = next((line for line in lines if line.strip()), "")
        if first_content.startswith("@@"):
            lines = ["--- a/source", "+++ b/source"] + lines

        output : list[str] = []
        index = 0
        while index < len(lines):
            match = _hunk_header_pattern.match(lines[index])
            if not match:
                output.append(lines[index])
                index += 1
                continue

            body : list[str] = []
            index += 1
            while index < len(lines) and not _is_hunk_end(lines, index):
                body.append(lines[index])
                index += 1

            # Blank lines at the end of a hunk separate it from the next one
            while body and not body[-1].strip():
                body.pop()

            body = [ line if line else " " for line in body ]
            source_count = sum(1 for line in body if line[0] in (" ", "-"))
            target_count = sum(1 for line in body if line[0] in (" ", "+"))

            output.append(f"@@ -{match.group('source_start')},{source_count} +{match.group('target_start')},{target_count} @@{match.group('section')}")
            output.extend(body)

        return "\n".join(output) + "\n"

    def ApplyHunk(self, lines : list[str], hunk : Hunk, newline : str = "\n") -> list[str]|None:
        """
        Apply a single hunk to the lines, or return None if its source lines cannot be found.

        Lines keep their own line endings. Context lines are taken from the content as they
        are, and added lines end with the newline given.
        """
        source = [ _strip_newline(line.value) for line in hunk.source_lines() ]

        if not source:
            # Pure insertion, source_start is the line after which to insert
            position = min(max(hunk.source_start, 0), len(lines))
        else:
            position = self._find_source(lines, source, hunk.source_start - 1)
            if position is None:
                return None

        patched : list[str] = []
        cursor = position
        for line in hunk:
            if line.is_context:
                patched.append(lines[cursor])
                cursor += 1
            elif line.is_removed:
                cursor += 1
            elif line.is_added:
                patched.append(_strip_newline(line.value) + newline)

        return lines[:position] + patched + lines[cursor:]

    def _find_source(self, lines : list[str], source : list[str], expected : int) -> int|None:
        """
        Search outwards from the expected position for the hunk's source lines
        """
        last_start = len(lines) - len(source)
        if last_start < 0:
            return None

        expected = min(max(expected, 0), last_start)
        for offset in range(0, last_start + 1):
            for position in (expected - offset, expected + offset):
                if 0 <= position <= last_start and _matches(lines, source, position):
                    return position
                if offset == 0:
                    break

        return None

def _split_lines(text : str) -> list[str]:
    """
    Split text into lines at \n only, each line keeping its own ending
    """
    lines = [ line + "\n" for line in text.split("\n") ]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines

def _join_lines(lines : list[str], newline : str, trailing_newline : bool) -> str:
    """
    Join lines that keep their own endings, ending the file the way the original did
    """
    lines = [ line if line.endswith("\n") else line + newline for line in lines ]
    if lines and not trailing_newline:
        lines[-1] = _strip_newline(lines[-1])
    return "".join(lines)

def _split_patch_lines(patch_text : str) -> list[str]:
    return [ line[:-1] if line.endswith("\r") else line for line in patch_text.split("\n") ]

def _strip_newline(value : str) -> str:
    return value.rstrip("\r\n")

def _matches(lines : list[str], source : list[str], position : int) -> bool:
    return all(lines[position + i].rstrip() == line.rstrip() for i, line in enumerate(source))

def _is_hunk_end(lines : list[str], index : int) -> bool:
    """
    A hunk body ends at the next hunk header or the next file header
    """
    line = lines[index]
    if line.startswith("@@") or _diff_header_pattern.match(line):
        return True

    return line.startswith("--- ") and index + 1 < len(lines) and lines[index + 1].startswith("+++ ")
