import os

from typing import Any

from PyLocalise.LocaliseError import LocaliseError

diff_extension = ".diff"

def GetDiffPath(filepath : str) -> str:
    """
    Path of the side artifact that holds the generated patch for a source file
    """
    return os.path.normpath(f"{filepath}{diff_extension}")

def FormatMessages(messages : list[dict[str,Any]]) -> str:
    lines : list[str] = []
    for index, message in enumerate(messages, start=1):
        lines.append(f"Message {index}")
        if 'role' in message:
            lines.append(f"Role: {message['role']}")
        if 'content' in message:
            if isinstance(message['content'], str):
                content = message['content'].replace('\\n', '\n')
                lines.extend(["--------------------", content])
            elif isinstance(message['content'], dict):
                for key, value in message['content'].items():
                    text = f"{key}: {value}".replace('\\n', '\n')
                    lines.append(text)
        lines.append("")

    return '\n'.join(lines)

def FormatErrorMessages(errors : list[LocaliseError|str]) -> str:
    """
    Extract error messages from a list of errors
    """
    return ", ".join([ error.message or str(error) if isinstance(error, LocaliseError) else str(error) for error in errors ])
