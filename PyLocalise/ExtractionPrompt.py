import logging
import os

import regex

from PyLocalise.LocaliseError import PromptTemplateError

file_path_placeholder : str = "{file_path}"
file_content_placeholder : str = "{file_content}"

_placeholder_pattern = regex.compile(r"\{(file_path|file_content)\}")

default_prompt_template : str = """You are a developer working on a React project that needs to be translated into multiple languages. You have a source code file that is at {file_path} with the following content:
{file_content}

- Find all texts in the source code that should be translated and provide the translation key and the default message.
- If there is nothing to translate, respond with an empty diff patch and an empty list of extracted translations.
- Use FormatJS libraries to handle translations.
- Provide a valid diff patch (use Unified Diff format) with the changes needed to add the translation key to the source code, including the default message and any necessary changes to the code.
- Provide a list of extracted translations with the translation key and the default message in the following format: [{"k": "translation key", "m": "default message"}], where "k" is the translation key and "m" is the default message.
- Generate response as a minified valid JSON that looks like this: {"d": "diff patch", "e": [{"k": "translation key", "m": "default message"}]}
"""

def ValidatePromptTemplate(template : str, path : str|None = None) -> None:
    """
    Check that the template has both placeholders
    """
    for placeholder in (file_path_placeholder, file_content_placeholder):
        if placeholder not in template:
            raise PromptTemplateError(f"Prompt template is missing the {placeholder} placeholder", path=path)

def LoadPromptTemplate(path : str|None) -> str:
    """
    Load the prompt template from a file, or return the default template if no path is given
    """
    if not path:
        return default_prompt_template

    if not os.path.exists(path):
        raise PromptTemplateError(f"Prompt template {path} not found. Create it or omit --prompt to use the default template", path=path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            template = f.read()

    except (OSError, UnicodeDecodeError) as e:
        raise PromptTemplateError(f"Unable to read prompt template {path}", path=path, error=e)

    ValidatePromptTemplate(template, path)

    logging.debug(f"Loaded prompt template from {path}")
    return template

class ExtractionPrompt:
    """
    Prompt requesting an extraction for a single source file
    """
    def __init__(self, template : str|None = None):
        self.template : str = template or default_prompt_template
        self.user_prompt : str|None = None
        self.messages : list[dict[str,str]] = []

    def GenerateMessages(self, file_path : str, file_content : str) -> None:
        """
        Substitute the file path and content into the template, each exactly once
        """
        self.user_prompt = self.FormatPrompt(file_path, file_content)
        self.messages = [ { 'role': 'user', 'content': self.user_prompt } ]

    def FormatPrompt(self, file_path : str, file_content : str) -> str:
        """
        Single pass substitution, so placeholders inside the substituted values are left alone
        """
        values = { 'file_path': file_path, 'file_content': file_content }
        substituted : set[str] = set()

        def substitute(match : regex.Match) -> str:
            name = match.group(1)
            if name in substituted:
                return match.group(0)
            substituted.add(name)
            return values[name]

        return _placeholder_pattern.sub(substitute, self.template)
