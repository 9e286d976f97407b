"""Entry point functions for llm-localise command line tools."""

import os
import sys
import logging

# Add the parent directory to the sys path so that modules can be found
base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(base_path)

def _provider_error_details(error : Exception|None) -> str|None:
    """ Try to find the error payload returned by the provider """
    from PyLocalise.Helpers.Parse import ParseErrorMessageFromText

    if error is None:
        return None

    body = getattr(error, 'body', None)
    if isinstance(body, dict):
        return str(body)

    response = getattr(error, 'response', None)
    text = getattr(response, 'text', None)
    if isinstance(text, str) and text:
        return ParseErrorMessageFromText(text) or text

    return None

def llm_localise(argv : list[str]|None = None) -> int:
    """Entry point for llm-localise command."""
    from scripts.localise_common import InitLogger, CreateArgParser, CreateOptions, CreateClient, CreatePipeline, FindSourceFiles
    from PyLocalise.LocaliseError import LocaliseError
    from PyLocalise.Options import Options

    parser = CreateArgParser("Extracts translatable messages from source files using an LLM, generating patches to replace them with translation calls")
    args = parser.parse_args(argv)

    logger_options = InitLogger("llm-localise", args.debug)

    try:
        options : Options = CreateOptions(args)

        filepaths = FindSourceFiles(args.input, options.get_str('file_extension'))
        if not filepaths:
            logging.warning(f"No files found matching {args.input}")
            return 0

        logging.info(f"Found {len(filepaths)} files to process")

        client = CreateClient(options)

        pipeline = CreatePipeline(options, client)

        pipeline.ProcessFiles(filepaths)

        logging.info(f"Log written to {logger_options.log_path}")
        return 0

    except LocaliseError as e:
        print(f"Error: {e}", file=sys.stderr)
        details = _provider_error_details(e.error)
        if details:
            print(details, file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("Error: interrupted", file=sys.stderr)
        return 1

    except Exception as e:
        logging.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

def main() -> None:
    sys.exit(llm_localise())
