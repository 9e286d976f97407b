import glob
import logging
import os

from argparse import ArgumentParser, Namespace
from dataclasses import dataclass

from PyLocalise.ExtractionClient import ExtractionClient
from PyLocalise.ExtractionPipeline import ExtractionPipeline
from PyLocalise.ExtractionPrompt import LoadPromptTemplate
from PyLocalise.ExtractionProvider import ExtractionProvider
from PyLocalise.Helpers.Resources import config_dir
from PyLocalise.LocaliseError import ProviderConfigurationError
from PyLocalise.Options import Options
from PyLocalise.TranslationStore import TranslationStore

@dataclass
class LoggerOptions():
    file_handler: logging.FileHandler|None
    log_path: str

def InitLogger(logfilename: str, debug: bool = False) -> LoggerOptions:
    """ Initialise the logger with a file handler and return the path to the log file """
    log_path = os.path.join(config_dir, f"{logfilename}.log")
    file_handler = None

    if debug:
        logging_level = logging.DEBUG
    else:
        level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
        logging_level = getattr(logging, level_name, logging.INFO)

    # Create console logger
    logging.basicConfig(format='%(levelname)s: %(message)s', encoding='utf-8', level=logging_level)

    if debug:
        logging.debug("Debug logging enabled")

    # Create file handler with the same logging level
    try:
        os.makedirs(config_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8', mode='w')
        file_handler.setLevel(logging_level)
        file_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logging.getLogger('').addHandler(file_handler)

    except OSError as e:
        logging.warning(f"Unable to create log file at {log_path}: {e}")

    return LoggerOptions(file_handler=file_handler, log_path=log_path)

def CreateArgParser(description : str) -> ArgumentParser:
    """
    Create new arg parser with the command line arguments for extraction
    """
    parser = ArgumentParser(description=description)
    parser.add_argument('input', help="Glob pattern for the source files, or a directory to search")
    parser.add_argument('-p', '--provider', type=str, default=None, help="The extraction provider to use (OpenAI or Claude)")
    parser.add_argument('-k', '--apikey', type=str, default=None, help="API key for the provider")
    parser.add_argument('-b', '--apibase', type=str, default=None, help="API backend base address")
    parser.add_argument('-m', '--model', type=str, default=None, help="The model to use for extraction")
    parser.add_argument('-o', '--output', type=str, default=None, help="Path of the extraction file to write")
    parser.add_argument('--prompt', type=str, default=None, help="Path of a prompt template with {file_path} and {file_content} placeholders")
    parser.add_argument('--extension', type=str, default=None, help="File extension to search for when the input is a directory (default .tsx)")
    parser.add_argument('--noextract', action='store_true', help="Do not write extracted messages to the extraction file")
    parser.add_argument('--nodiff', action='store_true', help="Do not write the generated patch next to each source file")
    parser.add_argument('--apply', action='store_true', help="Apply the generated patch to each source file")
    parser.add_argument('--keepdiff', action='store_true', help="Keep the patch file after it has been applied")
    parser.add_argument('--overwrite', action='store_true', help="Discard any existing extraction file rather than merging into it")
    parser.add_argument('--resetcorrupt', action='store_true', help="Start with an empty extraction file if the existing one cannot be read")
    parser.add_argument('--maxfiles', type=int, default=None, help="Refuse to run if more than this many files are found")
    parser.add_argument('--ratelimit', type=float, default=None, help="Maximum number of requests per minute")
    parser.add_argument('--temperature', type=float, default=None, help="A higher temperature increases the random variance of the response")
    parser.add_argument('--stoponerror', action='store_true', help="Stop after the first file that cannot be processed")
    parser.add_argument('--httpx', action='store_true', help="Use the httpx library for custom api_base requests")
    parser.add_argument('--proxy', type=str, default=None, help="Proxy URL (e.g., socks://127.0.0.1:1089)")
    parser.add_argument('--debug', action='store_true', help="Run with DEBUG log level")
    return parser

def CreateOptions(args: Namespace, **kwargs) -> Options:
    """ Create options from the settings file and command line, with additional arguments """
    options = Options()
    options.LoadSettings()

    settings = {
        'provider': args.provider,
        'api_key': args.apikey,
        'api_base': args.apibase,
        'model': args.model,
        'proxy': args.proxy,
        'use_httpx': args.httpx or None,
        'output_file': args.output,
        'prompt_file': args.prompt,
        'file_extension': args.extension,
        'extract_messages': False if args.noextract else None,
        'generate_diff': False if args.nodiff else None,
        'apply_diff': args.apply or None,
        'delete_applied_diff': False if args.keepdiff else None,
        'overwrite': args.overwrite or None,
        'reset_corrupt_output': args.resetcorrupt or None,
        'max_files': args.maxfiles,
        'rate_limit': args.ratelimit,
        'temperature': args.temperature,
        'stop_on_error': args.stoponerror or None,
    }

    # Adding optional new keys from kwargs
    for key, value in kwargs.items():
        settings[key] = value

    options.Update(settings)
    return options

def FindSourceFiles(pattern : str, extension : str|None = None) -> list[str]:
    """
    Expand the input to a sorted list of files. A directory is searched recursively for the extension.
    """
    if os.path.isdir(pattern):
        extension = extension or ".tsx"
        if not extension.startswith('.'):
            extension = f".{extension}"
        pattern = os.path.join(pattern, "**", f"*{extension}")

    filepaths = [ path for path in glob.glob(pattern, recursive=True) if os.path.isfile(path) ]
    return sorted(filepaths)

def CreateClient(options : Options) -> ExtractionClient:
    """
    Initialise the extraction client for the provider selected in the options
    """
    extraction_provider = ExtractionProvider.get_provider(options)

    if not extraction_provider.ValidateSettings():
        raise ProviderConfigurationError(f"Invalid settings for provider {options.provider}: {extraction_provider.validation_message}", provider=extraction_provider.name)

    logging.info(f"Using extraction provider {extraction_provider.name}")

    return extraction_provider.GetExtractionClient(options.GetSettings())

def CreatePipeline(options : Options, client : ExtractionClient) -> ExtractionPipeline:
    """
    Create the extraction pipeline with the store and prompt template described by the options
    """
    prompt_template = LoadPromptTemplate(options.prompt_file)

    store = TranslationStore(options.output_file, reset_corrupt=options.get_bool('reset_corrupt_output'))

    return ExtractionPipeline(options, client, store, prompt_template=prompt_template)
