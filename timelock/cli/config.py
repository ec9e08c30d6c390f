import click

from timelock.cli.options import group_options
from timelock.cli.utils import get_env_bool
from timelock.utilities.emitters import StdoutEmitter
from timelock.utilities.logging import GlobalLoggerSettings, Logger


class GroupGeneralConfig:
    __option_name__ = 'general_config'

    verbosity = 0

    # Environment Variables
    log_to_file = get_env_bool("TIMELOCK_FILE_LOGS", True)
    log_to_json_file = get_env_bool("TIMELOCK_JSON_LOGS", False)

    def __init__(
        self,
        verbose: bool,
        quiet: bool,
        no_logs: bool,
        console_logs: bool,
        file_logs: bool,
        json_logs: bool,
        log_level: str,
        debug: bool,
    ):
        self.log = Logger(self.__class__.__name__)

        # Session Emitter for pre and post session engagement.
        if verbose and quiet:
            raise click.BadOptionUsage(
                option_name="quiet",
                message="--verbose and --quiet are mutually exclusive "
                        "and cannot be used at the same time.")

        if verbose:
            GroupGeneralConfig.verbosity = 2
        elif quiet:
            GroupGeneralConfig.verbosity = 0
        else:
            GroupGeneralConfig.verbosity = 1

        self.emitter = StdoutEmitter(verbosity=GroupGeneralConfig.verbosity)

        if verbose:
            self.emitter.message("Verbose mode is enabled", color='blue')

        # Logging
        if debug and no_logs:
            message = "--debug and --no-logs cannot be used at the same time."
            raise click.BadOptionUsage(option_name="no-logs", message=message)

        # Defaults
        if file_logs is None:
            file_logs = self.log_to_file
        if json_logs is None:
            json_logs = self.log_to_json_file

        if debug:
            console_logs = True
            file_logs = True
            log_level = 'debug'

        if no_logs:
            console_logs = False
            file_logs = False
            json_logs = False

        GlobalLoggerSettings.set_log_level(log_level_name=log_level)

        if console_logs:
            GlobalLoggerSettings.start_console_logging()
        if file_logs:
            GlobalLoggerSettings.start_text_file_logging()
        if json_logs:
            GlobalLoggerSettings.start_json_file_logging()

        self.debug = debug


group_general_config = group_options(
    GroupGeneralConfig,

    verbose=click.option('-v', '--verbose', help="Verbose console messages", is_flag=True),
    quiet=click.option('-Q', '--quiet', help="Disable console messages", is_flag=True),
    no_logs=click.option('-L', '--no-logs', help="Disable all logging output", is_flag=True),

    console_logs=click.option(
        '--console-logs/--no-console-logs',
        help="Enable/disable logging to console. Defaults to `--no-console-logs`.",
        default=False),

    file_logs=click.option(
        '--file-logs/--no-file-logs',
        help="Enable/disable logging to text file. Defaults to TIMELOCK_FILE_LOGS, or to `--file-logs` if it is not set.",
        default=None,
    ),
    json_logs=click.option(
        "--json-logs/--no-json-logs",
        help="Enable/disable logging to a json file. Defaults to TIMELOCK_JSON_LOGS, or to `--no-json-logs` if it is not set.",
        default=None),

    log_level=click.option(
        '--log-level', help="The log level for this process.  Is overridden by --debug.",
        type=click.Choice(['critical', 'error', 'warn', 'info', 'debug']),
        default='info'),

    debug=click.option(
        '-D', '--debug',
        help="Enable debugging mode. Also sets log level to \"debug\" and turns on console and file logging.",
        is_flag=True),
)
