import logging
import logging.config
from rich.console import Console, ConsoleRenderable
from rich.logging import RichHandler
from rich.traceback import Traceback

_LOGGER = logging.getLogger(__name__)

USER_LOGGER_NAME = 'user_logger'


class ConditionalRichHandler(RichHandler):
    """
    Class that uses 'show_level=True' only if the message level is WARNING or higher.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

    def handle(self, record):
        if record.levelno >= logging.WARNING:
            self.show_level = True
        else:
            self.show_level = False
        return super().handle(record)

    def render(self, *, record: logging.LogRecord,
               traceback: Traceback | None,
               message_renderable: ConsoleRenderable) -> ConsoleRenderable:
        # if level is WARNING or higher, add the level column
        self._log_render.show_level = record.levelno >= logging.WARNING
        try:
            return super().render(record=record, traceback=traceback, message_renderable=message_renderable)
        finally:
            self._log_render.show_level = False


def load_cmdline_logging_config(verbose: bool = False) -> None:
    """Configure logging for the command line tools.

    User messages go to stderr through rich; library messages only show up at WARNING
    (or DEBUG with `verbose`).
    """
    level = 'DEBUG' if verbose else 'WARNING'
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'handlers': {
            'rich': {
                '()': ConditionalRichHandler,
                'console': Console(stderr=True),
                'show_time': False,
                'show_path': verbose,
                'markup': False,
            },
        },
        'loggers': {
            USER_LOGGER_NAME: {'level': 'INFO', 'handlers': ['rich'], 'propagate': False},
            'hypothesisapi': {'level': level, 'handlers': ['rich'], 'propagate': False},
        },
    })
    _LOGGER.debug("Command line logging configured.")
