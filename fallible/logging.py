import logging
import sys
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler


class BackTickHighlighter(RegexHighlighter):
    highlights = [r"`(?P<bold>[^`]*)`"]


def logger():
    return logging.getLogger("fallible")


def configure_logger(debug: bool, rich: bool = True):
    """Set up root logging for the command line. Library code only ever talks to
    `logger()` and leaves handler configuration to the application."""
    level = logging.DEBUG if debug else logging.INFO
    if rich:
        handler: logging.Handler = RichHandler(
            show_path=debug, highlighter=BackTickHighlighter())
        logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                            handlers=[handler])
    else:
        logging.basicConfig(
            level=level,
            format="%(levelname)s %(name)s: %(message)s",
            handlers=[logging.StreamHandler(sys.stderr)]
        )
