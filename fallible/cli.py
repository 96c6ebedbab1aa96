from argparse import ArgumentParser
import os
import sys
from typing import Optional
import argh  # type: ignore

from rich_argparse import RichHelpFormatter

from .config import Config, load_config
from .errors import UserError
from .files import read_from_file, read_text
from .logging import logger, configure_logger
from .protocol import Handle
from .version import __version__

log = logger()


def describe(code: int) -> str:
    try:
        return os.strerror(code)
    except (ValueError, OverflowError):
        return "unknown error"


def main(config: Config, paths: list[str]) -> bool:
    handles: list[tuple[str, Handle]] = []
    for p in paths:
        if config.encoding is None:
            handles.append((p, read_from_file(p, config.chunk_size)))
        else:
            handles.append((p, read_text(p, config.encoding, config.chunk_size)))

    for p, h in handles:
        if not h:
            continue
        if isinstance(h.value(), bytes):
            sys.stdout.buffer.write(h.value())
            sys.stdout.buffer.flush()
        else:
            sys.stdout.write(h.value())
            sys.stdout.flush()

    failed = [(p, h.error_code()) for p, h in handles if not h]
    for p, code in failed:
        log.error(f"Failed to read `{p}` with error {code} ({describe(code)})")
    return not failed


@argh.arg("files", nargs="+", help="files to read")
@argh.arg(
    "-c", "--config",
    help="TOML or JSON configuration, use a `[...]` suffix to indicate a subsection.",
)
@argh.arg("--chunk-size", type=int, help="read buffer size in bytes")
@argh.arg("-e", "--encoding", help="decode contents with this encoding before printing")
@argh.arg("-v", "--version", help="print version number and exit")
@argh.arg("--debug", help="more verbose logging")
def fallible(
    files: list[str],
    *,
    config: Optional[str] = None,
    chunk_size: Optional[int] = None,
    encoding: Optional[str] = None,
    version: bool = False,
    debug: bool = False
):
    """Print the contents of files, reporting the error code of any that fail."""
    if version:
        print(f"fallible {__version__}")
        sys.exit(0)

    try:
        cfg = load_config(config)
    except UserError as e:
        configure_logger(debug)
        log.error(f"Failed: {e}")
        sys.exit(2)

    if chunk_size is not None:
        cfg.chunk_size = chunk_size
    if encoding:
        cfg.encoding = encoding
    if cfg.chunk_size <= 0:
        configure_logger(debug, cfg.rich)
        log.error(f"Failed: chunk size should be positive, got {cfg.chunk_size}")
        sys.exit(2)

    configure_logger(debug, cfg.rich)
    if not main(cfg, files):
        sys.exit(1)


def cli(argv: Optional[list[str]] = None):
    parser = ArgumentParser(formatter_class=RichHelpFormatter)
    argh.set_default_command(parser, fallible)
    argh.dispatch(parser, argv=argv)


if __name__ == "__main__":
    cli()
