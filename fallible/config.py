from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import re
import tomllib
from typing import Optional

from .construct import construct, read_from_file
from .files import CHUNK_SIZE
from .logging import logger


log = logger()


@dataclass
class Config:
    chunk_size: int = CHUNK_SIZE
    encoding: Optional[str] = None
    rich: bool = True


def split_section(spec: str) -> tuple[Path, Optional[str]]:
    """Split `file.toml[tool.fallible]` into a path and a section."""
    if m := re.match(r"([^\[\]]+)\[([^\[\]\s]+)\]$", spec):
        return Path(m.group(1)), m.group(2)
    return Path(spec), None


def load_config(config_file: Optional[str] = None, cwd: Path = Path(".")) -> Config:
    """Locate and read the configuration.

    An explicit `config_file` wins; otherwise `fallible.toml` is tried, then a
    `[tool.fallible]` section in `pyproject.toml`. Without any of these the
    defaults are used.
    """
    if config_file is not None:
        path, section = split_section(config_file)
        return read_from_file(Config, path, section)

    if (cwd / "fallible.toml").exists():
        return read_from_file(Config, cwd / "fallible.toml")

    if (cwd / "pyproject.toml").exists():
        with open(cwd / "pyproject.toml", "rb") as f_in:
            data = tomllib.load(f_in)
        if "fallible" in data.get("tool", {}):
            return construct(Config, data["tool"]["fallible"])

    log.debug("no configuration found, using defaults")
    return Config()
