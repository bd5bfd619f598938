"""TOML config loading for mathscript.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "mathscript.toml"


@dataclass
class ReplConfig:
    sentinels: list[str] = field(default_factory=lambda: ["done", "quit"])
    prompt: str = ">> "


@dataclass
class OutputConfig:
    precision: int = 6
    color: bool = True


@dataclass
class MathScriptConfig:
    repl: ReplConfig = field(default_factory=ReplConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find mathscript.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> MathScriptConfig:
    """Parse a mathscript.toml file into a MathScriptConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = MathScriptConfig()

    if "repl" in data:
        repl = data["repl"]
        config.repl = ReplConfig(
            sentinels=list(repl.get("sentinels", ["done", "quit"])),
            prompt=repl.get("prompt", ">> "),
        )

    if "output" in data:
        out = data["output"]
        config.output = OutputConfig(
            precision=int(out.get("precision", 6)),
            color=bool(out.get("color", True)),
        )

    return config


def discover_config(start_path: Path | None = None) -> MathScriptConfig:
    """Load the nearest mathscript.toml, or the defaults if there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return MathScriptConfig()
