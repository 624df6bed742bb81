"""
Kernel configuration.

Settings live in the ``[kernel]`` table of a TOML file:

```toml
[kernel]
pid_offset = 100
session_prefix_length = 16
session_prefix_alphabet = "abcdefghijklmnopqrstuvwxyz0123456789"
```

The file is looked up at the explicit path, then ``$ACTOR_KERNEL_CONFIG``,
then ``./actor_kernel.toml``. A missing file means defaults.
"""
from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

from .address import PREFIX_ALPHABET
from .errors import ConfigError

CONFIG_ENV_VAR = "ACTOR_KERNEL_CONFIG"
DEFAULT_CONFIG_FILE = "actor_kernel.toml"


def _is_count(value: object) -> bool:
    # bool is an int subclass; TOML `true` must not pass as 1
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


@dataclass(frozen=True)
class KernelConfig:
    """Tunables for address allocation."""

    pid_offset: int = 100  # first PID is pid_offset + 1
    session_prefix_length: int = 16
    session_prefix_alphabet: str = PREFIX_ALPHABET

    def __post_init__(self) -> None:
        if not _is_count(self.pid_offset):
            raise ConfigError("pid_offset must be an integer >= 1")
        if not _is_count(self.session_prefix_length):
            raise ConfigError("session_prefix_length must be an integer >= 1")
        if not self.session_prefix_alphabet:
            raise ConfigError("session_prefix_alphabet must not be empty")


def resolve_config_path(path: Path | str | None = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_FILE


def load_config(path: Path | str | None = None) -> KernelConfig:
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return KernelConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    section = data.get("kernel", {})
    known = {f.name for f in fields(KernelConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown [kernel] keys in {config_path}: {', '.join(unknown)}")

    return KernelConfig(**section)
