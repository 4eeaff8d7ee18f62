from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bfvm.errors import ConfigError

DEFAULT_TAPE_SIZE = 30_000

# Environment variable -> VMConfig field.
ENV_FIELDS: dict[str, str] = {
    "BFVM_NUMERIC_OUTPUT": "numeric_output",
    "BFVM_FOLD_IO": "fold_io_operators",
    "BFVM_OPERAND_BITS": "operand_bits",
    "BFVM_POINTER_WRAP": "pointer_wrap",
    "BFVM_ON_EOF": "on_eof",
    "BFVM_TAPE_SIZE": "tape_size",
}


class EofPolicy(str, Enum):
    LEAVE_UNCHANGED = "leave_unchanged"
    SET_ZERO = "set_zero"
    SET_MINUS_ONE = "set_minus_one"


class PointerWrap(str, Enum):
    MODULAR = "modular"
    BOUNDARY = "boundary"


class VMConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    numeric_output: bool = False
    fold_io_operators: bool = False
    # None keeps operands unbounded; 8 reproduces the single-byte operand field.
    operand_bits: int | None = Field(default=None, ge=1, le=64)
    pointer_wrap: PointerWrap = PointerWrap.MODULAR
    on_eof: EofPolicy = EofPolicy.LEAVE_UNCHANGED
    tape_size: int = Field(default=DEFAULT_TAPE_SIZE, ge=1)

    def clamp_operand(self, value: int) -> int:
        if self.operand_bits is None:
            return value
        return value & ((1 << self.operand_bits) - 1)


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def load_env() -> None:
    # Prefer a project-local `.env`, fall back to searching from CWD.
    root_env = repo_root() / ".env"
    env_path = str(root_env) if root_env.exists() else (find_dotenv(usecwd=True) or str(root_env))
    load_dotenv(env_path)


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"unable to read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file must be a YAML mapping: {path}")
    return dict(data)


def _env_overrides() -> dict[str, Any]:
    out: dict[str, Any] = {}
    for var, field in ENV_FIELDS.items():
        raw = (os.getenv(var) or "").strip()
        if raw:
            out[field] = raw
    return out


def load_config(
    *,
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    use_env: bool = True,
) -> VMConfig:
    """Build a VMConfig from defaults, a YAML file, the environment and explicit overrides.

    Later sources win. Overrides whose value is None are ignored so that unset
    CLI flags do not mask the file or environment.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(_read_config_file(path))
    if use_env:
        load_env()
        data.update(_env_overrides())
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    try:
        return VMConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
