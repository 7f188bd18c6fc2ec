"""Configuration loading for the Wiggum Loop harness.

Precedence (highest to lowest): environment variables > JSON config file >
hardcoded defaults. Empty environment variables are treated as unset. A
``.env`` file in the repo root is loaded first and never overrides variables
that are already set.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from wiggum_loop.constants import (
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_HARNESS_DIR,
    DEFAULT_LOG_DIR,
    DEFAULT_MAX_LOOPS,
    DEFAULT_PLAN_DIR,
    PLAN_FILE_NAME,
    SUMMARY_LOG_NAME,
)
from wiggum_loop.exceptions import ConfigError

logger = logging.getLogger(__name__)

# (json_key, env_var_name, hardcoded_default, value_type)
_CONFIG_KEYS: List[tuple] = [
    ("repo_root",            "WIGGUM_REPO_ROOT",            None,                     str),
    ("plan_dir",             "WIGGUM_PLAN_DIR",             DEFAULT_PLAN_DIR,         str),
    ("harness_dir",          "WIGGUM_HARNESS_DIR",          DEFAULT_HARNESS_DIR,      str),
    ("log_dir",              "WIGGUM_LOG_DIR",              DEFAULT_LOG_DIR,          str),
    ("max_loops",            "WIGGUM_MAX_LOOPS",            DEFAULT_MAX_LOOPS,        int),
    ("cooldown_seconds",     "WIGGUM_COOLDOWN_SECONDS",     DEFAULT_COOLDOWN_SECONDS, float),
    ("protected_dirs",       "WIGGUM_PROTECTED_DIRS",       [],                       list),
    ("builder_prompt_file",  "WIGGUM_BUILDER_PROMPT_FILE",  None,                     str),
    ("verifier_prompt_file", "WIGGUM_VERIFIER_PROMPT_FILE", None,                     str),
]
VALID_KEYS = frozenset(key for key, _, _, _ in _CONFIG_KEYS)
ENV_VARS = {key: env for key, env, _, _ in _CONFIG_KEYS}


class LoopConfig(BaseModel):
    """Resolved runtime settings. All paths are absolute."""

    repo_root: Path
    plan_dir: Path
    harness_dir: Path
    log_dir: Path
    max_loops: int = Field(default=DEFAULT_MAX_LOOPS, ge=1)
    cooldown_seconds: float = Field(default=DEFAULT_COOLDOWN_SECONDS, ge=0)
    protected_dirs: List[str] = Field(default_factory=list)
    builder_prompt_file: Optional[Path] = None
    verifier_prompt_file: Optional[Path] = None
    sanity_check: bool = False

    @property
    def plan_file(self) -> Path:
        return self.plan_dir / PLAN_FILE_NAME

    @property
    def summary_log_path(self) -> Path:
        return self.log_dir / SUMMARY_LOG_NAME

    def relative(self, path: Path) -> str:
        """Render ``path`` relative to the repo root when it lives inside it."""
        try:
            return str(Path(path).relative_to(self.repo_root))
        except ValueError:
            return str(path)

    def for_sanity_check(self) -> "LoopConfig":
        """Sanity mode runs exactly one iteration with no cooldown."""
        return self.model_copy(
            update={"max_loops": 1, "cooldown_seconds": 0, "sanity_check": True}
        )


def _parse_env(raw: Optional[str], typ: type) -> object:
    """Convert an env var; None when unset or empty."""
    if raw is None or raw.strip() == "":
        return None
    if typ is list:
        return [item.strip() for item in raw.split(",") if item.strip()]
    return _coerce(raw.strip(), typ)


def _coerce(value: object, typ: type) -> object:
    if typ is list:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if not isinstance(value, list):
            raise ValueError(f"expected a list, got {type(value).__name__}")
        return [str(item) for item in value]
    if typ is int:
        if isinstance(value, bool):
            raise ValueError("expected an integer, got a boolean")
        return int(value)
    if typ is float:
        return float(value)
    return str(value)


def _read_json_file(config_file: Path) -> Dict[str, object]:
    if not config_file.is_file():
        raise ConfigError(f"Config file not found: {config_file}")
    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {config_file}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a JSON object")

    unknown = set(data.keys()) - VALID_KEYS
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    return data


def _resolve(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def load_config(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LoopConfig:
    """Load config from an optional JSON file + env vars + defaults."""
    json_data = _read_json_file(Path(config_file)) if config_file else {}

    # The repo root decides where .env lives, so resolve it before the rest
    env = os.environ if environ is None else environ
    repo_root_value = (
        env.get("WIGGUM_REPO_ROOT") or json_data.get("repo_root") or os.getcwd()
    )
    repo_root = Path(str(repo_root_value)).expanduser().resolve()
    if environ is None:
        dotenv_path = repo_root / ".env"
        if dotenv_path.is_file():
            load_dotenv(dotenv_path, override=False)
            logger.debug(f"Loaded environment from {dotenv_path}")

    values: Dict[str, object] = {}
    for key, env_var, default, typ in _CONFIG_KEYS:
        value = default
        try:
            if json_data.get(key) is not None:
                value = _coerce(json_data[key], typ)
            env_value = _parse_env(env.get(env_var), typ)
            if env_value is not None:
                value = env_value
        except ValueError as e:
            raise ConfigError(f"Invalid value for {key} ({env_var}): {e}")
        values[key] = value

    harness_dir = _resolve(repo_root, str(values["harness_dir"]))
    builder_prompt_file = values["builder_prompt_file"]
    verifier_prompt_file = values["verifier_prompt_file"]

    try:
        config = LoopConfig(
            repo_root=repo_root,
            plan_dir=_resolve(repo_root, str(values["plan_dir"])),
            harness_dir=harness_dir,
            log_dir=_resolve(harness_dir, str(values["log_dir"])),
            max_loops=values["max_loops"],
            cooldown_seconds=values["cooldown_seconds"],
            protected_dirs=values["protected_dirs"],
            builder_prompt_file=(
                _resolve(repo_root, str(builder_prompt_file)) if builder_prompt_file else None
            ),
            verifier_prompt_file=(
                _resolve(repo_root, str(verifier_prompt_file)) if verifier_prompt_file else None
            ),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")

    for prompt_file in (config.builder_prompt_file, config.verifier_prompt_file):
        if prompt_file is not None and not prompt_file.is_file():
            raise ConfigError(f"Prompt template file not found: {prompt_file}")

    return config
