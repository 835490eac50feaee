"""kuiper core - config loading and environment setup."""

import os
from pathlib import Path

import yaml
from dotenv import dotenv_values

GLOBAL_DIR = Path.home() / ".kuiper"
GLOBAL_CONFIG = GLOBAL_DIR / "config.yaml"

CWD_CONFIG_CANDIDATES = [
    ".kuiper.yaml",
    ".kuiper.yml",
    "kuiper.yaml",
    "kuiper.yml",
]

REQUEST_EXTENSION = "kuiper"
HEADERS_FILE = "headers.json"
DEFAULT_TIMEOUT = 30


def resolve_path(
    candidates: list[Path],
    default: Path | None = None,
) -> Path | None:
    """Return the first existing path from candidates, else default."""
    for p in candidates:
        if p.exists():
            return p.resolve()
    return default


def resolve_config_path(config_file: str | None) -> Path | None:
    """Find the config file to use.

    Resolution order:
      1. Explicit -c flag (hard — no fallthrough if missing)
      2. .kuiper.yaml (variants) in CWD
      3. ~/.kuiper/config.yaml
    """
    if config_file:
        return resolve_path([Path(config_file)])
    return resolve_path([Path(c) for c in CWD_CONFIG_CANDIDATES] + [GLOBAL_CONFIG])


def load_config(config_path: str | Path | None) -> dict:
    """Load YAML config file. Returns empty defaults if not found.

    Stores '_config_dir' in the returned dict so relative paths in the
    config (root, env_file) resolve against the config file.
    """
    if config_path is None:
        return {"defaults": {}, "_config_dir": None}
    path = Path(config_path)
    if not path.exists():
        return {"defaults": {}, "_config_dir": None}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return {
        "defaults": data.get("defaults") or {},
        "_config_dir": path.resolve().parent,
    }


def _config_relative(value: str, config: dict) -> Path:
    p = Path(value)
    config_dir = config.get("_config_dir")
    if not p.is_absolute() and config_dir:
        p = Path(config_dir) / p
    return p


def resolve_root(cli_root: str | None, config: dict) -> Path:
    """Find the requests root directory.

    Resolution order:
      1. --root CLI flag (relative to CWD)
      2. root from config defaults (relative to config file)
      3. CWD
    """
    if cli_root:
        return Path(cli_root).resolve()
    config_root = config.get("defaults", {}).get("root")
    if config_root:
        return _config_relative(config_root, config).resolve()
    return Path.cwd().resolve()


def resolve_env_file(cli_env_file: str | None, config: dict) -> Path | None:
    """Pick the .env file: -e flag first, then env_file from config."""
    if cli_env_file:
        return Path(cli_env_file)
    config_env = config.get("defaults", {}).get("env_file")
    if config_env:
        return _config_relative(config_env, config)
    return None


def load_env(env_file: str | Path | None) -> dict[str, str]:
    """Load .env file and merge with os.environ.

    .env values take precedence over os.environ. os.environ itself is
    never modified; the returned dict is what placeholders read from.
    """
    env = dict(os.environ)
    if env_file:
        dotenv_path = Path(env_file)
        if dotenv_path.exists():
            dotenv_vars = dotenv_values(str(dotenv_path))
            env.update({k: v for k, v in dotenv_vars.items() if v is not None})
    return env


def resolve_setting(cli_value, config: dict, key: str, default):
    """Return the CLI value if given, else the config default, else default."""
    if cli_value is not None:
        return cli_value
    value = config.get("defaults", {}).get(key)
    if value is not None:
        return value
    return default
