"""Typed configuration loading.

The configuration lives in a TOML file (``pintmerge.toml`` by default):

    [repository]
    remote = "upstream"
    path = "~/src/docs"
    branches = ["master", "0.8.1-ksqldb", "0.9.0-ksqldb"]
    signer_name = "Docs Bot"
    signer_email = "docs-bot@example.com"

    [app]
    default_branch = "master"
    delete_local_branches = true

    [validation]
    commit_sha_length = 40

Values are read once at startup and never change during a run.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_str_list, get_table

__all__ = [
    "AppConfig",
    "Config",
    "ConfigError",
    "RepositoryConfig",
    "ValidationConfig",
    "COMMIT_SHA_LENGTHS",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_NAME",
    "find_config_path",
    "load_config",
]

CONFIG_ENV_VAR = "PINTMERGE_CONFIG"
DEFAULT_CONFIG_NAME = "pintmerge.toml"

DEFAULT_REMOTE = "upstream"
DEFAULT_BRANCH = "master"
DEFAULT_COMMIT_SHA_LENGTH = 40
COMMIT_SHA_LENGTHS = (40, 64)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Where the clone lives and which branches receive commits."""

    branches: tuple[str, ...]
    signer_name: str
    signer_email: str
    remote: str = DEFAULT_REMOTE
    path: Path = Path(".")


@dataclass(frozen=True, slots=True)
class AppConfig:
    default_branch: str = DEFAULT_BRANCH
    delete_local_branches: bool = False


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    commit_sha_length: int = DEFAULT_COMMIT_SHA_LENGTH


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    repository: RepositoryConfig
    app: AppConfig = field(default_factory=AppConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, base_dir: Path) -> Result[Config, str]:
        """Create Config from parsed TOML.

        Args:
            data: The TOML document root
            base_dir: Directory relative repository paths are resolved against

        Returns:
            Ok(Config), or Err(message) naming the first invalid setting
        """
        repository: StrDict = get_table(data, "repository") or {}
        app: StrDict = get_table(data, "app") or {}
        validation: StrDict = get_table(data, "validation") or {}

        branches = get_str_list(repository, "branches")
        if not branches:
            return Err("repository.branches must be a non-empty list of branch names")

        signer_name = get_str(repository, "signer_name")
        if signer_name is None:
            return Err("repository.signer_name is required")
        signer_email = get_str(repository, "signer_email")
        if signer_email is None:
            return Err("repository.signer_email is required")

        for section, table, key in (
            ("repository", repository, "remote"),
            ("repository", repository, "path"),
            ("app", app, "default_branch"),
        ):
            if key in table and get_str(table, key) is None:
                return Err(f"{section}.{key} must be a non-empty string")
        if "delete_local_branches" in app and get_bool(app, "delete_local_branches") is None:
            return Err("app.delete_local_branches must be a boolean")

        repo_path = Path(get_str(repository, "path") or ".").expanduser()
        if not repo_path.is_absolute():
            repo_path = base_dir / repo_path

        sha_length = get_int(validation, "commit_sha_length")
        if "commit_sha_length" in validation and sha_length is None:
            return Err("validation.commit_sha_length must be an integer")
        if sha_length is not None and sha_length not in COMMIT_SHA_LENGTHS:
            return Err("validation.commit_sha_length must be 40 (SHA-1) or 64 (SHA-256)")

        return Ok(
            cls(
                repository=RepositoryConfig(
                    branches=tuple(branches),
                    signer_name=signer_name,
                    signer_email=signer_email,
                    remote=get_str(repository, "remote") or DEFAULT_REMOTE,
                    path=repo_path,
                ),
                app=AppConfig(
                    default_branch=get_str(app, "default_branch") or DEFAULT_BRANCH,
                    delete_local_branches=bool(get_bool(app, "delete_local_branches")),
                ),
                validation=ValidationConfig(
                    commit_sha_length=sha_length or DEFAULT_COMMIT_SHA_LENGTH,
                ),
            )
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    match Config.from_dict(result.value, base_dir=path.parent.resolve()):
        case Err(message):
            return Err(ConfigError(f"Invalid config: {message}", path=path))
        case Ok(config):
            return Ok(config)


def find_config_path(explicit: Path | None = None) -> Path:
    """Pick the config file: explicit option, then $PINTMERGE_CONFIG, then ./pintmerge.toml."""
    if explicit is not None:
        return explicit.expanduser()

    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()

    return Path.cwd() / DEFAULT_CONFIG_NAME
