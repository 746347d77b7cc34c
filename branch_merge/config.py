"""Configuration loading from YAML, action inputs and environment.

Secrets (tokens) are taken from environment variables or from files
(Docker secrets). Never put real tokens in config files committed to the
repo.
"""

import os
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from branch_merge.actions import get_input

# Checked in order when no token is configured explicitly
TOKEN_ENV_KEYS = ("INPUT_TOKEN", "PAT_TOKEN", "GITHUB_TOKEN")

MERGE_METHODS = ("merge", "squash", "rebase")


def _read_secret(env: Mapping[str, str], env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = env.get(env_key)
    if value:
        return value.strip()
    file_path = env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("${")


class GitHubConfig(BaseSettings):
    """GitHub API settings and target repo."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="Explicit token from YAML or --token; env tokens resolve in token_resolved")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    repository: str | None = Field(default=None, description="Target repo e.g. octo-org/octo-repo")


class MergeConfig(BaseSettings):
    """What to merge and how."""

    model_config = SettingsConfigDict(env_prefix="MERGE_", extra="ignore")

    branch: str = Field(default="", description="Head branch whose open PRs are merged")
    per_page: int = Field(default=100, ge=1, le=100, description="Page size for the single list call")
    merge_method: str | None = Field(default=None, description="merge, squash or rebase; API default if unset")
    # Report failure when any merge failed (outputs are still written)
    fail_on_error: bool = Field(default=False, description="Fail the run on any merge failure")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(levelname)s %(name)s: %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def token_resolved(self, env: Mapping[str, str] | None = None) -> str | None:
        """Resolve the API token from config, env or a secret file."""
        env = os.environ if env is None else env
        t = self.github.token
        if not _is_placeholder(t):
            return t
        for key in TOKEN_ENV_KEYS:
            found = _read_secret(env, key, f"{key}_FILE")
            if found:
                return found
        return None


def _substitute_env(value: Any, env: Mapping[str, str]) -> Any:
    """Replace ${VAR} and $VAR in strings with env values."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v, env) for v in value]
    return value


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _action_inputs(env: Mapping[str, str]) -> dict[str, Any]:
    """Merge settings passed as action inputs (INPUT_*)."""
    inputs: dict[str, Any] = {}
    if "INPUT_BRANCH" in env:
        inputs["branch"] = get_input("branch", env)
    merge_method = get_input("merge-method", env) or get_input("merge_method", env)
    if merge_method:
        inputs["merge_method"] = merge_method
    fail_on_error = get_input("fail-on-error", env) or get_input("fail_on_error", env)
    if fail_on_error:
        inputs["fail_on_error"] = _parse_bool(fail_on_error)
    return inputs


def _section_env(env: Mapping[str, str], prefix: str, fields: Iterable[str]) -> dict[str, Any]:
    """Values for a config section read from env (e.g. MERGE_BRANCH)."""
    found: dict[str, Any] = {}
    for name in fields:
        key = f"{prefix}{name.upper()}"
        if key in env:
            found[name] = env[key]
    return found


def load_config(config_path: Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    """Load config from an optional YAML file, action inputs and environment.

    Precedence: action inputs, then YAML, then GITHUB_*/MERGE_*/LOGGING_*
    env vars. github.token only comes from YAML or the command line, so
    GITHUB_TOKEN stays last in the token_resolved chain.
    """
    env = dict(os.environ) if env is None else dict(env)

    raw: dict[str, Any] = {}
    if config_path is not None and config_path.is_file():
        raw = yaml.safe_load(config_path.read_text()) or {}
        raw = _substitute_env(raw, env)

    github_raw = {
        **_section_env(env, "GITHUB_", ("api_url", "repository")),
        "token": None,
        **(raw.get("github") or {}),
    }
    merge_raw = {
        **_section_env(env, "MERGE_", MergeConfig.model_fields),
        **(raw.get("merge") or {}),
        **_action_inputs(env),
    }
    logging_raw = {
        **_section_env(env, "LOGGING_", LoggingConfig.model_fields),
        **(raw.get("logging") or {}),
    }

    merge_method = merge_raw.get("merge_method")
    if merge_method and merge_method not in MERGE_METHODS:
        raise ValueError(f"Unknown merge method {merge_method!r}, expected one of {', '.join(MERGE_METHODS)}")

    return AppConfig(
        github=GitHubConfig(**github_raw),
        merge=MergeConfig(**merge_raw),
        logging=LoggingConfig(**logging_raw),
    )
