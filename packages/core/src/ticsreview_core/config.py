from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

DEFAULT_SECRETS_FILTER = ["TICSAUTHTOKEN", "GITHUB_TOKEN", "Authentication token", "Authorization"]

DEFAULT_CONFIG: dict = {
    "viewer_url": None,  # the ticsConfiguration url, e.g. https://host/tiobeweb/TiCS/api/cfg?name=default
    "project_name": "auto",
    "branch_name": None,
    "calc": "GATE",
    "log_level": "default",
    "secrets_filter": [],  # extra terms, added to DEFAULT_SECRETS_FILTER
    "tmp_dir": None,
    "extend_flags": "",
    "post_annotations": True,
    "max_comment_pages": 30,  # None = follow GitHub pagination to the end
    "tics_command": "TICS",
    "repo": None,
    "pull_request_number": None,
    "github_api_url": None,
}

LOG_LEVELS = ("default", "debug")


class ConfigError(ValueError):
    """Raised when the configuration cannot be used."""


@dataclass
class TicsConfig:
    viewer_url: Optional[str] = None
    project_name: str = "auto"
    branch_name: str = ""
    auth_token: Optional[str] = None
    calc: str = "GATE"
    log_level: str = "default"
    secrets_filter: list[str] = field(default_factory=lambda: list(DEFAULT_SECRETS_FILTER))
    tmp_dir: Optional[str] = None
    extend_flags: str = ""
    post_annotations: bool = True
    max_comment_pages: Optional[int] = 30
    tics_command: str = "TICS"

    @property
    def debug(self) -> bool:
        return self.log_level == "debug"


@dataclass
class GithubConfig:
    token: Optional[str] = None
    repo: Optional[str] = None
    pull_request_number: Optional[int] = None
    event_name: str = ""
    api_url: str = "https://api.github.com"
    debugger: bool = False


@dataclass
class Config:
    tics: TicsConfig
    github: GithubConfig

    @property
    def debug(self) -> bool:
        return self.tics.debug or self.github.debugger


def _pull_request_number_from_event(event_path: Optional[str]) -> Optional[int]:
    """Read the PR number from the webhook payload GitHub Actions writes to disk."""
    if not event_path:
        return None
    path = Path(event_path)
    if not path.exists():
        return None
    with open(path) as f:
        payload = json.load(f)
    number = (payload.get("pull_request") or {}).get("number")
    return int(number) if number is not None else None


def _validate(raw: dict) -> None:
    unknown = sorted(set(raw) - set(DEFAULT_CONFIG))
    if unknown:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")
    if raw["log_level"] not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {raw['log_level']!r}")
    pages = raw["max_comment_pages"]
    if pages is not None and (not isinstance(pages, int) or pages < 1):
        raise ConfigError(f"max_comment_pages must be a positive integer or null, got {pages!r}")
    terms = raw["secrets_filter"]
    if not isinstance(terms, list) or not all(isinstance(t, str) for t in terms):
        raise ConfigError(f"secrets_filter must be a list of strings, got {terms!r}")


def load_config(
    config_path: str = ".ticsreview.yml",
    cli_overrides: Optional[dict] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ticsreview.yml in the current directory
      3. Environment variables set by the GitHub Actions runner (only for unset keys)
      4. CLI argument overrides
    """
    env = os.environ if environ is None else environ
    raw = {**DEFAULT_CONFIG, "secrets_filter": list(DEFAULT_CONFIG["secrets_filter"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        raw.update(file_config)

    env_defaults = {
        "repo": env.get("GITHUB_REPOSITORY"),
        "branch_name": env.get("GITHUB_HEAD_REF") or env.get("GITHUB_REF_NAME"),
        "github_api_url": env.get("GITHUB_API_URL"),
    }
    for key, value in env_defaults.items():
        if raw.get(key) is None and value:
            raw[key] = value
    if raw.get("pull_request_number") is None:
        raw["pull_request_number"] = _pull_request_number_from_event(env.get("GITHUB_EVENT_PATH"))

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                raw[key] = value

    _validate(raw)

    tics = TicsConfig(
        viewer_url=raw["viewer_url"],
        project_name=raw["project_name"] or "auto",
        branch_name=raw["branch_name"] or "",
        auth_token=env.get("TICSAUTHTOKEN"),
        calc=raw["calc"],
        log_level=raw["log_level"],
        secrets_filter=DEFAULT_SECRETS_FILTER + [s for s in raw["secrets_filter"] if s not in DEFAULT_SECRETS_FILTER],
        tmp_dir=raw["tmp_dir"],
        extend_flags=raw["extend_flags"] or "",
        post_annotations=bool(raw["post_annotations"]),
        max_comment_pages=raw["max_comment_pages"],
        tics_command=raw["tics_command"],
    )
    github = GithubConfig(
        token=env.get("GITHUB_TOKEN"),
        repo=raw["repo"],
        pull_request_number=int(raw["pull_request_number"]) if raw["pull_request_number"] is not None else None,
        event_name=env.get("GITHUB_EVENT_NAME", ""),
        api_url=raw["github_api_url"] or "https://api.github.com",
        debugger=env.get("RUNNER_DEBUG") == "1",
    )
    return Config(tics=tics, github=github)
