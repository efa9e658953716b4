import json
import os
from pathlib import Path
from typing import Optional

import yaml

from erbcop_core.errors import ConfigError

DEFAULT_CONFIG: dict = {
    "linter_command": "erb_lint",
    "include": ["*.erb"],
    "exclude": [],  # fnmatch patterns or directory names to skip (e.g. "vendor/", "*.text.erb")
    "gem_versions": None,  # None = don't install; "gemfile" = versions locked in Gemfile.lock
    "outside_diff": True,  # post the summary comment for offenses outside the diff
    "failure_exit_code": 109,
    "repository": None,
    "event_path": None,
}

# Environment variable -> config key. Values are strings; _coerce handles the rest.
_ENV_KEYS = {
    "ERB_LINT_COMMAND": "linter_command",
    "ERB_LINT_GEM_VERSIONS": "gem_versions",
    "OUTSIDE_DIFF": "outside_diff",
    "FAILURE_EXIT_CODE": "failure_exit_code",
    "GITHUB_REPOSITORY": "repository",
    "GITHUB_EVENT_PATH": "event_path",
}


def _coerce(key: str, value):
    if key == "outside_diff" and isinstance(value, str):
        # Only the literal "true" enables posting, as in the workflow input.
        return value == "true"
    if key == "failure_exit_code":
        try:
            code = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"failure_exit_code must be an integer, got {value!r}")
        if not 1 <= code <= 255:
            raise ConfigError(f"failure_exit_code must be between 1 and 255, got {code}")
        return code
    return value


def load_config(config_path: str = ".erbcop.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .erbcop.yml in the current directory
      3. Environment variables (the GitHub Actions inputs)
      4. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "include": list(DEFAULT_CONFIG["include"]), "exclude": list(DEFAULT_CONFIG["exclude"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            try:
                file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {config_path}: {e}")
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    for env_name, key in _ENV_KEYS.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    for key in ("outside_diff", "failure_exit_code"):
        config[key] = _coerce(key, config[key])

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def read_event(event_path: Optional[str]) -> tuple[int, str]:
    """
    Read the GitHub Actions event payload and return (pull request number, head SHA).

    Only pull_request events carry both values; anything else is a ConfigError.
    """
    if not event_path:
        raise ConfigError("GITHUB_EVENT_PATH is not set and no --pr was given.")
    p = Path(event_path)
    if not p.exists():
        raise ConfigError(f"Event payload not found: {event_path}")
    try:
        event = json.loads(p.read_text())
        pull_request = event["pull_request"]
        return int(pull_request["number"]), str(pull_request["head"]["sha"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"{event_path} is not a pull_request event payload: {e}")
