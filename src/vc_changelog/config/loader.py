"""
Configuration loader for vc_changelog.

Settings are read from an optional JSON file named
``.changelog_config.json`` in the repository root and then overridden by
the environment variables a CI runner usually provides
(``GITHUB_TOKEN``, ``GITHUB_REPOSITORY`` and ``GITHUB_API_URL``).

If the configuration file is malformed or a setting has the wrong type,
a :class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments
# where logging has not been configured. The CLI configures the root
# logger explicitly.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILENAME = ".changelog_config.json"

DEFAULTS: Dict[str, Any] = {
    "api_url": "https://api.github.com",
    "repository": None,
    "token": None,
    "request_timeout": 30,
    "commit_url_template": None,
}

ENV_OVERRIDES = {
    "GITHUB_TOKEN": "token",
    "GITHUB_REPOSITORY": "repository",
    "GITHUB_API_URL": "api_url",
}


class ConfigError(Exception):
    """Raised when the changelog configuration is invalid."""

    pass


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")
    return data


def _validate(data: Dict[str, Any]) -> None:
    for key in ("api_url", "repository", "token", "commit_url_template"):
        if data.get(key) is not None and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    timeout = data.get("request_timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ConfigError("'request_timeout' must be a number")
    repository = data.get("repository")
    if repository is not None and repository.count("/") != 1:
        raise ConfigError("'repository' must have the form 'owner/name'")


def load_config(
    repo_root: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Load the changelog configuration.

    Priority: environment variables > ``.changelog_config.json`` > defaults.

    Args:
        repo_root: Directory holding ``.changelog_config.json``. Defaults to
                   the current working directory. The file is optional.
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        A dictionary with the keys:
        - api_url (str): Base URL of the GitHub REST API
        - repository (str|None): ``owner/name`` of the hosted repository
        - token (str|None): API token
        - request_timeout (int|float): HTTP timeout in seconds
        - commit_url_template (str|None): ``str.format`` template with a
          ``{sha}`` field used to link commits read from a local checkout

    Raises:
        ConfigError: If the configuration file is malformed or invalid.
    """
    environ = os.environ if environ is None else environ
    config_path = (repo_root or Path.cwd()) / CONFIG_FILENAME

    data: Dict[str, Any] = dict(DEFAULTS)
    if config_path.exists():
        file_data = _read_config_file(config_path)
        unknown = sorted(set(file_data) - set(DEFAULTS))
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", unknown)
        data.update({k: v for k, v in file_data.items() if k in DEFAULTS})
        logger.debug("Loaded changelog configuration from: %s", config_path)

    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            data[key] = value

    _validate(data)
    logger.debug(
        "Configuration data: %s",
        {k: ("***" if k == "token" and v else v) for k, v in data.items()},
    )
    return data
