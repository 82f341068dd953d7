"""YAML configuration loader.

Runtime settings (backends, budgets, timeouts) come from environment
variables and ``.env`` through :class:`~speechindex.config.settings.Settings`.
The checked-in ``config/config.yaml`` holds the static data that does not
fit an environment variable: the speaker author table::

    authors:
      Lincoln: Abraham Lincoln
      Kennedy: John F. Kennedy

``load_config()`` reads and validates that file; ``resolve_author()`` looks
a speech directory name up in it.
"""

from pathlib import Path

import yaml

from speechindex.utils.errors import ConfigurationError

_UNKNOWN_AUTHOR = "Unknown"


def load_config(path: str = "config/config.yaml") -> dict:
    """Load the YAML configuration file.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
              an empty configuration (every author resolves to "Unknown").

    Returns:
        The parsed configuration, with ``authors`` always a mapping.

    Raises:
        ConfigurationError: If the file exists but cannot be read or parsed,
            or its top level or ``authors`` entry is not a mapping.
    """
    config_path = Path(path)
    if not config_path.exists():
        return {"authors": {}}

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            message=f"Unable to read configuration file {config_path}: {exc}",
        ) from exc

    if not isinstance(config, dict):
        raise ConfigurationError(message=f"Configuration file {config_path} must contain a mapping")
    authors = config.setdefault("authors", {}) or {}
    if not isinstance(authors, dict):
        raise ConfigurationError(
            message=f"'authors' in {config_path} must map directory names to authors",
        )
    config["authors"] = authors
    return config


def resolve_author(config: dict, directory_name: str) -> str:
    """Map a speech directory name (e.g. ``"Lincoln"``) to its author.

    Unlisted directories resolve to ``"Unknown"``.
    """
    authors = config.get("authors") or {}
    return str(authors.get(directory_name, _UNKNOWN_AUTHOR))
