"""Infrastructure: configuration discovery and merging.

Sources, in increasing precedence:

1. Built-in defaults.
2. The first ``firestore-cli.{yaml,yml,json}`` found in the current
   directory, the user's home directory, or ``~/.config/firestore-cli``
   (or the file named by ``--config``).
3. ``FIRESTORE_CLI_PROJECT`` / ``FIRESTORE_CLI_COLLECTION``.
4. Command-line flags.

Rules
-----
* A source only overrides a key it actually provides.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from firestore_cli.core.models import Settings
from firestore_cli.exceptions import ConfigError, ValidationError

CONFIG_NAME: str = "firestore-cli"
CONFIG_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml", ".json")
REQUIRED_KEYS: tuple[str, ...] = ("project", "collection")

ENV_PROJECT: str = "FIRESTORE_CLI_PROJECT"
ENV_COLLECTION: str = "FIRESTORE_CLI_COLLECTION"
ENV_EMULATOR_HOST: str = "FIRESTORE_EMULATOR_HOST"

CONFIG_NOT_FOUND_HINT: str = f"""\
Possible locations:
-------------------
  ./{CONFIG_NAME}.yaml
  ~/{CONFIG_NAME}.yaml
  ~/.config/{CONFIG_NAME}/{CONFIG_NAME}.yaml

Example configuration:
----------------------
project: my-awesome-gcp-project
collection: my_documents

You can also use --project and --collection switches to override these settings."""

_TRUE_STRINGS: frozenset[str] = frozenset({"1", "true", "yes", "on"})


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def config_search_dirs(
    *,
    cwd: Path | None = None,
    home: Path | None = None,
) -> tuple[Path, ...]:
    """Return the directories searched for a config file, in order."""
    if home is None:
        try:
            home = Path.home()
        except RuntimeError as exc:
            raise ConfigError(f"unable to resolve home directory: {exc}") from exc
    return (
        cwd if cwd is not None else Path.cwd(),
        home,
        home / ".config" / CONFIG_NAME,
    )


def find_config_file(search_dirs: Sequence[Path]) -> Path | None:
    """Return the first existing ``firestore-cli.*`` file, or ``None``."""
    for directory in search_dirs:
        for ext in CONFIG_EXTENSIONS:
            candidate = directory / f"{CONFIG_NAME}{ext}"
            if candidate.is_file():
                return candidate
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* and return its top-level mapping.

    JSON files are read with the same YAML loader, since JSON is a
    subset of YAML.  An empty file yields an empty mapping.

    Raises
    ------
    ConfigError
        If the file cannot be read, does not parse, or is not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"unable to read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"unable to parse config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"config file {path} must contain a mapping, "
            f"got {type(data).__name__}",
        )
    return data


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def resolve_settings(
    *,
    project: str | None = None,
    collection: str | None = None,
    pretty_print: bool | None = None,
    verbose: bool = False,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    search_dirs: Sequence[Path] | None = None,
) -> Settings:
    """Merge every configuration source into a :class:`Settings`.

    ``None`` for a flag argument means "not given on the command line".

    Raises
    ------
    ConfigError
        If an explicit *config_path* is missing or unreadable, or if no
        config file is found and no other source supplies a required key.
    ValidationError
        If ``project`` or ``collection`` is still empty after merging.
    """
    env = os.environ if environ is None else environ

    merged: dict[str, Any] = {
        "project": "",
        "collection": "",
        "prettyprint": False,
    }

    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"config file {config_path} not found")
        found: Path | None = config_path
    else:
        dirs = search_dirs if search_dirs is not None else config_search_dirs()
        found = find_config_file(dirs)

    if found is not None:
        file_values = read_config_file(found)
        for key in merged:
            if key in file_values and file_values[key] is not None:
                merged[key] = file_values[key]

    if env.get(ENV_PROJECT):
        merged["project"] = env[ENV_PROJECT]
    if env.get(ENV_COLLECTION):
        merged["collection"] = env[ENV_COLLECTION]

    if project is not None:
        merged["project"] = project
    if collection is not None:
        merged["collection"] = collection
    if pretty_print is not None:
        merged["prettyprint"] = pretty_print

    values = {key: _as_str(merged[key]) for key in REQUIRED_KEYS}
    if found is None and not any(values.values()):
        raise ConfigError(
            "Config file not found! Consider creating one.",
            hint=CONFIG_NOT_FOUND_HINT,
        )
    for key in REQUIRED_KEYS:
        if not values[key]:
            raise ValidationError(
                f"unable to validate required params: {key} undefined",
                hint=(
                    f"Set {key!r} in {found} or pass --{key}."
                    if found is not None
                    else CONFIG_NOT_FOUND_HINT
                ),
            )

    return Settings(
        project=values["project"],
        collection=values["collection"],
        pretty_print=_as_bool(merged["prettyprint"]),
        verbose=verbose,
        config_path=found,
        emulator_host=env.get(ENV_EMULATOR_HOST) or None,
    )
