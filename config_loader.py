"""Helpers for resolving configuration files and runtime paths."""

import json
import os
from typing import Any, Dict, List, Optional

DEFAULT_CONFIG_NAME = "config.json"
CONFIG_ENV_VAR = "HTML2PDF_CONFIG"

MODULE_DIR = os.path.dirname(os.path.abspath(__file__))
USER_CONFIG_DIR = os.path.join("~", ".config", "html-batch-pdf")
DEFAULT_INPUT_DIR = os.path.join(MODULE_DIR, "html_templates")
DEFAULT_OUTPUT_DIR = os.path.join(MODULE_DIR, "pdf_output")


class ConfigError(Exception):
    """Raised when runtime configuration cannot be loaded."""


def _config_search_roots() -> List[str]:
    """Folders searched for ``config.json`` when none is named explicitly."""
    return [
        os.getcwd(),
        os.path.expanduser(USER_CONFIG_DIR),
        MODULE_DIR,
    ]


def _resolve_config_path(path: Optional[str]) -> str:
    """Return the absolute config path.

    A path from ``--config`` or ``HTML2PDF_CONFIG`` must exist as given
    (relative to the working directory). Otherwise ``config.json`` is looked
    up in the working directory, the per-user config folder and the
    install folder, in that order.
    """
    env_override = os.environ.get(CONFIG_ENV_VAR)
    explicit = path or env_override
    if explicit:
        source = "--config" if path else CONFIG_ENV_VAR
        resolved = _resolve_path(explicit, os.getcwd())
        if not os.path.isfile(resolved):
            raise ConfigError(
                f"Configuration file not found: {resolved} (from {source})"
            )
        return resolved

    for root in _config_search_roots():
        resolved = os.path.join(root, DEFAULT_CONFIG_NAME)
        if os.path.isfile(resolved):
            return resolved

    raise ConfigError(
        f"Configuration file not found: no {DEFAULT_CONFIG_NAME} in "
        + ", ".join(_config_search_roots())
    )


def _resolve_path(value: str, base_dir: str) -> str:
    """Expand ``~`` and ``$VARS`` in ``value``, anchored at ``base_dir``."""
    expanded = os.path.expandvars(os.path.expanduser(value))
    return os.path.abspath(os.path.join(base_dir, expanded))


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON config file and normalize any filesystem paths."""
    config_path = _resolve_config_path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Unable to read {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a JSON object.")

    base_dir = os.path.dirname(config_path)
    resolved: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str) and key.endswith(("_dir", "_path")):
            resolved[key] = _resolve_path(value, base_dir)
        else:
            resolved[key] = value

    return resolved


def _load_optional_config(path: Optional[str]) -> Dict[str, Any]:
    """Return config data, tolerating a missing default config file."""
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    try:
        return load_config(path)
    except ConfigError:
        if explicit:
            raise
        return {}


def resolve_batch_settings(
    *,
    config_path: Optional[str] = None,
    input_dir: Optional[str] = None,
    output_dir: Optional[str] = None,
    render_options: Optional[Dict[str, Any]] = None,
    fail_fast: Optional[bool] = None,
    skip_existing: Optional[bool] = None,
    report_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Resolve batch arguments by combining CLI overrides with config."""
    config = _load_optional_config(config_path)

    resolved_input = input_dir or config.get("input_dir") or DEFAULT_INPUT_DIR
    resolved_output = (
        output_dir or config.get("output_dir") or DEFAULT_OUTPUT_DIR
    )

    configured_options = config.get("render_options") or {}
    if not isinstance(configured_options, dict):
        raise ConfigError("render_options must be a JSON object.")
    merged_options: Dict[str, Any] = dict(configured_options)
    merged_options.update(render_options or {})

    resolved_report = report_path or config.get("report_path")

    result: Dict[str, Any] = {
        "input_dir": _resolve_path(resolved_input, os.getcwd()),
        "output_dir": _resolve_path(resolved_output, os.getcwd()),
        "render_options": merged_options,
        "fail_fast": bool(
            fail_fast
            if fail_fast is not None
            else config.get("fail_fast", False)
        ),
        "skip_existing": bool(
            skip_existing
            if skip_existing is not None
            else config.get("skip_existing", False)
        ),
        "report_path": (
            _resolve_path(resolved_report, os.getcwd())
            if resolved_report
            else None
        ),
    }

    return result
