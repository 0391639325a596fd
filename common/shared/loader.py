"""
Shared configuration loading and validation helpers.

Provides:
 - `load_config`: basic YAML loader
 - `load_logging_config`: normalized `logging:` section
 - `load_task_config`: validated configuration for a given task, with
   caller overrides (typically CLI flags) merged over the file values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from common.base.file_io import read_yaml


ConfigDict = Dict[str, Any]

DEFAULT_CONFIG_FILENAME = "config.yaml"
LOGGING_SECTION_KEY = "logging"
TASKS_SECTION_KEY = "tasks"
CONFIGS_DIR = Path(__file__).resolve().parents[2] / "configs"


TASK_SCHEMAS: Dict[str, Dict[str, Iterable[str]]] = {
    "split": {
        "required": ["source_dir", "num_dirs"],
        "optional": [
            "output_dir",
            "prefix_format",
            "suffix_format",
            "match",
            "accompanying",
            "same_stem",
            "progress",
        ],
    },
    "cleanup": {
        "required": ["source_dir", "num_dirs"],
        "optional": ["output_dir", "prefix_format", "suffix_format"],
    },
    "walk": {
        "required": ["root", "extension"],
        "optional": ["multiline", "edit", "editor"],
    },
    "purge": {
        "required": ["root", "extension"],
        "optional": ["dry_run"],
    },
}

FIELD_ALIASES = {
    "source": "source_dir",
    "output": "output_dir",
    "patterns": "accompanying",
    "ext": "extension",
}

PATH_FIELDS = {"source_dir", "root"}
OUTPUT_PATH_FIELDS = {"output_dir"}
BOOLEAN_FIELDS = {"same_stem", "progress", "multiline", "edit", "dry_run"}
INTEGER_FIELDS = {"num_dirs"}
STRING_LIST_FIELDS = {"match", "accompanying"}
LOGGING_ALLOWED_KEYS = {"level", "use_rich", "log_dir", "file_prefix"}

YES_VALUES = {"1", "true", "yes", "y", "on"}
NO_VALUES = {"0", "false", "no", "n", "off"}


def default_config_path() -> Optional[Path]:
    candidate = CONFIGS_DIR / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.exists() else None


def load_config(path: str | Path | None) -> Mapping[str, Any] | Dict[str, Any]:
    if not path:
        return {}

    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    data = read_yaml(cfg_path)
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration root must be a mapping in {cfg_path}")
    return data


def load_logging_config(config_path: str | Path | None = None) -> Dict[str, Any]:
    path = Path(config_path).expanduser() if config_path else default_config_path()
    root = load_config(path)
    return _normalize_logging_settings(root.get(LOGGING_SECTION_KEY), path)


def load_task_config(
    task: str,
    config_path: str | Path | None = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ConfigDict:
    """
    Load, merge and validate the configuration for ``task``.

    Values in ``overrides`` that are not None take precedence over the file.
    The normalized logging section is returned under ``__logging__``.
    """
    if task not in TASK_SCHEMAS:
        raise ValueError(f"Unknown task '{task}'. Expected one of: {', '.join(sorted(TASK_SCHEMAS))}")

    resolved_path = Path(config_path).expanduser() if config_path else default_config_path()
    root_config = dict(load_config(resolved_path))
    label = str(resolved_path) if resolved_path else "<no config file>"

    config = _apply_aliases(_extract_task_config(root_config, task, label))
    for key, value in _apply_aliases(overrides or {}).items():
        if value is not None:
            config[key] = value

    schema = TASK_SCHEMAS[task]
    required = set(schema.get("required", []))
    allowed_keys = required | set(schema.get("optional", []))

    unexpected = [key for key in config if key not in allowed_keys]
    if unexpected:
        raise ValueError(
            f"Configuration '{label}' contains unsupported keys for task '{task}': {', '.join(sorted(unexpected))}"
        )

    missing = [key for key in sorted(required) if config.get(key) in (None, "")]
    if missing:
        raise ValueError(
            f"Configuration '{label}' missing required fields for task '{task}': {', '.join(missing)}"
        )

    normalized: ConfigDict = {}
    for key, value in config.items():
        if key in PATH_FIELDS:
            normalized[key] = str(Path(str(value)).expanduser().resolve())
        elif key in BOOLEAN_FIELDS:
            normalized[key] = _coerce_bool(value, key, label)
        elif key in INTEGER_FIELDS:
            normalized[key] = _coerce_int(value, key, label)
        elif key in STRING_LIST_FIELDS:
            normalized[key] = _normalize_str_list(value)
        else:
            normalized[key] = value

    for key in OUTPUT_PATH_FIELDS & set(normalized):
        normalized[key] = _resolve_output_path(normalized[key], normalized.get("source_dir"))

    normalized["__task__"] = task
    normalized["__config_path__"] = str(resolved_path) if resolved_path else None
    normalized["__logging__"] = _normalize_logging_settings(
        root_config.get(LOGGING_SECTION_KEY), resolved_path
    )
    return normalized


def _apply_aliases(config: Mapping[str, Any]) -> ConfigDict:
    result: ConfigDict = {}
    for key, value in config.items():
        result[FIELD_ALIASES.get(key, key)] = value
    return result


def _extract_task_config(root: Mapping[str, Any], task: str, label: str) -> ConfigDict:
    tasks_section = root.get(TASKS_SECTION_KEY) or {}
    if not isinstance(tasks_section, Mapping):
        raise ValueError(f"'{TASKS_SECTION_KEY}' section must be a mapping in {label}")
    payload = tasks_section.get(task) or {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Task '{task}' entry must be a mapping in {label}")
    return dict(payload)


def _normalize_logging_settings(section: Any, config_path: Optional[Path]) -> Dict[str, Any]:
    if not section:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"'{LOGGING_SECTION_KEY}' section must be a mapping in {config_path}")

    invalid = [key for key in section if key not in LOGGING_ALLOWED_KEYS]
    if invalid:
        raise ValueError(
            f"'{LOGGING_SECTION_KEY}' section contains unsupported keys in {config_path}: {', '.join(sorted(invalid))}"
        )

    cfg = dict(section)
    log_dir = cfg.get("log_dir")
    if log_dir:
        path = Path(str(log_dir)).expanduser()
        if not path.is_absolute() and config_path is not None:
            path = config_path.expanduser().resolve().parent / path
        cfg["log_dir"] = str(path.resolve())
    return cfg


def _resolve_output_path(value: Any, anchor: Optional[str]) -> str:
    path = Path(str(value)).expanduser()
    if not path.is_absolute() and anchor:
        path = Path(anchor) / path
    return str(path.resolve())


def _normalize_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value]
    raise ValueError(f"Expected a string or a list of strings, received {type(value).__name__}")


def _coerce_int(value: Any, field: str, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Configuration '{label}' field '{field}' must be an integer.")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Configuration '{label}' field '{field}' must be an integer.") from exc


def _coerce_bool(value: Any, field: str, label: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in YES_VALUES:
        return True
    if text in NO_VALUES:
        return False
    raise ValueError(f"Configuration '{label}' field '{field}' must be a boolean.")
