"""Runtime settings from environment variables and an optional YAML file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from ..adapters.upstream import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from ..report import ReportConfig
from ..report.compositor import MAX_CATEGORY_SAMPLE_LIMIT, MAX_DIFF_PREVIEW_LIMIT

SETTINGS_FILE_ENV = "LINT_REPORT_SETTINGS"
DEFAULT_STORAGE_DIR = ".lint-reports"
DEFAULT_FROM_ADDRESS = "noreply@yourdomain.com"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SettingsError(RuntimeError):
    """Raised when settings cannot be loaded or contain invalid values."""


@dataclass(slots=True, frozen=True)
class UpstreamSettings:
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(slots=True, frozen=True)
class StorageSettings:
    root: Path = Path(DEFAULT_STORAGE_DIR)


@dataclass(slots=True, frozen=True)
class EmailSettings:
    smtp_host: str | None = None
    smtp_port: int = 25
    from_address: str = DEFAULT_FROM_ADDRESS
    default_recipient: str | None = None
    use_tls: bool = False
    username: str | None = None
    password: str | None = None


@dataclass(slots=True, frozen=True)
class Settings:
    upstream: UpstreamSettings = field(default_factory=UpstreamSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    email: EmailSettings = field(default_factory=EmailSettings)
    report: ReportConfig = field(default_factory=ReportConfig)
    metrics_enabled: bool = True
    log_level: str = "INFO"
    json_logs: bool = False


# Value coercion ---------------------------------------------------------------
def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        folded = value.strip().lower()
        if folded in _TRUE_VALUES:
            return True
        if folded in _FALSE_VALUES:
            return False
    raise SettingsError(f"{name} must be a boolean, got {value!r}")


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise SettingsError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{name} must be an integer, got {value!r}") from exc


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise SettingsError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{name} must be a number, got {value!r}") from exc


def _as_str(name: str, value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    raise SettingsError(f"{name} must be a string, got {value!r}")


_UPSTREAM_FIELDS = {"base_url": _as_str, "api_key": _as_str, "timeout": _as_float}
_STORAGE_FIELDS = {"root": _as_str}
_EMAIL_FIELDS = {
    "smtp_host": _as_str,
    "smtp_port": _as_int,
    "from_address": _as_str,
    "default_recipient": _as_str,
    "use_tls": _as_bool,
    "username": _as_str,
    "password": _as_str,
}
_REPORT_FIELDS = {
    "report_title": _as_str,
    "subtitle": _as_str,
    "company_name": _as_str,
    "diff_preview_limit": _as_int,
    "category_sample_limit": _as_int,
}


# Sources ------------------------------------------------------------------------
def _env_values(env: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    """Raw values from the environment, grouped like the YAML sections."""

    def pick(**names: str) -> Dict[str, Any]:
        return {key: env[var] for key, var in names.items() if env.get(var, "").strip()}

    email = pick(
        smtp_host="SMTP_HOST",
        smtp_port="SMTP_PORT",
        default_recipient="DEFAULT_NOTIFY_EMAIL",
        use_tls="SMTP_USE_TLS",
        username="SMTP_USERNAME",
        password="SMTP_PASSWORD",
    )
    sender = env.get("REPORT_FROM_EMAIL") or env.get("SES_FROM_EMAIL")
    if sender:
        email["from_address"] = sender

    general = pick(metrics_enabled="METRICS_ENABLED", log_level="LOG_LEVEL", log_format="LOG_FORMAT")

    return {
        "upstream": pick(base_url="SWAGGERHUB_BASE_URL", api_key="SWAGGERHUB_API_KEY", timeout="SWAGGERHUB_TIMEOUT"),
        "storage": pick(root="REPORT_STORAGE_DIR"),
        "email": email,
        "report": pick(company_name="COMPANY_NAME", report_title="REPORT_TITLE"),
        "general": general,
    }


def _file_values(path: Path) -> Dict[str, Dict[str, Any]]:
    if not path.exists():
        raise SettingsError(f"Settings file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Failed to read settings file {path}") from exc

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in settings file {path}") from exc

    if not isinstance(data, Mapping):
        raise SettingsError(f"Settings file must be a mapping: {path}")

    grouped: Dict[str, Dict[str, Any]] = {"general": {}}
    for key, value in data.items():
        if key in {"upstream", "storage", "email", "report"}:
            if value is None:
                continue
            if not isinstance(value, Mapping):
                raise SettingsError(f"Settings section '{key}' must be a mapping")
            grouped[key] = dict(value)
        elif key in {"metrics_enabled", "log_level", "log_format"}:
            grouped["general"][key] = value
        else:
            raise SettingsError(f"Unknown settings key: {key}")
    return grouped


def _build_section(section: str, cls: type, fields: Mapping[str, Any], values: Mapping[str, Any]) -> Any:
    unknown = set(values) - set(fields)
    if unknown:
        raise SettingsError(f"Unknown keys in settings section '{section}': {', '.join(sorted(unknown))}")

    defaults = cls()
    kwargs: Dict[str, Any] = {}
    for key, raw in values.items():
        value = fields[key](f"{section}.{key}", raw)
        if value is None and getattr(defaults, key) is not None:
            continue
        kwargs[key] = value
    return replace(defaults, **kwargs)


def load_settings(
    path: str | os.PathLike[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from ``env`` (default: ``os.environ``), overridden by the YAML file."""

    env = os.environ if env is None else env
    merged = _env_values(env)
    if path is not None:
        for section, values in _file_values(Path(path)).items():
            merged.setdefault(section, {}).update(values)

    upstream = _build_section("upstream", UpstreamSettings, _UPSTREAM_FIELDS, merged.get("upstream", {}))
    storage_values = merged.get("storage", {})
    unknown = set(storage_values) - set(_STORAGE_FIELDS)
    if unknown:
        raise SettingsError(f"Unknown keys in settings section 'storage': {', '.join(sorted(unknown))}")
    storage_root = _as_str("storage.root", storage_values.get("root"))
    storage = StorageSettings(root=Path(storage_root)) if storage_root else StorageSettings()
    email = _build_section("email", EmailSettings, _EMAIL_FIELDS, merged.get("email", {}))
    report = _build_section("report", ReportConfig, _REPORT_FIELDS, merged.get("report", {}))

    if report.diff_preview_limit < 0 or report.category_sample_limit < 0:
        raise SettingsError("Report preview limits must not be negative")
    if report.diff_preview_limit > MAX_DIFF_PREVIEW_LIMIT:
        raise SettingsError(f"report.diff_preview_limit must be at most {MAX_DIFF_PREVIEW_LIMIT}")
    if report.category_sample_limit > MAX_CATEGORY_SAMPLE_LIMIT:
        raise SettingsError(f"report.category_sample_limit must be at most {MAX_CATEGORY_SAMPLE_LIMIT}")
    if upstream.timeout <= 0:
        raise SettingsError("upstream.timeout must be positive")

    general = merged.get("general", {})
    settings = Settings(upstream=upstream, storage=storage, email=email, report=report)

    if "metrics_enabled" in general:
        settings = replace(settings, metrics_enabled=_as_bool("metrics_enabled", general["metrics_enabled"]))
    if "log_level" in general:
        level = (_as_str("log_level", general["log_level"]) or "INFO").upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise SettingsError(f"Unsupported log level: {level}")
        settings = replace(settings, log_level=level)
    if "log_format" in general:
        log_format = (_as_str("log_format", general["log_format"]) or "text").lower()
        if log_format not in {"json", "text"}:
            raise SettingsError(f"log_format must be 'json' or 'text', got {log_format!r}")
        settings = replace(settings, json_logs=log_format == "json")

    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings(os.environ.get(SETTINGS_FILE_ENV) or None)
