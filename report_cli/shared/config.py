"""Layered configuration for report-parse: defaults, then YAML file, then environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, NamedTuple

import yaml

from . import paths
from .exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class SourceSettings:
    """How raw report lines are read."""

    encoding: str
    skip_top_empty_lines: bool
    width: int | None  # fixed record width for dumps without line breaks


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    lookahead_depth: int
    lookahead_enumerators: int
    enabled_reports: tuple[int, ...]  # empty means every registered report


@dataclass(frozen=True, slots=True)
class TraceSettings:
    enabled: bool


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    source: SourceSettings
    pipeline: PipelineSettings
    trace: TraceSettings

    def with_source_overrides(
        self,
        *,
        encoding: str | None = None,
        width: int | None = None,
    ) -> AppConfig:
        """Return a copy with ``--encoding``/``--width`` applied; unset values keep the config."""
        changes: dict[str, Any] = {}
        if encoding:
            changes["encoding"] = encoding
        if width:
            changes["width"] = width
        if not changes:
            return self
        return replace(self, source=replace(self.source, **changes))


DEFAULTS: dict[str, dict[str, Any]] = {
    "source": {"encoding": "utf-8", "skip_top_empty_lines": True, "width": None},
    "pipeline": {"lookahead_depth": 1, "lookahead_enumerators": 1, "enabled_reports": []},
    "trace": {"enabled": False},
}


def _parse_flag(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError("expected boolean (true/false)")


def _parse_codes(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class EnvOverride(NamedTuple):
    variable: str
    section: str
    key: str
    parse: Callable[[str], Any]


ENV_OVERRIDES: tuple[EnvOverride, ...] = (
    EnvOverride("REPORTCLI_SOURCE_ENCODING", "source", "encoding", str),
    EnvOverride("REPORTCLI_SOURCE_SKIP_TOP_EMPTY_LINES", "source", "skip_top_empty_lines", _parse_flag),
    EnvOverride("REPORTCLI_SOURCE_WIDTH", "source", "width", int),
    EnvOverride("REPORTCLI_LOOKAHEAD_DEPTH", "pipeline", "lookahead_depth", int),
    EnvOverride("REPORTCLI_LOOKAHEAD_ENUMERATORS", "pipeline", "lookahead_enumerators", int),
    EnvOverride("REPORTCLI_ENABLED_REPORTS", "pipeline", "enabled_reports", _parse_codes),
    EnvOverride("REPORTCLI_TRACE_ENABLED", "trace", "enabled", _parse_flag),
)


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build the configuration.

    ``config_path`` wins over ``$REPORTCLI_CONFIG_PATH`` and the config directory.
    A missing file is not an error; every setting then comes from defaults and
    ``REPORTCLI_*`` variables.
    """
    env = dict(os.environ if env is None else env)
    source_path = paths.resolve_path(config_path) if config_path else paths.default_config_path(env=env)

    sections = {name: dict(values) for name, values in DEFAULTS.items()}
    for name, values in _read_yaml(source_path).items():
        if isinstance(values, Mapping) and name in sections:
            sections[name].update(values)
        else:
            sections[name] = values
    for override in ENV_OVERRIDES:
        if override.variable in env:
            sections[override.section][override.key] = _env_value(override, env[override.variable])
    return _build(sections, source_path)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, MutableMapping):
        raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
    return dict(data)


def _env_value(override: EnvOverride, raw: str) -> Any:
    try:
        return override.parse(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(
            f"Environment override {override.variable} has invalid value '{raw}': {exc}"
        ) from exc


def _build(sections: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        source = sections["source"]
        pipeline = sections["pipeline"]
        config = AppConfig(
            source_path=source_path,
            source=SourceSettings(
                encoding=str(source["encoding"]),
                skip_top_empty_lines=bool(source["skip_top_empty_lines"]),
                width=int(source["width"]) if source["width"] else None,
            ),
            pipeline=PipelineSettings(
                lookahead_depth=int(pipeline["lookahead_depth"]),
                lookahead_enumerators=int(pipeline["lookahead_enumerators"]),
                enabled_reports=tuple(int(code) for code in pipeline["enabled_reports"]),
            ),
            trace=TraceSettings(enabled=bool(sections["trace"]["enabled"])),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    if config.pipeline.lookahead_depth < 0:
        raise ConfigurationError("pipeline.lookahead_depth must not be negative.")
    if config.pipeline.lookahead_enumerators < 1:
        raise ConfigurationError("pipeline.lookahead_enumerators must be at least 1.")
    return config
