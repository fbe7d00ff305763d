"""Generator configuration.

The core reads a Config but never mutates it. CLI options and an optional
YAML config file are merged into one instance before a run starts.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CLIENTS = ("fetch", "axios", "angular", "fastify")

# union: type alias of literals; typescript: `enum`; javascript: alias + `as const` object
ENUM_STYLES = ("union", "typescript", "javascript")

RESPONSE_STYLES = ("body", "response")


@dataclasses.dataclass(frozen=True)
class Config:
    """Options that shape the emitted TypeScript."""

    client: str = "fetch"
    enums: str = "union"
    operation_id: bool = True
    use_options: bool = True
    response: str = "body"
    service_name: str = "{{name}}Service"
    base: str | None = None
    export_core: bool = True
    export_services: bool = True
    export_types: bool = True
    export_schemas: bool = False

    def __post_init__(self) -> None:
        _check_choice("client", self.client, CLIENTS)
        _check_choice("enums", self.enums, ENUM_STYLES)
        _check_choice("response", self.response, RESPONSE_STYLES)
        if "{{name}}" not in self.service_name:
            raise ConfigError(
                f"service_name must contain '{{{{name}}}}', got {self.service_name!r}"
            )

    @property
    def exports_services(self) -> bool:
        """Fastify consumers implement controllers; no service classes are emitted."""
        return self.export_services and self.client != "fastify"

    def with_overrides(self, **overrides: Any) -> Config:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **values)


def _check_choice(option: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ConfigError(
            f"Invalid {option} {value!r}; expected one of: {', '.join(choices)}"
        )


def load_config(path: Path | None = None) -> Config:
    """Load a Config from a YAML file, or return the defaults."""
    if path is None:
        return Config()
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of options")

    known = {f.name for f in dataclasses.fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config options in {path}: {', '.join(unknown)}")
    return Config(**data)
