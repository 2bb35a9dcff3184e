"""Configuration file models and loader.

The configuration is a YAML document validated with pydantic::

    log_level: info
    address: 0.0.0.0:3000
    scrape_on_startup: false
    targets:
      - name: example
        url: https://example.com/status.json
        cron: "*/5 * * * *"
        extractor: jq
        headers:
          Authorization: Bearer secret
        rules:
          - name: example_up
            extract: .up
"""

import json
from pathlib import Path
from typing import Any

import yaml
from croniter import croniter
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from prometheus_http_exporter.adapters.http.httpx_fetcher import DEFAULT_TIMEOUT
from prometheus_http_exporter.adapters.logging import parse_level
from prometheus_http_exporter.core.errors import ConfigError
from prometheus_http_exporter.core.models import ExtractorKind, Rule, Target


class RuleConfig(BaseModel):
    """How to process the fetched data into metrics."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(
        description=(
            "The rule's name, and that of any metrics generated. Should be "
            "snake_case to conform with Prometheus specs."
        )
    )
    extract: str = Field(
        description=(
            "Instructions for the selected extractor, f.e. a jq query or "
            "regex pattern."
        )
    )

    @field_validator("name", "extract")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class TargetConfig(BaseModel):
    """A URL to fetch on a schedule, with the rules applied to its responses."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="The target's name. Must be unique.")
    url: str = Field(description="The URL that should be fetched.")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Additional headers. User-Agent is set by default.",
    )
    cron: str = Field(
        description=(
            "When the job should run, as a cron expression. Six fields put "
            "seconds first: sec min hour dom mon dow."
        ),
    )
    extractor: ExtractorKind = Field(
        default=ExtractorKind.JQ,
        description="Which engine shall be used to process the response.",
    )
    rules: list[RuleConfig] = Field(min_length=1, description="A set of rules.")

    @field_validator("name")
    @classmethod
    def valid_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        if "\n" in v or "\r" in v:
            raise ValueError("must not contain newlines")
        return v

    @field_validator("url")
    @classmethod
    def http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("must be an http:// or https:// URL")
        return v

    @field_validator("cron")
    @classmethod
    def valid_cron(cls, v: str) -> str:
        if not croniter.is_valid(v, second_at_beginning=True):
            raise ValueError(f"invalid cron expression {v!r}")
        return v

    def to_target(self) -> Target:
        """Convert to the immutable core model."""
        return Target(
            name=self.name,
            url=self.url,
            cron=self.cron,
            rules=tuple(Rule(name=r.name, extract=r.extract) for r in self.rules),
            headers=dict(self.headers),
            extractor=self.extractor,
        )


class ExporterConfig(BaseModel):
    """Top-level configuration file."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="info", description="How verbose logging should be.")
    address: str = Field(default="0.0.0.0:3000", description="The address to bind to.")
    scrape_on_startup: bool = Field(
        default=False,
        description=(
            "Scrapes each target while starting up. Useful to test your config, "
            "don't use in production."
        ),
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Request timeout in seconds for every fetch.",
    )
    targets: list[TargetConfig]

    @field_validator("log_level")
    @classmethod
    def valid_level(cls, v: str) -> str:
        parse_level(v)
        return v

    @field_validator("address")
    @classmethod
    def valid_address(cls, v: str) -> str:
        parse_address(v)
        return v

    @field_validator("targets")
    @classmethod
    def unique_names(cls, v: list[TargetConfig]) -> list[TargetConfig]:
        seen: set[str] = set()
        for target in v:
            if target.name in seen:
                raise ValueError(f"duplicate target name {target.name!r}")
            seen.add(target.name)
        return v

    @property
    def host(self) -> str:
        return parse_address(self.address)[0]

    @property
    def port(self) -> int:
        return parse_address(self.address)[1]

    def to_targets(self) -> list[Target]:
        """Return core targets in configuration order."""
        return [target.to_target() for target in self.targets]


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` for IPv6) into its parts.

    Raises:
        ValueError: If the port is missing or out of range.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"address must be host:port, got {address!r}")
    number = int(port)
    if not 0 < number < 65536:
        raise ValueError(f"port out of range in {address!r}")
    return host.strip("[]"), number


def parse_config(data: Any) -> ExporterConfig:
    """Validate already-parsed configuration data.

    Raises:
        ConfigError: If the data does not describe a valid configuration.
    """
    try:
        return ExporterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Failed to deserialize config: {e}") from e


def load_config(path: str | Path) -> ExporterConfig:
    """Load and validate a YAML configuration file.

    Raises:
        ConfigError: If the file cannot be read, is not YAML or is invalid.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to open config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e
    return parse_config(data)


def config_json_schema() -> str:
    """Return the JSON schema of the configuration file, pretty-printed."""
    return json.dumps(ExporterConfig.model_json_schema(), indent=2)
