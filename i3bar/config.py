from __future__ import annotations

from pathlib import Path
from typing import IO, Any, ClassVar, Literal, cast

from pydantic import BaseModel, Field

from .contracts import Header
from .stream import Sink, Stream

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class HeaderCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    version: int = 1
    stop_signal: int = Field(default=0, ge=0)
    cont_signal: int = Field(default=0, ge=0)
    click_events: bool = False

    def to_header(self) -> Header:
        return Header(
            version=self.version,
            stop_signal=self.stop_signal,
            cont_signal=self.cont_signal,
            click_events=self.click_events,
        )


class StreamCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    pretty: bool = False
    comma_separated: bool = False


class LoggingCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    level: LogLevel = "INFO"
    json: bool = True
    log_dir: Path | None = None


class Config(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    header: HeaderCfg = Field(default_factory=HeaderCfg)
    stream: StreamCfg = Field(default_factory=StreamCfg)
    logging: LoggingCfg = Field(default_factory=LoggingCfg)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Safe YAML read; returns {} if file missing/empty."""
    import yaml  # lazy import

    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data or {}


def load_config(base_dir: str | Path) -> Config:
    """Load the stream configuration from ./config/base.yaml."""

    base_yaml = Path(base_dir) / "config" / "base.yaml"
    data = _read_yaml(base_yaml)
    if not data:
        msg = f"Missing or empty config file: {base_yaml}"
        raise FileNotFoundError(msg)

    return cast(Config, Config.model_validate(data))


def open_stream(cfg: Config, sink: Sink, source: IO[str] | None = None) -> Stream:
    """Start a protocol stream on ``sink`` using the header and options in ``cfg``."""

    return Stream(
        sink,
        source,
        cfg.stream.pretty,
        cfg.header.to_header(),
        comma_separated=cfg.stream.comma_separated,
    )
