from __future__ import annotations

from pathlib import Path

import pytest
import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from i3bar.config import Config, load_config, open_stream
from i3bar.contracts import Block, Header
from tests.utils import RecordingSink, parse_stream


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def write_config(tmp_path: Path, data: dict[str, object]) -> Path:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "base.yaml").write_text(yaml.safe_dump(data), encoding="utf-8")
    return tmp_path


def test_load_config_from_repo() -> None:
    cfg = load_config(repo_root())

    assert cfg.header.to_header() == Header(version=1)
    assert cfg.stream.pretty is False
    assert cfg.stream.comma_separated is False
    assert cfg.logging.level == "INFO"
    assert cfg.logging.json is True
    assert cfg.logging.log_dir is None


def test_partial_config_uses_defaults(tmp_path: Path) -> None:
    base = write_config(tmp_path, {"header": {"click_events": True, "stop_signal": 10}})

    cfg = load_config(base)

    assert cfg.header.to_header() == Header(version=1, stop_signal=10, click_events=True)
    assert cfg.stream.pretty is False
    assert cfg.logging.level == "INFO"


def test_load_config_missing_base(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()

    with pytest.raises(FileNotFoundError):
        load_config(tmp_path)


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    base = write_config(tmp_path, {"stream": {"pretty": True, "colour": "red"}})

    with pytest.raises(ValidationError):
        load_config(base)


def test_negative_signal_is_rejected(tmp_path: Path) -> None:
    base = write_config(tmp_path, {"header": {"cont_signal": -1}})

    with pytest.raises(ValidationError):
        load_config(base)


def test_unknown_log_level_is_rejected(tmp_path: Path) -> None:
    base = write_config(tmp_path, {"logging": {"level": "VERBOSE"}})

    with pytest.raises(ValidationError):
        load_config(base)


def test_open_stream_applies_config() -> None:
    cfg = Config.model_validate(
        {
            "header": {"version": 1, "click_events": True},
            "stream": {"comma_separated": True},
        }
    )
    sink = RecordingSink()

    stream = open_stream(cfg, sink)
    stream.send_line([Block("a")])
    stream.send_line([Block("b")])
    stream.close()

    assert sink.writes[0] == '{"version":1,"click_events":true}\n'
    assert sink.writes[3].startswith(",")
    header, lines, closed = parse_stream(sink.getvalue())
    assert header == {"version": 1, "click_events": True}
    assert lines == [[{"full_text": "a"}], [{"full_text": "b"}]]
    assert closed is True
