"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mailrender.cli import build_parser, execute
from mailrender.core.config import AppSettings, OutputSettings


def _settings(directory: Path) -> AppSettings:
    return AppSettings(output=OutputSettings(directory=directory, random_seed=1))


def test_info_command_prints_configuration(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    args = build_parser().parse_args([])

    assert execute(args, _settings(tmp_path)) == 0
    assert f"Output directory: {tmp_path}" in capsys.readouterr().out


def test_render_requires_input(tmp_path: Path) -> None:
    args = build_parser().parse_args(["render"])

    assert execute(args, _settings(tmp_path)) == 2


def test_render_reports_unreadable_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    args = build_parser().parse_args(["render", str(broken)])

    assert execute(args, _settings(tmp_path)) == 1
    assert "Unable to load" in capsys.readouterr().err


def test_render_writes_documents(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    document = {
        "root": {
            "type": "store",
            "children": [
                {
                    "type": "folder",
                    "file_as": "Contacts",
                    "item_count": 1,
                    "children": [{"type": "contact", "contact": {"fullname": "Ann"}}],
                }
            ],
        }
    }
    source = tmp_path / "items.json"
    source.write_text(json.dumps(document), encoding="utf-8")
    output = tmp_path / "out"
    args = build_parser().parse_args(["render", str(source), "--output", str(output)])

    assert execute(args, _settings(tmp_path / "unused")) == 0

    assert (output / "Contacts" / "0001.vcard").read_bytes().startswith(b"BEGIN:VCARD")
    captured = capsys.readouterr()
    assert "Wrote 1 documents" in captured.out
    assert "Processed 1/1" in captured.err


def test_render_reports_invalid_payload_as_load_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    document = {
        "root": {
            "type": "note",
            "email": {},
            "attachments": [{"filename": "a.bin", "data": "abc"}],
        }
    }
    source = tmp_path / "items.json"
    source.write_text(json.dumps(document), encoding="utf-8")
    args = build_parser().parse_args(["render", str(source)])

    assert execute(args, _settings(tmp_path / "out")) == 1
    assert "Unable to load" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()
