"""Tests for the inkwell command-line interface.

HOW: Commands run through main() with argument lists; files live in
tmp_path and output is read back with capsys. Collaborator commands run
without an API key, which exercises the degraded paths offline.
"""

from __future__ import annotations

import functools
import json

import pytest

from inkwell import cli
from inkwell.core.playback import PlaybackScheduler


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def chapter(tmp_path):
    path = tmp_path / "chapter.txt"
    path.write_text("我走过荷塘。月色很美丽。", encoding="utf-8")
    return path


class TestParser:

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_focus_defaults(self):
        args = cli.build_parser().parse_args(["focus", "book.txt"])
        assert args.rate == 5
        assert args.handler is cli.cmd_focus

    def test_highlight_config_from_categories(self):
        args = cli.build_parser().parse_args(
            ["annotate", "f.txt", "--categories", "verb, adj", "--verb-color", "#000000"]
        )
        config = cli._highlight_config(args)
        assert config.nouns.enabled is False
        assert config.verbs.enabled is True
        assert config.verbs.color == "#000000"
        assert config.adjectives.enabled is True


class TestAnnotate:

    def test_creative_terms_file(self, chapter, tmp_path, capsys):
        terms = tmp_path / "terms.json"
        terms.write_text(json.dumps({"nouns": ["荷塘"], "verbs": ["走过"]}), encoding="utf-8")

        assert _run(["annotate", str(chapter), "--terms", str(terms)]) == 0
        out = capsys.readouterr().out
        assert 'data-term="荷塘" data-type="noun"' in out
        assert "data-type=\"verb\"" not in out

    def test_analytical_terms_file(self, chapter, tmp_path, capsys):
        terms = tmp_path / "terms.json"
        terms.write_text(
            json.dumps({"properNouns": ["荷塘"], "topicHotWords": ["月色"]}, ensure_ascii=False),
            encoding="utf-8",
        )

        assert _run(["annotate", str(chapter), "--mode", "analytical", "--terms", str(terms)]) == 0
        out = capsys.readouterr().out
        assert 'data-type="proper"' in out
        assert 'data-type="hotword"' in out

    def test_terms_file_must_be_object(self, chapter, tmp_path, capsys):
        terms = tmp_path / "terms.json"
        terms.write_text("[]", encoding="utf-8")
        assert _run(["annotate", str(chapter), "--terms", str(terms)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: invalid terms file" in captured.err

    def test_terms_file_with_bad_json(self, chapter, tmp_path, capsys):
        terms = tmp_path / "terms.json"
        terms.write_text("{nouns: ", encoding="utf-8")
        assert _run(["annotate", str(chapter), "--terms", str(terms)]) == 1
        assert "Error: invalid terms file" in capsys.readouterr().err


class TestSegment:

    def test_prints_numbered_units(self, chapter, capsys):
        assert _run(["segment", str(chapter)]) == 0
        captured = capsys.readouterr()
        assert captured.out.splitlines() == ["   0  我走过荷塘。", "   1  月色很美丽。"]
        assert "2 unit(s)" in captured.err


class TestFocus:

    def test_plays_every_unit_then_exits(self, tmp_path, capsys, monkeypatch):
        path = tmp_path / "short.txt"
        path.write_text("甲。乙。", encoding="utf-8")
        monkeypatch.setattr(cli, "PlaybackScheduler", functools.partial(PlaybackScheduler, min_delay_ms=1))

        assert _run(["focus", str(path), "--rate", "15"]) == 0
        captured = capsys.readouterr()
        assert captured.out.splitlines() == ["甲。", "乙。"]
        assert "Played 2 unit(s)" in captured.err

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.txt"
        path.write_text("", encoding="utf-8")
        assert _run(["focus", str(path)]) == 0
        assert "Played 0 unit(s)" in capsys.readouterr().err


class TestCollaboratorCommands:

    def test_analyze_without_key_degrades(self, chapter, capsys, no_api_key):
        assert _run(["analyze", str(chapter), "--mode", "novel"]) == 0
        captured = capsys.readouterr()
        assert captured.out.strip() == "我走过荷塘。月色很美丽。"
        assert "Analysis failed" in captured.err

    def test_explain_without_key_prints_placeholder(self, capsys, no_api_key):
        assert _run(["explain", "荷塘"]) == 0
        assert capsys.readouterr().out.strip() == "无法获取解释"

    def test_import_unsupported_type(self, tmp_path, capsys):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"ID3")
        assert _run(["import", str(path)]) == 1
        assert "unsupported file type '.mp3'" in capsys.readouterr().err

    def test_import_without_key_fails_cleanly(self, tmp_path, capsys, no_api_key):
        path = tmp_path / "book.txt"
        path.write_text("正文", encoding="utf-8")
        assert _run(["import", str(path)]) == 1
        assert "Error:" in capsys.readouterr().err
