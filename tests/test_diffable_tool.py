"""Tests for scripts/diffable_tool.py subcommands."""
from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import orjson
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

SAMPLE = (
    "BibleMultiConverter-1.0 Title: Tool Test\n"
    "# two books, then Gen is folded into Exo\n"
    "Gen = Gen\tGenesis\tGenesis\n"
    "Gen 1:1 In the <b>beginning</>\n"
    "Exo = Exod\tExodus\tExodus\n"
    "Exo 1 <h1>Names</>\n"
    "Exo 1:1 These are the names\n"
    "Gen -> Exo\n"
)


def _load_tool_module() -> object:
    script_path = ROOT / "scripts" / "diffable_tool.py"
    spec = importlib.util.spec_from_file_location("diffable_tool", script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def tool() -> object:
    return _load_tool_module()


@pytest.fixture()
def sample_path(tmp_path: Path) -> Path:
    path = tmp_path / "bible.txt"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


class TestCheck:
    def test_prints_stats(self, tool, sample_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert tool.main(["check", str(sample_path)]) == 0
        payload = orjson.loads(capsys.readouterr().out)
        assert payload["name"] == "Tool Test"
        assert payload["books"] == ["Exo"]
        assert payload["book_count"] == 1
        assert payload["chapter_count"] == 2
        assert payload["verse_count"] == 2
        assert payload["prolog_count"] == 1

    def test_missing_input(self, tool, tmp_path: Path) -> None:
        assert tool.main(["check", str(tmp_path / "nope.txt")]) == 2

    def test_parse_error_exit_code(self, tool, tmp_path: Path) -> None:
        bad = tmp_path / "bad.txt"
        bad.write_text(
            "BibleMultiConverter-1.0 Title: Bad\nGen = Gen\tGenesis\tGenesis\nGen 1:1 <b>open\n",
            encoding="utf-8",
        )
        assert tool.main(["check", str(bad)]) == 1


class TestNormalize:
    def test_folds_directives(self, tool, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "normalized.txt"
        assert tool.main(["normalize", str(sample_path), "-o", str(out)]) == 0
        assert out.read_text(encoding="utf-8").splitlines() == [
            "BibleMultiConverter-1.0 Title: Tool Test",
            "Exo = Exod\tExodus\tExodus",
            "Exo 1 <h1>Names</>",
            "Exo 1:1 These are the names",
            "Exo 2:1 In the <b>beginning</>",
        ]

    def test_normalized_output_is_stable(self, tool, sample_path: Path, tmp_path: Path) -> None:
        first = tmp_path / "first.txt"
        second = tmp_path / "second.txt"
        assert tool.main(["normalize", str(sample_path), "-o", str(first)]) == 0
        assert tool.main(["normalize", str(first), "-o", str(second)]) == 0
        assert first.read_text(encoding="utf-8") == second.read_text(encoding="utf-8")


class TestDumpJson:
    def test_writes_model(self, tool, sample_path: Path, tmp_path: Path) -> None:
        out = tmp_path / "bible.json"
        assert tool.main(["dump-json", str(sample_path), "-o", str(out), "--pretty"]) == 0
        payload = orjson.loads(out.read_bytes())
        assert payload["name"] == "Tool Test"
        (book,) = payload["books"]
        assert book["abbr"] == "Exo"
        assert [ch["number"] for ch in book["chapters"]] == [1, 2]
        assert book["chapters"][0]["prolog"] == [
            {"type": "Headline", "depth": 1, "children": [{"type": "Text", "text": "Names"}]},
        ]
        verse = book["chapters"][1]["verses"][0]
        assert verse["number"] == "1"
        assert verse["content"][1] == {
            "type": "FormattingInstruction",
            "kind": "BOLD",
            "children": [{"type": "Text", "text": "beginning"}],
        }
