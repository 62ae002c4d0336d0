"""Tests for the command-line front end."""

import json

import pytest

from annotation_search.cli import ENV_DATA_PATH, main


@pytest.fixture
def export_path(tmp_path, abc_corpus):
    path = tmp_path / "export.json"
    path.write_text(json.dumps({"annotations": [a.to_dict() for a in abc_corpus]}))
    return str(path)


def run(capsys, argv):
    code = main(argv)
    out = capsys.readouterr().out
    return code, (json.loads(out) if out.strip() else None)


def test_search(capsys, export_path):
    code, out = run(capsys, ["--annotations", export_path, "search", "deep"])
    assert code == 0
    assert [a["id"] for a in out["annotations"]] == ["A", "B"]
    assert out["scores"] == {"A": 3, "B": 2}
    assert out["total"] == 2


def test_search_with_filters(capsys, export_path):
    code, out = run(capsys, ["--annotations", export_path, "search",
                             "--tag", "ml", "--tag", "nlp", "--sort-by", "author"])
    assert code == 0
    assert [a["id"] for a in out["annotations"]] == ["B"]


def test_search_by_platform_and_comment(capsys, export_path):
    code, out = run(capsys, ["--annotations", export_path, "search",
                             "--platform", "zotero", "--no-comment"])
    assert code == 0
    assert [a["id"] for a in out["annotations"]] == ["A"]


def test_data_path_from_environment(capsys, export_path, monkeypatch):
    monkeypatch.setenv(ENV_DATA_PATH, export_path)
    code, out = run(capsys, ["suggest", "deep"])
    assert code == 0
    assert out == ["deep", "deep learning", "deep dive"]


def test_popular_tags(capsys, export_path):
    code, out = run(capsys, ["--annotations", export_path, "popular-tags", "--limit", "2"])
    assert code == 0
    assert out == [{"tag": "ml", "count": 2}, {"tag": "nlp", "count": 1}]


def test_missing_path(capsys, monkeypatch):
    monkeypatch.delenv(ENV_DATA_PATH, raising=False)
    assert main(["popular-tags"]) == 2
    assert ENV_DATA_PATH in capsys.readouterr().err


def test_unreadable_file(capsys, tmp_path):
    assert main(["--annotations", str(tmp_path / "missing.json"), "popular-tags"]) == 1
    assert "could not read" in capsys.readouterr().err


def test_invalid_request_exit_code(capsys, export_path):
    assert main(["--annotations", export_path, "search", "--page", "0"]) == 2
    assert "API_INVALID_REQUEST" in capsys.readouterr().err
