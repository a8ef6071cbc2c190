from __future__ import annotations

import logging
from pathlib import Path

import pytest

from adapters.csv_rule_store import CsvRuleStore, parse_rule_line
from core.errors import MalformedRecordError, NotFoundError, RuleStoreError
from core.models import Decision


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_parses_decisions_case_insensitively(tmp_path: Path) -> None:
    path = _write(tmp_path / "cookies.csv", "example.com,keep\nbad.com,DELETE\nmaybe.com,Undecided\n")

    rules = CsvRuleStore(str(path)).load()

    assert rules == {
        "example.com": Decision.KEEP,
        "bad.com": Decision.DELETE,
        "maybe.com": Decision.UNDECIDED,
    }


def test_missing_or_empty_or_unknown_decision_is_undecided(tmp_path: Path) -> None:
    path = _write(tmp_path / "cookies.csv", "a.com\nb.com,\nc.com,  \nd.com,purge\n")

    rules = CsvRuleStore(str(path)).load()

    assert rules == {
        "a.com": Decision.UNDECIDED,
        "b.com": Decision.UNDECIDED,
        "c.com": Decision.UNDECIDED,
        "d.com": Decision.UNDECIDED,
    }


def test_last_occurrence_of_a_host_wins(tmp_path: Path) -> None:
    path = _write(tmp_path / "cookies.csv", "dup.com,delete\nother.com,keep\ndup.com,keep\n")

    rules = CsvRuleStore(str(path)).load()

    assert rules["dup.com"] is Decision.KEEP
    assert len(rules) == 2


def test_blank_lines_bom_crlf_and_extra_fields_are_tolerated(tmp_path: Path) -> None:
    path = tmp_path / "cookies.csv"
    path.write_bytes(b"\xef\xbb\xbfexample.com,keep\r\n\r\n .spaced.com , delete ,note\r\n")

    rules = CsvRuleStore(str(path)).load()

    assert rules == {"example.com": Decision.KEEP, ".spaced.com": Decision.DELETE}


def test_missing_file_raises_not_found(tmp_path: Path) -> None:
    store = CsvRuleStore(str(tmp_path / "absent.csv"))

    with pytest.raises(NotFoundError) as excinfo:
        store.load()

    assert "absent.csv" in str(excinfo.value)
    assert isinstance(excinfo.value, FileNotFoundError)


def test_empty_host_is_skipped_with_warning_by_default(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(tmp_path / "cookies.csv", "good.com,keep\n,delete\nlast.com,delete\n")

    with caplog.at_level(logging.WARNING):
        rules = CsvRuleStore(str(path)).load()

    assert rules == {"good.com": Decision.KEEP, "last.com": Decision.DELETE}
    assert "line 2" in caplog.text


def test_empty_host_raises_in_strict_mode(tmp_path: Path) -> None:
    path = _write(tmp_path / "cookies.csv", "good.com,keep\n,delete\n")

    with pytest.raises(MalformedRecordError) as excinfo:
        CsvRuleStore(str(path), strict=True).load()

    assert excinfo.value.line_number == 2


def test_parse_rule_line_returns_none_for_blank_line() -> None:
    assert parse_rule_line("   \n", 1) is None
    assert parse_rule_line("site.com,keep,\n", 1) == ("site.com", Decision.KEEP)


def test_append_hosts_preserves_existing_records(tmp_path: Path) -> None:
    original = "example.com,keep\nbad.com,delete\n"
    path = _write(tmp_path / "cookies.csv", original)
    store = CsvRuleStore(str(path))

    store.append_hosts(["new.com", "other.com"])

    assert path.read_text(encoding="utf-8") == original + "new.com,\nother.com,\n"
    rules = store.load()
    assert rules["new.com"] is Decision.UNDECIDED
    assert rules["example.com"] is Decision.KEEP


def test_append_hosts_adds_missing_trailing_newline(tmp_path: Path) -> None:
    path = _write(tmp_path / "cookies.csv", "example.com,keep")

    CsvRuleStore(str(path)).append_hosts(["new.com"])

    assert path.read_text(encoding="utf-8") == "example.com,keep\nnew.com,\n"


def test_append_nothing_does_not_touch_file(tmp_path: Path) -> None:
    path = tmp_path / "cookies.csv"

    CsvRuleStore(str(path)).append_hosts([])

    assert not path.exists()


def test_undecodable_line_is_skipped_by_default(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "cookies.csv"
    path.write_bytes(b"caf\xe9.com,keep\nbad.com,delete\n")

    with caplog.at_level(logging.WARNING):
        rules = CsvRuleStore(str(path)).load()

    assert rules == {"bad.com": Decision.DELETE}
    assert "not valid UTF-8" in caplog.text


def test_undecodable_line_raises_in_strict_mode(tmp_path: Path) -> None:
    path = tmp_path / "cookies.csv"
    path.write_bytes(b"good.com,keep\ncaf\xe9.com,keep\n")

    with pytest.raises(MalformedRecordError) as excinfo:
        CsvRuleStore(str(path), strict=True).load()

    assert excinfo.value.line_number == 2


def test_directory_instead_of_file_raises_rule_store_error(tmp_path: Path) -> None:
    with pytest.raises(RuleStoreError):
        CsvRuleStore(str(tmp_path)).load()


def test_append_failure_raises_rule_store_error(tmp_path: Path) -> None:
    store = CsvRuleStore(str(tmp_path / "missing-dir" / "cookies.csv"))

    with pytest.raises(RuleStoreError):
        store.append_hosts(["new.com"])
