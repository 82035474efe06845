from __future__ import annotations

from types import SimpleNamespace

import pytest

from choreosync.domain.sync import SyncReport
from choreosync.ui import cli as cli_module


def test_sync_command_runs_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def fake_sync() -> SyncReport:
        calls.append("sync")
        return SyncReport(applied=True, entity_count=3)

    monkeypatch.setattr(cli_module, "run_sync_once", fake_sync)

    cli_module.main(["sync"])

    assert calls == ["sync"]


def test_unapplied_sync_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli_module, "run_sync_once", lambda: SyncReport(applied=False, error="namespaces down")
    )

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 1


def test_serve_passes_max_ticks(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_serve(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "serve", fake_serve)

    cli_module.main(["--verbose", "serve", "--max-ticks", "2"])

    assert captured == {"max_ticks": 2}


def test_insert_and_remove_commands(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[tuple[str, str]] = []

    def fake_insert(path: str) -> SimpleNamespace:
        seen.append(("insert", path))
        return SimpleNamespace(entity=SimpleNamespace(ref="system:acme/shop"))

    def fake_remove(ref: str) -> str:
        seen.append(("remove", ref))
        return ref

    monkeypatch.setattr(cli_module, "insert_entity_from_file", fake_insert)
    monkeypatch.setattr(cli_module, "remove_entity", fake_remove)

    cli_module.main(["insert", "entity.json"])
    cli_module.main(["remove", "system:acme/shop"])

    assert seen == [("insert", "entity.json"), ("remove", "system:acme/shop")]


def test_failures_exit_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_remove(ref: str) -> str:
        raise ValueError(f"bad reference {ref}")

    monkeypatch.setattr(cli_module, "remove_entity", failing_remove)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["remove", "nonsense"])

    assert excinfo.value.code == 1


def test_missing_command_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_serve_rejects_zero_max_ticks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "serve", lambda **_kwargs: None)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["serve", "--max-ticks", "0"])

    assert excinfo.value.code == 2


def test_annotate_command_parses_pairs(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[tuple[str, dict[str, str | None]]] = []

    def fake_annotate(ref: str, annotations: dict[str, str | None]) -> dict[str, str]:
        captured.append((ref, annotations))
        return {"example.com/oncall": "team-a"}

    monkeypatch.setattr(cli_module, "annotate_entity", fake_annotate)

    cli_module.main(["annotate", "system:acme/shop", "example.com/oncall=team-a", "stale-"])

    assert captured == [("system:acme/shop", {"example.com/oncall": "team-a", "stale": None})]
