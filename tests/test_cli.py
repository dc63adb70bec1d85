"""Tests for the blog-snapshot command line."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from blog_snapshot.cli import main
from blog_snapshot.factory import ProfileNotFoundError


@pytest.fixture
def cli_store(store, clean_env):
    """Route every get_adapter() call in the CLI to the in-memory store."""
    with patch("blog_snapshot.cli.get_adapter", return_value=store) as factory:
        store.factory = factory
        yield store


def _write(path, data) -> str:
    path.write_text(json.dumps(data))
    return str(path)


class TestExportCommand:
    def test_writes_snapshot_file(self, cli_store, tmp_path):
        output = tmp_path / "out.json"
        assert main(["export", "--output", str(output)]) == 0

        data = json.loads(output.read_text())
        assert data["version"] == "1.0.0"
        assert [p["slug"] for p in data["tables"]["posts"]] == ["123456"]
        assert cli_store.closed

    def test_dated_file_in_directory(self, cli_store, tmp_path):
        assert main(["export", "--dir", str(tmp_path / "backups")]) == 0
        files = list((tmp_path / "backups").glob("blog_backup_*.json"))
        assert len(files) == 1

    def test_degraded_collection_still_succeeds(self, cli_store, tmp_path):
        cli_store.fail_tables.add("links")
        output = tmp_path / "out.json"
        assert main(["export", "--output", str(output)]) == 0
        assert json.loads(output.read_text())["tables"]["links"] == []

    def test_profile_passed_to_factory(self, cli_store, tmp_path):
        main(["--profile", "local", "export", "--output", str(tmp_path / "o.json")])
        assert cli_store.factory.call_args.args[0] == "local"

    def test_unwritable_destination_reported(self, cli_store, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        assert main(["export", "--dir", str(blocker / "backups")]) == 1
        assert "failed to write snapshot" in capsys.readouterr().out
        assert cli_store.closed

    def test_no_database_configured(self, clean_env, tmp_path):
        with patch("blog_snapshot.cli.get_adapter", side_effect=ProfileNotFoundError("none")):
            assert main(["export", "--output", str(tmp_path / "o.json")]) == 1


class TestImportCommand:
    def test_imports_with_yes(self, cli_store, tmp_path):
        path = _write(
            tmp_path / "in.json",
            {"version": "1.0.0", "tables": {"links": [{"title": "New", "url": "https://new"}]}},
        )
        assert main(["import", path, "--yes"]) == 0
        assert [link["title"] for link in cli_store.tables["links"]] == ["New"]
        assert cli_store.closed

    def test_invalid_file_rejected_before_store(self, cli_store, tmp_path):
        path = _write(tmp_path / "in.json", {"version": "1.0.0"})
        assert main(["import", path, "--yes"]) == 1
        cli_store.factory.assert_not_called()
        assert cli_store.mutations == 0

    def test_unsupported_version_rejected(self, cli_store, tmp_path):
        path = _write(tmp_path / "in.json", {"version": "2.0.0", "tables": {}})
        assert main(["import", path, "--yes"]) == 1
        assert cli_store.transactions_opened == 0

    def test_store_failure_reports_and_rolls_back(self, cli_store, tmp_path):
        before = {name: [dict(r) for r in rows] for name, rows in cli_store.tables.items()}
        path = _write(tmp_path / "in.json", {"tables": {"posts": [{"slug": "x"}]}})

        assert main(["import", path, "--yes"]) == 1
        assert cli_store.tables == before

    def test_confirmation_declined(self, cli_store, tmp_path):
        path = _write(tmp_path / "in.json", {"tables": {}})
        with patch("builtins.input", return_value="n"):
            assert main(["import", path]) == 1
        assert cli_store.transactions_opened == 0

    def test_confirmation_accepted(self, cli_store, tmp_path):
        path = _write(tmp_path / "in.json", {"tables": {}})
        with patch("builtins.input", return_value="yes"):
            assert main(["import", path]) == 0
        assert cli_store.transactions_opened == 1

    def test_missing_file(self, cli_store, tmp_path):
        assert main(["import", str(tmp_path / "missing.json"), "--yes"]) == 1


class TestValidateCommand:
    def test_valid_file(self, clean_env, tmp_path, capsys):
        path = _write(tmp_path / "in.json", {"version": "1.0.0", "tables": {"posts": [{"slug": "a"}]}})
        assert main(["validate", path]) == 0
        assert "Valid snapshot" in capsys.readouterr().out

    def test_invalid_file(self, clean_env, tmp_path):
        path = _write(tmp_path / "in.json", {"tables": {"links": ["nope"]}})
        assert main(["validate", path]) == 1


class TestCheckCommand:
    def test_valid_store(self, clean_env):
        from blog_snapshot.snapshot.registry import expected_columns

        rows = [
            {"table_name": table, "column_name": column}
            for table, columns in expected_columns().items()
            for column in columns
        ]
        adapter = AsyncMock()
        adapter.select = AsyncMock(return_value=rows)
        with patch("blog_snapshot.cli.get_adapter", return_value=adapter):
            assert main(["check"]) == 0
        adapter.close.assert_awaited_once()

    def test_drifted_store(self, clean_env):
        adapter = AsyncMock()
        adapter.select = AsyncMock(return_value=[{"table_name": "posts", "column_name": "id"}])
        with patch("blog_snapshot.cli.get_adapter", return_value=adapter):
            assert main(["check"]) == 1

    def test_connection_failure(self, clean_env):
        adapter = AsyncMock()
        adapter.select = AsyncMock(side_effect=OSError("refused"))
        with patch("blog_snapshot.cli.get_adapter", return_value=adapter):
            assert main(["check"]) == 1

    def test_health_check_runs_before_introspection(self, clean_env, capsys):
        adapter = AsyncMock()
        adapter.test_connection = AsyncMock(side_effect=OSError("refused"))
        with patch("blog_snapshot.cli.get_adapter", return_value=adapter):
            assert main(["check"]) == 1
        assert "Failed to connect to database" in capsys.readouterr().out
        adapter.select.assert_not_awaited()
        adapter.close.assert_awaited_once()


def test_bad_config_path(clean_env, tmp_path):
    assert main(["--config", str(tmp_path / "missing.toml"), "validate", "x.json"]) == 1
