from __future__ import annotations

import pytest

from academy_backoffice.database import bootstrap


class FakeCursor:
    def __init__(self, log: list[str]):
        self._log = log

    def execute(self, sql, params=None):
        self._log.append(" ".join(sql.split()))

    def fetchall(self):
        return [("users",), ("employee_punches",)]


class FakeConnection:
    def __init__(self, log: list[str]):
        self._log = log
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self._log)

    def commit(self):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def connects(monkeypatch):
    calls: list[dict] = []
    log: list[str] = []

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return FakeConnection(log)

    monkeypatch.setattr("mysql.connector.connect", fake_connect)
    return calls, log


DB = {"host": "db", "port": 3307, "user": "app", "password": "pw", "database": "academy_test"}


def test_create_database_connects_without_schema(connects):
    calls, log = connects

    bootstrap.ensure_database_exists(DB)

    assert "database" not in calls[0]
    assert calls[0]["host"] == "db" and calls[0]["port"] == 3307
    assert log[0].startswith("CREATE DATABASE IF NOT EXISTS `academy_test`")


def test_apply_schema_runs_each_statement_against_target_db(connects, tmp_path):
    calls, log = connects
    schema = tmp_path / "schema.sql"
    schema.write_text(
        "-- demo\nCREATE DATABASE IF NOT EXISTS other;\nUSE other;\n"
        "CREATE TABLE a (x VARCHAR(3) DEFAULT ';');\nCREATE TABLE b (y INT);\n",
        encoding="utf-8",
    )

    bootstrap.apply_schema(DB, schema_path=schema)

    assert [c.get("database") for c in calls] == [None, "academy_test"]
    assert log[1:] == ["CREATE TABLE a (x VARCHAR(3) DEFAULT ';')", "CREATE TABLE b (y INT)"]


def test_list_tables(connects):
    assert bootstrap.list_tables(DB) == ["users", "employee_punches"]
