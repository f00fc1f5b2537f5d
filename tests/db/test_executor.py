"""Tests for ``shiftline.db.executor`` -- role-scoped data access end to end."""

from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import patch

import pytest
from structlog.testing import capture_logs

from shiftline.core.adapters import SQLiteAdapter
from shiftline.core.errors import (
    BuildError,
    ConfigurationError,
    DatabaseConnectionError,
    ExecutionError,
    MappingError,
    UnsafeQueryError,
)
from shiftline.db import QueryExecutor, QuerySpec, Role, RoleRegistry, UnsafeSQLFilter, column


@dataclass(kw_only=True)
class Token:
    token_id: int | None = column("token_id", generated=True)
    token_hash: str = column("token_hash")
    token_revoked: bool = column("token_revoked", default=False)
    token_expiry: str = column("token_expiry")


@dataclass
class TokenHash:
    token_hash: str = column("token_hash")


def _seed(executor: QueryExecutor, *tokens: tuple[str, bool, str]) -> list[int]:
    return [
        executor.insert(Role.ADMIN, "tokens", Token(token_hash=h, token_revoked=r, token_expiry=e))
        for h, r, e in tokens
    ]


class TestInsert:
    def test_returns_generated_id_and_row_is_selectable(self, executor):
        token_id = executor.insert(
            Role.ADMIN, "tokens", Token(token_hash="abc", token_revoked=False, token_expiry="2020-01-01")
        )
        assert token_id

        rows: list[Token] = []
        executor.select(Role.ADMIN, "tokens", rows, Token, conditions=["token_id = ?"], params=[token_id])
        assert rows == [Token(token_id=token_id, token_hash="abc", token_revoked=False, token_expiry="2020-01-01")]

    def test_ids_increase(self, executor):
        first, second = _seed(executor, ("a", False, "2020"), ("b", False, "2021"))
        assert second > first

    def test_bad_table_never_executes(self, executor, sqlite_adapter):
        with patch.object(sqlite_adapter, "run_statement") as run:
            with pytest.raises(BuildError):
                executor.insert(Role.ADMIN, "tokens; DROP TABLE tokens", Token(token_hash="a", token_expiry="x"))
        run.assert_not_called()

    def test_constraint_violation_is_execution_error(self, executor):
        with pytest.raises(ExecutionError) as exc_info:
            executor.insert(Role.ADMIN, "no_such_table", Token(token_hash="a", token_expiry="x"))
        ctx = exc_info.value.context
        assert (ctx.role, ctx.table, ctx.operation) == ("admin", "no_such_table", "insert")


class TestSelect:
    def test_unrevoked_sorted_with_limit(self, executor):
        _seed(executor, ("revoked", True, "2019-01-01"), ("live", False, "2020-01-01"))

        tokens: list[Token] = []
        executor.select(
            "admin",
            "tokens",
            tokens,
            Token,
            all_columns=True,
            conditions=["token_revoked = ?"],
            params=[False],
            order_by="token_expiry ASC",
            limit=10,
            offset=0,
        )

        assert len(tokens) == 1
        assert tokens[0].token_expiry == "2020-01-01"
        assert tokens[0].token_revoked is False

    def test_two_conditions_and_joined(self, executor):
        _seed(
            executor,
            ("old", False, "2022-06-01"),
            ("new", False, "2024-01-01"),
            ("old-revoked", True, "2022-01-01"),
        )
        tokens: list[Token] = []
        executor.select(
            Role.ADMIN,
            "tokens",
            tokens,
            Token,
            conditions=["token_revoked = ?", "token_expiry < ?"],
            params=[False, "2023-01-01"],
        )
        assert [t.token_hash for t in tokens] == ["old"]

    def test_destination_is_replaced_not_appended(self, executor):
        _seed(executor, ("a", False, "2020"), ("b", False, "2021"))
        stale = Token(token_hash="stale", token_expiry="1999")
        tokens: list[Token] = [stale]

        result = executor.select(Role.ADMIN, "tokens", tokens, Token, order_by="token_id")

        assert result is tokens
        assert [t.token_hash for t in tokens] == ["a", "b"]

    def test_empty_result_clears_destination(self, executor):
        tokens = [Token(token_hash="stale", token_expiry="1999")]
        executor.select(Role.ADMIN, "tokens", tokens, Token)
        assert tokens == []

    def test_pagination(self, executor):
        _seed(executor, *[(f"h{i}", False, f"202{i}") for i in range(5)])
        page = executor.select(Role.ADMIN, "tokens", None, Token, order_by="token_id", limit=2, offset=2)
        assert [t.token_hash for t in page] == ["h2", "h3"]

    def test_projection_decodes_into_smaller_record(self, executor):
        _seed(executor, ("abc", False, "2020"))
        hashes = executor.select(Role.ADMIN, "tokens", [], TokenHash, all_columns=False, columns=["token_hash"])
        assert hashes == [TokenHash(token_hash="abc")]

    def test_missing_projected_columns_get_zero_values(self, executor):
        _seed(executor, ("abc", True, "2020"))
        tokens = executor.select(Role.ADMIN, "tokens", [], Token, all_columns=False, columns=["token_hash"])
        assert tokens == [Token(token_id=None, token_hash="abc", token_revoked=False, token_expiry="")]

    def test_group_by_having(self, executor):
        @dataclass
        class RevokedCount:
            token_revoked: bool = column("token_revoked")
            n: int = column("n")

        _seed(executor, ("a", True, "2020"), ("b", True, "2021"), ("c", False, "2022"))
        counts = executor.select(
            Role.ADMIN,
            "tokens",
            [],
            RevokedCount,
            all_columns=False,
            columns=["token_revoked", "COUNT(*) AS n"],
            group_by="token_revoked",
            having="COUNT(*) > ?",
            params=[1],
        )
        assert counts == [RevokedCount(token_revoked=True, n=2)]

    def test_select_spec(self, executor):
        _seed(executor, ("abc", False, "2020"))
        spec = QuerySpec(table="tokens", record_type=Token, conditions=["token_hash LIKE ?"], params=["%b%"])
        assert [t.token_hash for t in executor.select_spec(Role.ADMIN, spec)] == ["abc"]

    def test_select_spec_requires_record_type(self, executor):
        with pytest.raises(BuildError, match="record_type"):
            executor.select_spec(Role.ADMIN, QuerySpec(table="tokens"))


class TestSelectFailures:
    def test_param_mismatch_fails_before_io(self, executor, sqlite_adapter):
        tokens = [Token(token_hash="keep", token_expiry="x")]
        with patch.object(sqlite_adapter, "run_query") as run:
            with pytest.raises(BuildError):
                executor.select(
                    Role.ADMIN,
                    "tokens",
                    tokens,
                    Token,
                    conditions=["token_revoked = ?", "token_expiry < ?"],
                    params=[False],
                )
        run.assert_not_called()
        assert tokens[0].token_hash == "keep"

    def test_unregistered_role(self, sqlite_adapter):
        executor = QueryExecutor(RoleRegistry({Role.ADMIN: sqlite_adapter}))
        with pytest.raises(ConfigurationError):
            executor.select(Role.DRIVER, "tokens", [], Token)

    def test_decode_failure_leaves_destination_untouched(self, executor):
        @dataclass
        class Strict:
            token_expiry: int = column("token_expiry")

        _seed(executor, ("a", False, "not-a-number"))
        dest: list[Strict] = []
        with pytest.raises(MappingError):
            executor.select(Role.ADMIN, "tokens", dest, Strict)
        assert dest == []

    def test_store_error_wrapped_with_context(self, executor):
        with pytest.raises(ExecutionError) as exc_info:
            executor.select(Role.DRIVER, "tokens", [], Token, conditions=["no_such_column = ?"], params=[1])
        assert exc_info.value.context.role == "driver"
        assert exc_info.value.context.operation == "select"
        assert exc_info.value.cause is not None

    def test_connection_error_not_retried(self, executor, sqlite_adapter):
        with patch.object(
            sqlite_adapter, "run_query", side_effect=DatabaseConnectionError("gone")
        ) as run:
            with pytest.raises(DatabaseConnectionError):
                executor.select(Role.ADMIN, "tokens", [], Token)
        assert run.call_count == 1


class TestSelectPrimitive:
    def test_raw_select(self, executor):
        _seed(executor, ("abc", False, "2020-01-01 00:00:00"))
        tokens: list[Token] = []
        executor.select_primitive(
            Role.ADMIN,
            "SELECT token_id, token_hash, token_revoked, token_expiry FROM tokens WHERE token_id = (?) AND token_expiry < (?)",
            [1, "2023-01-01 00:00:00"],
            tokens,
            Token,
        )
        assert [t.token_hash for t in tokens] == ["abc"]

    def test_drop_rejected_without_touching_connection(self, executor, sqlite_adapter):
        tokens = [Token(token_hash="keep", token_expiry="x")]
        with patch.object(sqlite_adapter, "checkout") as checkout:
            with pytest.raises(UnsafeQueryError) as exc_info:
                executor.select_primitive(Role.ADMIN, "SELECT * FROM tokens; DROP TABLE tokens", [], tokens, Token)
        checkout.assert_not_called()
        assert exc_info.value.pattern == ";"
        assert exc_info.value.context.operation == "select_primitive"
        assert tokens[0].token_hash == "keep"

    def test_rejection_is_logged_with_pattern(self, executor):
        with capture_logs() as logs:
            with pytest.raises(UnsafeQueryError):
                executor.select_primitive(Role.ADMIN, "DROP TABLE tokens", ["secret"], [], Token)
        rejected = [e for e in logs if e["event"] == "db.unsafe_sql_rejected"]
        assert rejected[0]["pattern"] == "DROP"
        assert rejected[0]["role"] == "admin"
        assert all("secret" not in str(e) for e in logs)

    def test_custom_filter(self, registry):
        executor = QueryExecutor(registry, UnsafeSQLFilter(denylist=["tokens"]))
        with pytest.raises(UnsafeQueryError):
            executor.select_primitive(Role.ADMIN, "SELECT * FROM tokens", [], [], Token)


class TestExecuteSQL:
    def test_update_returns_rows_affected(self, executor):
        _seed(executor, ("a", False, "2020"), ("b", False, "2021"))
        result = executor.execute_sql(Role.ADMIN, "UPDATE tokens SET token_revoked = ? WHERE token_expiry < ?", True, "2021")
        assert result.rows_affected == 1

    def test_not_filtered(self, executor):
        executor.execute_sql(Role.ADMIN, "DROP TABLE car_isusing")
        with pytest.raises(ExecutionError):
            executor.execute_sql(Role.ADMIN, "DELETE FROM car_isusing")

    def test_statement_events_logged(self, executor):
        with capture_logs() as logs:
            executor.execute_sql(Role.DRIVER, "DELETE FROM tokens WHERE token_id = ?", 99)
        end = [e for e in logs if e["event"] == "db.execute_sql.end"][0]
        assert end["role"] == "driver"
        assert end["rows_affected"] == 0

    def test_failure_logged_as_error_event(self, executor):
        with capture_logs() as logs:
            with pytest.raises(ExecutionError):
                executor.execute_sql(Role.ADMIN, "UPDATE missing SET x = ?", 1)
        error = [e for e in logs if e["event"] == "db.execute_sql.error"][0]
        assert error["error_type"] == "ExecutionError"
        assert error["role"] == "admin"


class TestRoleIsolation:
    def test_roles_route_to_their_own_adapters(self):
        admin_db, driver_db = SQLiteAdapter(":memory:"), SQLiteAdapter(":memory:")
        executor = QueryExecutor(RoleRegistry({Role.ADMIN: admin_db, Role.DRIVER: driver_db}))
        executor.execute_sql(Role.ADMIN, "CREATE TABLE only_admin (x INTEGER)")

        with pytest.raises(ExecutionError):
            executor.execute_sql(Role.DRIVER, "INSERT INTO only_admin (x) VALUES (?)", 1)
        admin_db.disconnect()
        driver_db.disconnect()
