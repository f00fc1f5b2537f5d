#!/usr/bin/env python3
"""Token Queries -- the data-access layer end to end on SQLite.

================================================================================
WHAT THIS SHOWS
================================================================================

Every call goes through ``QueryExecutor`` and names the database role it
runs as. Records are dataclasses whose fields are tagged with
``column("...")``:

    insert(role, "tokens", token)                 -> generated token_id
    select(role, "tokens", dest, Token, ...)      -> structured, parameterized
    select_primitive(role, sql, params, dest, T)  -> hand-written, denylist-filtered
    execute_sql(role, sql, *params)               -> trusted DDL/DML

Both ``select`` calls fill ``dest`` in place. It is replaced, never appended
to, and left untouched when the call fails.

Run:
    python examples/token_queries.py
"""

from dataclasses import dataclass

from shiftline.core.adapters import SQLiteAdapter
from shiftline.core.errors import BuildError, UnsafeQueryError
from shiftline.db import QueryExecutor, Role, RoleRegistry, column


@dataclass(kw_only=True)
class Token:
    token_id: int | None = column("token_id", generated=True)
    token_hash: str = column("token_hash")
    token_revoked: bool = column("token_revoked", default=False)
    token_expiry: str = column("token_expiry")


@dataclass
class UserRegistration:
    user_id: str = column("user_id")
    user_registry_date: str = column("user_registry_date")


SCHEMA = [
    """CREATE TABLE tokens (
        token_id INTEGER PRIMARY KEY AUTOINCREMENT,
        token_hash TEXT NOT NULL,
        token_revoked INTEGER NOT NULL DEFAULT 0,
        token_expiry TEXT NOT NULL
    )""",
    "CREATE TABLE usersPass (user_id TEXT PRIMARY KEY, user_role TEXT)",
    "CREATE TABLE usersInfo (user_id TEXT PRIMARY KEY, user_registry_date TEXT)",
]


def show(title: str, tokens: list[Token]) -> None:
    print(f"\n{title}")
    for t in tokens:
        print(f"  Token ID: {t.token_id}, Hash: {t.token_hash}, Expiry: {t.token_expiry}, Revoked: {t.token_revoked}")


def main():
    print("=" * 60)
    print("Token Queries")
    print("=" * 60)

    adapter = SQLiteAdapter(":memory:")
    registry = RoleRegistry({Role.ADMIN: adapter, Role.DRIVER: adapter})
    db = QueryExecutor(registry)

    for ddl in SCHEMA:
        db.execute_sql(Role.ADMIN, ddl)
    db.execute_sql(Role.ADMIN, "INSERT INTO usersPass (user_id, user_role) VALUES (?, ?)", "1", "driver")
    db.execute_sql(Role.ADMIN, "INSERT INTO usersInfo (user_id, user_registry_date) VALUES (?, ?)", "1", "2021-06-01")

    # === 1. Insert ===
    print("\n[1] Insert")
    for token_hash, revoked, expiry in [
        ("1234567890", False, "2020-01-01 00:00:00"),
        ("abcdef", False, "2022-06-30 00:00:00"),
        ("xabcx", True, "2024-03-15 00:00:00"),
    ]:
        index = db.insert(Role.ADMIN, "tokens", Token(token_hash=token_hash, token_revoked=revoked, token_expiry=expiry))
        print(f"  insert success, index: {index}")

    tokens: list[Token] = []

    # === 2. Plain select ===
    db.select(Role.ADMIN, "tokens", tokens, Token, conditions=["token_revoked = ?"], params=[False], limit=10)
    show("[2] Unrevoked tokens", tokens)

    # === 3. Sorted ===
    db.select(
        Role.ADMIN, "tokens", tokens, Token,
        conditions=["token_revoked = ?"], params=[False],
        order_by="token_expiry DESC", limit=10,
    )
    show("[3] Unrevoked tokens, newest expiry first", tokens)

    # === 4. Multiple conditions (joined with AND) ===
    db.select(
        Role.ADMIN, "tokens", tokens, Token,
        conditions=["token_revoked = ?", "token_expiry < ?"],
        params=[False, "2023-01-01 00:00:00"],
        limit=10,
    )
    show("[4] Unrevoked and expiring before 2023", tokens)

    # === 5. Range ===
    db.select(
        Role.ADMIN, "tokens", tokens, Token,
        conditions=["token_expiry BETWEEN ? AND ?"],
        params=["2022-01-01 00:00:00", "2023-01-01 00:00:00"],
        limit=10,
    )
    show("[5] Expiring during 2022", tokens)

    # === 6. OR inside one fragment ===
    db.select(
        Role.ADMIN, "tokens", tokens, Token,
        conditions=["(token_revoked = ? OR token_expiry < ?)"],
        params=[True, "2021-01-01 00:00:00"],
        limit=10,
    )
    show("[6] Revoked or expired before 2021", tokens)

    # === 7. LIKE ===
    db.select(Role.ADMIN, "tokens", tokens, Token, conditions=["token_hash LIKE ?"], params=["%abc%"], limit=10)
    show("[7] Hash contains 'abc'", tokens)

    # === 8. Multi-table ===
    users: list[UserRegistration] = []
    db.select(
        Role.ADMIN, "usersPass p, usersInfo i", users, UserRegistration,
        all_columns=False,
        columns=["p.user_id", "user_registry_date"],
        conditions=["p.user_id = i.user_id", "p.user_id = ?"],
        params=["1"],
        limit=9999,
    )
    print("\n[8] Multi-table")
    for user in users:
        print(f"  User ID: {user.user_id}, Registry Date: {user.user_registry_date}")

    # === 9. Raw select ===
    db.select_primitive(
        Role.ADMIN,
        "SELECT token_id, token_hash, token_revoked, token_expiry FROM tokens WHERE token_id = (?) AND token_expiry < (?)",
        [1, "2023-01-01 00:00:00"],
        tokens,
        Token,
    )
    show("[9] Raw select by id", tokens)

    # === 10. What gets refused ===
    print("\n[10] Refused before reaching the database")
    try:
        db.select_primitive(Role.ADMIN, "SELECT * FROM tokens; DROP TABLE tokens", [], tokens, Token)
    except UnsafeQueryError as e:
        print(f"  UnsafeQueryError: pattern={e.pattern!r}")
    try:
        db.select(Role.ADMIN, "tokens", tokens, Token, conditions=["token_hash = ?"], params=[])
    except BuildError as e:
        print(f"  BuildError: {e.message}")
    print(f"  destination untouched: {len(tokens)} row(s) from [9]")

    registry.close()


if __name__ == "__main__":
    main()
