#!/usr/bin/env python3
"""
Bootstrap editors and login keys in the AMS SQLite database.

The API only lets signed-in editors create other editors, so the first
editor has to be added from the command line.  ``add-editor`` registers
an editor row; ``issue`` stores a fresh login key for an existing
editor and prints it (the key is never emailed from here).

Usage:
    python manage_keys.py --db ./ams.db add-editor --email chief@example.com --name "Chief Editor"
    python manage_keys.py --db ./ams.db issue --email chief@example.com

Without ``--db`` the ``DATABASE_URL`` setting is used.
"""

import argparse
import sys
import time
from typing import List, Optional

from ams_api.app.core.config import settings
from ams_api.app.core.db import EDITOR_SHEET, KEY_SHEET, SQLiteSheetStore, get_database_path
from ams_api.app.core.errors import StoreError
from ams_api.app.core.security import generate_key, hash_key
from ams_api.app.schemas.editor import Editor
from ams_api.app.services.records import find_editor


def add_editor(store: SQLiteSheetStore, email: str, name: str, role: Optional[str]) -> int:
    if find_editor(store, email) is not None:
        print(f"[!] Editor already exists: {email}", file=sys.stderr)
        return 2
    store.append_row(EDITOR_SHEET, Editor(email=email, name=name, role=role).to_row())
    print(f"[+] Added editor: {email}")
    return 0


def issue_key(store: SQLiteSheetStore, email: str, minutes: int) -> int:
    editor = find_editor(store, email)
    if editor is None:
        print(f"[!] No editor found with email: {email}", file=sys.stderr)
        return 2
    key = generate_key()
    expires = int(time.time()) + minutes * 60
    store.append_row(KEY_SHEET, [editor.email, hash_key(key), str(expires)])
    print(f"[+] Login key for {editor.email} (valid {minutes} min): {key}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Manage AMS editors and login keys (SQLite).")
    ap.add_argument("--db", help="Path to SQLite DB file (default: DATABASE_URL)")
    sub = ap.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add-editor", help="Register an editor")
    add.add_argument("--email", required=True)
    add.add_argument("--name", required=True)
    add.add_argument("--role")

    issue = sub.add_parser("issue", help="Issue a login key for an editor")
    issue.add_argument("--email", required=True)
    issue.add_argument("--minutes", type=int, default=settings.key_expire_minutes)

    args = ap.parse_args(argv)
    store = SQLiteSheetStore(get_database_path(args.db))
    try:
        store.init_db()
        if args.command == "add-editor":
            return add_editor(store, args.email, args.name, args.role)
        return issue_key(store, args.email, args.minutes)
    except StoreError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
