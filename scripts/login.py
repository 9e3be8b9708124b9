#!/usr/bin/env python3
"""Log in (or sign up) against a running Leadbook server and cache the token.

  python scripts/login.py [login|signup|logout|leads|add|edit ID|delete ID]

LEADBOOK_URL selects the server (default http://127.0.0.1:8000).
"""
from __future__ import annotations

import os
import sys
from getpass import getpass

from leadbook.client.api import LeadbookApi, Ok
from leadbook.client.forms import AuthForm, logout, restore_session
from leadbook.client.session import SessionStore
from leadbook.client.token_cache import TokenCache
from leadbook.observability import setup_logging


def _print_notice(title: str, description: str) -> None:
    print(f"[{title}] {description}")


def _ask_lead() -> dict:
    return {
        "name": input("Name: "),
        "age": input("Age: "),
        "city": input("City: "),
        "occupation": input("Occupation: "),
    }


def main() -> None:
    setup_logging(os.getenv("LEADBOOK_LOG_LEVEL", "WARNING"))
    command = sys.argv[1] if len(sys.argv) > 1 else "login"
    base_url = os.getenv("LEADBOOK_URL", "http://127.0.0.1:8000")
    session = SessionStore()
    cache = TokenCache()

    with LeadbookApi(base_url) as api:
        if command == "logout":
            logout(session, cache)
            print("Logged out")
            return

        if command in ("leads", "add", "edit", "delete"):
            if not restore_session(api, session, cache):
                raise SystemExit("Not logged in")
            lead_id = sys.argv[2] if len(sys.argv) > 2 else ""
            if command in ("edit", "delete") and not lead_id:
                raise SystemExit(f"Usage: login.py {command} LEAD-ID")
            if command == "add":
                result = api.create_lead(session.token, _ask_lead())
            elif command == "edit":
                result = api.update_lead(session.token, lead_id, _ask_lead())
            elif command == "delete":
                result = api.delete_lead(session.token, lead_id)
            else:
                result = api.list_leads(session.token)
            if not isinstance(result, Ok):
                raise SystemExit(result.message)
            if command == "delete":
                print(f"Deleted {lead_id}")
                return
            if command != "leads":
                print(f"Saved {result.data['id']}")
                return
            for lead in result.data:
                print(f"{lead['id']}\t{lead['name']}\t{lead['age']}\t{lead['city']}\t{lead['occupation']}")
            return

        if command not in ("login", "signup"):
            raise SystemExit(f"Unknown command: {command}")

        form = AuthForm(command, api, session, token_cache=cache, notify=_print_notice)
        name = input("Name: ") if command == "signup" else ""
        email = input("Email: ")
        password = getpass("Password: ")
        outcome = form.submit(email=email, password=password, name=name)
        for fld, msg in outcome.field_errors.items():
            print(f"  {fld}: {msg}")
        if not outcome.ok:
            raise SystemExit(1)
        print(f"Logged in as {session.user.name} <{session.user.email}>")


if __name__ == "__main__":
    main()
