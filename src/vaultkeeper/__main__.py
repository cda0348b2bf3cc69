# Main Entry Point - command line interface
#
# python -m vaultkeeper <command>
#
# Master passwords are always read interactively (getpass), never from
# arguments, so they do not end up in shell history.

import argparse
import getpass
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import get_settings
from .core import SQLiteKeyValueStore
from .generator import PasswordPolicy, evaluate_strength, generate_password
from .vault import Entry, VaultError, VaultStore


def _prompt_master_password(confirm: bool = False) -> str:
    password = getpass.getpass("Master password: ")
    if confirm and getpass.getpass("Confirm master password: ") != password:
        raise VaultError("Passwords do not match")
    if not password:
        raise VaultError("Master password cannot be empty")
    return password


def _open_store(args) -> VaultStore:
    db_path = Path(args.db) if args.db else get_settings().db_path
    return VaultStore(SQLiteKeyValueStore(db_path))


def _require_initialized(store: VaultStore) -> None:
    if not store.is_initialized():
        raise VaultError("Vault does not exist. Run 'vaultkeeper init' first.")


def _print_entry(entry: Entry, show_secret: bool = False) -> None:
    print(f"  id:       {entry.id}")
    print(f"  service:  {entry.service_name}")
    print(f"  username: {entry.username}")
    if show_secret:
        print(f"  secret:   {entry.secret}")
    for label, value in (("url", entry.url), ("notes", entry.notes), ("category", entry.category)):
        if value is not None:
            print(f"  {label + ':':<9} {value}")
    print(f"  created:  {entry.created_at}")
    print(f"  updated:  {entry.updated_at}")


def _policy_from_args(args) -> PasswordPolicy:
    return PasswordPolicy(
        length=args.length,
        lowercase=not args.no_lowercase,
        uppercase=not args.no_uppercase,
        digits=not args.no_digits,
        symbols=not args.no_symbols,
    )


# ── Commands ────────────────────────────────────────────────────────


def cmd_init(args) -> int:
    store = _open_store(args)
    if store.is_initialized():
        raise VaultError("Vault already exists.")

    password = _prompt_master_password(confirm=True)
    result = evaluate_strength(password)
    if result.level == "weak":
        print(f"[WARN] Weak master password ({result.score}/100): {'; '.join(result.feedback)}")

    store.initialize(password)
    print("[OK] Vault created")
    return 0


def cmd_list(args) -> int:
    store = _open_store(args)
    _require_initialized(store)
    password = _prompt_master_password()

    if args.query:
        entries = store.search_entries(password, args.query)
    else:
        entries = store.list_entries(password)

    if not entries:
        print("No entries")
        return 0

    entries.sort(key=lambda e: e.updated_at, reverse=True)
    for entry in entries:
        category = f" [{entry.category}]" if entry.category else ""
        print(f"{entry.id}  {entry.service_name}  {entry.username}{category}")
    print(f"\n{len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
    return 0


def cmd_show(args) -> int:
    store = _open_store(args)
    _require_initialized(store)
    entry = store.get_entry(_prompt_master_password(), args.entry_id)
    if entry is None:
        print(f"[ERROR] No entry with id {args.entry_id}", file=sys.stderr)
        return 1
    _print_entry(entry, show_secret=True)
    return 0


def cmd_add(args) -> int:
    store = _open_store(args)
    _require_initialized(store)
    password = _prompt_master_password()
    if not store.authenticate(password):
        raise VaultError("Incorrect master password")

    if args.generate:
        secret = generate_password(_policy_from_args(args))
    else:
        secret = getpass.getpass(f"Secret for {args.service}: ")

    entry = store.create_entry(
        password,
        service_name=args.service,
        username=args.username,
        secret=secret,
        url=args.url,
        notes=args.notes,
        category=args.category,
    )
    print(f"[OK] Entry added: {entry.id}")
    if args.generate:
        print(f"  generated secret: {secret}")
    return 0


def cmd_edit(args) -> int:
    store = _open_store(args)
    _require_initialized(store)
    password = _prompt_master_password()

    changes = {}
    if args.service is not None:
        changes["service_name"] = args.service
    if args.username is not None:
        changes["username"] = args.username
    for field in ("url", "notes", "category"):
        value = getattr(args, field)
        if value is not None:
            changes[field] = value or None  # '' clears
    if args.new_secret:
        changes["secret"] = getpass.getpass("New secret: ")

    if not changes:
        print("Nothing to change")
        return 0

    entry = store.update_entry(password, args.entry_id, **changes)
    if entry is None:
        print(f"[ERROR] No entry with id {args.entry_id}", file=sys.stderr)
        return 1
    print(f"[OK] Entry updated: {entry.id}")
    return 0


def cmd_delete(args) -> int:
    store = _open_store(args)
    _require_initialized(store)
    if not store.delete_entry(_prompt_master_password(), args.entry_id):
        print(f"[ERROR] No entry with id {args.entry_id}", file=sys.stderr)
        return 1
    print("[OK] Entry deleted")
    return 0


def cmd_reset(args) -> int:
    store = _open_store(args)
    if not args.yes:
        answer = input("This permanently deletes the vault. Type 'reset' to continue: ")
        if answer.strip() != "reset":
            print("Aborted")
            return 1
    store.reset()
    print("[OK] Vault reset")
    return 0


def cmd_generate(args) -> int:
    for _ in range(args.count):
        print(generate_password(_policy_from_args(args)))
    return 0


def cmd_strength(args) -> int:
    result = evaluate_strength(getpass.getpass("Password to check: "))
    print(f"Score: {result.score}/100 ({result.level})")
    for line in result.feedback:
        print(f"  - {line}")
    return 0


def cmd_serve(args) -> int:
    from .api.main import start_api_server

    settings = get_settings()
    start_api_server(host=args.host or settings.host, port=args.port or settings.port)
    return 0


# ── Parser ──────────────────────────────────────────────────────────


def _add_policy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--length", type=int, default=16, help="Password length (default: 16)")
    parser.add_argument("--no-lowercase", action="store_true", help="Exclude lowercase letters")
    parser.add_argument("--no-uppercase", action="store_true", help="Exclude uppercase letters")
    parser.add_argument("--no-digits", action="store_true", help="Exclude digits")
    parser.add_argument("--no-symbols", action="store_true", help="Exclude symbols")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaultkeeper",
        description="Local encrypted credential vault",
    )
    parser.add_argument("--db", help="Vault database path (default: $VAULTKEEPER_DB_PATH or data/vault.db)")
    parser.add_argument("--version", action="version", version=f"vaultkeeper v{__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Create a new vault")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("list", help="List entries")
    p.add_argument("--query", "-q", help="Only entries matching this text")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="Show one entry including its secret")
    p.add_argument("entry_id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("add", help="Add an entry")
    p.add_argument("--service", required=True, help="Service name")
    p.add_argument("--username", required=True)
    p.add_argument("--url")
    p.add_argument("--notes")
    p.add_argument("--category")
    p.add_argument("--generate", action="store_true", help="Generate the secret instead of prompting")
    _add_policy_arguments(p)
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("edit", help="Change fields of an entry")
    p.add_argument("entry_id")
    p.add_argument("--service")
    p.add_argument("--username")
    p.add_argument("--url", help="New url ('' to clear)")
    p.add_argument("--notes", help="New notes ('' to clear)")
    p.add_argument("--category", help="New category ('' to clear)")
    p.add_argument("--new-secret", action="store_true", help="Prompt for a new secret")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("delete", help="Delete an entry")
    p.add_argument("entry_id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("reset", help="Permanently delete the vault")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=cmd_reset)

    p = sub.add_parser("generate", help="Generate random passwords")
    p.add_argument("--count", type=int, default=1)
    _add_policy_arguments(p)
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("strength", help="Score a password")
    p.set_defaults(func=cmd_strength)

    p = sub.add_parser("serve", help="Run the local REST API")
    p.add_argument("--host", help="Bind host (default: 127.0.0.1)")
    p.add_argument("--port", type=int, help="Bind port (default: 8000)")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for vaultkeeper."""
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except VaultError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled")
        return 130


if __name__ == "__main__":
    sys.exit(main())
