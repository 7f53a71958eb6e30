"""Command line interface for inspecting and administering save data."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config import SaveConfig
from .log_utils import setup_logging
from .manager import SaveManager, open_save_manager
from .values import kind_of

VALUE_TYPES = ["string", "float", "int", "long", "bool", "array"]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(text: str) -> bool:
    t = text.strip().lower()
    if t in _TRUE:
        return True
    if t in _FALSE:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _get(mgr: SaveManager, key: str, kind: Optional[str]) -> object:
    if kind is None:
        return mgr.raw_value(key)
    if kind == "array":
        return mgr.get_string_array(key)
    return getattr(mgr, f"get_{kind}")(key)


def _set(mgr: SaveManager, key: str, values: List[str], kind: str) -> bool:
    if kind == "array":
        return mgr.set_string_array(key, values)
    if len(values) != 1:
        raise ValueError(f"type {kind!r} takes exactly one value")
    text = values[0]
    if kind == "string":
        mgr.set_string(key, text)
    elif kind == "float":
        mgr.set_float(key, float(text))
    elif kind in ("int", "long"):
        getattr(mgr, f"set_{kind}")(key, int(text))
    elif kind == "bool":
        mgr.set_bool(key, _parse_bool(text))
    return True


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="save-system", description="Inspect and administer persistent save data.")
    ap.add_argument("--home", type=Path, default=None, help="Folder holding the save file")
    ap.add_argument("--app-id", type=str, default=None, help="Application identity (names the save file)")
    ap.add_argument("--legacy", type=Path, default=None, help="Legacy preferences JSON file to migrate from")
    ap.add_argument("-v", "--verbose", action="store_true")

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("path", help="Print the save file path")
    sub.add_parser("show", help="Print the save document")
    p = sub.add_parser("keys", help="List stored keys")
    p.add_argument("--kinds", action="store_true", help="Also print the stored value kind")

    p = sub.add_parser("get", help="Read one key")
    p.add_argument("key")
    p.add_argument("--type", dest="kind", choices=VALUE_TYPES, default=None)

    p = sub.add_parser("set", help="Write one key")
    p.add_argument("key")
    p.add_argument("values", nargs="*", help="Value (all remaining values for --type array)")
    p.add_argument("--type", dest="kind", choices=VALUE_TYPES, default="string")

    p = sub.add_parser("delete", help="Delete one key from the save and legacy stores")
    p.add_argument("key")

    for name, text in (("reset", "Clear all save data"), ("delete-all", "Delete the save file and all data")):
        p = sub.add_parser(name, help=text)
        p.add_argument("--yes", action="store_true", help="Confirm the destructive operation")

    p = sub.add_parser("export", help="Write the save document to FILE")
    p.add_argument("file", type=Path)

    p = sub.add_parser("import", help="Replace all save data with the document in FILE")
    p.add_argument("file", type=Path)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)
    config = SaveConfig.from_env(data_dir=args.home, app_identity=args.app_id)
    setup_logging(config.data_dir, verbose=args.verbose)

    if args.command in ("reset", "delete-all") and not args.yes:
        print(f"Refusing to {args.command} without --yes", file=sys.stderr)
        return 2

    with open_save_manager(home=args.home, app_identity=args.app_id, legacy_path=args.legacy) as mgr:
        cmd = args.command
        if cmd == "path":
            print(mgr.save_path)
        elif cmd == "show":
            print(mgr.get_save_json())
        elif cmd == "keys":
            for key in mgr.keys():
                if args.kinds:
                    print(f"{key}\t{kind_of(mgr.raw_value(key)).value}")
                else:
                    print(key)
        elif cmd == "get":
            if not mgr.has_any_save_key(args.key):
                print(f"No such key: {args.key}", file=sys.stderr)
                return 1
            if args.kind is None and not mgr.has_save_key(args.key):
                print(f"{args.key} only exists in the legacy preferences; pass --type to migrate it", file=sys.stderr)
                return 1
            value = _get(mgr, args.key, args.kind)
            print(value if isinstance(value, str) else json.dumps(value))
        elif cmd == "set":
            try:
                ok = _set(mgr, args.key, args.values, args.kind)
            except ValueError as e:
                print(f"Invalid value: {e}", file=sys.stderr)
                return 2
            if not ok:
                return 1
        elif cmd == "delete":
            mgr.delete_key(args.key)
        elif cmd == "reset":
            mgr.reset()
        elif cmd == "delete-all":
            mgr.delete_all()
        elif cmd == "export":
            try:
                args.file.write_text(mgr.get_save_json(), encoding="utf-8")
            except OSError as e:
                print(f"Cannot write {args.file}: {e}", file=sys.stderr)
                return 1
            print(f"Wrote {args.file}")
        elif cmd == "import":
            try:
                text = args.file.read_text(encoding="utf-8")
            except OSError as e:
                print(f"Cannot read {args.file}: {e}", file=sys.stderr)
                return 1
            if not mgr.set_save_from_json(text):
                return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
