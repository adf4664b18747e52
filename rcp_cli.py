# rcp_cli.py
#
# Command line helper for request checksums:
#   rcp sign   --salt /api/orders --field amount=10 --field side=BUY
#   rcp verify --salt /api/orders --checksum <hex> --json body.json
#   rcp doctor
#
# Secret and time policy come from RCP_* env (or .env); flags override them.

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import config
from config_doctor import emit_once
from rc_protocol import RCPConfig

# ---------- Field parsing ----------

def _parse_field(raw: str) -> tuple:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected name=value, got {raw!r}")
    return name, value


def _load_json_fields(path: str) -> Dict[str, Any]:
    if path == "-":
        data = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    if not isinstance(data, dict):
        raise RuntimeError("--json must hold a JSON object")
    return data


def _collect_fields(args: argparse.Namespace) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if args.json:
        fields.update(_load_json_fields(args.json))
    # --field wins over --json on name clashes
    for name, value in args.field or []:
        fields[name] = value
    return fields


def _resolve_config(args: argparse.Namespace) -> RCPConfig:
    cfg = config.load_config()
    overrides: Dict[str, Any] = {}
    if args.secret is not None:
        overrides["shared_secret"] = args.secret
    if args.no_time:
        overrides["use_time_component"] = False
    if args.time_delta is not None:
        overrides["time_delta"] = args.time_delta
    return dataclasses.replace(cfg, **overrides) if overrides else cfg

# ---------- Commands ----------

def cmd_sign(args: argparse.Namespace, cfg: RCPConfig) -> int:
    print(cfg.get_checksum(_collect_fields(args), args.salt))
    return 0


def cmd_verify(args: argparse.Namespace, cfg: RCPConfig) -> int:
    ok = cfg.validate_checksum(_collect_fields(args), args.salt, args.checksum)
    print("valid" if ok else "invalid")
    return 0 if ok else 1


def cmd_doctor(args: argparse.Namespace, cfg: RCPConfig) -> int:
    r = emit_once(cfg)
    for hint in r.hints:
        print(f"hint: {hint}")
    return 0 if r.ok else 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="rcp", description="Request checksum helper")
    ap.add_argument("--secret", help="Shared secret (default: RCP_SHARED_SECRET)")
    ap.add_argument("--no-time", action="store_true", help="Disable the timestamp component")
    ap.add_argument("--time-delta", type=int, help="Tolerance window in seconds")
    sub = ap.add_subparsers(dest="command", required=True)

    def _fields(p: argparse.ArgumentParser) -> None:
        p.add_argument("--salt", default="", help="Salt, e.g. the endpoint path")
        p.add_argument("--field", action="append", type=_parse_field, metavar="NAME=VALUE")
        p.add_argument("--json", metavar="FILE", help="JSON object of fields ('-' for stdin)")

    p_sign = sub.add_parser("sign", help="Print the checksum for a set of fields")
    _fields(p_sign)
    p_sign.set_defaults(func=cmd_sign)

    p_verify = sub.add_parser("verify", help="Check a checksum against a set of fields")
    _fields(p_verify)
    p_verify.add_argument("--checksum", required=True)
    p_verify.set_defaults(func=cmd_verify)

    p_doctor = sub.add_parser("doctor", help="Report risky configuration")
    p_doctor.set_defaults(func=cmd_doctor)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="[rcp] %(levelname)s %(asctime)s %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        cfg = _resolve_config(args)
        return args.func(args, cfg)
    except (RuntimeError, ValueError, OSError) as e:
        print(f"rcp: error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
