"""config_doctor.py — sanity report for a partner's checksum settings

Looks at an RCPConfig and flags settings that make forged or replayed
checksums easier, or that make every timed checksum fail or cost many
digests. Read-only: the config is never modified, and the secret is only
ever measured, not echoed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from rc_protocol import RCPConfig

log = logging.getLogger("rcp.doctor")

MIN_SECRET_LEN = 16
MAX_SANE_DELTA = 30


@dataclass
class DoctorResult:
    ok: bool
    warnings: List[str]
    hints: List[str]


def diagnose(config: RCPConfig) -> DoctorResult:
    warnings: List[str] = []
    hints: List[str] = []

    # 1) Secret strength
    secret = config.shared_secret or ""
    if not secret:
        warnings.append("shared secret is empty (anyone can forge checksums)")
        hints.append("Set RCP_SHARED_SECRET or RCP_SHARED_SECRET_FILE")
    elif len(secret) < MIN_SECRET_LEN:
        warnings.append(f"shared secret shorter than {MIN_SECRET_LEN} chars")
        hints.append("Use a long random secret, e.g. python -c 'import secrets; print(secrets.token_hex(32))'")

    # 2) Replay window
    if not config.use_time_component:
        warnings.append("time component disabled (captured checksums replay forever)")
        hints.append("Set RCP_USE_TIME_COMPONENT=1 unless clocks can't be synced")
    elif config.time_delta == 0:
        warnings.append("time_delta=0 (every timed checksum is rejected)")
        hints.append("Use a small window such as RCP_TIME_DELTA=5")
    elif config.time_delta > MAX_SANE_DELTA:
        warnings.append(
            f"time_delta={config.time_delta}s (up to {2 * config.time_delta} digests per rejected request)"
        )
        hints.append("Sync clocks (NTP) and keep the window to a few seconds")

    ok = len(warnings) == 0
    return DoctorResult(ok=ok, warnings=warnings, hints=hints)


def _summary(r: DoctorResult, limit: int = 6) -> str:
    shown = " | ".join(r.warnings[:limit])
    hidden = len(r.warnings) - limit
    return shown + (f" (+{hidden} more)" if hidden > 0 else "")


def emit_once(config: RCPConfig, prefix: str = "RCP") -> DoctorResult:
    """Log diagnose() as one line, e.g. "[RCP] PASS" or "[RCP] WARN 2 — a | b".

    Returns a failed result instead of raising if the config can't be read.
    """
    try:
        r = diagnose(config)
    except Exception:
        log.warning("[%s] WARN 1 — config_doctor_failed", prefix)
        return DoctorResult(ok=False, warnings=["config_doctor_failed"], hints=[])

    if r.ok:
        log.info("[%s] PASS", prefix)
    else:
        log.warning("[%s] WARN %d — %s", prefix, len(r.warnings), _summary(r))
    return r
