# rc_protocol.py — request checksums shared between two partners
#
# Canonical string:
#   salt + key1 + value1 + key2 + value2 ... + shared_secret [+ unix_ts]
# Keys are sorted by codepoint. The string is hashed with SHA-512 and sent as
# lowercase hex. Both sides MUST render values the same way (see render_value).

from __future__ import annotations

import hashlib
import hmac
import logging
import operator
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

log = logging.getLogger("rcp")

Pairs = List[Tuple[str, Any]]
Request = Union[Mapping[str, Any], Iterable[Tuple[str, Any]], None]

DEFAULT_TIME_DELTA = 5


def _utc_now() -> int:
    # Unix epoch, whole seconds
    return int(time.time())


# ---------- Canonicalization ----------

def into_pairs(request: Request) -> Pairs:
    """
    Turn any named-field collection into a list of (name, value) pairs.

    Accepts a mapping (anything with .items()), an iterable of 2-tuples, or
    None for an empty request. Duplicate names collapse last-writer-wins, so a
    list like [("a", 1), ("a", 2)] is treated as {"a": 2}.
    """
    if request is None:
        return []
    items = request.items() if hasattr(request, "items") else request
    merged = {}
    for key, value in items:
        merged[str(key)] = value
    return list(merged.items())


def render_value(value: Any) -> str:
    """Text form of a field value; str() is the reference rendering (4.0 -> "4.0", True -> "True")."""
    return value if isinstance(value, str) else str(value)


def pre_assemble(request: Request, shared_secret: str, salt: str = "") -> str:
    """Everything that goes into the checksum except the timestamp."""
    pairs = into_pairs(request)
    pairs.sort(key=lambda kv: kv[0])

    parts = [salt]
    for key, value in pairs:
        parts.append(key)
        parts.append(render_value(value))
    parts.append(shared_secret)
    return "".join(parts)


# ---------- Digest ----------

def sha512_hex(data: Union[str, bytes]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha512(data).hexdigest()


def candidate_timestamps(now: int, time_delta: int) -> Iterator[int]:
    """Timestamps a validator tries: now-time_delta up to (not including) now+time_delta."""
    for delta in range(-time_delta, time_delta):
        yield now + delta


def _same(expected: str, supplied: Optional[str]) -> bool:
    # compare_digest on str only takes ASCII; bytes keep odd input from raising
    if not isinstance(supplied, str):
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


# ---------- Partner config ----------

@dataclass(frozen=True)
class RCPConfig:
    """
    Parameters for talking to a single partner.

    - shared_secret:      string known only to both partners (kept out of repr)
    - use_time_component: append the current unix timestamp before hashing, so
                          a captured checksum stops validating after a few seconds
    - time_delta:         how many seconds the partner's clock may deviate.
                          The hash can't be reversed, so validation tries every
                          second in the window: 2 * time_delta digests on a miss.
                          Keep it to a few seconds.
    - clock:              returns current unix seconds; swap it in tests

    Instances are immutable. To rotate a secret, build a new one with
    dataclasses.replace() and swap the reference.
    """
    shared_secret: str = field(default="", repr=False)
    use_time_component: bool = True
    time_delta: int = DEFAULT_TIME_DELTA
    clock: Callable[[], int] = field(default=_utc_now, repr=False, compare=False)

    def __post_init__(self):
        try:
            delta = operator.index(self.time_delta)
        except TypeError:
            raise ValueError(f"time_delta must be whole seconds, got {self.time_delta!r}") from None
        if delta < 0:
            raise ValueError(f"time_delta must be >= 0, got {self.time_delta!r}")
        object.__setattr__(self, "time_delta", delta)

    def get_checksum(self, request: Request, salt: str = "") -> str:
        """
        Checksum for a request's fields and a salt.

        For HTTP APIs the endpoint path makes a good salt.
        """
        string = pre_assemble(request, self.shared_secret, salt)
        if self.use_time_component:
            string += str(self.clock())
        return sha512_hex(string)

    def validate_checksum(self, request: Request, salt: str, checksum: Optional[str]) -> bool:
        """
        True if `checksum` matches the request and salt.

        Without timestamps this is get_checksum(...) == checksum. With them,
        every second of the tolerance window is tried until one matches.
        Failure never says why.
        """
        if not self.use_time_component:
            ok = _same(self.get_checksum(request, salt), checksum)
        else:
            base = pre_assemble(request, self.shared_secret, salt)
            ok = any(
                _same(sha512_hex(f"{base}{ts}"), checksum)
                for ts in candidate_timestamps(self.clock(), self.time_delta)
            )
        if not ok:
            log.debug("checksum rejected salt=%r", salt)
        return ok


# ---------- Reference-style helpers ----------

def get_checksum(request: Request, shared_secret: str, salt: str = "",
                 use_time_component: bool = True) -> str:
    """Functional form: get_checksum({"b": "test"}, "secret", salt="x", use_time_component=False)."""
    cfg = RCPConfig(shared_secret=shared_secret, use_time_component=use_time_component)
    return cfg.get_checksum(request, salt)


def validate_checksum(request: Request, checksum: Optional[str], shared_secret: str,
                      salt: str = "", use_time_component: bool = True,
                      time_delta: int = DEFAULT_TIME_DELTA) -> bool:
    cfg = RCPConfig(
        shared_secret=shared_secret,
        use_time_component=use_time_component,
        time_delta=time_delta,
    )
    return cfg.validate_checksum(request, salt, checksum)


__all__ = [
    "RCPConfig",
    "DEFAULT_TIME_DELTA",
    "into_pairs",
    "render_value",
    "pre_assemble",
    "sha512_hex",
    "candidate_timestamps",
    "get_checksum",
    "validate_checksum",
]
