import os
from dotenv import load_dotenv

from rc_protocol import DEFAULT_TIME_DELTA, RCPConfig

load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env"))

TRUTHY = {"1", "true", "yes", "on"}

LOG_LEVEL = os.getenv("RCP_LOG_LEVEL", "INFO").strip().upper()


def _env(key: str, default: str = "") -> str:
    return (os.getenv(key) or default).strip()


def _load_secret(prefix: str) -> str:
    """<PREFIX>_SHARED_SECRET, or the contents of <PREFIX>_SHARED_SECRET_FILE."""
    s = _env(f"{prefix}_SHARED_SECRET")
    path = _env(f"{prefix}_SHARED_SECRET_FILE")
    if not s and path:
        if not os.path.exists(path):
            raise RuntimeError(f"{prefix}_SHARED_SECRET_FILE not found: {path!r}")
        with open(path, "r", encoding="utf-8") as f:
            s = f.read().strip()
    return s


def load_config(prefix: str = "RCP") -> RCPConfig:
    use_time = _env(f"{prefix}_USE_TIME_COMPONENT", "1").lower() in TRUTHY
    raw_delta = _env(f"{prefix}_TIME_DELTA", str(DEFAULT_TIME_DELTA))
    try:
        time_delta = int(raw_delta)
    except ValueError:
        raise RuntimeError(f"{prefix}_TIME_DELTA must be an integer: {raw_delta!r}")
    if time_delta < 0:
        raise RuntimeError(f"{prefix}_TIME_DELTA must be >= 0: {raw_delta!r}")

    return RCPConfig(
        shared_secret=_load_secret(prefix),
        use_time_component=use_time,
        time_delta=time_delta,
    )
