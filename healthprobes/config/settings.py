"""Application settings and configuration."""
import os
from pathlib import Path
from typing import Dict, Optional
from dotenv import load_dotenv

from healthprobes.domain.errors import ConfigurationError

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


# env values that failed to parse; reported by Settings.validate()
_invalid: Dict[str, str] = {}


def _int(name: str, default: int) -> int:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _invalid[name] = raw
        return default


_CPU_COUNT = os.cpu_count() or 1


class Settings:
    """Process-wide configuration read from the environment and ``config/.env``.

    Probe thresholds are read by the options classes themselves
    (``MemoryProbeOptions.from_env()``, ``CertificateProbeOptions.from_env()``);
    this class holds what the CLI and the runtime thread pools need.
    """

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR: Optional[Path] = Path(os.environ['LOG_DIR']) if os.getenv('LOG_DIR') else None

    # ── Certificate target ────────────────────────────────────────────────
    CERT_HOSTNAME: str = os.getenv('HEALTH_CERT_HOSTNAME', '')

    # ── Runtime thread pools ──────────────────────────────────────────────
    # min is the reserve the thread pool probe compares active threads to
    WORKER_MIN_THREADS:     int = _int('HEALTH_WORKER_MIN_THREADS', _CPU_COUNT)
    WORKER_MAX_THREADS:     int = _int('HEALTH_WORKER_MAX_THREADS', min(32, _CPU_COUNT + 4))
    COMPLETION_MIN_THREADS: int = _int('HEALTH_COMPLETION_MIN_THREADS', _CPU_COUNT)
    COMPLETION_MAX_THREADS: int = _int('HEALTH_COMPLETION_MAX_THREADS', min(32, _CPU_COUNT + 4))

    # ── Per-probe host timeouts (seconds) ─────────────────────────────────
    MEMORY_CHECK_TIMEOUT_S:      float = 1.0
    THREAD_POOL_CHECK_TIMEOUT_S: float = 1.0
    CERT_CHECK_TIMEOUT_S:        float = 5.0

    @classmethod
    def validate(cls) -> None:
        if _invalid:
            bad = ', '.join(f"{name}={raw!r}" for name, raw in _invalid.items())
            raise ConfigurationError('Settings', f"expected integers: {bad}")
        for name in ('WORKER', 'COMPLETION'):
            lo = getattr(cls, f'{name}_MIN_THREADS')
            hi = getattr(cls, f'{name}_MAX_THREADS')
            if lo < 0 or hi < 1 or lo > hi:
                raise ConfigurationError('Settings', f"{name.lower()} thread pool sizing is invalid: min={lo}, max={hi}")


settings = Settings
