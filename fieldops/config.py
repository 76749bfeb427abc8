"""
Centralized configuration with environment variable overrides.

Company details, scheduling defaults, completion policy and invoicing
values are configurable here. Nothing is hardcoded in lifecycle or tool
logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "es")
CHECKLIST_GATE_MODES = ("all", "required")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (1/0, true/false, yes/no) from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class CompanyConfig:
    """Company identity used in notifications and invoices."""

    name: str = os.getenv("COMPANY_NAME", "Sparkle Field Services")
    email: str = os.getenv("COMPANY_EMAIL", "office@sparkle.example")
    phone: str = os.getenv("COMPANY_PHONE", "+1 555 0100")
    default_language: str = os.getenv("DEFAULT_LANGUAGE", "en")


@dataclass(frozen=True)
class SchedulingConfig:
    """Booking duration defaults and timeouts for external field calls."""

    default_duration_minutes: int = _safe_int("DEFAULT_DURATION_MINUTES", "120")
    location_timeout_sec: float = _safe_float("LOCATION_TIMEOUT_SEC", "10.0")
    upload_timeout_sec: float = _safe_float("UPLOAD_TIMEOUT_SEC", "30.0")
    max_photo_bytes: int = _safe_int("MAX_PHOTO_BYTES", str(10 * 1024 * 1024))


@dataclass(frozen=True)
class CompletionConfig:
    """Policy applied when an employee finishes a job."""

    checklist_gate: str = os.getenv("CHECKLIST_GATE", "all")
    require_photo_evidence: bool = _safe_bool("REQUIRE_PHOTO_EVIDENCE", "false")


@dataclass(frozen=True)
class InvoiceConfig:
    """Invoice numbering, tax and payment terms."""

    tax_rate: float = _safe_float("TAX_RATE", "0.0")
    due_days: int = _safe_int("INVOICE_DUE_DAYS", "30")
    prefix: str = os.getenv("INVOICE_PREFIX", "INV")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    company: CompanyConfig = field(default_factory=CompanyConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    invoicing: InvoiceConfig = field(default_factory=InvoiceConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.company.default_language not in SUPPORTED_LANGUAGES:
        raise ValueError(
            f"DEFAULT_LANGUAGE must be one of {SUPPORTED_LANGUAGES}, "
            f"got {config.company.default_language!r}"
        )
    if config.scheduling.default_duration_minutes < 1:
        raise ValueError(
            "DEFAULT_DURATION_MINUTES must be >= 1, "
            f"got {config.scheduling.default_duration_minutes}"
        )
    if config.scheduling.location_timeout_sec <= 0:
        raise ValueError(
            "LOCATION_TIMEOUT_SEC must be > 0, "
            f"got {config.scheduling.location_timeout_sec}"
        )
    if config.scheduling.upload_timeout_sec <= 0:
        raise ValueError(
            f"UPLOAD_TIMEOUT_SEC must be > 0, got {config.scheduling.upload_timeout_sec}"
        )
    if config.scheduling.max_photo_bytes < 1:
        raise ValueError(
            f"MAX_PHOTO_BYTES must be >= 1, got {config.scheduling.max_photo_bytes}"
        )
    if config.completion.checklist_gate not in CHECKLIST_GATE_MODES:
        raise ValueError(
            f"CHECKLIST_GATE must be one of {CHECKLIST_GATE_MODES}, "
            f"got {config.completion.checklist_gate!r}"
        )
    if not 0.0 <= config.invoicing.tax_rate <= 100.0:
        raise ValueError(
            f"TAX_RATE must be between 0 and 100, got {config.invoicing.tax_rate}"
        )
    if config.invoicing.due_days < 0:
        raise ValueError(
            f"INVOICE_DUE_DAYS must be >= 0, got {config.invoicing.due_days}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.company.name)
    return config


# Singleton instance
settings = load_config()
