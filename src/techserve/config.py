"""Configuration models and resolution helpers for techserve."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

INSTALLATION_TYPES = ("full", "dual")
OS_KINDS = ("windows", "linux")
ADD_ON_TYPES = ("additional_drivers", "office_suite")
ORDER_STATUSES = ("pending", "in_progress", "completed", "rejected", "cancelled")
BACKEND_MODES = ("local", "remote")

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_UNDO_WINDOW_S = 10.0
CURRENCY = "KSh"

PRICE_KEYS = ("full_installation", "dual_boot_installation", "additional_drivers", "office_suite")


@dataclass(frozen=True)
class PriceTable:
    full_installation: float
    dual_boot_installation: float
    additional_drivers: float
    office_suite: float

    def base_price(self, installation_type: str | None) -> float:
        if installation_type == "full":
            return self.full_installation
        return self.dual_boot_installation

    def add_on_price(self, add_on_type: str) -> float:
        if add_on_type == "additional_drivers":
            return self.additional_drivers
        if add_on_type == "office_suite":
            return self.office_suite
        raise ValueError(f"Unknown add-on type: {add_on_type}")

    def to_dict(self) -> dict:
        return {
            "full_installation": self.full_installation,
            "dual_boot_installation": self.dual_boot_installation,
            "additional_drivers": self.additional_drivers,
            "office_suite": self.office_suite,
        }

    @classmethod
    def from_records(cls, data: Any) -> "PriceTable":
        """Accept either a mapping or the service's ``[{service_type, price}]`` rows."""
        if isinstance(data, list):
            mapping: dict[str, Any] = {}
            for idx, row in enumerate(data):
                if not isinstance(row, dict):
                    raise ValueError(f"Pricing row {idx} must be an object.")
                mapping[str(row.get("service_type", ""))] = row.get("price")
            data = mapping
        if not isinstance(data, Mapping):
            raise ValueError("Pricing must be an object or a list of rows.")
        values: dict[str, float] = {}
        for key in PRICE_KEYS:
            raw = data.get(key)
            if isinstance(raw, str):
                try:
                    raw = float(raw)
                except ValueError as exc:
                    raise ValueError(f"Pricing '{key}' must be numeric.") from exc
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"Pricing '{key}' is missing or not numeric.")
            if raw < 0:
                raise ValueError(f"Pricing '{key}' must be >= 0.")
            values[key] = raw
        return cls(**values)


@dataclass(frozen=True)
class Settings:
    backend: str
    api_url: str
    timeout_s: float
    undo_window_s: float
    store_path: Path | None
    call_log_path: Path | None

    def to_dict(self) -> dict:
        return {
            "backend": self.backend,
            "api_url": self.api_url,
            "timeout_s": self.timeout_s,
            "undo_window_s": self.undo_window_s,
            "store_path": str(self.store_path) if self.store_path else None,
            "call_log_path": str(self.call_log_path) if self.call_log_path else None,
        }


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    backend = (env.get("TECHSERVE_BACKEND") or "local").strip().lower()
    if backend not in BACKEND_MODES:
        raise ValueError(f"TECHSERVE_BACKEND must be one of {', '.join(BACKEND_MODES)}; got '{backend}'.")
    api_url = (env.get("TECHSERVE_API_URL") or DEFAULT_API_URL).strip().rstrip("/")
    timeout_s = _positive_float(env, "TECHSERVE_TIMEOUT_S", DEFAULT_TIMEOUT_S)
    undo_window_s = _positive_float(env, "TECHSERVE_UNDO_WINDOW_S", DEFAULT_UNDO_WINDOW_S)
    return Settings(
        backend=backend,
        api_url=api_url,
        timeout_s=timeout_s,
        undo_window_s=undo_window_s,
        store_path=_optional_path(env, "TECHSERVE_STORE_PATH"),
        call_log_path=_optional_path(env, "TECHSERVE_CALL_LOG"),
    )


def _positive_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number; got '{raw}'.") from exc
    if value <= 0:
        raise ValueError(f"{key} must be > 0; got '{raw}'.")
    return value


def _optional_path(env: Mapping[str, str], key: str) -> Path | None:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip()).expanduser()
