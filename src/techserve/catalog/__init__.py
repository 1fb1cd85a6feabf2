"""Catalog snapshot of installable operating systems and the price table."""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from importlib import resources
from pathlib import Path
from typing import Any

from techserve.config import OS_KINDS, PriceTable


@dataclass(frozen=True)
class OSVersion:
    id: int
    os_id: int
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class OperatingSystem:
    id: int
    name: str
    kind: str
    is_active: bool
    versions: tuple[OSVersion, ...]

    def active_versions(self) -> list[OSVersion]:
        return [version for version in self.versions if version.is_active]


@dataclass(frozen=True)
class CatalogSnapshot:
    """Read-only view of the active catalog, loaded once per session."""

    systems: tuple[OperatingSystem, ...]

    @classmethod
    def from_records(cls, data: Any) -> "CatalogSnapshot":
        return cls(systems=tuple(_validate_catalog(data)))

    def get_system(self, os_id: int | None) -> OperatingSystem | None:
        if os_id is None:
            return None
        for system in self.systems:
            if system.id == os_id:
                return system
        return None

    def get_version(self, os_id: int | None, version_id: int | None) -> OSVersion | None:
        system = self.get_system(os_id)
        if system is None or version_id is None:
            return None
        for version in system.versions:
            if version.id == version_id:
                return version
        return None

    def selectable_systems(self) -> list[OperatingSystem]:
        return [system for system in self.systems if system.is_active and system.active_versions()]

    def is_selectable(self, os_id: int | None) -> bool:
        system = self.get_system(os_id)
        return system is not None and system.is_active and bool(system.active_versions())

    def version_belongs(self, os_id: int | None, version_id: int | None) -> bool:
        version = self.get_version(os_id, version_id)
        system = self.get_system(os_id)
        return version is not None and version.is_active and system is not None and system.is_active

    def to_records(self) -> list[dict[str, Any]]:
        return [
            {
                "id": system.id,
                "name": system.name,
                "type": system.kind,
                "is_active": system.is_active,
                "versions": [
                    {"id": version.id, "name": version.name, "is_active": version.is_active}
                    for version in system.versions
                ],
            }
            for system in self.systems
        ]


def load_catalog_records() -> tuple[list[dict[str, Any]], str | None]:
    """Raw catalog rows (inactive entries included) as the order service stores them."""
    return _load_resource(
        env_var="TECHSERVE_CATALOG_PATH",
        filename="operating_systems.json",
        validate=_checked_records,
    )


def _checked_records(data: Any) -> list[dict[str, Any]]:
    _validate_catalog(data, keep_inactive=True)
    return data


def load_price_table() -> tuple[PriceTable, str | None]:
    return _load_resource(
        env_var="TECHSERVE_PRICING_PATH",
        filename="pricing.json",
        validate=PriceTable.from_records,
    )


def _load_resource(*, env_var: str, filename: str, validate) -> tuple[Any, str | None]:  # type: ignore[no-untyped-def]
    override = os.getenv(env_var)
    if override:
        try:
            data = json.loads(Path(override).read_text(encoding="utf-8"))
            return validate(data), None
        except (OSError, ValueError) as exc:
            built_in = validate(_read_builtin(filename))
            return built_in, f"Override failed ({env_var}: {exc}). Using built-in {filename}."
    return validate(_read_builtin(filename)), None


def _read_builtin(filename: str) -> Any:
    data = resources.files(__name__).joinpath(filename).read_text(encoding="utf-8")
    return json.loads(data)


def _validate_catalog(data: Any, *, keep_inactive: bool = False) -> list[OperatingSystem]:
    if not isinstance(data, list):
        raise ValueError("Catalog must be a list of operating systems.")
    systems: list[OperatingSystem] = []
    seen_os: set[int] = set()
    seen_versions: set[int] = set()
    for idx, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise ValueError(f"Catalog item {idx} must be an object.")
        os_id = raw.get("id")
        if isinstance(os_id, bool) or not isinstance(os_id, int):
            raise ValueError(f"Catalog item {idx} missing integer 'id'.")
        if os_id in seen_os:
            raise ValueError(f"Catalog item {idx} duplicates os id {os_id}.")
        seen_os.add(os_id)
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Catalog item {idx} missing 'name'.")
        kind = raw.get("type", raw.get("kind"))
        if kind not in OS_KINDS:
            raise ValueError(f"Catalog item {idx} has unsupported type '{kind}'.")
        is_active = bool(raw.get("is_active", True))
        raw_versions = raw.get("versions") or []
        if not isinstance(raw_versions, list):
            raise ValueError(f"Catalog item {idx} 'versions' must be a list.")
        versions: list[OSVersion] = []
        for v_idx, raw_version in enumerate(raw_versions):
            if not isinstance(raw_version, dict):
                raise ValueError(f"Catalog item {idx} version {v_idx} must be an object.")
            version_id = raw_version.get("id")
            if isinstance(version_id, bool) or not isinstance(version_id, int):
                raise ValueError(f"Catalog item {idx} version {v_idx} missing integer 'id'.")
            if version_id in seen_versions:
                raise ValueError(f"Catalog item {idx} version {v_idx} duplicates version id {version_id}.")
            seen_versions.add(version_id)
            version_name = raw_version.get("name")
            if not isinstance(version_name, str) or not version_name.strip():
                raise ValueError(f"Catalog item {idx} version {v_idx} missing 'name'.")
            version_active = bool(raw_version.get("is_active", True))
            if not version_active and not keep_inactive:
                continue
            versions.append(
                OSVersion(
                    id=version_id,
                    os_id=os_id,
                    name=version_name.strip(),
                    is_active=version_active,
                )
            )
        if not is_active and not keep_inactive:
            continue
        systems.append(
            OperatingSystem(
                id=os_id,
                name=name.strip(),
                kind=kind,
                is_active=is_active,
                versions=tuple(versions),
            )
        )
    return systems
