"""Read-only, file-backed organization configuration store.

One file per organization under ``DIALECT_DIR``::

    {org_id}.yaml | {org_id}.yml | {org_id}.json

with an optional ``dialect:`` section (a partial :class:`ServiceDialect`) and an
optional ``shortcodes:`` list of :class:`OrgShortcodeConfig` records.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from panel_notation.core.config import get_settings
from panel_notation.core.errors import DialectError, ErrorCode

from .dialect import ServiceDialect, parse_dialect, read_config_file
from .org_shortcodes import OrgShortcodeConfig

logger = logging.getLogger(__name__)

DEFAULT_DIALECT_DIR = Path("config/dialects")
CONFIG_SUFFIXES = (".yaml", ".yml", ".json")

_ORG_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")


@dataclass(frozen=True)
class StoreConfig:
    dir_path: Path = DEFAULT_DIALECT_DIR
    dialect_ttl_seconds: float = 300.0
    shortcode_ttl_seconds: float = 300.0

    @classmethod
    def from_env(cls) -> "StoreConfig":
        settings = get_settings()
        return cls(
            dir_path=Path(settings.DIALECT_DIR),
            dialect_ttl_seconds=float(settings.DIALECT_CACHE_TTL_SECONDS),
            shortcode_ttl_seconds=float(settings.SHORTCODE_CACHE_TTL_SECONDS),
        )


def valid_org_id(organization_id: Optional[str]) -> bool:
    return bool(organization_id) and _ORG_ID_RE.match(organization_id) is not None and ".." not in organization_id


class FileDialectStore:
    """Loads organization dialect partials and shortcode configs from disk."""

    def __init__(self, config: Optional[StoreConfig] = None) -> None:
        self.config = config or StoreConfig.from_env()

    def _file_path(self, organization_id: str) -> Optional[Path]:
        if not valid_org_id(organization_id):
            return None
        for suffix in CONFIG_SUFFIXES:
            path = self.config.dir_path / f"{organization_id}{suffix}"
            if path.is_file():
                return path
        return None

    def _read(self, organization_id: str) -> Optional[Dict[str, Any]]:
        path = self._file_path(organization_id)
        if path is None:
            return None
        try:
            return read_config_file(str(path))
        except DialectError as exc:
            exc.organization_id = organization_id
            if isinstance(exc.__cause__, OSError):
                exc.code = ErrorCode.STORE_UNAVAILABLE
            raise

    def load_dialect(self, organization_id: str) -> Optional[ServiceDialect]:
        """Return the organization's partial dialect, or None when it has none."""
        data = self._read(organization_id)
        if data is None:
            return None
        section = data.get("dialect")
        if section is None:
            return None
        if not isinstance(section, dict):
            raise DialectError(
                ErrorCode.DIALECT_INVALID,
                "dialect section must be a mapping",
                organization_id,
                str(self._file_path(organization_id)),
            )
        return parse_dialect(section, organization_id)

    def load_shortcodes(self, organization_id: str) -> List[OrgShortcodeConfig]:
        """Active shortcode configs, highest priority first."""
        data = self._read(organization_id)
        if not data:
            return []
        records = data.get("shortcodes") or []
        if not isinstance(records, list):
            raise DialectError(ErrorCode.DIALECT_INVALID, "shortcodes section must be a list", organization_id)
        configs: List[OrgShortcodeConfig] = []
        for record in records:
            if not isinstance(record, dict):
                continue
            try:
                config = OrgShortcodeConfig.model_validate({"org_id": organization_id, **record})
            except ValidationError as exc:
                logger.warning(
                    "skipping invalid shortcode config",
                    extra={"organization_id": organization_id, "code": record.get("shortcode"), "error_code": exc.error_count()},
                )
                continue
            if config.is_active:
                configs.append(config)
        configs.sort(key=lambda c: c.priority, reverse=True)
        return configs


__all__ = ["CONFIG_SUFFIXES", "FileDialectStore", "StoreConfig", "valid_org_id"]
