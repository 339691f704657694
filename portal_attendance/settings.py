# settings.py
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, replace, field
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Academic year appended to "12 Jan" style dates that carry no year.
DEFAULT_YEAR = 2025
PORTAL_TIMEZONE = "Asia/Kolkata"


@dataclass(frozen=True)
class EngineSettings:
    default_year: int = DEFAULT_YEAR
    alternate_course_codes: Tuple[str, ...] = field(default=("ACDD05",))
    portal_timezone: str = PORTAL_TIMEZONE

    def to_dict(self) -> dict:
        data = asdict(self)
        data["alternate_course_codes"] = list(self.alternate_course_codes)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EngineSettings":
        codes = data.get("alternate_course_codes", DEFAULT_SETTINGS.alternate_course_codes)
        if isinstance(codes, str):
            codes = [codes]
        return cls(
            default_year=int(data.get("default_year", DEFAULT_YEAR)),
            alternate_course_codes=tuple(str(c).strip().upper() for c in codes if str(c).strip()),
            portal_timezone=data.get("portal_timezone", PORTAL_TIMEZONE),
        )

    @classmethod
    def load_from_file(cls, filepath: Optional[str | os.PathLike]) -> "EngineSettings":
        if not filepath:
            return replace(DEFAULT_SETTINGS)
        path = Path(filepath)
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
                return cls.from_dict(data)
            except (json.JSONDecodeError, OSError, AttributeError, TypeError, ValueError) as e:
                logger.warning("Could not load settings from %s: %s", path, e)
                return replace(DEFAULT_SETTINGS)
        return replace(DEFAULT_SETTINGS)


DEFAULT_SETTINGS = EngineSettings()
