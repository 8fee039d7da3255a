"""Persist and load keeper settings profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from pykeeper.config import KeeperSettings, settings_from_mapping


@dataclass
class SettingsProfile:
    preset: Optional[str] = None
    overrides: Dict[str, object] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "SettingsProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            preset=data.get("preset"),
            overrides=data.get("overrides", {}),
        )

    def save(self, path: Path) -> None:
        payload = {
            "preset": self.preset,
            "overrides": self.overrides,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def resolve(self) -> KeeperSettings:
        return settings_from_mapping(self.overrides, base=self.preset)
