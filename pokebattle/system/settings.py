from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, List, Optional
from pokebattle.battle.state import TIE_POLICIES
from pokebattle.core.logging import logger

SETTINGS_FILENAME = ".pokebattle_settings.json"
LOG_LEVELS = {"DEBUG","INFO","WARN","ERROR"}


@dataclass
class SettingsData:
    text_speed: int = 2                 # 1 fast, 2 normal, 3 slow
    log_level: str = "INFO"             # DEBUG / INFO / WARN / ERROR
    debug: bool = False                 # Echo engine debug logs during simulations
    speed_tie_policy: str = "coin_flip" # coin_flip / stable
    seed: Optional[int] = None          # Fixed RNG seed for reproducible battles

    def normalize(self):
        if self.text_speed not in {1,2,3}:
            self.text_speed = 2
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            self.log_level = "INFO"
        if self.speed_tie_policy not in TIE_POLICIES:
            self.speed_tie_policy = "coin_flip"
        if self.seed is not None and not isinstance(self.seed, int):
            self.seed = None
        self.debug = bool(self.debug)

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                # Backfill missing fields (migration safe)
                names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2), encoding="utf-8")
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def update(self, **changes):
        """Apply field changes, normalise, persist and notify listeners."""
        names = {f.name for f in fields(SettingsData)}
        unknown = sorted(set(changes) - names)
        if unknown:
            raise KeyError(f"Unknown setting '{unknown[0]}'")
        for key, value in changes.items():
            setattr(self.data, key, value)
        self.data.normalize()
        logger.set_level(self.data.log_level)
        self.save()
        self._notify()

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)
