"""
Settings management for the memory match game.

Settings live in a small JSON file; anything missing falls back to the
defaults below.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields

from errors import ConfigError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


@dataclass
class GameSettings:
    """Timing constants (milliseconds unless noted) and storage location."""
    stagger_ms: int = 80
    settle_ms: int = 300
    countdown_seconds: int = 3
    match_delay_ms: int = 300
    mismatch_delay_ms: int = 700
    clock_interval_ms: int = 250
    db_file: str = "memory_game.db"
    fps: int = 60

    def validate(self) -> "GameSettings":
        """
        Check that the settings describe a playable round.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigError: If a value is out of range
        """
        for name in ("stagger_ms", "settle_ms", "match_delay_ms", "mismatch_delay_ms"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.countdown_seconds < 1:
            raise ConfigError("countdown_seconds must be at least 1")
        if self.clock_interval_ms <= 0:
            raise ConfigError("clock_interval_ms must be positive")
        if self.fps <= 0:
            raise ConfigError("fps must be positive")
        if self.match_delay_ms > self.mismatch_delay_ms:
            raise ConfigError("match_delay_ms must not exceed mismatch_delay_ms")
        return self

    @classmethod
    def from_dict(cls, data):
        """
        Create settings from a dictionary, ignoring keys we don't know.

        Raises:
            ConfigError: If a known key holds a value of the wrong type
        """
        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            # bool is an int subclass but never a valid timing
            if isinstance(value, bool) or not isinstance(value, f.type):
                raise ConfigError(f"{f.name} must be {f.type.__name__}, got {value!r}")
            values[f.name] = value
        return cls(**values)

    def to_dict(self):
        return asdict(self)


def load_settings(path=SETTINGS_FILE) -> GameSettings:
    """Load settings from a JSON file, using defaults if it is missing or unreadable."""
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read %s (%s), using default settings", path, e)
            return GameSettings()
        if isinstance(data, dict):
            return GameSettings.from_dict(data).validate()
        logger.warning("%s does not hold a JSON object, using default settings", path)
    return GameSettings()


def save_settings(settings: GameSettings, path=SETTINGS_FILE) -> None:
    """Save settings to a JSON file."""
    with open(path, 'w') as f:
        json.dump(settings.to_dict(), f, indent=2)
