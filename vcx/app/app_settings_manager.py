from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Callable, Dict
from PySide6.QtCore import QSettings
import logging

from vcx.core import constants

logger = logging.getLogger(__name__)

ORG_DOMAIN = "vcx.org"
APP_NAME = "VCX"


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value
    def __repr__(self):
        return self.value


# ----------------------
# Defaults
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "orientation": {
        "update_interval": constants.DEFAULT_UPDATE_INTERVAL,
        "orientation_change_throttle_ms": constants.DEFAULT_ORIENTATION_CHANGE_THROTTLE_MS,
        "enabled": constants.DEFAULT_ENABLED,
    },
    "alignment": {
        "target_orientation": constants.DEFAULT_TARGET_ORIENTATION,
        "alignment_tolerance": constants.DEFAULT_ALIGNMENT_TOLERANCE,
        "exit_multiplier": constants.DEFAULT_ALIGNMENT_EXIT_MULTIPLIER,
        "min_stable_duration_ms": constants.DEFAULT_MIN_STABLE_DURATION_MS,
    },
    "display": {
        "angle_precision": constants.DEFAULT_ANGLE_PRECISION,
        "angle_format": constants.DEFAULT_ANGLE_FORMAT,
    },
    "level": {
        "level_threshold": constants.DEFAULT_LEVEL_THRESHOLD,
        "update_interval": constants.DEFAULT_LEVEL_UPDATE_INTERVAL,
        "angle_change_throttle_ms": constants.DEFAULT_ANGLE_CHANGE_THROTTLE_MS,
        "show_angle_text": False,
    },
}

SECTIONS = tuple(DEFAULTS.keys())


# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"

@dataclass
class OrientationConfig:
    update_interval: int = constants.DEFAULT_UPDATE_INTERVAL
    orientation_change_throttle_ms: float = constants.DEFAULT_ORIENTATION_CHANGE_THROTTLE_MS
    enabled: bool = constants.DEFAULT_ENABLED

@dataclass
class AlignmentConfig:
    target_orientation: str = constants.DEFAULT_TARGET_ORIENTATION
    alignment_tolerance: float = constants.DEFAULT_ALIGNMENT_TOLERANCE
    exit_multiplier: float = constants.DEFAULT_ALIGNMENT_EXIT_MULTIPLIER
    min_stable_duration_ms: float = constants.DEFAULT_MIN_STABLE_DURATION_MS

@dataclass
class DisplayConfig:
    angle_precision: int = constants.DEFAULT_ANGLE_PRECISION
    angle_format: str = constants.DEFAULT_ANGLE_FORMAT

@dataclass
class LevelConfig:
    level_threshold: float = constants.DEFAULT_LEVEL_THRESHOLD
    update_interval: int = constants.DEFAULT_LEVEL_UPDATE_INTERVAL
    angle_change_throttle_ms: float = constants.DEFAULT_ANGLE_CHANGE_THROTTLE_MS
    show_angle_text: bool = False

@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    orientation: OrientationConfig = field(default_factory=OrientationConfig)
    alignment: AlignmentConfig = field(default_factory=AlignmentConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    level: LevelConfig = field(default_factory=LevelConfig)

# ----------------------
# Utility
# ----------------------
def _truthy(s: Any) -> bool:
    if isinstance(s, bool):
        return s
    return str(s).strip().lower() in ("1", "true", "yes", "on")


def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    mode = str(v).strip().lower()
    try:
        return RunMode(mode)
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])

def _validate_logging_level(v: str) -> str:
    v = str(v).upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"

def _clamped_number(lo: float, hi: float, default: float, cast: Callable = float) -> Callable[[Any], Any]:
    """Validator: parse a number and clamp it into [lo, hi], default on garbage."""
    def validate(v: Any):
        try:
            f = float(v)
        except (TypeError, ValueError):
            return cast(default)
        if f != f:  # NaN
            return cast(default)
        return cast(min(hi, max(lo, f)))
    return validate

def _positive_number(default: float) -> Callable[[Any], float]:
    def validate(v: Any) -> float:
        try:
            f = float(v)
        except (TypeError, ValueError):
            return default
        return f if 0 < f < float("inf") else default
    return validate

def _validate_target_orientation(v: Any) -> str:
    t = str(v).strip().lower()
    return t if t in constants.REFERENCES else constants.DEFAULT_TARGET_ORIENTATION

def _validate_angle_format(v: Any) -> str:
    f = str(v).strip().lower()
    return f if f in ("degrees", "radians") else constants.DEFAULT_ANGLE_FORMAT


_VALIDATORS: Dict[str, Dict[str, Callable[[Any], Any]]] = {
    "general": {
        "run_mode": lambda v: _validate_run_mode(v).value,
        "logging_level": _validate_logging_level,
    },
    "orientation": {
        "update_interval": _clamped_number(
            *constants.UPDATE_INTERVAL_RANGE, constants.DEFAULT_UPDATE_INTERVAL, int),
        "orientation_change_throttle_ms": _clamped_number(
            *constants.THROTTLE_MS_RANGE, constants.DEFAULT_ORIENTATION_CHANGE_THROTTLE_MS),
        "enabled": _truthy,
    },
    "alignment": {
        "target_orientation": _validate_target_orientation,
        "alignment_tolerance": _clamped_number(
            *constants.ALIGNMENT_TOLERANCE_RANGE, constants.DEFAULT_ALIGNMENT_TOLERANCE),
        "exit_multiplier": _clamped_number(1.0, 10.0, constants.DEFAULT_ALIGNMENT_EXIT_MULTIPLIER),
        "min_stable_duration_ms": _clamped_number(0, 5000, constants.DEFAULT_MIN_STABLE_DURATION_MS),
    },
    "display": {
        "angle_precision": _clamped_number(
            *constants.ANGLE_PRECISION_RANGE, constants.DEFAULT_ANGLE_PRECISION, int),
        "angle_format": _validate_angle_format,
    },
    "level": {
        "level_threshold": _positive_number(constants.DEFAULT_LEVEL_THRESHOLD),
        "update_interval": _clamped_number(
            *constants.UPDATE_INTERVAL_RANGE, constants.DEFAULT_LEVEL_UPDATE_INTERVAL, int),
        "angle_change_throttle_ms": _clamped_number(
            *constants.THROTTLE_MS_RANGE, constants.DEFAULT_ANGLE_CHANGE_THROTTLE_MS),
        "show_angle_text": _truthy,
    },
}


# ---------------------
# AppSettingManager
# ---------------------
class AppSettingsManager:
    """
    Application settings for the orientation indicator and bubble level.

    Values come from the in-code DEFAULTS overridden by QSettings.
    Everything is validated on load; out of range values are clamped,
    unparsable values fall back to the default.
    set_* persists to QSettings immediately.
    """
    def __init__(self, org_domain: str = ORG_DOMAIN, app_name: str = APP_NAME):
        self._settings = QSettings(org_domain, app_name)
        self._data = self._load_effective()

    # read
    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    # write
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_value(self, section: str, key: str, v: Any) -> Any:
        """
        Validate and persist one value.

        :param section: Section name (e.g. "alignment")
        :param key: Key within the section (e.g. "alignment_tolerance")
        :param v: Raw value
        :return: The validated value that was stored
        """
        validator = self._validator(section, key)
        value = validator(v)
        if section == "general" and key == "run_mode":
            self.set_run_mode(value)
            return self._data.general.run_mode
        self._settings.setValue(f"{section}/{key}", value)
        setattr(getattr(self._data, section), key, value)
        logger.debug("Setting %s/%s = %r", section, key, value)
        return value

    def set_target_orientation(self, v: str) -> None:
        self.set_value("alignment", "target_orientation", v)

    def set_alignment_tolerance(self, v: float) -> None:
        self.set_value("alignment", "alignment_tolerance", v)

    def set_update_interval(self, v: int) -> None:
        self.set_value("orientation", "update_interval", v)

    def set_angle_precision(self, v: int) -> None:
        self.set_value("display", "angle_precision", v)

    def set_angle_format(self, v: str) -> None:
        self.set_value("display", "angle_format", v)

    # Reset
    def reset_all_to_default(self) -> None:
        """Remove every user setting."""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """Reset one section to its defaults."""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()

    def to_dict(self) -> dict[str, Any]:
        data = {section: asdict(getattr(self._data, section)) for section in SECTIONS}
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- internal ---------------
    @staticmethod
    def _validator(section: str, key: str) -> Callable[[Any], Any]:
        if section not in _VALIDATORS:
            raise ValueError(f"Invalid section: {section}")
        if key not in _VALIDATORS[section]:
            raise ValueError(f"Invalid key: {section}/{key}")
        return _VALIDATORS[section][key]

    def _load_effective(self) -> AppSettingsData:
        """DEFAULTS overridden by QSettings, validated, as a model."""
        merged = self._apply_qsettings_overrides(DEFAULTS)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Read the dict based settings and apply QSettings overrides.
        :param base:
        :return: merged dict of validated values
        """
        merged: dict[str, Any] = {}
        for section, values in base.items():
            sec = {}
            for key, default in values.items():
                v = self._settings.value(f"{section}/{key}", None)
                sec[key] = _VALIDATORS[section][key](default if v is None else v)
            merged[section] = sec
        return merged

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        making model from merged dict and returning merged AppSettingsData
        :param merged:
        :return: merged AppSettingsData
        """
        g = merged["general"]
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g["run_mode"]),
                logging_level=g["logging_level"],
            ),
            orientation=OrientationConfig(**merged["orientation"]),
            alignment=AlignmentConfig(**merged["alignment"]),
            display=DisplayConfig(**merged["display"]),
            level=LevelConfig(**merged["level"]),
        )
