from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict
from PySide6.QtCore import QSettings
import logging

from qvq.core.results import ConjugationMode

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value
    def __repr__(self):
        return self.value


MAX_DURATION_MS = 60000

# ----------------------
# Defaults
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.DEVELOPMENT.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "view": {
        "algebra_mode": ConjugationMode.PSEUDO.value,
        "show_final_result": True,
    },
    "animation": {
        "qv_duration_ms": 3000,
        "qvq_duration_ms": 6000,
    },
}

SECTIONS = tuple(DEFAULTS)

# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"

@dataclass
class ViewConfig:
    algebra_mode: ConjugationMode = ConjugationMode.PSEUDO
    show_final_result: bool = True

@dataclass
class AnimationConfig:
    qv_duration_ms: int = 3000
    qvq_duration_ms: int = 6000

@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)

# ----------------------
# Utility
# ----------------------
def _truthy(s: str) -> bool:
    return s.strip().lower() in ("1", "true", "yes", "on")


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

def _validate_algebra_mode(v: Any) -> ConjugationMode:
    if isinstance(v, ConjugationMode):
        return v
    try:
        return ConjugationMode(str(v).strip().lower())
    except ValueError:
        return ConjugationMode(DEFAULTS["view"]["algebra_mode"])

def _validate_bool(v: Any, default: bool) -> bool:
    # QSettings INI backends hand booleans back as strings
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    return _truthy(str(v))

def _validate_duration(v: Any, default: int) -> int:
    try:
        ms = int(float(v))
    except (TypeError, ValueError):
        return default
    return ms if 0 < ms <= MAX_DURATION_MS else default


# ---------------------
# AppSettingManager
# ---------------------
class AppSettingsManager:
    """
    Application-wide settings.

    Starts from the in-code DEFAULTS, applies QSettings overrides and
    validates them; out-of-range values fall back to the default.
    Every set_* is persisted to QSettings immediately.
    """
    def __init__(self, org_domain: str = "QvqApp.org", app_name: str = "QVQ"):
        self._settings = QSettings(org_domain, app_name)
        self._data = self._load_effective()

    # Reading
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

    @property
    def algebra_mode(self) -> ConjugationMode:
        return self._data.view.algebra_mode

    @property
    def show_final_result(self) -> bool:
        return self._data.view.show_final_result

    @property
    def animation(self) -> AnimationConfig:
        return self._data.animation

    # Writing
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_algebra_mode(self, v: str | ConjugationMode) -> None:
        mode = _validate_algebra_mode(v)
        self._settings.setValue("view/algebra_mode", mode.value)
        self._data.view.algebra_mode = mode

    def set_show_final_result(self, v: bool) -> None:
        show = _validate_bool(v, DEFAULTS["view"]["show_final_result"])
        self._settings.setValue("view/show_final_result", show)
        self._data.view.show_final_result = show

    def set_qv_duration_ms(self, v: int) -> None:
        ms = _validate_duration(v, DEFAULTS["animation"]["qv_duration_ms"])
        self._settings.setValue("animation/qv_duration_ms", ms)
        self._data.animation.qv_duration_ms = ms

    def set_qvq_duration_ms(self, v: int) -> None:
        ms = _validate_duration(v, DEFAULTS["animation"]["qvq_duration_ms"])
        self._settings.setValue("animation/qvq_duration_ms", ms)
        self._data.animation.qvq_duration_ms = ms

    # Reset
    def reset_all_to_default(self) -> None:
        """Drop every user setting (shortcuts are managed separately)."""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """Restore a single section to its defaults."""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()
        logger.info("Settings section '%s' reset to defaults", section)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "general": asdict(self._data.general),
            "view": asdict(self._data.view),
            "animation": asdict(self._data.animation),
        }
        data["general"]["run_mode"] = self._data.general.run_mode.value
        data["view"]["algebra_mode"] = self._data.view.algebra_mode.value
        return data

    # ---------- Internals ---------------
    def _load_effective(self) -> AppSettingsData:
        """Apply QSettings overrides on top of DEFAULTS, validate and model them."""
        merged = self._apply_qsettings_overrides(DEFAULTS)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Read the dict based settings and apply QSettings overrides.
        :param base:
        :return: apply QSettings overrides
        """
        # general
        g = dict(base.get("general", {}))
        v = self._settings.value("general/run_mode", None)
        if v is not None:
            g["run_mode"] = _validate_run_mode(v).value
        v = self._settings.value("general/logging_level", None)
        if v is not None:
            g["logging_level"] = _validate_logging_level(v)

        # view
        vw = dict(base.get("view", {}))
        v = self._settings.value("view/algebra_mode", None)
        if v is not None:
            vw["algebra_mode"] = _validate_algebra_mode(v).value
        v = self._settings.value("view/show_final_result", None)
        if v is not None:
            vw["show_final_result"] = _validate_bool(v, base["view"]["show_final_result"])

        # animation
        an = dict(base.get("animation", {}))
        for key in ("qv_duration_ms", "qvq_duration_ms"):
            v = self._settings.value(f"animation/{key}", None)
            if v is not None:
                an[key] = _validate_duration(v, base["animation"][key])

        return {"general": g, "view": vw, "animation": an}

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        making model from merged dict and returning merged AppSettingsData
        :param merged:
        :return: merged AppSettingsData
        """
        g = merged.get("general", {})
        vw = merged.get("view", {})
        an = merged.get("animation", {})
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g.get("run_mode", DEFAULTS["general"]["run_mode"])),
                logging_level=_validate_logging_level(g.get("logging_level", DEFAULTS["general"]["logging_level"])),
            ),
            view=ViewConfig(
                algebra_mode=_validate_algebra_mode(vw.get("algebra_mode", DEFAULTS["view"]["algebra_mode"])),
                show_final_result=_validate_bool(vw.get("show_final_result"), DEFAULTS["view"]["show_final_result"]),
            ),
            animation=AnimationConfig(
                qv_duration_ms=_validate_duration(an.get("qv_duration_ms"), DEFAULTS["animation"]["qv_duration_ms"]),
                qvq_duration_ms=_validate_duration(an.get("qvq_duration_ms"), DEFAULTS["animation"]["qvq_duration_ms"]),
            ),
        )
