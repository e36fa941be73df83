import pytest
from PySide6.QtCore import QSettings

from qvq.app.app_settings_manager import DEFAULTS, AppSettingsManager, RunMode
from qvq.core.results import ConjugationMode


def test_defaults(tmp_settings):
    mgr = AppSettingsManager()
    assert mgr.run_mode is RunMode.DEVELOPMENT
    assert mgr.dev_mode
    assert mgr.logging_level == "INFO"
    assert mgr.algebra_mode is ConjugationMode.PSEUDO
    assert mgr.show_final_result is True
    assert mgr.animation.qv_duration_ms == 3000
    assert mgr.animation.qvq_duration_ms == 6000


def test_values_persist_across_instances(tmp_settings):
    mgr = AppSettingsManager()
    mgr.set_run_mode("production")
    mgr.set_algebra_mode(ConjugationMode.REAL)
    mgr.set_show_final_result(False)
    mgr.set_qvq_duration_ms(4500)

    again = AppSettingsManager()
    assert again.run_mode is RunMode.PRODUCTION
    assert not again.dev_mode
    assert again.algebra_mode is ConjugationMode.REAL
    assert again.show_final_result is False
    assert again.animation.qvq_duration_ms == 4500


@pytest.mark.parametrize("key, raw, attr, expected", [
    ("general/run_mode", "turbo", "run_mode", RunMode.DEVELOPMENT),
    ("general/logging_level", "chatty", "logging_level", "INFO"),
    ("view/algebra_mode", "octonion", "algebra_mode", ConjugationMode.PSEUDO),
    ("view/show_final_result", "false", "show_final_result", False),
])
def test_stored_values_are_validated(tmp_settings, key, raw, attr, expected):
    tmp_settings.setValue(key, raw)
    tmp_settings.sync()
    mgr = AppSettingsManager()
    assert getattr(mgr, attr) == expected


@pytest.mark.parametrize("raw", ["0", "-10", "60001", "soon"])
def test_out_of_range_durations_fall_back(tmp_settings, raw):
    tmp_settings.setValue("animation/qv_duration_ms", raw)
    tmp_settings.sync()
    mgr = AppSettingsManager()
    assert mgr.animation.qv_duration_ms == DEFAULTS["animation"]["qv_duration_ms"]


def test_setter_rejects_invalid_duration(tmp_settings):
    mgr = AppSettingsManager()
    mgr.set_qv_duration_ms(120000)
    assert mgr.animation.qv_duration_ms == 3000


def test_reset_section(tmp_settings):
    mgr = AppSettingsManager()
    mgr.set_algebra_mode("real")
    mgr.set_qv_duration_ms(900)

    mgr.reset_section("view")
    assert mgr.algebra_mode is ConjugationMode.PSEUDO
    assert mgr.animation.qv_duration_ms == 900

    with pytest.raises(ValueError):
        mgr.reset_section("shortcuts")


def test_reset_all_to_default(tmp_settings):
    mgr = AppSettingsManager()
    mgr.set_run_mode(RunMode.VERBOSE)
    mgr.set_logging_level("debug")
    mgr.reset_all_to_default()
    assert mgr.run_mode is RunMode.DEVELOPMENT
    assert mgr.logging_level == "INFO"
    assert QSettings("QvqApp.org", "QVQ").value("general/run_mode") is None


def test_to_dict_uses_plain_values(tmp_settings):
    mgr = AppSettingsManager()
    data = mgr.to_dict()
    assert data["general"]["run_mode"] == "development"
    assert data["view"] == {"algebra_mode": "pseudo", "show_final_result": True}
    assert data["animation"] == {"qv_duration_ms": 3000, "qvq_duration_ms": 6000}
