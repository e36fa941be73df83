import logging
from types import SimpleNamespace

from qvq.animation.choreography import QVQ
from qvq.ui.mainwindow import MainWindow
from qvq.viewers.controllers.conjugation_controller import ConjugationController


def test_start_animation_is_logged_once(sink, fake_clock, caplog):
    caplog.set_level(logging.INFO, logger="qvq")
    window = SimpleNamespace(controller=ConjugationController(sink, fake_clock))

    assert MainWindow.start_animation(window, QVQ)
    calls = [r for r in caplog.records
             if r.getMessage().startswith("-> ") and "start_animation" in r.getMessage()]
    assert len(calls) == 1
    assert "ConjugationController.start_animation" in calls[0].getMessage()
