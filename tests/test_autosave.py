"""Tests for the debounced markdown autosave."""
import pytest

from app.prospects.modules.contacts.autosave import MarkdownAutosave


class FakeTimer:
    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fn()


@pytest.fixture()
def timers():
    return []


@pytest.fixture()
def saves():
    return []


@pytest.fixture()
def autosave(timers, saves):
    def factory(delay, fn):
        t = FakeTimer(delay, fn)
        timers.append(t)
        return t

    return MarkdownAutosave(saves.append, "initial", delay=1.0, timer_factory=factory)


def test_debounce_saves_once_with_latest_value(autosave, timers, saves):
    autosave.begin_edit()
    autosave.change("a")
    autosave.change("ab")
    autosave.change("abc")
    assert len(timers) == 3
    assert timers[0].cancelled and timers[1].cancelled
    assert autosave.state == MarkdownAutosave.PENDING
    assert saves == []

    timers[-1].fire()
    assert saves == ["abc"]
    assert autosave.state == MarkdownAutosave.IDLE
    assert autosave.dirty is False


def test_superseded_timer_does_nothing(autosave, timers, saves):
    autosave.change("a")
    autosave.change("ab")
    timers[0].fire()
    assert saves == []


def test_blur_flushes_pending_edit(autosave, timers, saves):
    autosave.begin_edit()
    autosave.change("draft")
    assert autosave.blur() is True
    assert saves == ["draft"]
    assert autosave.editing is False
    assert timers[0].cancelled

    # the cancelled timer firing late must not save twice
    timers[0].fire()
    assert saves == ["draft"]


def test_close_without_changes_does_not_save(autosave, saves):
    autosave.begin_edit()
    assert autosave.close() is True
    assert saves == []
    assert autosave.value == "initial"


def test_failed_save_stays_dirty(timers):
    def failing(value):
        raise RuntimeError("network down")

    a = MarkdownAutosave(failing, "", timer_factory=lambda d, fn: timers.append(FakeTimer(d, fn)) or timers[-1])
    a.change("unsaved")
    timers[-1].fire()
    assert a.dirty is True
    assert a.state == MarkdownAutosave.IDLE
    assert a.flush() is False
    assert a.saved_value == ""


def test_close_after_failed_save_keeps_edit(timers):
    attempts = []

    def flaky(value):
        attempts.append(value)
        if len(attempts) == 1:
            raise RuntimeError("network down")

    a = MarkdownAutosave(flaky, "saved", timer_factory=lambda d, fn: timers.append(FakeTimer(d, fn)) or timers[-1])
    a.begin_edit()
    a.change("edited")
    assert a.close() is False
    assert a.editing is False
    assert a.value == "edited"
    assert a.dirty is True

    assert a.close() is True
    assert a.saved_value == "edited"
    assert attempts == ["edited", "edited"]
