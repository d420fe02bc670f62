"""
Unit tests for the engine hook table and inert watcher.
"""

import pytest

from twinbuild.engine.base import HookTable, InertWatcher
from twinbuild.models import BuildEvent


@pytest.mark.unit
class TestHookTable:
    """Test cases for HookTable."""

    def test_calls_taps_in_registration_order(self):
        hooks = HookTable(["done"])
        calls = []
        hooks.tap("done", "first", lambda stats: calls.append(("first", stats)))
        hooks.tap("done", "second", lambda stats: calls.append(("second", stats)))

        hooks.call("done", "stats")

        assert calls == [("first", "stats"), ("second", "stats")]

    def test_unknown_hook_raises(self):
        hooks = HookTable(["done"])

        with pytest.raises(KeyError, match="Unknown hook 'emit'"):
            hooks.tap("emit", "compiler", lambda: None)

    def test_untap_removes_callback(self):
        hooks = HookTable(["done"])
        calls = []
        untap = hooks.tap("done", "compiler", calls.append)

        untap()
        untap()
        hooks.call("done", "stats")

        assert calls == []
        assert hooks.count("done") == 0

    def test_tap_errors_propagate(self):
        hooks = HookTable(["done"])

        def broken(stats):
            raise RuntimeError("tap failed")

        hooks.tap("done", "compiler", broken)

        with pytest.raises(RuntimeError, match="tap failed"):
            hooks.call("done", None)

    def test_build_events_cover_engine_hooks(self):
        hooks = HookTable(event.value for event in BuildEvent)
        assert hooks.names == ["compile", "done", "failed", "invalid", "watch-run"]


@pytest.mark.unit
def test_inert_watcher_is_a_no_op():
    watcher = InertWatcher()
    watcher.close()
    watcher.invalidate()


@pytest.mark.unit
def test_build_event_coerce():
    assert BuildEvent.coerce("done") is BuildEvent.DONE
    assert BuildEvent.coerce(BuildEvent.INVALID) is BuildEvent.INVALID
    with pytest.raises(ValueError):
        BuildEvent.coerce("emit")
