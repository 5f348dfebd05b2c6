import logging

from docprobe_core.codebase.debug import spy_enabled, spy_trace


@spy_trace
def _findings(n):
    return ["x"] * n


class TestSpyTrace:
    def test_disabled_by_default(self, monkeypatch, caplog):
        monkeypatch.delenv("DOCPROBE_SPY", raising=False)
        with caplog.at_level(logging.DEBUG, logger="docprobe.spy"):
            assert _findings(2) == ["x", "x"]
        assert not spy_enabled()
        assert caplog.records == []

    def test_enabled_logs_finding_count(self, monkeypatch, caplog):
        """Exit line reports how many findings the wrapped call returned."""
        monkeypatch.setenv("DOCPROBE_SPY", "1")
        with caplog.at_level(logging.DEBUG, logger="docprobe.spy"):
            _findings(3)
        messages = [r.getMessage() for r in caplog.records]
        assert any("3 finding(s)" in m for m in messages)

    def test_false_values(self, monkeypatch):
        for value in ("off", "No", "false", " 0 "):
            monkeypatch.setenv("DOCPROBE_SPY", value)
            assert not spy_enabled()
