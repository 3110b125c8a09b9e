"""Tests for user-visible prompts."""

import pytest

from vuetiful.config_runtime import load_settings
from vuetiful.errors import ArtifactMissing, MalformedArtifact, SizeExceeded
from vuetiful.fs import PathPermissionDenied
from vuetiful.notifications import (
    DONT_SHOW_AGAIN,
    ConsoleNotifier,
    FailureKind,
    classify_failure,
)


class TestClassifyFailure:
    @pytest.mark.parametrize(
        "error,kind",
        [
            (ArtifactMissing("gone"), FailureKind.MISSING_ARTIFACT),
            (MalformedArtifact("bad", line=3, column=1), FailureKind.MALFORMED_ARTIFACT),
            (SizeExceeded("/x.css", 60 * 1024 * 1024, 50 * 1024 * 1024), FailureKind.SIZE_EXCEEDED),
            (PathPermissionDenied("/x.css", "Permission denied"), FailureKind.IO_FAILURE),
            (ValueError("other"), FailureKind.OTHER),
        ],
    )
    def test_kinds(self, error, kind):
        assert classify_failure(error) is kind

    def test_malformed_message_has_location(self):
        assert "(line 3, column 1)" in str(MalformedArtifact("bad", line=3, column=1))


class TestConsoleNotifier:
    def test_dont_show_again_persists(self, tmp_path, monkeypatch):
        monkeypatch.setattr("vuetiful.notifications.Prompt.ask", lambda *a, **kw: DONT_SHOW_AGAIN)
        notifier = ConsoleNotifier(tmp_path, interactive=True)

        notifier.not_detected(str(tmp_path))

        assert load_settings(tmp_path).show_warnings is False

    def test_non_interactive_never_prompts(self, tmp_path, monkeypatch, capsys):
        def fail(*args, **kwargs):
            raise AssertionError("must not prompt")

        monkeypatch.setattr("vuetiful.notifications.Prompt.ask", fail)
        notifier = ConsoleNotifier(tmp_path)

        notifier.not_detected(str(tmp_path))
        notifier.extraction_failed(str(tmp_path), ArtifactMissing("gone"))
        notifier.critical_failure(RuntimeError("boom"))

        out = capsys.readouterr().out
        assert "npm install --force vuetify" in out
        assert "When reporting this issue" in out
        assert load_settings(tmp_path).show_warnings is True
