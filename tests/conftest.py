"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from vuetiful.cache import ArtifactCache, FileStore
from vuetiful.extractor import Extractor
from vuetiful.fs import FileSystem
from vuetiful.locator import Locator
from vuetiful.parser import ArtifactParser
from vuetiful.utils.logging import LogFacility

SAMPLE_CSS = """\
/* Vuetify generated stylesheet (trimmed) */
.v-btn { color: red; }
.ma-2 { margin: 8px !important; }
.pa-4 { padding: 16px !important; }
.d-flex { display: flex !important; }
.elevation-8 { box-shadow: 0 5px 5px -3px rgba(0, 0, 0, 0.2) !important; }
.ma-2:hover { margin: 0; }
.d-flex > .pa-4 { padding: 0; }
.v-card .ma-2 { margin: 0; }
.justify-center { justify-content: center !important; }
@media (min-width: 960px) {
  .d-md-flex { display: flex !important; }
}
.ma-2 { margin: 12px !important; }
"""


def write_project(
    root: Path,
    version: str | None = "3.5.1",
    css: str | None = SAMPLE_CSS,
    artifact: str = "dist/vuetify.css",
    package_dir: str = "node_modules/vuetify",
    manifest: dict | None = None,
) -> Path:
    """Create a project tree with an installed vuetify package.

    Returns the package directory.
    """
    root.mkdir(parents=True, exist_ok=True)
    if manifest is not None:
        (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")

    package = root / package_dir
    package.mkdir(parents=True, exist_ok=True)
    package_manifest = {"name": "vuetify"}
    if version is not None:
        package_manifest["version"] = version
    (package / "package.json").write_text(json.dumps(package_manifest), encoding="utf-8")

    if css is not None:
        artifact_path = package / artifact
        artifact_path.parent.mkdir(parents=True, exist_ok=True)
        artifact_path.write_text(css, encoding="utf-8")
    return package


class RecordingNotifier:
    """Notifier that remembers every call."""

    def __init__(self):
        self.calls = []

    def not_detected(self, root):
        self.calls.append(("not_detected", root))

    def extraction_failed(self, root, error):
        self.calls.append(("extraction_failed", root, error))

    def critical_failure(self, error):
        self.calls.append(("critical_failure", error))

    def storage_degraded(self, error_count):
        self.calls.append(("storage_degraded", error_count))

    def refreshed(self, report):
        self.calls.append(("refreshed", report))

    def kinds(self):
        return [call[0] for call in self.calls]


class CountingParser(ArtifactParser):
    """ArtifactParser that counts parse_file calls."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parse_calls = 0

    async def parse_file(self, path, token=None):
        self.parse_calls += 1
        return await super().parse_file(path, token)


@pytest.fixture
def log_lines():
    """Captured log lines of the facility below."""
    return []


@pytest.fixture
def log_facility(log_lines):
    """Verbose LogFacility writing into a list."""
    facility = LogFacility(verbose=True, json_mode=False, sink=log_lines.append)
    yield facility
    facility.close()


@pytest.fixture
def fs():
    return FileSystem()


@pytest.fixture
def project(tmp_path):
    """Single-root project with vuetify 3.5.1 installed."""
    root = tmp_path / "project"
    write_project(root)
    return root


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_extractor(tmp_path, fs, log_facility, notifier):
    """Factory building an Extractor over the given roots with a fresh cache."""

    def factory(roots, cache_dir=None, store=None, settings_loader=None):
        store = store or FileStore(str(cache_dir or tmp_path / "state" / "cache"), fs)
        cache = ArtifactCache(store, fs, log_facility)
        parser = CountingParser(fs, log_facility)
        kwargs = {}
        if settings_loader is not None:
            kwargs["settings_loader"] = settings_loader
        return Extractor(
            [str(r) for r in roots],
            Locator(fs, log_facility),
            parser,
            cache,
            notifier,
            log_facility,
            **kwargs,
        )

    return factory
