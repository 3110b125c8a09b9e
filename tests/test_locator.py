"""Tests for installation discovery."""

import asyncio
import os

import pytest

from vuetiful.cancellation import CancellationToken
from vuetiful.errors import ExtractionCancelled
from vuetiful.locator import Locator, normalize_root

from .conftest import write_project


@pytest.fixture
def locator(fs, log_facility):
    return Locator(fs, log_facility)


def find(locator, root):
    return asyncio.run(locator.find_in_root(str(root)))


class TestSearchStrategies:
    """Each strategy on its own."""

    def test_direct_dependency(self, locator, project):
        installation = find(locator, project)

        assert installation is not None
        assert installation.version == "3.5.1"
        assert installation.root_path == normalize_root(str(project))
        assert installation.package_path == str(project / "node_modules" / "vuetify")
        assert installation.artifact_path == str(project / "node_modules" / "vuetify" / "dist" / "vuetify.css")

    def test_parent_directory(self, locator, tmp_path):
        write_project(tmp_path / "repo")
        nested = tmp_path / "repo" / "site"
        nested.mkdir()

        installation = find(locator, nested)

        assert installation is not None
        assert installation.package_path == str(tmp_path / "repo" / "node_modules" / "vuetify")
        assert installation.root_path == str(nested)

    @pytest.mark.parametrize("subdir", ["frontend", "client", "web", "app", "ui"])
    def test_monorepo_subdirectory(self, locator, tmp_path, subdir):
        root = tmp_path / "mono"
        write_project(root / subdir)

        installation = find(locator, root)

        assert installation is not None
        assert installation.package_path == str(root / subdir / "node_modules" / "vuetify")

    def test_nested_package_under_packages(self, locator, tmp_path):
        root = tmp_path / "mono"
        write_project(root / "packages" / "site", version="3.4.0")

        installation = find(locator, root)

        assert installation is not None
        assert installation.version == "3.4.0"

    def test_pnpm_store(self, locator, tmp_path):
        root = tmp_path / "pnpm"
        write_project(
            root,
            version="3.6.0",
            package_dir="node_modules/.pnpm/vuetify@3.6.0_vue@3.4.0/node_modules/vuetify",
        )

        installation = find(locator, root)

        assert installation is not None
        assert installation.version == "3.6.0"
        assert ".pnpm" in installation.package_path

    def test_workspace_glob(self, locator, tmp_path):
        root = tmp_path / "ws"
        root.mkdir()
        (root / "package.json").write_text('{"workspaces": ["libs/*"]}')
        write_project(root / "libs" / "theme", version="3.3.3")

        installation = find(locator, root)

        assert installation is not None
        assert installation.version == "3.3.3"

    def test_yarn_object_workspaces(self, locator, tmp_path):
        root = tmp_path / "yarn"
        root.mkdir()
        (root / "package.json").write_text('{"workspaces": {"packages": ["sites/main"]}}')
        write_project(root / "sites" / "main")

        assert find(locator, root) is not None

    def test_pnpm_workspace_yaml(self, locator, tmp_path):
        root = tmp_path / "pnpmws"
        root.mkdir()
        (root / "pnpm-workspace.yaml").write_text("packages:\n  - 'tools/*'\n  - '!tools/skip'\n")
        write_project(root / "tools" / "docs")

        assert find(locator, root) is not None

    def test_alternate_artifact_name(self, locator, tmp_path):
        root = tmp_path / "min"
        write_project(root, artifact="dist/vuetify.min.css")

        installation = find(locator, root)

        assert installation.artifact_path.endswith(os.path.join("dist", "vuetify.min.css"))


class TestConfirmation:
    """An installation needs a version and a stylesheet."""

    def test_first_hit_wins(self, locator, tmp_path):
        root = tmp_path / "both"
        write_project(root, version="3.0.0")
        write_project(root / "frontend", version="3.9.9")

        assert find(locator, root).version == "3.0.0"

    def test_no_artifact_yields_none(self, locator, tmp_path):
        root = tmp_path / "nocss"
        write_project(root, css=None)
        write_project(root / "frontend")

        assert find(locator, root) is None

    def test_missing_version_yields_none(self, locator, tmp_path):
        root = tmp_path / "noversion"
        write_project(root, version=None)

        assert find(locator, root) is None

    def test_nothing_installed(self, locator, tmp_path):
        root = tmp_path / "empty"
        root.mkdir()

        assert find(locator, root) is None

    def test_missing_root_is_not_an_error(self, locator, tmp_path):
        assert find(locator, tmp_path / "does-not-exist") is None


class TestFindAll:
    """Multiple roots."""

    def test_maps_roots_in_order(self, locator, tmp_path):
        first = tmp_path / "a"
        second = tmp_path / "b"
        empty = tmp_path / "c"
        write_project(first, version="3.1.0")
        write_project(second, version="3.2.0")
        empty.mkdir()

        result = asyncio.run(locator.find_all([str(first), str(empty), str(second)]))

        assert list(result) == [str(first), str(second)]
        assert result[str(second)].version == "3.2.0"

    def test_cancelled_token_unwinds(self, locator, project):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ExtractionCancelled):
            asyncio.run(locator.find_all([str(project)], token))

    def test_error_in_one_root_does_not_stop_others(self, locator, tmp_path, monkeypatch):
        good = tmp_path / "good"
        bad = tmp_path / "bad"
        write_project(good)
        write_project(bad)

        original = locator.find_in_root

        async def flaky(root, token=None):
            if root == str(bad):
                raise RuntimeError("boom")
            return await original(root, token)

        monkeypatch.setattr(locator, "find_in_root", flaky)

        result = asyncio.run(locator.find_all([str(bad), str(good)]))

        assert list(result) == [str(good)]
