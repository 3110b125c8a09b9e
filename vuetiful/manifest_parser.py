"""Parser for the npm manifests consulted during discovery and watching."""

import json
import os
from typing import Any

import yaml

from vuetiful.fs import FileSystem, FileSystemError
from vuetiful.utils.constants import MANIFEST_FILE, PNPM_WORKSPACE_FILE

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")


class ManifestParser:
    """Reads package.json and pnpm-workspace.yaml files.

    Parse helpers never raise for unreadable or malformed input; they return
    an empty value and leave a debug line, matching the "lookup failures are
    not found" rule of discovery.
    """

    def __init__(self, fs: FileSystem, log):
        self.fs = fs
        self.log = log

    async def parse_json(self, path: str) -> dict[str, Any]:
        """Parse JSON safely."""
        try:
            data = json.loads(await self.fs.read_text(path))
        except (FileSystemError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self.log.debug("Failed to parse JSON {path}: {err}", path=path, err=e)
            return {}
        return data if isinstance(data, dict) else {}

    async def parse_yaml(self, path: str) -> dict[str, Any]:
        """Parse YAML safely."""
        try:
            data = yaml.safe_load(await self.fs.read_text(path))
        except (FileSystemError, UnicodeDecodeError, yaml.YAMLError) as e:
            self.log.debug("Failed to parse YAML {path}: {err}", path=path, err=e)
            return {}
        return data if isinstance(data, dict) else {}

    async def read_version(self, package_path: str) -> str | None:
        """Version string declared by an installed package, or None."""
        data = await self.parse_json(os.path.join(package_path, MANIFEST_FILE))
        version = data.get("version")
        if isinstance(version, str) and version.strip():
            return version.strip()
        return None

    @staticmethod
    def check_package_in_deps(data: dict[str, Any], package_name: str) -> str | None:
        """Return the declared range for ``package_name`` or None.

        Only runtime and dev dependencies count; a package that appears in
        peer or optional dependencies alone is not installed by the project.
        """
        for section in DEPENDENCY_SECTIONS:
            deps = data.get(section)
            if isinstance(deps, dict) and package_name in deps:
                spec = deps[package_name]
                return spec if isinstance(spec, str) else str(spec)
        return None

    @staticmethod
    def workspace_patterns(data: dict[str, Any]) -> list[str]:
        """Workspace member patterns from a package.json body.

        Handles both ``"workspaces": [...]`` and the yarn object form
        ``"workspaces": {"packages": [...]}``.
        """
        workspaces = data.get("workspaces", [])

        if isinstance(workspaces, dict):
            workspaces = workspaces.get("packages", [])

        if not isinstance(workspaces, list):
            return []
        return [w for w in workspaces if isinstance(w, str) and w.strip()]

    async def pnpm_workspace_patterns(self, root: str) -> list[str]:
        """``packages:`` entries of the root pnpm-workspace.yaml, negations dropped."""
        data = await self.parse_yaml(os.path.join(root, PNPM_WORKSPACE_FILE))
        packages = data.get("packages", [])
        if not isinstance(packages, list):
            return []
        return [p for p in packages if isinstance(p, str) and p.strip() and not p.startswith("!")]
