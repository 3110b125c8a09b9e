"""Discovery of installed Vuetify packages under project roots."""

import fnmatch
import os
from collections.abc import AsyncIterator, Iterable

from vuetiful.cancellation import CancellationToken, check
from vuetiful.errors import ExtractionCancelled
from vuetiful.fs import FileSystem, FileSystemError
from vuetiful.manifest_parser import ManifestParser
from vuetiful.models import Installation
from vuetiful.utils.constants import (
    ARTIFACT_CANDIDATES,
    MANIFEST_FILE,
    MONOREPO_SUBDIRECTORIES,
    NESTED_PROJECT_DIRECTORIES,
    NODE_MODULES,
    PACKAGE_NAME,
    PNPM_STORE,
)


def normalize_root(root: str) -> str:
    """Absolute, normalized form used as the identity of a root everywhere."""
    return os.path.normpath(os.path.abspath(root))


def _has_magic(part: str) -> bool:
    return any(ch in part for ch in "*?[")


class Locator:
    """Finds the target package for each root.

    Search order per root (the first candidate directory that exists
    decides the outcome for that root):

    1. ``<root>/node_modules/vuetify``
    2. ``<root>/../node_modules/vuetify`` (nested package layouts)
    3. conventional monorepo subdirectories, and for ``packages``/``apps``
       one level of nested projects
    4. the pnpm store, ``node_modules/.pnpm/vuetify@*/node_modules/vuetify``
    5. workspace members declared in package.json, then pnpm-workspace.yaml

    Every lookup is non-fatal: an unreadable or missing path counts as
    "not found".
    """

    def __init__(self, fs: FileSystem, log_facility, package_name: str = PACKAGE_NAME):
        self.fs = fs
        self.package_name = package_name
        self.log = log_facility.component("Locator")
        self.manifests = ManifestParser(fs, self.log)

    async def find_all(
        self, roots: Iterable[str], token: CancellationToken | None = None
    ) -> dict[str, Installation]:
        """Locate one installation per root.

        Returns:
            Mapping of normalized root path to installation, in root order.
            Roots without an installation are absent.
        """
        installations: dict[str, Installation] = {}

        for root in roots:
            check(token)
            root = normalize_root(root)
            if root in installations:
                continue
            try:
                installation = await self.find_in_root(root, token)
            except ExtractionCancelled:
                raise
            except Exception as e:
                self.log.opt(exception=True).error("Error finding installation in {root}: {err}", root=root, err=e)
                continue

            if installation is not None:
                installations[root] = installation

        return installations

    async def find_in_root(
        self, root: str, token: CancellationToken | None = None
    ) -> Installation | None:
        """Locate the installation for a single root, or None."""
        root = normalize_root(root)

        async for package_path in self._candidates(root, token):
            exists = await self.fs.exists(package_path)
            check(token)
            if exists:
                self.log.debug("Found {name} at {path}", name=self.package_name, path=package_path)
                return await self._create_installation(package_path, root, token)

        self.log.debug("No {name} installation under {root}", name=self.package_name, root=root)
        return None

    async def _candidates(self, root: str, token: CancellationToken | None) -> AsyncIterator[str]:
        """Yield candidate package directories in priority order."""
        # Standard node_modules
        yield self._package_dir(root)

        # Parent node_modules (for nested packages)
        yield self._package_dir(os.path.dirname(root))

        # Common monorepo subdirectories
        async for path in self._monorepo_candidates(root, token):
            yield path

        # pnpm store
        async for path in self._pnpm_candidates(root, token):
            yield path

        # Yarn/npm/pnpm workspaces
        async for path in self._workspace_candidates(root, token):
            yield path

    def _package_dir(self, project_dir: str) -> str:
        return os.path.join(project_dir, NODE_MODULES, self.package_name)

    async def _monorepo_candidates(self, root: str, token: CancellationToken | None) -> AsyncIterator[str]:
        for subdir in MONOREPO_SUBDIRECTORIES:
            subdir_path = os.path.join(root, subdir)
            is_dir = await self.fs.is_dir(subdir_path)
            check(token)
            if not is_dir:
                continue

            yield self._package_dir(subdir_path)

            if subdir in NESTED_PROJECT_DIRECTORIES:
                try:
                    entries = await self.fs.list_dir(subdir_path)
                except FileSystemError as e:
                    self.log.debug("Could not read directory {path}: {err}", path=subdir_path, err=e)
                    continue
                check(token)
                for entry in entries:
                    yield self._package_dir(os.path.join(subdir_path, entry))

    async def _pnpm_candidates(self, root: str, token: CancellationToken | None) -> AsyncIterator[str]:
        store = os.path.join(root, NODE_MODULES, PNPM_STORE)
        try:
            entries = await self.fs.list_dir(store)
        except FileSystemError as e:
            self.log.debug("No pnpm store at {path}: {err}", path=store, err=e.kind.value)
            return
        check(token)

        prefix = f"{self.package_name}@"
        for entry in entries:
            if entry.startswith(prefix):
                yield os.path.join(store, entry, NODE_MODULES, self.package_name)

    async def _workspace_candidates(self, root: str, token: CancellationToken | None) -> AsyncIterator[str]:
        manifest = await self.manifests.parse_json(os.path.join(root, MANIFEST_FILE))
        check(token)
        patterns = self.manifests.workspace_patterns(manifest)

        pnpm_patterns = await self.manifests.pnpm_workspace_patterns(root)
        check(token)
        patterns.extend(p for p in pnpm_patterns if p not in patterns)

        for pattern in patterns:
            for member in await self._expand_pattern(root, pattern, token):
                yield self._package_dir(member)

    async def _expand_pattern(self, root: str, pattern: str, token: CancellationToken | None) -> list[str]:
        """Expand a workspace pattern into member directories.

        Literal segments are joined as-is; ``*``-style segments are matched
        against directory listings. ``**`` matches a single level.
        """
        parts = [p for p in pattern.replace("\\", "/").split("/") if p not in ("", ".")]
        bases = [root]

        for part in parts:
            expanded = []
            for base in bases:
                if part != "**" and not _has_magic(part):
                    expanded.append(os.path.join(base, part))
                    continue
                try:
                    names = await self.fs.list_dir(base)
                except FileSystemError:
                    continue
                check(token)
                for name in names:
                    if name == NODE_MODULES or name.startswith("."):
                        continue
                    if part == "**" or fnmatch.fnmatch(name, part):
                        candidate = os.path.join(base, name)
                        if await self.fs.is_dir(candidate):
                            expanded.append(candidate)
            bases = expanded

        return [os.path.normpath(b) for b in bases]

    async def _create_installation(
        self, package_path: str, root: str, token: CancellationToken | None
    ) -> Installation | None:
        """Confirm an installation: needs a version and a readable stylesheet."""
        version = await self.manifests.read_version(package_path)
        check(token)
        if version is None:
            self.log.debug("No readable version in {path}", path=package_path)
            return None

        artifact_path = await self._find_artifact(package_path, token)
        if artifact_path is None:
            self.log.warning(
                "{name} {version} at {path} has no stylesheet",
                name=self.package_name,
                version=version,
                path=package_path,
            )
            return None

        return Installation(
            root_path=root,
            package_path=os.path.normpath(package_path),
            artifact_path=os.path.normpath(artifact_path),
            version=version,
        )

    async def _find_artifact(self, package_path: str, token: CancellationToken | None) -> str | None:
        for relative in ARTIFACT_CANDIDATES:
            candidate = os.path.join(package_path, *relative.split("/"))
            exists = await self.fs.exists(candidate)
            check(token)
            if exists:
                return candidate
        return None
