"""Extraction orchestrator: locate -> cache lookup -> parse -> cache write -> index."""

import asyncio
import os
from collections.abc import Callable, Iterable
from enum import Enum

from vuetiful.cache.artifact_cache import ArtifactCache
from vuetiful.cancellation import CancellationToken
from vuetiful.config_runtime import Settings
from vuetiful.errors import ExtractionCancelled, LocatorError
from vuetiful.locator import Locator, normalize_root
from vuetiful.models import ExtractionReport, Installation, Record
from vuetiful.notifications import Notifier
from vuetiful.parser import ArtifactParser


class ExtractionStatus(str, Enum):
    NEVER_RUN = "never_run"
    RUNNING = "running"
    COMPLETED = "completed"


class Extractor:
    """Owns the per-root record index and the extraction runs that fill it.

    At most one run is live at a time: starting a run cancels the previous
    one, and a cancelled run unwinds at its next suspension point without
    touching the index. Index entries are replaced whole, so a reader
    always sees either the previous records of a root or the new ones.

    A root whose extraction fails keeps its previous index entry.
    """

    def __init__(
        self,
        roots: Iterable[str],
        locator: Locator,
        parser: ArtifactParser,
        cache: ArtifactCache,
        notifier: Notifier,
        log_facility,
        settings_loader: Callable[[], Settings] = Settings,
    ):
        self.roots: list[str] = self._normalize_roots(roots)
        self.locator = locator
        self.parser = parser
        self.cache = cache
        self.notifier = notifier
        self.log = log_facility.component("Extractor")
        self._load_settings = settings_loader

        self.status = ExtractionStatus.NEVER_RUN
        self._index: dict[str, tuple[Record, ...]] = {}
        self._installations: dict[str, Installation] = {}
        self._all_records: tuple[Record, ...] | None = None
        self._completed_once = False
        self._token: CancellationToken | None = None
        self._active_run: asyncio.Future | None = None
        self._ensure_task: asyncio.Task | None = None
        self._not_detected_notified: set[str] = set()

    @staticmethod
    def _normalize_roots(roots: Iterable[str]) -> list[str]:
        normalized = []
        for root in roots:
            root = normalize_root(root)
            if root not in normalized:
                normalized.append(root)
        return normalized

    async def extract_all(self, force_refresh: bool = False, user_initiated: bool = False) -> ExtractionReport:
        """Extract utilities for every root.

        Cancels any ongoing extraction before starting.

        Args:
            force_refresh: Skip cache lookups and re-parse every stylesheet.
            user_initiated: Surface storage failures to the user, not just the log.
        """
        if self._token is not None:
            self._token.cancel()
            self.log.debug("Cancelled ongoing extraction")

        token = CancellationToken()
        self._token = token
        run_done = asyncio.get_running_loop().create_future()
        self._active_run = run_done
        self.status = ExtractionStatus.RUNNING

        report = ExtractionReport()
        storage_errors_before = self.cache.error_count
        settings = self._load_settings()

        try:
            self.log.info("Starting utility extraction...")
            await self._run(token, force_refresh, settings, report)
        except ExtractionCancelled:
            self.log.debug("Extraction cancelled")
            report.cancelled = True
        except Exception as e:
            if token.cancelled:
                self.log.debug("Extraction cancelled")
                report.cancelled = True
            else:
                self._handle_critical_error(e)
                report.failed["*"] = str(e)
                if self._token is token:
                    self.status = ExtractionStatus.COMPLETED if self._completed_once else ExtractionStatus.NEVER_RUN
        finally:
            if self._token is token:
                self._token = None
            if self._active_run is run_done:
                self._active_run = None
            run_done.set_result(None)
            report.storage_errors = self.cache.error_count - storage_errors_before

        if user_initiated and report.storage_errors:
            self.notifier.storage_degraded(report.storage_errors)
        return report

    async def _run(
        self, token: CancellationToken, force_refresh: bool, settings: Settings, report: ExtractionReport
    ) -> None:
        roots = list(self.roots)
        try:
            installations = await self.locator.find_all(roots, token)
        except ExtractionCancelled:
            raise
        except Exception as e:
            raise LocatorError(f"Discovery failed: {e}") from e

        # Check if cancelled after async operation
        token.raise_if_cancelled()

        for root in roots:
            if root not in installations:
                report.not_detected.append(root)
                self._drop(root)
                self._notify_not_detected(root, settings)

        if not installations:
            self.log.info("Vuetify not found in any workspace")
            self._mark_completed(token)
            return

        self.log.info("Found {count} Vuetify installation(s)", count=len(installations))

        for root, installation in installations.items():
            # Check if cancelled before each workspace
            token.raise_if_cancelled()

            try:
                from_cache = await self._extract_root(installation, force_refresh, token)
            except ExtractionCancelled:
                raise
            except Exception as e:
                report.failed[root] = str(e)
                self._handle_extraction_error(root, e)
                continue

            (report.cached if from_cache else report.extracted).append(root)

        self._mark_completed(token)
        self.log.info("Extraction completed")

    async def _extract_root(self, installation: Installation, force_refresh: bool, token: CancellationToken) -> bool:
        """Fill the index for one root. Returns True when served from cache."""
        root = installation.root_path
        path = installation.artifact_path
        version = installation.version

        self.log.debug("Processing workspace: {root}", root=root)
        self.log.debug("Vuetify version: {version}", version=version)
        self.log.debug("Stylesheet: {path}", path=path)

        if not force_refresh:
            cached = await self.cache.get(root, version, path, token)
            token.raise_if_cancelled()
            if cached is not None:
                self.log.debug("Using cached utilities ({count} classes)", count=len(cached))
                self._adopt(installation, cached)
                return True

        self.log.info("Parsing stylesheet...")
        records, content = await self.parser.parse_file(path, token)
        token.raise_if_cancelled()

        await self.cache.set(root, version, records, path, content=content)
        token.raise_if_cancelled()

        self._adopt(installation, records)
        self.log.info("Successfully extracted {count} utility classes", count=len(records))
        return False

    def _adopt(self, installation: Installation, records) -> None:
        root = installation.root_path
        self._index[root] = tuple(records)
        self._installations[root] = installation
        self._all_records = None

    def _drop(self, root: str) -> None:
        if self._index.pop(root, None) is not None:
            self._all_records = None
        self._installations.pop(root, None)

    def _mark_completed(self, token: CancellationToken) -> None:
        if self._token is token:
            self.status = ExtractionStatus.COMPLETED
            self._completed_once = True

    async def ensure_extracted(self) -> None:
        """Lazy extraction with request coalescing.

        Returns immediately once any run has completed. Callers arriving
        while a run is in flight wait for it instead of starting another.
        """
        while self._active_run is not None and self._ensure_task is None and not self._completed_once:
            self.log.debug("Coalescing extraction request with ongoing extraction")
            await asyncio.shield(self._active_run)

        if self._completed_once:
            return

        task = self._ensure_task
        if task is None:
            task = asyncio.ensure_future(self.extract_all())
            self._ensure_task = task
            task.add_done_callback(self._clear_ensure_task)
        else:
            self.log.debug("Coalescing extraction request with ongoing extraction")

        await asyncio.shield(task)

        # A forced run may have superseded ours; wait for whatever replaced it
        while self._active_run is not None and not self._completed_once:
            await asyncio.shield(self._active_run)

    def _clear_ensure_task(self, task: asyncio.Task) -> None:
        if self._ensure_task is task:
            self._ensure_task = None

    async def refresh(self) -> ExtractionReport:
        """Forced re-extraction on user request."""
        report = await self.extract_all(force_refresh=True, user_initiated=True)
        if not report.cancelled:
            self.notifier.refreshed(report)
        return report

    async def set_roots(self, roots: Iterable[str]) -> ExtractionReport | None:
        """Replace the workspace root set; re-extracts when it changed."""
        new_roots = self._normalize_roots(roots)
        if new_roots == self.roots:
            return None

        added = [r for r in new_roots if r not in self.roots]
        removed = [r for r in self.roots if r not in new_roots]
        self.log.info("Workspace folders changed: +{added}, -{removed}", added=len(added), removed=len(removed))

        self.roots = new_roots
        for root in removed:
            self._drop(root)
        return await self.extract_all(force_refresh=True)

    def get_records(self, path: str) -> tuple[Record, ...]:
        """Records for the root owning ``path``; empty if unknown or not extracted."""
        root = self.root_for(path)
        if root is None:
            return ()
        return self._index.get(root, ())

    def get_all_records(self) -> tuple[Record, ...]:
        """All records across roots. Memoized until the index changes."""
        if self._all_records is None:
            merged: list[Record] = []
            for records in self._index.values():
                merged.extend(records)
            self._all_records = tuple(merged)
        return self._all_records

    def root_for(self, path: str) -> str | None:
        """The known root containing ``path`` (longest match), or None."""
        path = normalize_root(path)
        best = None
        for root in set(self.roots) | set(self._index):
            if path == root or path.startswith(root.rstrip(os.sep) + os.sep):
                if best is None or len(root) > len(best):
                    best = root
        return best

    def installation(self, root: str) -> Installation | None:
        return self._installations.get(normalize_root(root))

    @property
    def indexed_roots(self) -> list[str]:
        return list(self._index)

    async def clear(self) -> None:
        """Forget everything: index, run state and the persistent cache."""
        if self._token is not None:
            self._token.cancel("cleared")
            self._token = None
        self._index.clear()
        self._installations.clear()
        self._all_records = None
        self._completed_once = False
        self._ensure_task = None
        self.status = ExtractionStatus.NEVER_RUN
        await self.cache.clear()
        self.log.info("Cleared all data")

    def dispose(self) -> None:
        """Cancel any ongoing extraction and drop the index."""
        if self._token is not None:
            self._token.cancel("disposed")
            self._token = None
        self._index.clear()
        self._installations.clear()
        self._all_records = None
        self.status = ExtractionStatus.NEVER_RUN

    def _notify_not_detected(self, root: str, settings: Settings) -> None:
        if not settings.show_warnings or root in self._not_detected_notified:
            return
        self._not_detected_notified.add(root)
        try:
            self.notifier.not_detected(root)
        except Exception as e:
            self.log.opt(exception=e).warning(
                "Failed to show not-detected prompt for {root}: {err}", root=root, err=e
            )

    def _handle_extraction_error(self, root: str, error: Exception) -> None:
        self.log.opt(exception=error).error(
            "Error extracting utilities for {root}: {err}", root=root, err=error
        )
        self.notifier.extraction_failed(root, error)

    def _handle_critical_error(self, error: Exception) -> None:
        self.log.opt(exception=error).error("Critical error during extraction: {err}", err=error)
        self.notifier.critical_failure(error)
