"""Filesystem monitoring that keeps extracted utilities current.

A watchdog ``Observer`` watches every workspace root recursively. Its
callbacks run on the observer thread and are handed to the event loop with
``call_soon_threadsafe``; from there on everything is single-threaded.

Events that matter:

- a project ``package.json`` created or changed: re-extract if it declares
  vuetify as a dependency
- ``node_modules/vuetify/package.json`` (including the pnpm store copy)
  created or changed: the package was installed or updated, re-extract
- the same file deleted: the package was removed, clear everything now

Re-extraction requests share one debounce timer that restarts on every
trigger, so a burst of events from a package manager run collapses into a
single forced ``extract_all``.
"""

import asyncio
import os
from enum import Enum

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from vuetiful.extractor import Extractor
from vuetiful.manifest_parser import ManifestParser
from vuetiful.utils.constants import (
    FILE_WATCHER_DEBOUNCE_MS,
    MANIFEST_FILE,
    NODE_MODULES,
    PACKAGE_NAME,
)


class ChangeKind(str, Enum):
    MANIFEST = "manifest"
    PACKAGE = "package"


class EventType(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


def classify_event(path: str, package_name: str = PACKAGE_NAME) -> ChangeKind | None:
    """Decide whether a changed path is relevant.

    ``<...>/node_modules/<package>/package.json`` is the installed package
    (this also covers ``node_modules/.pnpm/<package>@<v>/node_modules/<package>``).
    Any other ``package.json`` outside ``node_modules`` is a project manifest.
    """
    parts = os.path.normpath(path).split(os.sep)
    if not parts or parts[-1] != MANIFEST_FILE:
        return None

    if len(parts) >= 3 and parts[-3] == NODE_MODULES and parts[-2] == package_name:
        return ChangeKind.PACKAGE

    if NODE_MODULES in parts:
        return None

    return ChangeKind.MANIFEST


class _EventHandler(FileSystemEventHandler):
    """Watchdog handler that forwards file events to the monitor's loop."""

    def __init__(self, monitor: "ChangeMonitor"):
        super().__init__()
        self._monitor = monitor

    def on_created(self, event):
        if not event.is_directory:
            self._monitor.post_event(event.src_path, EventType.CREATED)

    def on_modified(self, event):
        if not event.is_directory:
            self._monitor.post_event(event.src_path, EventType.MODIFIED)

    def on_deleted(self, event):
        if not event.is_directory:
            self._monitor.post_event(event.src_path, EventType.DELETED)

    def on_moved(self, event):
        if not event.is_directory:
            self._monitor.post_event(event.src_path, EventType.DELETED)
            self._monitor.post_event(event.dest_path, EventType.CREATED)


class ChangeMonitor:
    """Triggers re-extraction when manifests or the installed package change.

    Lifecycle:
        1. ``ChangeMonitor(extractor, manifests, log_facility)``
        2. ``start()`` from inside the running event loop
        3. file events -> debounce -> ``extractor.extract_all(force_refresh=True)``
        4. ``stop()`` cancels the pending debounce and stops the observer
    """

    def __init__(
        self,
        extractor: Extractor,
        manifests: ManifestParser,
        log_facility,
        debounce_ms: int = FILE_WATCHER_DEBOUNCE_MS,
        package_name: str = PACKAGE_NAME,
        observer_factory=Observer,
    ):
        self.extractor = extractor
        self.manifests = manifests
        self.log = log_facility.component("ChangeMonitor")
        self.debounce = debounce_ms / 1000
        self.package_name = package_name
        self._observer_factory = observer_factory

        self._loop: asyncio.AbstractEventLoop | None = None
        self._observer = None
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending(self) -> bool:
        """True while a debounced re-extraction is waiting to fire."""
        return self._timer is not None

    def start(self) -> None:
        """Start watching every root of the extractor.

        Must be called from a coroutine. Calling it twice is a no-op.
        """
        if self._running:
            return

        self._loop = asyncio.get_running_loop()
        observer = self._observer_factory()
        handler = _EventHandler(self)
        watched = 0
        for root in self.extractor.roots:
            if not os.path.isdir(root):
                self.log.warning("Workspace path does not exist: {root}", root=root)
                continue
            observer.schedule(handler, root, recursive=True)
            watched += 1

        observer.daemon = True
        observer.start()
        self._observer = observer
        self._running = True
        self.log.info("File watchers initialized ({count} root(s))", count=watched)

    def stop(self) -> None:
        """Stop watching and release resources."""
        self._running = False
        self.cancel_pending()
        for task in list(self._tasks):
            task.cancel()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=2)
            self._observer = None
        self.log.debug("File watchers disposed")

    def post_event(self, path: str, event_type: EventType) -> None:
        """Thread-safe entry point used by the watchdog handler."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self.handle_event, path, event_type)

    def handle_event(self, path: str, event_type: EventType) -> None:
        """Dispatch one file event. Runs on the event loop."""
        kind = classify_event(path, self.package_name)
        if kind is None:
            return

        if kind is ChangeKind.MANIFEST:
            if event_type is not EventType.DELETED:
                self._spawn(self._check_manifest(path))
            return

        if event_type is EventType.DELETED:
            self.log.info("Vuetify package removed, clearing cache")
            self._spawn(self.extractor.clear())
        else:
            self.log.info("Vuetify package {event}, scheduling re-extraction", event=event_type.value)
            self.trigger()

    async def _check_manifest(self, path: str) -> None:
        data = await self.manifests.parse_json(path)
        if ManifestParser.check_package_in_deps(data, self.package_name) is not None:
            self.log.info("Vuetify dependency detected in {path}", path=path)
            self.trigger()

    def trigger(self) -> None:
        """Request a re-extraction; restarts the debounce window."""
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.debounce, self._fire)

    def cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        self.log.info("File change detected, re-extracting...")
        self._spawn(self.extractor.extract_all(force_refresh=True))

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.log.opt(exception=error).error("Error handling file change: {err}", err=error)

    async def drain(self) -> None:
        """Wait for every task spawned by file events to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
