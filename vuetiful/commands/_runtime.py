"""Wiring shared by the commands: one LogFacility, one cache, one extractor."""

from dataclasses import dataclass
from pathlib import Path

from vuetiful.cache import ArtifactCache, FileStore
from vuetiful.config_runtime import Settings, load_settings
from vuetiful.extractor import Extractor
from vuetiful.fs import FileSystem
from vuetiful.locator import Locator
from vuetiful.manifest_parser import ManifestParser
from vuetiful.notifications import ConsoleNotifier, Notifier
from vuetiful.parser import ArtifactParser
from vuetiful.utils.constants import CACHE_SUBDIR, LOG_SUBDIR
from vuetiful.utils.logging import LogFacility


@dataclass
class Runtime:
    roots: list[str]
    config_root: str
    settings: Settings
    log_facility: LogFacility
    fs: FileSystem
    cache: ArtifactCache
    manifests: ManifestParser
    extractor: Extractor

    @property
    def state_path(self) -> Path:
        return self.settings.state_path(self.config_root)

    def close(self) -> None:
        self.extractor.dispose()
        self.log_facility.close()


def build_runtime(obj: dict, notifier: Notifier | None = None, interactive: bool = False) -> Runtime:
    """Build the component graph for one command invocation.

    ``obj`` is the click context object set up by the ``cli`` group.
    The first root holds the configuration, cache and logs.
    """
    roots = obj["roots"]
    config_root = roots[0]

    log_facility = LogFacility(verbose=obj.get("verbose", False), sink=obj.get("log_sink"))
    config_log = log_facility.component("Config")
    settings = load_settings(config_root, config_log)
    if settings.enable_logging:
        log_facility.set_verbose(True)

    state_path = settings.state_path(config_root)
    obj["state_dir"] = str(state_path)
    log_file = log_facility.configure_file_logging(state_path / LOG_SUBDIR)

    fs = FileSystem()
    cache = ArtifactCache(FileStore(str(state_path / CACHE_SUBDIR), fs), fs, log_facility)
    parser = ArtifactParser(fs, log_facility, max_bytes=settings.max_artifact_bytes)
    locator = Locator(fs, log_facility)

    if notifier is None:
        notifier = ConsoleNotifier(config_root, log_file=log_file, interactive=interactive)

    extractor = Extractor(
        roots,
        locator,
        parser,
        cache,
        notifier,
        log_facility,
        settings_loader=lambda: load_settings(config_root, config_log),
    )
    return Runtime(
        roots=extractor.roots,
        config_root=config_root,
        settings=settings,
        log_facility=log_facility,
        fs=fs,
        cache=cache,
        manifests=locator.manifests,
        extractor=extractor,
    )
