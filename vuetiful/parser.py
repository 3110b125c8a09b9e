"""Extraction of utility-class records from a generated stylesheet.

The stylesheet is parsed with tinycss2. Only rules whose selector is a
plain utility class (no combinators, no attribute or pseudo-element parts,
a known utility prefix) produce records. A class keeps the declarations of
the first rule that introduced it.
"""

import asyncio
import re
import time
from collections.abc import Iterable, Iterator

import tinycss2

from vuetiful.cancellation import CancellationToken, check
from vuetiful.classify import categorize, describe
from vuetiful.errors import ArtifactMissing, MalformedArtifact, SizeExceeded
from vuetiful.fs import FileSystem, FsErrorKind, FileSystemError
from vuetiful.models import Record
from vuetiful.utils.constants import MAX_ARTIFACT_SIZE_BYTES, UTILITY_PREFIXES

CLASS_NAME_RE = re.compile(r"\.([a-zA-Z0-9_-]+)")
_COMBINATOR_SPACING_RE = re.compile(r"\s*([,>+~])\s*")

# At-rules whose block holds ordinary style rules.
RULE_LIST_AT_RULES = frozenset({"media", "supports", "layer", "container", "document", "scope"})


def render_selector(prelude) -> str:
    """Serialize a rule prelude the way a CSS generator would emit it.

    Whitespace is collapsed and dropped around ``,`` ``>`` ``+`` ``~`` so
    that the only remaining spaces are descendant combinators.
    """
    text = " ".join(tinycss2.serialize(prelude).split())
    return _COMBINATOR_SPACING_RE.sub(r"\1", text)


def extract_class_names(selector: str) -> list[str]:
    return CLASS_NAME_RE.findall(selector)


class ArtifactParser:
    """Turns stylesheet bytes into an ordered list of ``Record``."""

    def __init__(
        self,
        fs: FileSystem,
        log_facility,
        max_bytes: int = MAX_ARTIFACT_SIZE_BYTES,
        prefixes: Iterable[str] = UTILITY_PREFIXES,
    ):
        self.fs = fs
        self.log = log_facility.component("Parser")
        self.max_bytes = max_bytes
        self.utility_prefixes = tuple(prefixes)

    async def read_artifact(self, path: str, token: CancellationToken | None = None) -> bytes:
        """Read the stylesheet, checking its size before the full read.

        Raises:
            SizeExceeded: File is larger than the ceiling.
            ArtifactMissing: File vanished since discovery.
            FileSystemError: Any other I/O failure, unchanged.
        """
        start = time.perf_counter()
        self.log.debug("Reading stylesheet: {path}", path=path)

        try:
            size = await self.fs.stat_size(path)
            check(token)
            if size > self.max_bytes:
                raise SizeExceeded(path, size, self.max_bytes)
            data = await self.fs.read_bytes(path)
        except FileSystemError as e:
            if e.kind is FsErrorKind.NOT_FOUND:
                raise ArtifactMissing(f"Vuetify stylesheet not found: {path}", path) from e
            raise
        check(token)

        self.log.debug(
            "Read {size:.2f}MB in {ms}ms",
            size=len(data) / 1024 / 1024,
            ms=int((time.perf_counter() - start) * 1000),
        )
        return data

    async def parse_file(self, path: str, token: CancellationToken | None = None) -> tuple[list[Record], bytes]:
        """Read and parse an artifact.

        Parsing runs in a worker thread so the event loop keeps serving
        other callers while a large stylesheet is processed.

        Returns:
            The records and the exact bytes they were extracted from.
        """
        data = await self.read_artifact(path, token)
        records = await asyncio.to_thread(self.parse, data, path)
        check(token)
        return records, data

    def parse(self, data: bytes, path: str | None = None) -> list[Record]:
        """Extract records from stylesheet bytes.

        Raises:
            SizeExceeded: Input is larger than the ceiling. The grammar
                parser is not invoked.
            MalformedArtifact: The stylesheet hit a parse error before
                yielding any rule. Later errors are logged and skipped.
        """
        if len(data) > self.max_bytes:
            raise SizeExceeded(path, len(data), self.max_bytes)

        parse_start = time.perf_counter()
        rules, _encoding = tinycss2.parse_stylesheet_bytes(data, skip_comments=True, skip_whitespace=True)
        self.log.debug("Parsed stylesheet in {ms}ms", ms=int((time.perf_counter() - parse_start) * 1000))

        extract_start = time.perf_counter()
        records: list[Record] = []
        seen: set[str] = set()

        rule_count = 0
        for node in self._walk(rules):
            if node.type == "error":
                # A file that never produced a rule is not a stylesheet
                if not rule_count:
                    raise MalformedArtifact(
                        f"Failed to parse stylesheet: {node.message}",
                        path,
                        line=node.source_line,
                        column=node.source_column,
                    )
                self.log.warning(
                    "Skipping unparsable input at line {line}, column {column}: {msg}",
                    line=node.source_line,
                    column=node.source_column,
                    msg=node.message,
                )
                continue
            rule_count += 1
            self._extract_from_rule(node, records, seen)

        self.log.info(
            "Extracted {count} utilities in {ms}ms",
            count=len(records),
            ms=int((time.perf_counter() - extract_start) * 1000),
        )
        return records

    def _walk(self, nodes) -> Iterator:
        """Yield qualified rules and parse errors in document order, descending into grouping at-rules."""
        for node in nodes:
            if node.type in ("qualified-rule", "error"):
                yield node
            elif node.type == "at-rule" and node.content is not None:
                if node.lower_at_keyword in RULE_LIST_AT_RULES:
                    nested = tinycss2.parse_rule_list(node.content, skip_comments=True, skip_whitespace=True)
                    yield from self._walk(nested)

    def is_utility_selector(self, selector: str) -> bool:
        # Skip complex selectors (component styles)
        if any(ch in selector for ch in " >+~"):
            return False

        # Skip attribute and pseudo-element selectors
        if "[" in selector or "::" in selector:
            return False

        if not selector.startswith("."):
            return False

        base_class_name = selector.split(":")[0][1:]
        return base_class_name.startswith(self.utility_prefixes)

    def _extract_from_rule(self, rule, records: list[Record], seen: set[str]) -> None:
        selector = render_selector(rule.prelude)
        if not self.is_utility_selector(selector):
            return

        properties: dict[str, str] = {}
        for decl in tinycss2.parse_declaration_list(rule.content, skip_comments=True, skip_whitespace=True):
            if decl.type == "declaration":
                properties[decl.name] = tinycss2.serialize(decl.value).strip()

        for class_name in extract_class_names(selector):
            if class_name in seen:
                continue
            seen.add(class_name)

            category = categorize(class_name)
            records.append(
                Record(
                    name=class_name,
                    selector=selector,
                    properties=properties,
                    category=category,
                    description=describe(class_name, properties, category),
                )
            )
