"""
Compilation stats reporting for the orchestration module.

This module turns each compilation event into log output: fatal errors,
deduplicated compilation errors and warnings, and a per-asset size report
for production builds. It also persists the full stats tree as a JSON
artifact next to the build output.
"""

import asyncio
import json
import logging
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..validation import ErrorSeverity, handle_error

PRODUCTION_ENV = "production"
SOURCE_MAP_SUFFIX = ".map"


@dataclass(frozen=True)
class ErrorRecord:
    """
    One marker-led section of an error message.

    The same transpiler failure is reported by several layers (bundler,
    transform, once per target), each repeating the marker line and the
    stack trace. Records with equal fingerprints are the same failure.
    """

    text: str
    message: str
    last_frame: Optional[str]

    @property
    def fingerprint(self) -> Tuple[str, Optional[str]]:
        return (self.message, self.last_frame)

    def has_trace(self, trace_fragment: str) -> bool:
        return self.last_frame is not None and trace_fragment in self.text


def parse_error_records(message: str, marker: str) -> Tuple[str, List[ErrorRecord]]:
    """
    Split a message into the text before the first marker and the records
    that follow it.

    ``head + "".join(record.text for record in records)`` reproduces the
    original message.
    """
    head, *sections = message.split(marker)
    records = []
    for section in sections:
        text = marker + section
        lines = text.splitlines()
        frames = [line.strip() for line in lines[1:] if line.strip().startswith("at ")]
        records.append(
            ErrorRecord(
                text=text,
                message=lines[0].strip(),
                last_frame=frames[-1] if frames else None,
            )
        )
    return head, records


def collapse_error_records(records: Sequence[ErrorRecord], trace_fragment: str) -> List[ErrorRecord]:
    """Drop traced records that are repeated later, keeping the final occurrence."""
    last_seen = {}
    for index, record in enumerate(records):
        if record.has_trace(trace_fragment):
            last_seen[record.fingerprint] = index
    return [
        record
        for index, record in enumerate(records)
        if not record.has_trace(trace_fragment) or last_seen[record.fingerprint] == index
    ]


def dedupe_errors(items: Sequence[str], marker: str, trace_fragment: str) -> List[str]:
    """
    Deduplicate repeated transpiler errors.

    Within each message, repeated marker/trace records collapse to their
    final occurrence. Across the list, identical messages collapse to their
    final occurrence.
    """
    collapsed = []
    for item in items:
        head, records = parse_error_records(item, marker)
        kept = collapse_error_records(records, trace_fragment)
        collapsed.append(head + "".join(record.text for record in kept))

    last_index = {message: index for index, message in enumerate(collapsed)}
    return [message for index, message in enumerate(collapsed) if last_index[message] == index]


def format_fatal_error(error: BaseException) -> str:
    if error.__traceback__ is not None:
        return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
    return str(error)


class StatsReporter:
    """
    Terminal consumer of compilation events.

    Calling the reporter never raises: any failure while reporting is logged
    and dropped so that the build's own outcome is what the caller sees.
    """

    def __init__(
        self,
        root: Path,
        envs: Sequence[str],
        logger: Optional[logging.Logger] = None,
        output_dir: str = ".twinbuild",
        stats_file: str = "stats.json",
        error_marker: str = "BabelLoaderError",
        trace_fragment: str = "at transpile",
    ):
        self.root = Path(root).resolve()
        self.envs = list(envs)
        self.logger = logger or logging.getLogger(__name__)
        self.stats_path = self.root / output_dir / stats_file
        self.error_marker = error_marker
        self.trace_fragment = trace_fragment

    @property
    def is_production(self) -> bool:
        return PRODUCTION_ENV in self.envs

    def __call__(self, error: Optional[BaseException], stats: Any) -> None:
        try:
            self.report(error, stats)
        except Exception as e:
            handle_error(
                error=e,
                context="reporting compilation stats",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=self.logger,
            )

    def report(self, error: Optional[BaseException], stats: Any) -> None:
        """Log one compilation event."""
        if error is not None:
            self.logger.error(format_fatal_error(error))
            details = getattr(error, "details", None)
            if details:
                self.logger.error(details)
            return

        info = stats.to_dict(context=str(self.root))
        self.persist(info)

        if stats.has_errors():
            for message in self.dedupe(info.get("errors", [])):
                self.logger.error(message)

        if self.is_production:
            self.log_asset_sizes(info)

        if stats.has_warnings():
            for message in self.dedupe(info.get("warnings", [])):
                self.logger.warning(message)

    def dedupe(self, items: Sequence[str]) -> List[str]:
        return dedupe_errors(items, self.error_marker, self.trace_fragment)

    def log_asset_sizes(self, info: Dict[str, Any]) -> None:
        """Log every non-map asset of every child build, largest first."""
        for child in info.get("children", []):
            assets = [
                asset for asset in child.get("assets", [])
                if not asset["name"].endswith(SOURCE_MAP_SUFFIX)
            ]
            for asset in sorted(assets, key=lambda a: a["size"], reverse=True):
                self.logger.info(
                    f"Entrypoint: {child['name']}  Asset: {asset['name']}  Size: {asset['size']} bytes"
                )

    def persist(self, info: Dict[str, Any]) -> None:
        """
        Write the stats tree to disk without waiting for it.

        With a running event loop the write happens on the loop's default
        executor; otherwise it happens inline.
        """
        stats_path = self.stats_path

        def write() -> None:
            try:
                stats_path.parent.mkdir(parents=True, exist_ok=True)
                stats_path.write_text(json.dumps(info, indent=2), encoding="utf-8")
            except (OSError, TypeError, ValueError):
                # Diagnostic artifact only; never affects the build outcome.
                pass

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            write()
            return
        loop.run_in_executor(None, write)
