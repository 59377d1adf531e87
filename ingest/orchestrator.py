# ingest/orchestrator.py
"""
Drives uploads through classify -> rows -> dedupe -> reconcile -> commit.

All files of a batch are parsed first, then their rows are applied one file
at a time to a single shared working copy, so cross-file references resolve
against each other. Dedup and reconciliation run once over the combined
result and the commit happens only if every stage succeeded.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Tuple

from config import CLIENTS_KEY, LLCS_KEY, PROPERTIES_KEY
from io_utils.readers import CsvUpload, FileRejected, ParsedCsv, read_upload
from matching.cluster import dedupe_clients, merge_llc_duplicates
from matching.schema import classify_headers
from merge.models import LLC, Client, Collections, Property, dumps, loads
from merge.reconcile import fold_properties, reconcile, repoint_llc_ids, restore_missing_llcs
from merge.rows import RowCounts, RowProcessor

logger = logging.getLogger(__name__)

PROCESSING_ERROR = "An error occurred while processing the CSV file."
NO_FILES = "No CSV files were provided."


@dataclass
class FileResult:
    name: str
    kind: str
    processed: int
    skipped: int


@dataclass
class IngestReport:
    processed: int = 0
    skipped: int = 0
    files: List[FileResult] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)
    committed: bool = False
    failed: bool = False
    status: str = ""


def _status_message(report: IngestReport) -> str:
    if report.failed:
        return PROCESSING_ERROR
    if not report.committed:
        if report.errors:
            return "; ".join(f"{name}: {msg}" for name, msg in report.errors)
        return NO_FILES
    msg = f"Successfully processed {report.processed} records"
    if report.skipped:
        msg += f" ({report.skipped} rows skipped)"
    if report.errors:
        msg += ". Errors: " + "; ".join(f"{name}: {m}" for name, m in report.errors)
    return msg


class IngestOrchestrator:
    def __init__(self, store, today: Optional[date] = None):
        self.store = store
        self.today = today
        self.status = ""
        self._lock = threading.Lock()
        self.state = self._load()

    # --------- persistence ---------
    def _load(self) -> Collections:
        llcs = loads(LLC, self.store.load(LLCS_KEY))
        clients = loads(Client, self.store.load(CLIENTS_KEY))
        properties = loads(Property, self.store.load(PROPERTIES_KEY))
        state = restore_missing_llcs(Collections(llcs, clients, properties))
        state.llcs, remap = merge_llc_duplicates(state.llcs)
        repoint_llc_ids(state, remap)
        state.properties = fold_properties(state.properties)
        state.clients = dedupe_clients(state.clients)
        logger.info(
            "Loaded %d LLCs, %d clients, %d properties",
            len(state.llcs), len(state.clients), len(state.properties),
        )
        return state

    def _persist(self) -> None:
        for key, records in (
            (LLCS_KEY, self.state.llcs),
            (CLIENTS_KEY, self.state.clients),
            (PROPERTIES_KEY, self.state.properties),
        ):
            if not self.store.save(key, dumps(records)):
                logger.warning("Failed to persist %s", key)

    @property
    def llcs(self) -> List[LLC]:
        return self.state.llcs

    @property
    def clients(self) -> List[Client]:
        return self.state.clients

    @property
    def properties(self) -> List[Property]:
        return self.state.properties

    def snapshot(self) -> Collections:
        return self.state.clone()

    def reset(self) -> None:
        with self._lock:
            self.state = Collections()
            self._persist()
            self.status = ""

    # --------- ingestion ---------
    def ingest_file(self, upload: CsvUpload) -> IngestReport:
        return self.ingest_batch([upload])

    def ingest_batch(self, uploads: Iterable[CsvUpload]) -> IngestReport:
        with self._lock:
            report = self._run(list(uploads))
            report.status = _status_message(report)
            self.status = report.status
            return report

    def _parse_all(self, uploads: List[CsvUpload], report: IngestReport) -> List[ParsedCsv]:
        parsed = []
        for upload in uploads:
            try:
                parsed.append(read_upload(upload))
            except FileRejected as e:
                logger.warning("Rejected %s: %s", e.name, e.message)
                report.errors.append((e.name, e.message))
        return parsed

    def _run(self, uploads: List[CsvUpload]) -> IngestReport:
        report = IngestReport()
        logger.info("Ingesting %d file(s)", len(uploads))
        parsed = self._parse_all(uploads, report)
        if not parsed:
            return report

        try:
            working = self.state.clone()
            totals = RowCounts()
            for csv_file in parsed:
                kind = classify_headers(csv_file.headers)
                processor = RowProcessor(working, source=csv_file.name, today=self.today)
                counts = processor.process_rows(kind, csv_file.rows)
                totals.add(counts)
                report.files.append(FileResult(csv_file.name, kind.value, counts.processed, counts.skipped))
                logger.info(
                    "%s: %s file, %d processed, %d skipped",
                    csv_file.name, kind.value, counts.processed, counts.skipped,
                )

            working.llcs, remap = merge_llc_duplicates(working.llcs)
            repoint_llc_ids(working, remap)
            working.properties = fold_properties(working.properties)
            working.clients = dedupe_clients(working.clients)
            result = reconcile(working)
        except Exception:
            logger.exception("Ingestion failed; keeping previous state")
            report.files.clear()
            report.failed = True
            return report

        self.state = result
        self._persist()
        report.processed = totals.processed
        report.skipped = totals.skipped
        report.committed = True
        logger.info("Committed: %d processed, %d skipped", totals.processed, totals.skipped)
        return report
