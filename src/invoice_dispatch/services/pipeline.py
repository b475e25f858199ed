"""
End-to-end run: list source files, skip the ones already processed, group
each remaining file's rows and dispatch its invoices, then record the file
in the run ledger.
"""

from dataclasses import dataclass, field
from typing import Literal

from loguru import logger

from ..core.config import Settings, settings as default_settings
from ..core.errors import FileReadError, FileSourceError
from ..core.logging import setup_logging
from .dispatch import DispatchCoordinator, InvoiceOutcome
from .grouping import RowGrouper
from .inventory_api import InventoryAPI, KoronaInventoryClient
from .line_items import LineItemBuilder
from .quantity_cost import QuantityCostEngine
from .receipt_builder import ReceiptBuilder
from .rows import RowReader
from .run_ledger import RunLedger
from .sources import FileSource, FTPFileSource, LocalDirectorySource, RemoteFile
from .storage import FileLedger, SQLiteLedger
from .suppliers import SupplierCache, SupplierRegistrar

FileStatus = Literal["skipped", "processed", "unmarked", "read_failed"]


@dataclass
class FileResult:
    name: str
    status: FileStatus
    outcomes: list[InvoiceOutcome] = field(default_factory=list)
    error: str | None = None


@dataclass
class RunSummary:
    files: list[FileResult] = field(default_factory=list)
    error: str | None = None

    def count(self, status: FileStatus) -> int:
        return sum(1 for f in self.files if f.status == status)

    @property
    def outcomes(self) -> list[InvoiceOutcome]:
        return [o for f in self.files for o in f.outcomes]

    def to_dict(self) -> dict:
        outcomes = self.outcomes
        return {
            "files_seen": len(self.files),
            "files_skipped": self.count("skipped"),
            "files_processed": self.count("processed"),
            "files_unmarked": self.count("unmarked"),
            "files_read_failed": self.count("read_failed"),
            "invoices_done": sum(1 for o in outcomes if o.succeeded and not o.skipped),
            "invoices_skipped": sum(1 for o in outcomes if o.skipped),
            "invoices_failed": sum(1 for o in outcomes if not o.succeeded),
        }


class DispatchPipeline:
    def __init__(
        self,
        source: FileSource,
        reader: RowReader,
        grouper: RowGrouper,
        coordinator: DispatchCoordinator,
        run_ledger: RunLedger,
        mark_failed_files_processed: bool = True,
    ):
        self.source = source
        self.reader = reader
        self.grouper = grouper
        self.coordinator = coordinator
        self.run_ledger = run_ledger
        self.mark_failed_files_processed = mark_failed_files_processed

    def should_mark(self, outcomes: list[InvoiceOutcome]) -> bool:
        """
        Decide whether a walked file counts as processed.

        Supplier failures always leave the file for the next run. Receipt and
        item failures count as attempted unless mark_failed_files_processed
        is off, in which case every invoice must be done.
        """
        if any(o.supplier_failed for o in outcomes):
            return False
        if not self.mark_failed_files_processed:
            return all(o.succeeded for o in outcomes)
        return True

    async def process_file(self, remote: RemoteFile | str) -> FileResult:
        if isinstance(remote, str):
            remote = RemoteFile(remote)
        name = remote.local_name

        if self.run_ledger.is_processed(name):
            logger.info("File has already been processed, skipping", file=name)
            return FileResult(name, "skipped")

        logger.info("Processing file", file=name)
        try:
            with self.source.fetch(remote.name) as stream:
                groups = self.grouper.group(self.reader.read(stream, name))
        except FileReadError as e:
            logger.error("Could not read {file}: {error}", file=name, error=e.reason)
            return FileResult(name, "read_failed", error=e.reason)

        outcomes = await self.coordinator.dispatch_file(name, groups)

        if self.should_mark(outcomes):
            self.run_ledger.mark_processed(name)
            return FileResult(name, "processed", outcomes)

        failed = [o.invoice for o in outcomes if not o.succeeded]
        logger.warning("File left unprocessed for the next run", file=name, failed_invoices=failed)
        return FileResult(name, "unmarked", outcomes)

    async def run(self) -> RunSummary:
        summary = RunSummary()
        try:
            available = self.source.list_available()
        except FileSourceError as e:
            logger.error("Failed to list source files: {error}", error=str(e))
            summary.error = str(e)
            return summary

        logger.info(f"Total files listed: {len(available)}")
        for remote in available:
            summary.files.append(await self.process_file(remote))

        logger.info("Run finished", **summary.to_dict())
        return summary


def build_source(config: Settings) -> FileSource:
    if config.ftp_host:
        return FTPFileSource(
            host=config.ftp_host,
            user=config.ftp_user,
            password=config.ftp_password,
            remote_dir=config.ftp_remote_dir,
            download_dir=config.download_dir,
        )
    return LocalDirectorySource(config.download_dir)


def build_pipeline(
    config: Settings | None = None,
    api: InventoryAPI | None = None,
    source: FileSource | None = None,
) -> DispatchPipeline:
    """
    Wire a pipeline from settings.

    A fresh SupplierCache is created for every pipeline, so each run
    hydrates it again from the inventory API.
    """
    config = config or default_settings
    columns = config.columns

    if api is None:
        api = KoronaInventoryClient(
            config.api_base_url,
            config.inventory_username,
            config.inventory_password,
            timeout=config.http_timeout_seconds,
        )

    run_ledger = RunLedger(
        files=FileLedger(config.processed_files_path),
        invoices=SQLiteLedger(config.supplier_db_path, table="processed_invoices"),
    )
    registrar = SupplierRegistrar(
        api,
        SQLiteLedger(config.supplier_db_path, table="suppliers"),
        SupplierCache(),
    )
    coordinator = DispatchCoordinator(
        api=api,
        registrar=registrar,
        receipt_builder=ReceiptBuilder(columns, scheme=config.receipt_number_scheme),
        item_builder=LineItemBuilder(columns, QuantityCostEngine(config.unit_ruleset)),
        run_ledger=run_ledger,
        request_delay=config.request_delay_seconds,
    )
    return DispatchPipeline(
        source=source or build_source(config),
        reader=RowReader(),
        grouper=RowGrouper(columns, org_unit=config.org_unit_to_match),
        coordinator=coordinator,
        run_ledger=run_ledger,
        mark_failed_files_processed=config.mark_failed_files_processed,
    )


async def run_once(config: Settings | None = None) -> RunSummary:
    """Build a pipeline with a live inventory client, run it once and close the client"""
    config = config or default_settings
    setup_logging(config)
    async with KoronaInventoryClient(
        config.api_base_url,
        config.inventory_username,
        config.inventory_password,
        timeout=config.http_timeout_seconds,
    ) as api:
        pipeline = build_pipeline(config, api=api)
        return await pipeline.run()
