"""Startup provisioning of the catalog, collections and their throughput.

Every configured collection is provisioned in its own task. A failure in
one collection is logged at critical severity and recorded in the report;
it never cancels or delays the others.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import ClientError

from . import schema
from .client import DocstoreClient
from .config import DocstoreOptions, DocumentOptions
from .exceptions import SetupError
from .models import ThroughputMode, ThroughputSettings
from .naming import table_name
from .serialization import serialize_map
from .structured_logging import StructuredLogger

logger = StructuredLogger(__name__)


@dataclass
class ProvisionReport:
    """Outcome of one provisioning pass."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, SetupError] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    throughput_replaced: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if no collection failed."""
        return not self.failed


class CapacityProvisioner:
    """
    Brings the catalog table and every configured collection into shape.

    Safe to run repeatedly: existing tables are left alone, TTL is enabled
    only once, and throughput is replaced only when it differs from the
    target and no rescale is in flight.
    """

    def __init__(
        self,
        client: DocstoreClient,
        options: DocstoreOptions,
        min_manual_throughput: int = schema.MIN_MANUAL_THROUGHPUT,
        min_autoscale_max_throughput: int = schema.MIN_AUTOSCALE_MAX_THROUGHPUT,
    ) -> None:
        self._client = client
        self._options = options
        self.database_name = options.database_name
        self.min_manual_throughput = min_manual_throughput
        self.min_autoscale_max_throughput = min_autoscale_max_throughput
        self._database_lock = asyncio.Lock()
        self._database_ready = False

    # -------------------------------------------------------------------------
    # Provisioning pass
    # -------------------------------------------------------------------------

    async def provision(self, stop_event: asyncio.Event | None = None) -> ProvisionReport:
        """
        Provision every configured collection concurrently.

        Args:
            stop_event: When set, collections stop between steps; calls
                already sent to the store are allowed to finish

        Returns:
            ProvisionReport listing succeeded, failed and skipped collections
        """
        report = ProvisionReport()
        start_time = time.perf_counter()

        logger.info(
            "Provisioning started",
            db_name=self.database_name,
            collection_count=len(self._options.documents),
        )

        await asyncio.gather(
            *(
                self._provision_collection(document_options, report, stop_event)
                for document_options in self._options.documents
            )
        )

        logger.info(
            "Provisioning completed",
            db_name=self.database_name,
            succeeded=report.succeeded,
            failed=sorted(report.failed),
            skipped=report.skipped,
            throughput_replaced=report.throughput_replaced,
            processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return report

    async def _provision_collection(
        self,
        document_options: DocumentOptions,
        report: ProvisionReport,
        stop_event: asyncio.Event | None,
    ) -> None:
        name = document_options.name
        context = {"db_name": self.database_name, "collection_name": name}

        def stopping() -> bool:
            if stop_event is not None and stop_event.is_set():
                logger.warning("Provisioning stopping", **context)
                report.skipped.append(name)
                return True
            return False

        try:
            if stopping():
                return
            await self.ensure_database()

            if stopping():
                return
            await self.ensure_collection(document_options)

            if document_options.set_throughput_on_startup:
                if stopping():
                    return
                if await self.reconcile_throughput(document_options):
                    report.throughput_replaced.append(name)

            report.succeeded.append(name)
        except Exception as e:
            logger.critical("Collection setup failed", exc_info=True, **context)
            report.failed[name] = e if isinstance(e, SetupError) else SetupError(name, str(e))

    # -------------------------------------------------------------------------
    # Existence
    # -------------------------------------------------------------------------

    async def ensure_database(self) -> None:
        """Create the catalog table once, shared by all collections."""
        async with self._database_lock:
            if self._database_ready:
                return
            await self._create_table(schema.get_catalog_definition(self.database_name))
            self._database_ready = True

    async def ensure_collection(self, document_options: DocumentOptions) -> str:
        """
        Create a collection's table if needed and apply its expiry policy.

        Returns:
            The collection's table name
        """
        name = table_name(self.database_name, document_options.name)
        created = await self._create_table(
            schema.get_table_definition(name, document_options.partition_key_name)
        )
        if created:
            logger.info(
                "Collection created",
                db_name=self.database_name,
                collection_name=document_options.name,
                partition_key=document_options.partition_key_name,
            )

        await self._enable_ttl(name, document_options.name)
        await self._register_collection(document_options, name)
        return name

    async def _create_table(self, definition: dict[str, Any]) -> bool:
        """Create a table if it doesn't exist and wait until it is active."""
        client = await self._client.get()
        created = True
        try:
            await client.create_table(**definition)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceInUseException":
                raise
            created = False

        waiter = client.get_waiter("table_exists")
        await waiter.wait(TableName=definition["TableName"])
        return created

    async def _enable_ttl(self, name: str, collection: str) -> None:
        """Turn on store-side expiry for the TTL attribute, unless already on."""
        client = await self._client.get()
        response = await client.describe_time_to_live(TableName=name)
        description = response.get("TimeToLiveDescription", {})
        status = description.get("TimeToLiveStatus")

        if status in ("ENABLED", "ENABLING"):
            attribute = description.get("AttributeName")
            if attribute != schema.EXPIRES_AT_ATTR:
                raise SetupError(
                    collection,
                    f"TTL is already enabled on attribute '{attribute}', "
                    f"expected '{schema.EXPIRES_AT_ATTR}'",
                )
            return

        await client.update_time_to_live(
            TableName=name,
            TimeToLiveSpecification={"Enabled": True, "AttributeName": schema.EXPIRES_AT_ATTR},
        )

    async def _register_collection(self, document_options: DocumentOptions, name: str) -> None:
        """Record the collection's configured shape in the catalog table."""
        client = await self._client.get()
        item = serialize_map(
            {
                schema.CATALOG_KEY: document_options.name,
                "table_name": name,
                "partition_key_name": document_options.partition_key_name,
                "document_schema": document_options.document_schema,
                "default_ttl_seconds": document_options.default_ttl_seconds,
                "updated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            }
        )
        await client.put_item(TableName=self.database_name, Item=item)

    # -------------------------------------------------------------------------
    # Throughput
    # -------------------------------------------------------------------------

    def target_throughput(self, document_options: DocumentOptions) -> ThroughputSettings:
        """The configured target, raised to the store minimum for its mode."""
        if document_options.enable_auto_scale:
            return ThroughputSettings.autoscale(
                max(document_options.offered_throughput, self.min_autoscale_max_throughput)
            )
        return ThroughputSettings.manual(
            max(document_options.offered_throughput, self.min_manual_throughput)
        )

    async def read_throughput(self, document_options: DocumentOptions) -> ThroughputSettings | None:
        """
        Read a collection's current throughput.

        Returns:
            The current settings, or None if the store returns no table
            description
        """
        client = await self._client.get()
        name = table_name(self.database_name, document_options.name)
        response = await client.describe_table(TableName=name)

        table = response.get("Table") if response else None
        if not table:
            return None

        pending = table.get("TableStatus") in schema.PENDING_TABLE_STATUSES
        billing_mode = table.get("BillingModeSummary", {}).get("BillingMode", "PROVISIONED")

        if billing_mode == "PAY_PER_REQUEST":
            on_demand = table.get("OnDemandThroughput", {})
            read = on_demand.get("MaxReadRequestUnits")
            write = on_demand.get("MaxWriteRequestUnits")
            # -1 (or no value) means no maximum is set
            value = read if read is not None and read > 0 and read == write else None
            return ThroughputSettings(ThroughputMode.AUTOSCALE, value, pending)

        provisioned = table.get("ProvisionedThroughput", {})
        read = provisioned.get("ReadCapacityUnits")
        write = provisioned.get("WriteCapacityUnits")
        value = read if read is not None and read == write else None
        return ThroughputSettings(ThroughputMode.MANUAL, value, pending)

    async def reconcile_throughput(self, document_options: DocumentOptions) -> bool:
        """
        Move a collection's throughput to its configured target.

        Returns:
            True if a replace was issued, False if nothing needed doing
        """
        context: dict[str, Any] = {
            "db_name": self.database_name,
            "collection_name": document_options.name,
        }

        current = await self.read_throughput(document_options)
        if current is None:
            logger.error("Store returned no throughput settings, no action taken", **context)
            return False

        if current.replace_pending:
            logger.info("Throughput already updating, no action taken", **context)
            return False

        target = self.target_throughput(document_options)
        if current.matches(target):
            logger.info("Throughput already set, no action taken", **context)
            return False

        context["auto_scale"] = target.mode is ThroughputMode.AUTOSCALE
        context["throughput"] = target.value
        logger.info("Updating throughput settings", **context)

        await self._replace_throughput(document_options, current, target)
        return True

    async def _replace_throughput(
        self,
        document_options: DocumentOptions,
        current: ThroughputSettings,
        target: ThroughputSettings,
    ) -> None:
        client = await self._client.get()
        kwargs: dict[str, Any] = {
            "TableName": table_name(self.database_name, document_options.name),
        }

        if target.mode is ThroughputMode.MANUAL:
            if current.mode is not ThroughputMode.MANUAL:
                kwargs["BillingMode"] = "PROVISIONED"
            kwargs["ProvisionedThroughput"] = {
                "ReadCapacityUnits": target.value,
                "WriteCapacityUnits": target.value,
            }
        else:
            if current.mode is not ThroughputMode.AUTOSCALE:
                kwargs["BillingMode"] = "PAY_PER_REQUEST"
            kwargs["OnDemandThroughput"] = {
                "MaxReadRequestUnits": target.value,
                "MaxWriteRequestUnits": target.value,
            }

        await client.update_table(**kwargs)
