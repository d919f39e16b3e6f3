"""Locally cached order history, reconciled against the store backend."""

import asyncio
import json
import logging
from typing import Optional, Protocol

from pydantic import ValidationError

from .errors import NotFoundError
from .models import Order, ReconcileMode, ReconcileResult, StoredOrderSummary
from .store import ORDERS_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class OrderSource(Protocol):
    async def get_order(self, order_id: int) -> Order: ...


class OrderHistory:
    """Newest-first list of order summaries mirrored to the key-value store.

    Reconciliation and user actions are not serialized against each other;
    whichever writes the stored list last wins.
    """

    def __init__(self, store: KeyValueStore, client: OrderSource) -> None:
        self.store = store
        self.client = client
        self.orders: list[StoredOrderSummary] = []
        self._background_task: Optional[asyncio.Task] = None

    async def load_from_storage(self) -> list[StoredOrderSummary]:
        """Restore the order list. A missing key means no orders."""
        try:
            raw = await self.store.get(ORDERS_KEY)
        except Exception as e:
            logger.error(f"Error loading orders from storage: {e}")
            return self.orders

        if not raw:
            self.orders = []
            return self.orders

        try:
            self.orders = [StoredOrderSummary.model_validate(o) for o in json.loads(raw)]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.error(f"Ignoring malformed stored orders: {e}")
            self.orders = []

        logger.info(f"Loaded {len(self.orders)} order(s) from storage")
        return self.orders

    async def _persist(self, orders: list[StoredOrderSummary]) -> None:
        payload = json.dumps([o.model_dump(by_alias=True) for o in orders])
        try:
            await self.store.set(ORDERS_KEY, payload)
        except Exception as e:
            logger.error(f"Error saving orders to storage: {e}")

    def get_order(self, order_id: int) -> Optional[StoredOrderSummary]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    async def record_new_order(
        self,
        order_id: int,
        order_number: str,
        total: str,
        status: str,
        created_at: str,
    ) -> StoredOrderSummary:
        """Put a newly placed order at the front of the list and persist."""
        summary = StoredOrderSummary(
            id=order_id,
            order_number=order_number,
            total=total,
            status=status,
            date_created=created_at,
        )
        self.orders = [summary, *self.orders]
        await self._persist(self.orders)
        logger.info(f"Recorded order {order_id} (#{order_number})")
        return summary

    async def record_order(self, order: Order) -> StoredOrderSummary:
        return await self.record_new_order(
            order.id, order.number, order.total, order.status, order.date_created
        )

    async def remove_order(self, order_id: int) -> None:
        """Drop one order, e.g. after its detail fetch came back 404."""
        self.orders = [o for o in self.orders if o.id != order_id]
        await self._persist(self.orders)
        logger.info(f"Removed order {order_id} from local history")

    async def update_order_fields(self, order_id: int, status: str, total: str) -> None:
        """Overwrite status and total of one order with fresh server values."""
        if self.get_order(order_id) is None:
            return
        self.orders = [
            o.model_copy(update={"status": status, "total": total}) if o.id == order_id else o
            for o in self.orders
        ]
        await self._persist(self.orders)

    async def reconcile(self, mode: ReconcileMode = ReconcileMode.QUIET) -> ReconcileResult:
        """
        Re-verify every cached order against the backend.

        Orders are fetched one at a time. A 404 drops the order, changed
        status or total is copied over, and any other failure leaves the
        entry untouched.

        Args:
            mode: ``interactive`` when the caller will show the summary to
                the user, ``quiet`` for background upkeep

        Returns:
            Counts of checked, removed, updated and failed orders
        """
        snapshot = list(self.orders)
        result = ReconcileResult()
        kept: list[StoredOrderSummary] = []

        for summary in snapshot:
            result.checked += 1
            try:
                server_order = await self.client.get_order(summary.id)
            except NotFoundError:
                logger.info(f"Order {summary.id} no longer exists on server, removing")
                result.removed += 1
                continue
            except Exception as e:
                logger.warning(f"Could not verify order {summary.id}, keeping it: {e}")
                result.failed += 1
                kept.append(summary)
                continue

            if server_order.status != summary.status or server_order.total != summary.total:
                logger.info(
                    f"Order {summary.id} updated: {summary.status} -> {server_order.status}, "
                    f"{summary.total} -> {server_order.total}"
                )
                result.updated += 1
                kept.append(
                    summary.model_copy(
                        update={"status": server_order.status, "total": server_order.total}
                    )
                )
            else:
                kept.append(summary)

        if len(kept) != len(snapshot) or result.updated > 0:
            await self._persist(kept)
            self.orders = kept

        if mode == ReconcileMode.INTERACTIVE:
            logger.info(f"Reconciliation complete: {result.message}")
        elif result.changed:
            logger.info(
                f"Background reconciliation: removed {result.removed}, updated {result.updated}"
            )
        else:
            logger.debug(f"Background reconciliation: {result.checked} order(s) unchanged")

        return result

    def schedule_quiet_reconcile(self, delay: float = 2.0) -> asyncio.Task:
        """Run one quiet reconciliation after ``delay`` seconds."""

        async def _run() -> None:
            await asyncio.sleep(delay)
            try:
                await self.reconcile(ReconcileMode.QUIET)
            except Exception as e:
                logger.error(f"Error validating orders: {e}", exc_info=True)

        self._background_task = asyncio.create_task(_run())
        return self._background_task

    async def close(self) -> None:
        """Cancel a pending or running background reconciliation."""
        task, self._background_task = self._background_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Background order reconciliation cancelled")
