"""
Reorder reconciliation.

Submits a composed order to the catalog as one complete move list and
polls the asynchronous reorder job until it reports done or the attempt
budget runs out.

    Submitted → Polling → Done
                        → TimedOut (issued, completion unconfirmed)

A timeout is a result, not an error: the remote job keeps running and
a later resort can safely resubmit the full move list.
"""

import asyncio
from typing import Awaitable, Callable, Optional
import structlog

from config import settings
from exceptions import (
    CatalogError,
    CollectionNotFoundError,
    CollectionNotManualError,
    EmptyCollectionError,
)
from integrations.catalog import CatalogClient
from models.catalog import Collection, Move, ReorderJob
from models.resort import ReorderResult, ReorderStatus

logger = structlog.get_logger(__name__)


def build_moves(product_ids: list[str]) -> list[Move]:
    """One move per product: id → zero-based index."""
    return [
        Move(product_id=product_id, new_position=index)
        for index, product_id in enumerate(product_ids)
    ]


class ReorderReconciler:
    """
    Drives the reorder job for one collection at a time.

    Blocking catalog calls run in worker threads so concurrent resorts
    of other collections keep progressing while this one polls.
    """

    def __init__(
        self,
        client: CatalogClient,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.poll_interval = (
            settings.reorder_poll_interval_seconds if poll_interval is None else poll_interval
        )
        self.max_attempts = (
            settings.reorder_poll_max_attempts if max_attempts is None else max_attempts
        )
        self._sleep = sleep

    async def ensure_manual(self, collection_id: str) -> Collection:
        """
        Read the collection and check it accepts manual positions.

        Raises:
            CollectionNotFoundError: If the catalog has no such collection
            CollectionNotManualError: If the collection sorts automatically
        """
        collection = await asyncio.to_thread(self.client.get_collection, collection_id)

        if collection is None:
            raise CollectionNotFoundError(collection_id)

        if not collection.is_manual:
            logger.warning(
                "collection_not_manual",
                collection_id=collection.id,
                sort_order=collection.sort_order
            )
            raise CollectionNotManualError(collection.id, collection.sort_order)

        return collection

    async def reconcile(self, collection: Collection, product_ids: list[str]) -> ReorderResult:
        """
        Submit the full order and wait for the job.

        Args:
            collection: Collection header (must be in manual mode)
            product_ids: Final order, one entry per product

        Returns:
            ReorderResult with DONE or TIMED_OUT status

        Raises:
            CollectionNotManualError: Nothing is submitted
            EmptyCollectionError: Nothing is submitted
            SubmissionRejectedError: The catalog rejected the move list
            CatalogError: The submission itself failed
        """
        if not collection.is_manual:
            raise CollectionNotManualError(collection.id, collection.sort_order)
        if not product_ids:
            raise EmptyCollectionError(collection.id)

        moves = build_moves(product_ids)

        logger.info(
            "reorder_submitting",
            collection_id=collection.id,
            moves=len(moves)
        )
        job = await asyncio.to_thread(self.client.submit_reorder, collection.id, moves)

        if job is None or job.done:
            logger.info(
                "reorder_completed_on_submit",
                collection_id=collection.id,
                job_id=job.id if job else None
            )
            return ReorderResult(
                status=ReorderStatus.DONE,
                job_id=job.id if job else None,
                move_count=len(moves),
            )

        result = await self.poll(job)
        result.move_count = len(moves)
        return result

    async def poll(self, job: ReorderJob) -> ReorderResult:
        """
        Wait poll_interval, read job status; repeat up to max_attempts.

        A failed status read uses up its attempt; the job itself is
        unaffected.
        """
        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.poll_interval)

            try:
                status = await asyncio.to_thread(self.client.get_job_status, job.id)
            except CatalogError as e:
                logger.warning(
                    "reorder_status_check_failed",
                    job_id=job.id,
                    attempt=attempt,
                    error=e.message
                )
                continue

            if status.done:
                logger.info("reorder_job_done", job_id=job.id, attempts=attempt)
                return ReorderResult(
                    status=ReorderStatus.DONE,
                    job_id=job.id,
                    attempts=attempt,
                )

            logger.debug("reorder_job_pending", job_id=job.id, attempt=attempt)

        logger.warning(
            "reorder_job_timed_out",
            job_id=job.id,
            attempts=self.max_attempts,
            waited_seconds=self.poll_interval * self.max_attempts
        )
        return ReorderResult(
            status=ReorderStatus.TIMED_OUT,
            job_id=job.id,
            attempts=self.max_attempts,
        )
