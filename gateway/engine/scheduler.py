"""
Deferred payment transitions.

Each created payment gets one work item, keyed by payment id: an asyncio task
that sleeps for the processing delay and then resolves the payment. The task
outlives the request that created it.

Scheduled transitions live only in memory. A restart before a task fires
leaves its payment in "processing"; the startup hook reports how many
payments are in that state.
"""

import asyncio
import logging
import random
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gateway.engine.delay import processing_delay_ms
from gateway.engine.outcome import ProcessingConfig
from gateway.engine.processor import process_payment

logger = logging.getLogger("payment_gateway.scheduler")


class TransitionScheduler:
    """
    One-shot timers that resolve processing payments.

    Submitting a payment id that already has a pending task is a no-op, so a
    payment is transitioned at most once per process.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: ProcessingConfig,
        rng: Optional[random.Random] = None,
    ):
        self.session_factory = session_factory
        self.config = config
        self.rng = rng or random.Random()
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def is_scheduled(self, payment_id: str) -> bool:
        return payment_id in self._tasks

    def schedule(
        self,
        payment_id: str,
        method: str,
        vpa: Optional[str] = None,
        card_number: Optional[str] = None,
    ) -> Optional[int]:
        """
        Schedule the outcome of a payment.

        Returns:
            The delay in milliseconds, or None if the payment was already
            scheduled.
        """
        if payment_id in self._tasks:
            logger.warning("Payment %s already scheduled; ignoring duplicate", payment_id)
            return None

        delay_ms = processing_delay_ms(self.config, self.rng)
        task = asyncio.create_task(
            self._run(payment_id, method, delay_ms, vpa, card_number),
            name=f"transition-{payment_id}",
        )
        self._tasks[payment_id] = task
        task.add_done_callback(lambda t: self._on_done(payment_id, t))

        logger.debug("Payment %s scheduled in %dms", payment_id, delay_ms)
        return delay_ms

    async def _run(
        self,
        payment_id: str,
        method: str,
        delay_ms: int,
        vpa: Optional[str],
        card_number: Optional[str],
    ):
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)
        return await process_payment(
            self.session_factory,
            payment_id,
            method,
            self.config,
            self.rng,
            vpa=vpa,
            card_number=card_number,
        )

    def _on_done(self, payment_id: str, task: asyncio.Task) -> None:
        self._tasks.pop(payment_id, None)
        if task.cancelled():
            logger.warning("Transition for payment %s cancelled; left in processing", payment_id)
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Unexpected error resolving payment %s",
                payment_id,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self) -> None:
        """Wait for every pending transition to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel pending transitions."""
        tasks = list(self._tasks.values())
        if tasks:
            logger.warning("Cancelling %d pending payment transitions", len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
