"""Periodic trigger for batch runs."""

import asyncio

from zipmeta.utils.logger import get_logger

from .batch_orchestrator import BatchOrchestrator

logger = get_logger(__name__)


async def _run_logged(orchestrator: BatchOrchestrator, only_new: bool) -> None:
    try:
        await orchestrator.run_batch(only_new)
    except Exception as exc:
        logger.error("Batch run failed: %s", exc)


async def run_forever(
    orchestrator: BatchOrchestrator,
    interval_minutes: float,
    only_new: bool = True,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Trigger a batch run every ``interval_minutes`` until stopped.

    Each trigger starts the run as a background task, so a run that
    outlasts the interval meets the orchestrator's re-entrancy guard
    instead of delaying the schedule. Batch-level failures are logged and
    retried on the next trigger.

    Args:
        orchestrator: Orchestrator to trigger.
        interval_minutes: Time between triggers.
        only_new: Skip archives that already have metadata.
        stop_event: Set to stop scheduling; in-flight runs are awaited.
    """
    stop_event = stop_event or asyncio.Event()
    interval_s = interval_minutes * 60
    running: set[asyncio.Task] = set()

    logger.info("Scheduler started (every %.1f minutes)", interval_minutes)
    try:
        while not stop_event.is_set():
            task = asyncio.create_task(_run_logged(orchestrator, only_new))
            running.add(task)
            task.add_done_callback(running.discard)

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_s)
            except TimeoutError:
                pass
    finally:
        if running:
            await asyncio.gather(*running)
        logger.info("Scheduler stopped")
