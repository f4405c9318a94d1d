"""Daily trigger for the puzzle generator.

Sleeps until the configured local time (01:00 America/New_York by default),
runs one bounded generation and repeats. A failed or timed-out run is logged
and the loop carries on; the next day's run retries naturally.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from stock_puzzle.config import get_settings
from stock_puzzle.context import AppContext
from stock_puzzle.core.logging import setup_logging
from stock_puzzle.core.telemetry import setup_telemetry
from stock_puzzle.services.generator import GenerationResult

logger = logging.getLogger(__name__)


def next_run_at(now: datetime, hour: int, minute: int) -> datetime:
    """Next occurrence of ``hour:minute`` in ``now``'s time zone."""

    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target = target + timedelta(days=1)
    return target


def seconds_until(now: datetime, target: datetime) -> float:
    # Compare in UTC so a DST change between now and the target is counted.
    return (target.astimezone(timezone.utc) - now.astimezone(timezone.utc)).total_seconds()


def seconds_until_next_run(now: datetime, hour: int, minute: int) -> float:
    return seconds_until(now, next_run_at(now, hour, minute))


async def run_daily_puzzle(context: AppContext) -> GenerationResult | None:
    """Run the generator once within the configured timeout."""

    timeout = context.settings.generator_timeout_seconds
    try:
        return await asyncio.wait_for(context.generator().run(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Daily puzzle generation exceeded %.0fs and was cancelled", timeout)
        raise


async def run_scheduler(context: AppContext, stop_event: asyncio.Event) -> None:
    settings = context.settings
    logger.info(
        "Puzzle scheduler started (%02d:%02d %s)",
        settings.schedule_hour,
        settings.schedule_minute,
        settings.puzzle_timezone,
    )
    target = next_run_at(context.clock.current(), settings.schedule_hour, settings.schedule_minute)
    while not stop_event.is_set():
        delay = max(0.0, seconds_until(context.clock.current(), target))
        logger.info("Puzzle scheduler sleeping %.1f hours until next run", delay / 3600)
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
            break
        except asyncio.TimeoutError:
            pass

        try:
            await run_daily_puzzle(context)
        except asyncio.TimeoutError:
            pass
        except Exception:
            logger.exception("Daily puzzle run failed; will retry next cycle")
        # Advance from the slot that fired; an early wake-up must not rerun it.
        target = next_run_at(target, settings.schedule_hour, settings.schedule_minute)
    logger.info("Puzzle scheduler stopped")


async def _main(once: bool) -> None:
    settings = get_settings()
    context = AppContext.build(settings)
    setup_telemetry(settings, engine=context.database.engine)
    logger.info("Scheduler configuration: %s", settings.dict_for_logging())
    try:
        await context.start()
        if once:
            result = await run_daily_puzzle(context)
            if result is not None:
                print(f"Published puzzle {result.date_key}: {', '.join(result.symbols)}")
            return
        await run_scheduler(context, asyncio.Event())
    finally:
        await context.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Publish the daily stock puzzle")
    parser.add_argument("--once", action="store_true", help="Run a single generation and exit")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(_main(args.once))


if __name__ == "__main__":
    main()
