import asyncio
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from loguru import logger

from winrates.aggregation.store import AggregateStats
from winrates.config.settings import settings
from winrates.extraction.extractor import StatsError, extract
from winrates.models.enums import ErrorPolicy
from winrates.models.record import BattleRecord
from winrates.models.stats import GameResult
from winrates.normalization.species import SpeciesNormalizer, default_normalizer

# A battle as handed to the pool: already built, a decoded battle log, or a
# loader that reads it from disk when a worker picks it up.
RecordSource = Union[BattleRecord, Mapping[str, Any], Callable[[], BattleRecord]]

_DONE = object()


def resolve_record(source: RecordSource) -> BattleRecord:
    """Turns any supported record source into a BattleRecord."""
    if isinstance(source, BattleRecord):
        return source
    if isinstance(source, Mapping):
        try:
            return BattleRecord.from_log(source)
        except ValueError as e:
            raise StatsError(f"Invalid battle log: {e}") from e
    if callable(source):
        return source()
    raise TypeError(f"Unsupported record source: {type(source).__name__}")


class AggregationPool:
    """Extracts battles on a bounded set of workers and merges the results.

    Extraction runs in worker threads with no shared state. Merges happen one
    at a time under a lock, so each battle's results land in the store as a
    unit. The counters are order-independent, so the final store does not
    depend on which worker finishes first.
    """

    def __init__(
        self,
        min_rating: float,
        workers: Optional[int] = None,
        error_policy: Optional[ErrorPolicy] = None,
        normalizer: Optional[SpeciesNormalizer] = None,
    ):
        if min_rating < 0:
            raise ValueError(f"min_rating must be non-negative, got {min_rating}")
        self.min_rating = min_rating
        self.workers = workers if workers is not None else settings.worker_count
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        self.error_policy = error_policy or settings.error_policy
        self.normalizer = normalizer or default_normalizer

        self.processed = 0
        self.filtered = 0
        self.skipped = 0

    def _process(self, source: RecordSource) -> List[GameResult]:
        return extract(self.min_rating, resolve_record(source), self.normalizer)

    async def run(self, records: Iterable[RecordSource]) -> AggregateStats:
        """Aggregates every record; returns only once all have been merged."""
        store = AggregateStats()
        store_lock = asyncio.Lock()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.workers * 2)

        async def produce() -> None:
            for source in records:
                await queue.put(source)
            for _ in range(self.workers):
                await queue.put(_DONE)

        async def work() -> None:
            while True:
                source = await queue.get()
                if source is _DONE:
                    return
                try:
                    results = await asyncio.to_thread(self._process, source)
                except StatsError as e:
                    if self.error_policy == ErrorPolicy.ABORT:
                        logger.error(f"Aborting run: {e}")
                        raise
                    logger.warning(f"Skipping malformed battle: {e}")
                    self.skipped += 1
                    continue

                async with store_lock:
                    store.merge(results)
                    self.processed += 1
                    if not results:
                        self.filtered += 1

        logger.info(
            f"Aggregating battles with {self.workers} workers (minimum rating {self.min_rating:g})"
        )
        tasks = [asyncio.create_task(produce())]
        tasks.extend(asyncio.create_task(work()) for _ in range(self.workers))
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # Fail fast: stop the remaining workers before propagating
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.success(
            f"Aggregation complete. {self.processed} battles processed, "
            f"{self.filtered} filtered by rating, {self.skipped} skipped, "
            f"{len(store)} species seen."
        )
        return store


async def aggregate_records(
    records: Iterable[RecordSource],
    min_rating: float,
    workers: Optional[int] = None,
    error_policy: Optional[ErrorPolicy] = None,
    normalizer: Optional[SpeciesNormalizer] = None,
) -> AggregateStats:
    pool = AggregationPool(
        min_rating, workers=workers, error_policy=error_policy, normalizer=normalizer
    )
    return await pool.run(records)


def aggregate(
    min_rating: float,
    records: Iterable[RecordSource],
    workers: Optional[int] = None,
    error_policy: Optional[ErrorPolicy] = None,
    normalizer: Optional[SpeciesNormalizer] = None,
) -> AggregateStats:
    """Synchronous entry point: aggregates ``records`` into a fresh store."""
    return asyncio.run(
        aggregate_records(
            records,
            min_rating,
            workers=workers,
            error_policy=error_policy,
            normalizer=normalizer,
        )
    )
