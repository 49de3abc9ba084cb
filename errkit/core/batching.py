"""
Batch processor running items in sequential groups.

Items are split into contiguous groups. The items of one group are
processed concurrently, groups run one after another with an optional pause
in between, and results come back in input order.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar, Union

from tqdm import tqdm

from .task import run_task

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchConfig:
    """Configuration for batch processing."""
    group_size: int = 10                    # Items per group
    inter_group_delay: float = 0.0          # Seconds to pause between groups
    concurrency: Optional[int] = None       # Concurrent items per group, defaults to group_size
    progress: bool = False                  # Show a tqdm progress bar

    def __post_init__(self):
        if self.group_size < 1:
            raise ValueError(f"group_size must be at least 1, got {self.group_size}")
        if self.inter_group_delay < 0:
            raise ValueError(f"inter_group_delay must be non-negative, got {self.inter_group_delay}")
        if self.concurrency is not None and self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")

    @property
    def effective_concurrency(self) -> int:
        return self.concurrency or self.group_size


async def batch(items: Iterable[T],
                processor: Callable[[T], Union[Awaitable[R], R]],
                config: Optional[BatchConfig] = None,
                **overrides) -> List[R]:
    """
    Process items group by group.

    Args:
        items: Input sequence
        processor: Called once per item, returns a task (or a plain value)
        config: Batch configuration, defaults to BatchConfig()
        **overrides: Field overrides applied on top of config
            (group_size, inter_group_delay, concurrency, progress)

    Returns:
        One result per item, in input order

    Raises:
        Exception: The first processor failure; later groups are not started
    """
    if config is None:
        config = BatchConfig(**overrides)
    elif overrides:
        config = replace(config, **overrides)

    items = list(items)
    results: List[R] = []
    if not items:
        return results

    semaphore = asyncio.Semaphore(config.effective_concurrency)
    aborted = asyncio.Event()
    progress_bar = tqdm(total=len(items), desc="Batch", ncols=100) if config.progress else None

    async def process_one(item: T) -> Optional[R]:
        async with semaphore:
            # Items still waiting for a slot are not started once the batch failed
            if aborted.is_set():
                return None
            try:
                result = await run_task(lambda: processor(item))
            except Exception:
                aborted.set()
                raise
            if progress_bar:
                progress_bar.update(1)
            return result

    try:
        for start in range(0, len(items), config.group_size):
            if start > 0 and config.inter_group_delay > 0:
                await asyncio.sleep(config.inter_group_delay)

            group = items[start:start + config.group_size]
            group_results = await asyncio.gather(*(process_one(item) for item in group))
            results.extend(group_results)
    finally:
        if progress_bar:
            progress_bar.close()

    return results
