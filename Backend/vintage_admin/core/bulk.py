import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class BulkOutcome:
    item_id: Any
    ok: bool
    error: Optional[Exception] = None
    result: Any = None


@dataclass
class BulkReport:
    """Per-item outcomes of a multi-entity operation plus aggregate counts."""
    outcomes: List[BulkOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)

    @property
    def is_partial_failure(self) -> bool:
        return self.failed > 0 and self.succeeded > 0

    def failures(self) -> List[BulkOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


async def run_bulk(
    item_ids: Iterable[Any],
    operation: Callable[[Any], Awaitable[Any]],
    expected: tuple = (Exception,),
) -> BulkReport:
    """
    Run `operation` for every id, one after another, collecting each outcome.
    Exceptions listed in `expected` are recorded against their item; anything
    else propagates after the items already processed have been reported in the log.
    """
    report = BulkReport()
    for item_id in item_ids:
        try:
            result = await operation(item_id)
        except expected as exc:
            logger.warning(f"Bulk item {item_id} failed: {exc}")
            report.outcomes.append(BulkOutcome(item_id=item_id, ok=False, error=exc))
            continue
        except Exception:
            logger.error(
                f"Bulk operation aborted at {item_id} after "
                f"{report.succeeded} succeeded / {report.failed} failed"
            )
            raise
        report.outcomes.append(BulkOutcome(item_id=item_id, ok=True, result=result))

    logger.info(f"Bulk operation finished: {report.succeeded} succeeded, {report.failed} failed")
    return report
