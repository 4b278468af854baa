"""Batch rendering with a bounded worker pool and per-element isolation.

One element failing never stops the others: each outcome is recorded
against its element id and summarised in a :class:`BatchReport`.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence, TypeVar, Union

from aecview.config import DEFAULT_MAX_WORKERS, EngineSettings
from aecview.context.door import DoorContextResolver
from aecview.errors import AecviewError, InvalidConfiguration
from aecview.models.context import DoorContext, SpaceContext
from aecview.models.element import Element
from aecview.models.options import RenderOptions, ViewKind
from aecview.render import render_view, views_for
from aecview.spatial.index import SpatialIndex

logger = logging.getLogger(__name__)

Context = Union[DoorContext, SpaceContext]
T = TypeVar("T")


@dataclass
class ItemOutcome:
    """What happened to one element in a batch."""

    element_id: int | None
    success: bool = True
    documents: dict[str, str] = field(default_factory=dict)
    error_type: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_id": self.element_id,
            "success": self.success,
            "views": sorted(self.documents),
            "error_type": self.error_type,
            "message": self.message,
        }


class BatchReport:
    """Aggregated outcomes of a batch, in input order."""

    def __init__(
        self,
        items: list[ItemOutcome] | None = None,
        started_at: datetime | None = None,
        finished_at: datetime | None = None,
    ) -> None:
        self.items = items or []
        self.started_at = started_at or datetime.now(timezone.utc)
        self.finished_at = finished_at or self.started_at

    @property
    def succeeded(self) -> int:
        return sum(1 for i in self.items if i.success)

    @property
    def failed(self) -> int:
        return sum(1 for i in self.items if not i.success)

    @property
    def total(self) -> int:
        return len(self.items)

    def failures_by_type(self) -> dict[str, int]:
        counts = Counter(i.error_type or "Unknown" for i in self.items if not i.success)
        return dict(sorted(counts.items()))

    def summary(self) -> str:
        text = f"{self.succeeded} succeeded, {self.failed} failed"
        if self.failed:
            reasons = ", ".join(f"{n} {t}" for t, n in self.failures_by_type().items())
            text += f" ({reasons})"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures_by_type": self.failures_by_type(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "items": [i.to_dict() for i in self.items],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_markdown(self) -> str:
        lines: list[str] = []
        lines.append("# Batch Render Report")
        lines.append("")
        lines.append(f"**Finished:** {self.finished_at.strftime('%Y-%m-%d %H:%M UTC')}")
        lines.append(f"**Summary:** {self.summary()}")
        lines.append("")

        failures = [i for i in self.items if not i.success]
        if failures:
            lines.append("## Failures")
            lines.append("")
            lines.append("| Element | Error | Message |")
            lines.append("|---------|-------|---------|")
            for item in failures:
                msg = item.message.replace("|", "\\|")
                lines.append(f"| {item.element_id} | {item.error_type} | {msg} |")
            lines.append("")
        else:
            lines.append("All elements rendered successfully.")
            lines.append("")

        return "\n".join(lines)


def _check_views(views: Iterable[ViewKind | str] | None) -> list[ViewKind] | None:
    if views is None:
        return None
    checked = []
    for v in views:
        try:
            checked.append(ViewKind(v))
        except ValueError:
            raise InvalidConfiguration(f"unknown view kind {v!r}") from None
    return checked


class BatchRenderer:
    """Run per-element pipelines on a small thread pool.

    Parameters
    ----------
    max_workers:
        Concurrent in-flight elements.
    settings:
        Tolerances passed to resolvers and the projector.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        settings: EngineSettings | None = None,
    ) -> None:
        if max_workers < 1:
            raise InvalidConfiguration(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self.settings = settings or EngineSettings()

    def _run(self, items: Sequence[T], job: Callable[[T], ItemOutcome]) -> BatchReport:
        started = datetime.now(timezone.utc)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            outcomes = list(pool.map(job, items))
        report = BatchReport(outcomes, started_at=started, finished_at=datetime.now(timezone.utc))
        logger.info("Batch of %d elements: %s", report.total, report.summary())
        return report

    def _render_one(
        self,
        context: Context,
        views: list[ViewKind] | None,
        options: RenderOptions,
    ) -> ItemOutcome:
        outcome = ItemOutcome(element_id=context.element_id)
        for kind in views if views is not None else views_for(context):
            result = render_view(context, kind, options, self.settings)
            if result.success and result.document is not None:
                outcome.documents[kind.value] = result.document
            elif outcome.success:
                outcome.success = False
                outcome.error_type = result.error_type
                outcome.message = result.message
        if not outcome.success:
            logger.warning(
                "Element %s failed: %s", outcome.element_id, outcome.message
            )
        return outcome

    def render_contexts(
        self,
        contexts: Sequence[Context],
        views: Iterable[ViewKind | str] | None = None,
        options: RenderOptions | None = None,
    ) -> BatchReport:
        """Render already-resolved contexts.

        Raises
        ------
        InvalidConfiguration
            Before any work starts, if *options* or *views* are invalid.
        """
        opts = options or RenderOptions()
        opts.check()
        kinds = _check_views(views)
        return self._run(contexts, lambda ctx: self._render_one(ctx, kinds, opts))

    def process_doors(
        self,
        doors: Sequence[Element],
        architectural_index: SpatialIndex,
        devices_index: SpatialIndex | None = None,
        views: Iterable[ViewKind | str] | None = None,
        options: RenderOptions | None = None,
    ) -> BatchReport:
        """Resolve, project and emit each door independently."""
        opts = options or RenderOptions()
        opts.check()
        kinds = _check_views(views)
        resolver = DoorContextResolver(architectural_index, devices_index, self.settings)

        def job(door: Element) -> ItemOutcome:
            try:
                context = resolver.resolve(door)
            except (AecviewError, ValueError) as exc:
                logger.warning("Door %d skipped: %s", door.id, exc)
                return ItemOutcome(
                    element_id=door.id,
                    success=False,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            return self._render_one(context, kinds, opts)

        return self._run(doors, job)
