"""Ingestion of completed pull requests from an Azure DevOps organization.

Repositories are enumerated once; each repository's completed pull requests
are then walked page by page with ``$top``/``$skip`` offsets. All requests are
issued sequentially.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, Iterator, List, Optional

from .ado_client import AdoClient
from .errors import PageFetchError
from .estimator import estimate_change_stats
from .models import UNKNOWN_AUTHOR, IngestionResult, PullRequestRecord, Repository

logger = logging.getLogger(__name__)

PULL_REQUEST_PAGE_SIZE = 1000

ProgressCallback = Callable[[str], None]


class PullRequestPaginator:
    """Lazily walk one repository's completed pull requests.

    Every call to :meth:`records` starts again from offset ``0``. Records are
    filtered individually against ``cutoff`` because the upstream ordering is
    not guaranteed to follow closed dates. Pagination ends on an empty page or
    on a page shorter than ``page_size``.

    When a page request fails the walk stops, ``error`` is set, and the records
    already yielded stand.
    """

    def __init__(
        self,
        ado_client: AdoClient,
        repository: Repository,
        cutoff: date,
        include_impact: bool = False,
        page_size: int = PULL_REQUEST_PAGE_SIZE,
    ) -> None:
        self._client = ado_client
        self._repository = repository
        self._cutoff = cutoff
        self._include_impact = include_impact
        self._page_size = page_size
        self.pages_fetched = 0
        self.error: Optional[PageFetchError] = None

    @property
    def halted(self) -> bool:
        return self.error is not None

    def records(self) -> Iterator[PullRequestRecord]:
        """Yield records closed on or after the cutoff, page by page."""
        repository = self._repository
        self.pages_fetched = 0
        self.error = None
        skip = 0
        emitted = 0

        while True:
            try:
                page_items = self._client.list_completed_pull_requests(
                    project=repository.project,
                    repo_id=repository.id,
                    skip=skip,
                    top=self._page_size,
                )
            except PageFetchError as exc:
                self.error = exc
                logger.warning(
                    "Stopped paginating repository after failed page request",
                    extra={
                        "project": repository.project,
                        "repository": repository.name,
                        "skip": skip,
                        "records_kept": emitted,
                        "error": str(exc),
                    },
                )
                return

            self.pages_fetched += 1
            if not page_items:
                return

            for item in page_items:
                record = self._build_record(item)
                if record is None:
                    continue
                emitted += 1
                yield record

            logger.info(
                "Fetched pull request page",
                extra={
                    "project": repository.project,
                    "repository": repository.name,
                    "skip": skip,
                    "page_items": len(page_items),
                    "records_emitted": emitted,
                },
            )

            if len(page_items) < self._page_size:
                return

            skip += self._page_size

    def _build_record(self, item: Dict[str, Any]) -> Optional[PullRequestRecord]:
        """Normalize one pull request payload, or ``None`` if it does not qualify."""
        closed_at = AdoClient.parse_datetime(item.get("closedDate"))
        if closed_at is None:
            return None

        closed_date = closed_at.date()
        if closed_date < self._cutoff:
            return None

        repository = self._repository
        pr_id = int(item.get("pullRequestId") or 0)
        created_by = item.get("createdBy") or {}

        lines_added = 0
        lines_deleted = 0
        if self._include_impact:
            stats = estimate_change_stats(
                self._client,
                project=repository.project,
                repo_id=repository.id,
                pr_id=pr_id,
            )
            lines_added = stats.added
            lines_deleted = stats.deleted

        return PullRequestRecord(
            author=created_by.get("displayName") or UNKNOWN_AUTHOR,
            author_email=created_by.get("uniqueName") or "",
            project=repository.project,
            repository=repository.name,
            closed_date=closed_date,
            pr_id=pr_id,
            title=item.get("title") or "",
            lines_added=lines_added,
            lines_deleted=lines_deleted,
        )


def fetch_pull_request_records(
    ado_client: AdoClient,
    cutoff: date,
    include_impact: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    page_size: int = PULL_REQUEST_PAGE_SIZE,
) -> IngestionResult:
    """Collect completed pull requests from every repository in the organization.

    Args:
        ado_client: Authenticated Azure DevOps client.
        cutoff: Earliest closed date a record may have.
        include_impact: Estimate lines changed per pull request (one extra
            request per commit).
        on_progress: Called synchronously with each repository name as its
            processing begins.
        page_size: Pull requests requested per page.

    Returns:
        Records sorted by closed date, plus the repositories whose pagination
        halted early.

    Raises:
        UpstreamError: If the repository listing fails.
    """
    repositories = ado_client.list_repositories()
    logger.info(
        "Enumerated repositories",
        extra={"repository_count": len(repositories), "cutoff": cutoff.isoformat()},
    )

    records: List[PullRequestRecord] = []
    skipped: List[str] = []

    for repository in repositories:
        if on_progress is not None:
            on_progress(repository.name)

        paginator = PullRequestPaginator(
            ado_client,
            repository,
            cutoff=cutoff,
            include_impact=include_impact,
            page_size=page_size,
        )
        records.extend(paginator.records())

        if paginator.halted:
            skipped.append(f"{repository.project}/{repository.name}")

    records.sort(key=lambda record: record.closed_date)

    logger.info(
        "Collected pull request records",
        extra={
            "records_total": len(records),
            "repositories_total": len(repositories),
            "repositories_halted": len(skipped),
        },
    )

    return IngestionResult(
        records=records,
        skipped_repositories=skipped,
        repository_count=len(repositories),
    )
