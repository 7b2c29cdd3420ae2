"""Azure DevOps REST API client for pull request velocity data retrieval."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

import requests
from requests.auth import HTTPBasicAuth

from .config import Config
from .errors import ApiError, EstimationError, PageFetchError, UpstreamError
from .models import ChangeCounts, Repository

logger = logging.getLogger(__name__)

_FRACTION_PATTERN = re.compile(r"\.(\d+)")


class AdoClient:
    """Small, typed client for the Azure DevOps Git APIs used during ingestion.

    Requests are issued one at a time and are never retried: a failed call
    raises an ``ApiError`` subclass and the caller decides whether the failure
    is fatal.
    """

    _API_VERSION = "7.0"
    _COMMIT_CHANGE_COUNT = 1000

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated Azure DevOps API client.

        Args:
            config: Validated runtime configuration including organization/PAT.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._base_url = f"https://dev.azure.com/{config.organization}"

        self._session = requests.Session()
        self._session.auth = HTTPBasicAuth("", config.pat)
        self._session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )

    def _build_url(self, path: str, project: Optional[str] = None) -> str:
        """Build a fully qualified API URL, optionally scoped to a project."""
        if project:
            return f"{self._base_url}/{quote(project, safe='')}/_apis/{path.lstrip('/')}"
        return f"{self._base_url}/_apis/{path.lstrip('/')}"

    @staticmethod
    def parse_datetime(value: Optional[str]) -> Optional[datetime]:
        """Parse Azure DevOps ISO8601 timestamps into timezone-aware UTC datetimes."""
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        # Azure DevOps emits up to 7 fractional digits.
        normalized = _FRACTION_PATTERN.sub(
            lambda match: "." + match.group(1)[:6].ljust(6, "0"), normalized
        )
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        project: Optional[str] = None,
        error_type: Type[ApiError] = ApiError,
    ) -> Dict[str, Any]:
        """Execute a single GET request and return its JSON object payload.

        Raises:
            ApiError: ``error_type`` when the request fails, returns
                HTTP >= 400, or does not return a JSON object.
        """
        url = self._build_url(path, project=project)
        query = dict(params or {})
        query["api-version"] = self._API_VERSION

        try:
            response = self._session.get(url, params=query, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise error_type(f"Azure DevOps request failed: GET {url}") from exc

        if response.status_code >= 400:
            raise error_type(
                "Azure DevOps API request failed: "
                f"GET {url} returned {response.status_code} - {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise error_type(f"Azure DevOps API returned invalid JSON: GET {url}") from exc

        if not isinstance(payload, dict):
            raise error_type(f"Azure DevOps API returned unexpected payload shape: GET {url}")

        return payload

    @staticmethod
    def _value_items(
        payload: Dict[str, Any],
        path: str,
        error_type: Type[ApiError],
    ) -> List[Dict[str, Any]]:
        """Return the ``value`` list of a collection payload.

        Raises:
            ApiError: ``error_type`` when ``value`` is not a list of objects.
        """
        items = payload.get("value")
        if items is None:
            return []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise error_type(f"Azure DevOps API returned unexpected collection shape: {path}")
        return items

    def list_repositories(self) -> List[Repository]:
        """List every repository in the configured organization.

        Entries missing an id, a name, or a project name are skipped.

        Raises:
            UpstreamError: If the listing request does not succeed.
        """
        path = "git/repositories"
        payload = self._get_json(path, error_type=UpstreamError)
        repositories: List[Repository] = []

        for item in self._value_items(payload, path, UpstreamError):
            repo_id = item.get("id")
            repo_name = item.get("name")
            project = item.get("project")
            project_name = project.get("name") if isinstance(project, dict) else None
            if not repo_id or not repo_name or not project_name:
                logger.debug("Skipping incomplete repository entry", extra={"repo_id": repo_id})
                continue
            repositories.append(
                Repository(id=str(repo_id), name=str(repo_name), project=str(project_name))
            )

        return repositories

    def list_completed_pull_requests(
        self,
        project: str,
        repo_id: str,
        skip: int,
        top: int,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of completed pull requests using ``$top``/``$skip``.

        Raises:
            PageFetchError: If the page request does not succeed.
        """
        path = f"git/repositories/{repo_id}/pullrequests"
        payload = self._get_json(
            path,
            params={
                "searchCriteria.status": "completed",
                "$top": top,
                "$skip": skip,
            },
            project=project,
            error_type=PageFetchError,
        )
        return list(self._value_items(payload, path, PageFetchError))

    def list_pull_request_commit_ids(self, project: str, repo_id: str, pr_id: int) -> List[str]:
        """List commit ids belonging to a pull request.

        Raises:
            EstimationError: If the commit listing does not succeed.
        """
        path = f"git/repositories/{repo_id}/pullRequests/{pr_id}/commits"
        payload = self._get_json(
            path,
            project=project,
            error_type=EstimationError,
        )
        commit_ids: List[str] = []
        for item in self._value_items(payload, path, EstimationError):
            commit_id = item.get("commitId")
            if commit_id:
                commit_ids.append(str(commit_id))
        return commit_ids

    def get_commit_change_counts(
        self,
        project: str,
        repo_id: str,
        commit_id: str,
    ) -> Optional[ChangeCounts]:
        """Fetch Add/Edit/Delete file counts for a commit.

        Returns ``None`` when the commit payload carries no ``changeCounts``.

        Raises:
            EstimationError: If the commit detail request does not succeed or
                its counts are not numeric.
        """
        payload = self._get_json(
            f"git/repositories/{repo_id}/commits/{commit_id}",
            params={"changeCount": self._COMMIT_CHANGE_COUNT},
            project=project,
            error_type=EstimationError,
        )
        counts = payload.get("changeCounts")
        if not counts:
            return None

        try:
            return ChangeCounts(
                add=int(counts.get("Add") or 0),
                edit=int(counts.get("Edit") or 0),
                delete=int(counts.get("Delete") or 0),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise EstimationError(
                f"Azure DevOps API returned invalid change counts for commit {commit_id}"
            ) from exc
