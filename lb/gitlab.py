"""GitLab REST API v4 client."""

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from lb.models import Issue, Note, Project

logger = structlog.get_logger(__name__)

TIMEOUT = 30

_PROJECTS = TypeAdapter(list[Project])


class GitLabError(RuntimeError):
    """A GitLab call failed: transport error, non-2xx status, or unexpected response body."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        if body:
            message = f"{message}\n{body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GitLabClient:
    def __init__(self, instance: str, token: str) -> None:
        self._base_url = f"https://{instance}/api/v4"
        self._headers = {"PRIVATE-TOKEN": token}

    def _send(self, method: str, path: str, body: dict | None = None) -> dict | list:
        url = f"{self._base_url}{path}"
        try:
            response = httpx.request(method, url, headers=self._headers, json=body, timeout=TIMEOUT)
        except httpx.HTTPError as exc:
            raise GitLabError(f"{method} {url} failed: {exc}") from exc

        logger.debug("gitlab request", method=method, path=path, status=response.status_code)
        if response.status_code == 401:
            raise GitLabError(
                "GitLab rejected the access token (401)",
                status_code=401,
                body=response.text,
            )
        if not response.is_success:
            raise GitLabError(
                f"GitLab API returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GitLabError(
                f"GitLab API returned a non-JSON body for {method} {path}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    def _get(self, path: str) -> dict | list:
        return self._send("GET", path)

    def _post(self, path: str, body: dict) -> dict:
        return self._send("POST", path, body)  # type: ignore[return-value]

    def list_projects(self) -> list[Project]:
        # NOTE: first page only (GitLab's default of 20). Pagination not implemented.
        nodes = self._get("/projects")
        try:
            return _PROJECTS.validate_python(nodes)
        except ValidationError as exc:
            raise GitLabError(f"Unexpected project list from GitLab: {exc}") from exc

    def get_issue(self, project: int, issue: int) -> Issue:
        node = self._get(f"/projects/{project}/issues/{issue}")
        try:
            return Issue.model_validate(node)
        except ValidationError as exc:
            raise GitLabError(f"Unexpected issue payload from GitLab: {exc}") from exc

    def create_note(self, project: int, issue: int, body: str) -> Note:
        node = self._post(f"/projects/{project}/issues/{issue}/notes", {"body": body})
        try:
            return Note.model_validate(node)
        except ValidationError as exc:
            raise GitLabError(f"Unexpected note payload from GitLab: {exc}") from exc
