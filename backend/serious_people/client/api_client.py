"""SeriousPlanClient: async httpx client for the Serious People API.

Used by the poller and by scripts that drive a user through plan generation.
All responses are returned as plain dicts in the API's camelCase shape.
"""

from uuid import UUID

import httpx
import structlog

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail, retry_after: float | None = None):
        self.status_code = status_code
        self.detail = detail
        self.retry_after = retry_after
        super().__init__(f"API error {status_code}: {detail}")

    @property
    def retryable(self) -> bool:
        if isinstance(self.detail, dict) and "retryable" in self.detail:
            return bool(self.detail["retryable"])
        return self.status_code >= 500

    @property
    def code(self) -> str | None:
        return self.detail.get("code") if isinstance(self.detail, dict) else None


class SeriousPlanClient:
    """Thin wrapper over the HTTP API.

    Pass ``http_client`` to reuse a connection pool (or an ASGITransport client
    in tests); otherwise the client owns one and closes it in ``aclose()``.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "SeriousPlanClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict:
        response = await self._http.request(method, f"{self._base_url}{path}", json=json, headers=self._headers)
        if response.is_success:
            return response.json()

        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = response.text

        retry_after = response.headers.get("Retry-After")
        raise ApiError(
            response.status_code,
            detail,
            retry_after=float(retry_after) if retry_after else None,
        )

    async def get_journey(self) -> dict:
        """GET /api/journey -> {step, currentPath, state}"""
        return await self._request("GET", "/api/journey")

    async def create_plan(self) -> dict:
        """POST /api/serious-plan -> {planId, created}"""
        return await self._request("POST", "/api/serious-plan")

    async def get_latest_plan(self) -> dict:
        """GET /api/serious-plan/latest -> {id, status, createdAt, artifacts}"""
        return await self._request("GET", "/api/serious-plan/latest")

    async def get_coach_letter(self) -> dict:
        """GET /api/serious-plan/letter -> {status, content, seenAt}"""
        return await self._request("GET", "/api/serious-plan/letter")

    async def mark_coach_letter_seen(self) -> dict:
        """POST /api/serious-plan/letter/seen -> {status, content, seenAt}"""
        return await self._request("POST", "/api/serious-plan/letter/seen")

    async def ensure_artifacts(self, user_id: str, force_regenerate: bool = False) -> dict:
        """Admin only. POST /api/serious-plan/ensure-artifacts"""
        return await self._request(
            "POST",
            "/api/serious-plan/ensure-artifacts",
            json={"userId": user_id, "forceRegenerate": force_regenerate},
        )

    async def regenerate_artifact(self, artifact_id: UUID | str) -> dict:
        """POST /api/serious-plan/artifacts/{id}/regenerate"""
        return await self._request("POST", f"/api/serious-plan/artifacts/{artifact_id}/regenerate")
