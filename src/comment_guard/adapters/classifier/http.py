"""HTTP classifier provider."""

import httpx

from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.config import settings
from comment_guard.domain.errors import UpstreamUnavailableError
from comment_guard.domain.models import ClassificationResult
from comment_guard.logging import get_logger

logger = get_logger(__name__)


class HTTPClassifierProvider(ClassifierProvider):
    """Classifier served over HTTP.

    Expects ``POST {base_url}/predict`` with ``{"text": ...}`` and a JSON
    answer carrying ``classification``, ``confidenceScore`` and
    ``modelVersion``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.classifier_url).rstrip("/")
        self.timeout = timeout or settings.classifier_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "http"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def classify(self, text: str) -> ClassificationResult:
        client = await self._get_client()
        try:
            response = await client.post("/predict", json={"text": text})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Classifier request failed: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailableError("Classifier returned invalid JSON") from e

        try:
            return ClassificationResult(
                label=str(data["classification"]),
                confidence_score=float(data["confidenceScore"]),
                model_version=str(data.get("modelVersion") or "unknown"),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("classifier_malformed_response", body=str(data)[:200])
            raise UpstreamUnavailableError(f"Classifier response is malformed: {e}") from e

    async def health_check(self) -> bool:
        client = await self._get_client()
        try:
            response = await client.get("/health")
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("classifier_health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
