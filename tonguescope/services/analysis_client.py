from pathlib import PurePosixPath

import httpx
from loguru import logger

from tonguescope.core.base_client import BaseClient
from tonguescope.core.config import settings
from tonguescope.core.version import __version__
from tonguescope.models.analysis import AnalysisRecord, HealthCheckResponse


class AnalysisPayloadError(ValueError):
    """The analysis API answered, but not with a payload we can read."""


def _parse(model, response_body: str | bytes, what: str):
    try:
        return model.model_validate_json(response_body)
    except ValueError as exc:
        logger.error(f"Unreadable {what} payload from analysis API: {exc}")
        raise AnalysisPayloadError(f"Unreadable {what} payload") from exc


class AnalysisClient(BaseClient):
    """
    Client for the remote tongue analysis API.

    The API segments the uploaded image and returns scores plus paths of
    generated visualization images, which are fetched separately by file name.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "User-Agent": f"TongueScope/{__version__}",
            "Accept": "application/json",
        }
        super().__init__(
            base_url=base_url or settings.ANALYSIS_API_URL,
            timeout=timeout or settings.ANALYSIS_API_TIMEOUT_SECONDS,
            max_retries=max_retries or settings.ANALYSIS_API_MAX_RETRIES,
            headers=headers,
            transport=transport,
        )

    @staticmethod
    def _file_name(path: str) -> str:
        # The API reports server-side paths but serves files by bare name
        return PurePosixPath(path.replace("\\", "/")).name

    async def analyze_image(
        self, filename: str, content: bytes, content_type: str = "image/jpeg"
    ) -> AnalysisRecord:
        """Upload an image for analysis. Not retried: each upload starts a new analysis."""
        logger.info(f"Submitting {filename} ({len(content)} bytes) for analysis")
        response = await self._request(
            "POST",
            "analyze_tongue",
            max_tries=1,
            files={"file": (filename, content, content_type)},
        )
        return _parse(AnalysisRecord, response.content, "analysis")

    async def get_image(self, image_path: str) -> bytes:
        return await self.get_bytes(f"image/{self._file_name(image_path)}")

    async def get_csv(self, csv_path: str) -> bytes:
        return await self.get_bytes(f"csv/{self._file_name(csv_path)}")

    async def check_health(self) -> HealthCheckResponse:
        response = await self._request("GET", "health", max_tries=1)
        return _parse(HealthCheckResponse, response.content, "health")
