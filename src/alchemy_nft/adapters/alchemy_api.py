from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from ..config.settings import AlchemySettings
from ..core.errors import AdapterError, NormalizationError, RateLimitError
from ..core.logging import get_logger
from ..version import __version__

log = get_logger(__name__)


def _is_retryable(error: BaseException) -> bool:
    """僅伺服器錯誤與連線錯誤會重試，4xx 原樣拋出。"""

    if not isinstance(error, AdapterError) or isinstance(error, RateLimitError):
        return False
    return error.status_code is None or error.status_code >= 500


class AlchemyAPIClient:
    """Alchemy NFT API 的 HTTP 傳輸層。"""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 5,
        backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._max_retries = max_retries
        self._backoff = backoff
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Accept": "application/json",
                "Alchemy-Python-Sdk-Version": __version__,
                "User-Agent": f"alchemy-nft/{__version__}",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: AlchemySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AlchemyAPIClient":
        return cls(
            settings.base_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            transport=transport,
        )

    async def aclose(self) -> None:
        """關閉底層 HTTP 連線。"""

        await self._client.aclose()

    async def __aenter__(self) -> "AlchemyAPIClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def fetch_single(self, endpoint: str, params: Mapping[str, Any]) -> Any:
        """送出 GET 請求，伺服器錯誤時以指數退避重試。"""

        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            wait=wait_exponential(multiplier=self._backoff, max=8),
            stop=stop_after_attempt(self._max_retries),
            before_sleep=self._log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._get(endpoint, params)

    async def _get(self, endpoint: str, params: Mapping[str, Any]) -> Any:
        log.debug("alchemy.request", endpoint=endpoint)
        try:
            response = await self._client.get(endpoint, params=dict(params))
        except httpx.TransportError as error:
            raise AdapterError(f"Alchemy 連線失敗（{endpoint}）：{error!r}") from error

        if response.status_code >= 400:
            body = response.text
            log.warning("alchemy.http_error", endpoint=endpoint, status=response.status_code)
            error_type = RateLimitError if response.status_code == 429 else AdapterError
            raise error_type(
                f"Alchemy 回應錯誤（{endpoint}）：{response.status_code} — body: {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as error:
            raise NormalizationError(f"Alchemy 回應不是合法的 JSON（{endpoint}）") from error

    @staticmethod
    def _log_retry(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        log.warning(
            "alchemy.retry",
            attempt=state.attempt_number,
            error=str(error),
        )
