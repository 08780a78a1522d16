from __future__ import annotations

from typing import Any, Mapping, Protocol


class NftTransport(Protocol):
    """NFT API 傳輸層介面，可替換為測試或自訂實作。"""

    async def fetch_single(self, endpoint: str, params: Mapping[str, Any]) -> Any:
        """對指定端點送出一次請求並回傳解析後的 JSON。"""

    async def aclose(self) -> None:
        """釋放底層連線。"""
