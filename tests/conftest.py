from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest

from alchemy_nft.config.settings import AlchemySettings


class FakeTransport:
    """依端點回放預先排入的回應，並記錄每次呼叫。"""

    def __init__(self, responses: Optional[Dict[str, List[Any]]] = None) -> None:
        self._responses = {key: list(value) for key, value in (responses or {}).items()}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    def queue(self, endpoint: str, *payloads: Any) -> None:
        self._responses.setdefault(endpoint, []).extend(payloads)

    async def fetch_single(self, endpoint: str, params: Mapping[str, Any]) -> Any:
        self.calls.append((endpoint, dict(params)))
        queued = self._responses.get(endpoint)
        if not queued:
            raise AssertionError(f"unexpected request to {endpoint}")
        payload = queued.pop(0)
        if isinstance(payload, BaseException):
            raise payload
        return payload

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def settings() -> AlchemySettings:
    return AlchemySettings(ALCHEMY_API_KEY="test-key", ALCHEMY_NETWORK="eth-mainnet")


@pytest.fixture
def raw_nft() -> Callable[..., Dict[str, Any]]:
    def build(
        token_id: str = "0x01",
        contract: str = "0xabc",
        time_last_updated: str = "2022-06-01T00:00:00.000Z",
        **extra: Any,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contract": {"address": contract},
            "id": {"tokenId": token_id, "tokenMetadata": {"tokenType": "ERC721"}},
            "title": "Cool Cat #1",
            "description": "a cool cat",
            "tokenUri": {"raw": "ipfs://cat/1", "gateway": "https://ipfs.io/cat/1"},
            "media": [{"raw": "ipfs://cat/1.png", "gateway": "https://ipfs.io/cat/1.png", "format": "png"}],
            "metadata": {"name": "Cool Cat #1", "attributes": []},
            "timeLastUpdated": time_last_updated,
            "contractMetadata": {
                "name": "Cool Cats",
                "symbol": "COOL",
                "totalSupply": "9999",
                "tokenType": "ERC721",
            },
        }
        payload.update(extra)
        return payload

    return build


@pytest.fixture
def raw_base_nft() -> Callable[..., Dict[str, Any]]:
    def build(token_id: str = "0x01", contract: str = "0xabc", balance: str = "1") -> Dict[str, Any]:
        return {
            "contract": {"address": contract},
            "id": {"tokenId": token_id, "tokenMetadata": {"tokenType": "ERC721"}},
            "balance": balance,
        }

    return build
