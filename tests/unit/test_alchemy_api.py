from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from alchemy_nft.adapters.alchemy_api import AlchemyAPIClient
from alchemy_nft.core.errors import AdapterError, NormalizationError, RateLimitError

BASE_URL = "https://eth-mainnet.g.alchemy.com/nft/v2/test-key"


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    max_retries: int = 3,
) -> AlchemyAPIClient:
    return AlchemyAPIClient(
        BASE_URL,
        max_retries=max_retries,
        backoff=0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_single_builds_url_and_list_params() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code=200, json={"ownedNfts": []})

    async with _make_client(handler) as client:
        payload = await client.fetch_single(
            "getNFTs",
            {"owner": "0xowner", "contractAddresses[]": ["0xa", "0xb"], "withMetadata": False},
        )

    assert payload == {"ownedNfts": []}
    request = seen[0]
    assert request.url.path == "/nft/v2/test-key/getNFTs"
    assert request.url.params.get_list("contractAddresses[]") == ["0xa", "0xb"]
    assert request.url.params["withMetadata"] == "false"
    assert request.headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_server_errors_are_retried() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            return httpx.Response(status_code=502, text="bad gateway")
        return httpx.Response(status_code=200, json=True)

    async with _make_client(handler) as client:
        assert await client.fetch_single("isSpamContract", {"contractAddress": "0xabc"}) is True

    assert attempts == 3


@pytest.mark.asyncio
async def test_server_errors_reraise_after_last_attempt() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(status_code=500, text="oops")

    async with _make_client(handler, max_retries=2) as client:
        with pytest.raises(AdapterError) as excinfo:
            await client.fetch_single("getSpamContracts", {})

    assert attempts == 2
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
@pytest.mark.parametrize(("status", "error_type"), [(400, AdapterError), (429, RateLimitError)])
async def test_client_errors_are_not_retried(status: int, error_type: type) -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(status_code=status, text="rejected")

    async with _make_client(handler) as client:
        with pytest.raises(error_type) as excinfo:
            await client.fetch_single("getNFTMetadata", {"refreshCache": True})

    assert attempts == 1
    assert excinfo.value.status_code == status
    assert excinfo.value.body == "rejected"
    assert "test-key" not in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_failures_are_wrapped_and_retried() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        raise httpx.ConnectError("connection refused", request=request)

    async with _make_client(handler, max_retries=2) as client:
        with pytest.raises(AdapterError) as excinfo:
            await client.fetch_single("getSpamContracts", {})

    assert attempts == 2
    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_invalid_json_raises_normalization_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, text="<html>")

    async with _make_client(handler) as client:
        with pytest.raises(NormalizationError):
            await client.fetch_single("getSpamContracts", {})
