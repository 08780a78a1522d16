"""NFT API 各項操作的實作：組合查詢參數、呼叫傳輸層並解析回應。"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Union

from ..adapters.base import NftTransport
from ..core.errors import InvalidArgumentError, NormalizationError
from ..core.types import (
    BaseNft,
    GetFloorPriceResponse,
    GetNftsForContractOptions,
    GetNftsForOwnerOptions,
    GetOwnersForContractOptions,
    GetOwnersForContractResponse,
    GetOwnersForContractWithTokenBalancesResponse,
    GetOwnersForNftResponse,
    Nft,
    NftAttributeRarity,
    NftAttributesResponse,
    NftContract,
    NftContractBaseNftsResponse,
    NftContractNftsResponse,
    NftTokenType,
    OwnedBaseNft,
    OwnedBaseNftsResponse,
    OwnedNft,
    OwnedNftsResponse,
    RefreshContractResult,
)
from ..core.utils import BigNumberish, drop_none, normalize_token_id
from .normalize import NftNormalizer
from .pagination import Page, paginate

_normalizer = NftNormalizer()


def _owner_params(owner: str, options: GetNftsForOwnerOptions) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "owner": owner,
        "pageSize": options.page_size,
        "withMetadata": not options.omit_metadata,
        "tokenUriTimeoutInMs": options.token_uri_timeout_in_ms,
        "orderBy": options.order_by.value if options.order_by else None,
    }
    if options.contract_addresses:
        params["contractAddresses[]"] = list(options.contract_addresses)
    if options.exclude_filters:
        params["excludeFilters[]"] = [item.value for item in options.exclude_filters]
    if options.include_filters:
        params["includeFilters[]"] = [item.value for item in options.include_filters]
    return drop_none(params)


def _contract_params(contract_address: str, options: GetNftsForContractOptions) -> Dict[str, Any]:
    return drop_none(
        {
            "contractAddress": contract_address,
            "limit": options.page_size,
            "withMetadata": not options.omit_metadata,
            "tokenUriTimeoutInMs": options.token_uri_timeout_in_ms,
        }
    )


def _owned_page(omit_metadata: bool):
    def parse(payload: Any) -> Page[Union[OwnedNft, OwnedBaseNft]]:
        if not isinstance(payload, dict):
            raise NormalizationError(f"分頁回應格式不正確：{type(payload).__name__}")
        raw_items = payload.get("ownedNfts") or []
        convert = _normalizer.owned_base_nft if omit_metadata else _normalizer.owned_nft
        return Page(items=[convert(item) for item in raw_items], page_key=payload.get("pageKey"))

    return parse


def _contract_page(contract_address: str, omit_metadata: bool):
    def parse(payload: Any) -> Page[Union[Nft, BaseNft]]:
        if not isinstance(payload, dict):
            raise NormalizationError(f"分頁回應格式不正確：{type(payload).__name__}")
        raw_items = payload.get("nfts") or []
        if omit_metadata:
            items = [_normalizer.base_nft(item, contract_address) for item in raw_items]
        else:
            items = [_normalizer.nft(item, contract_address) for item in raw_items]
        return Page(items=items, page_key=payload.get("nextToken"))

    return parse


async def get_nft_metadata(
    transport: NftTransport,
    contract_address: str,
    token_id: BigNumberish,
    token_type: Optional[NftTokenType] = None,
    token_uri_timeout_in_ms: Optional[int] = None,
    refresh_cache: bool = False,
) -> Nft:
    params = drop_none(
        {
            "contractAddress": contract_address,
            "tokenId": normalize_token_id(token_id),
            "tokenType": token_type.value if token_type and token_type != NftTokenType.UNKNOWN else None,
            "tokenUriTimeoutInMs": token_uri_timeout_in_ms,
            "refreshCache": True if refresh_cache else None,
        }
    )
    payload = await transport.fetch_single("getNFTMetadata", params)
    return _normalizer.nft(payload, contract_address)


async def get_contract_metadata(transport: NftTransport, contract_address: str) -> NftContract:
    payload = await transport.fetch_single("getContractMetadata", {"contractAddress": contract_address})
    return _normalizer.contract_metadata(payload)


async def get_nfts_for_owner(
    transport: NftTransport,
    owner: str,
    options: Optional[GetNftsForOwnerOptions] = None,
) -> Union[OwnedNftsResponse, OwnedBaseNftsResponse]:
    options = options or GetNftsForOwnerOptions()
    params = _owner_params(owner, options)
    if options.page_key:
        params["pageKey"] = options.page_key
    payload = await transport.fetch_single("getNFTs", params)
    page = _owned_page(options.omit_metadata)(payload)
    response_type = OwnedBaseNftsResponse if options.omit_metadata else OwnedNftsResponse
    return response_type(
        owned_nfts=page.items,
        page_key=page.page_key,
        total_count=int(payload.get("totalCount") or 0),
        block_hash=payload.get("blockHash"),
    )


def get_nfts_for_owner_iterator(
    transport: NftTransport,
    owner: str,
    options: Optional[GetNftsForOwnerOptions] = None,
) -> AsyncGenerator[Union[OwnedNft, OwnedBaseNft], None]:
    options = options or GetNftsForOwnerOptions()
    return paginate(
        transport,
        "getNFTs",
        _owner_params(owner, options),
        _owned_page(options.omit_metadata),
        request_key="pageKey",
        page_key=options.page_key,
    )


async def get_nfts_for_contract(
    transport: NftTransport,
    contract_address: str,
    options: Optional[GetNftsForContractOptions] = None,
) -> Union[NftContractNftsResponse, NftContractBaseNftsResponse]:
    options = options or GetNftsForContractOptions()
    params = _contract_params(contract_address, options)
    if options.page_key:
        params["startToken"] = options.page_key
    payload = await transport.fetch_single("getNFTsForCollection", params)
    page = _contract_page(contract_address, options.omit_metadata)(payload)
    response_type = NftContractBaseNftsResponse if options.omit_metadata else NftContractNftsResponse
    return response_type(nfts=page.items, page_key=page.page_key)


def get_nfts_for_contract_iterator(
    transport: NftTransport,
    contract_address: str,
    options: Optional[GetNftsForContractOptions] = None,
) -> AsyncGenerator[Union[Nft, BaseNft], None]:
    options = options or GetNftsForContractOptions()
    return paginate(
        transport,
        "getNFTsForCollection",
        _contract_params(contract_address, options),
        _contract_page(contract_address, options.omit_metadata),
        request_key="startToken",
        page_key=options.page_key,
    )


async def get_owners_for_contract(
    transport: NftTransport,
    contract_address: str,
    options: Optional[GetOwnersForContractOptions] = None,
) -> Union[GetOwnersForContractResponse, GetOwnersForContractWithTokenBalancesResponse]:
    options = options or GetOwnersForContractOptions()
    params = drop_none(
        {
            "contractAddress": contract_address,
            "withTokenBalances": options.with_token_balances,
            "block": options.block,
            "pageKey": options.page_key,
        }
    )
    payload = await transport.fetch_single("getOwnersForCollection", params)
    return _normalizer.owners_for_contract(payload, options.with_token_balances)


async def get_owners_for_nft(
    transport: NftTransport,
    contract_address: str,
    token_id: BigNumberish,
) -> GetOwnersForNftResponse:
    params = {"contractAddress": contract_address, "tokenId": normalize_token_id(token_id)}
    payload = await transport.fetch_single("getOwnersForToken", params)
    return _normalizer.owners_for_nft(payload)


async def check_nft_ownership(
    transport: NftTransport,
    owner: str,
    contract_addresses: Sequence[str],
) -> bool:
    if isinstance(contract_addresses, str) or not contract_addresses:
        raise InvalidArgumentError("至少需要提供一個合約地址")
    response = await get_nfts_for_owner(
        transport,
        owner,
        GetNftsForOwnerOptions(contract_addresses=list(contract_addresses), omit_metadata=True),
    )
    return len(response.owned_nfts) > 0


async def verify_nft_ownership(
    transport: NftTransport,
    owner: str,
    contract_address: Union[str, Sequence[str]],
) -> Union[bool, Dict[str, bool]]:
    """依輸入型態分派：單一地址回傳 bool，地址清單回傳 {地址: bool}。"""

    if not isinstance(owner, str) or not owner:
        raise InvalidArgumentError(f"owner 必須為非空字串：{owner!r}")

    if isinstance(contract_address, str):
        response = await get_nfts_for_owner(
            transport,
            owner,
            GetNftsForOwnerOptions(contract_addresses=[contract_address], omit_metadata=True),
        )
        return len(response.owned_nfts) > 0

    if not isinstance(contract_address, (list, tuple)) or not all(
        isinstance(address, str) for address in contract_address
    ):
        raise InvalidArgumentError(f"contract_address 必須為字串或字串清單：{contract_address!r}")
    if not contract_address:
        raise InvalidArgumentError("至少需要提供一個合約地址")

    result = {address: False for address in contract_address}
    pending: Dict[str, List[str]] = {}
    for address in contract_address:
        pending.setdefault(address.lower(), []).append(address)

    nfts = get_nfts_for_owner_iterator(
        transport,
        owner,
        GetNftsForOwnerOptions(contract_addresses=list(contract_address), omit_metadata=True),
    )
    try:
        async for nft in nfts:
            for address in pending.pop(nft.contract.address.lower(), []):
                result[address] = True
            if not pending:
                break
    finally:
        await nfts.aclose()
    return result


async def is_spam_contract(transport: NftTransport, contract_address: str) -> bool:
    payload = await transport.fetch_single("isSpamContract", {"contractAddress": contract_address})
    return bool(payload)


async def get_spam_contracts(transport: NftTransport) -> List[str]:
    payload = await transport.fetch_single("getSpamContracts", {})
    return list(payload or [])


async def get_floor_price(transport: NftTransport, contract_address: str) -> GetFloorPriceResponse:
    payload = await transport.fetch_single("getFloorPrice", {"contractAddress": contract_address})
    return _normalizer.floor_price(payload)


async def compute_rarity(
    transport: NftTransport,
    contract_address: str,
    token_id: BigNumberish,
) -> List[NftAttributeRarity]:
    params = {"contractAddress": contract_address, "tokenId": normalize_token_id(token_id)}
    payload = await transport.fetch_single("computeRarity", params)
    return _normalizer.rarity(payload)


async def search_contract_metadata(transport: NftTransport, query: str) -> List[NftContract]:
    payload = await transport.fetch_single("searchContractMetadata", {"query": query})
    return _normalizer.search_results(payload)


async def summarize_nft_attributes(transport: NftTransport, contract_address: str) -> NftAttributesResponse:
    payload = await transport.fetch_single("summarizeNFTAttributes", {"contractAddress": contract_address})
    return _normalizer.attributes(payload)


async def refresh_nft_metadata(
    transport: NftTransport,
    contract_address: str,
    token_id: BigNumberish,
) -> bool:
    """比較刷新前後的 time_last_updated 判斷是否真的刷新。

    後端對同一 token 的刷新有全域 15 分鐘冷卻，此處不做任何限制或重試，
    冷卻期間的拒絕會原樣拋出。
    """

    token_id_string = normalize_token_id(token_id)
    before = await get_nft_metadata(transport, contract_address, token_id_string)
    after = await get_nft_metadata(transport, contract_address, token_id_string, refresh_cache=True)
    return before.time_last_updated != after.time_last_updated


async def refresh_contract(transport: NftTransport, contract_address: str) -> RefreshContractResult:
    payload = await transport.fetch_single("reingestContract", {"contractAddress": contract_address})
    return _normalizer.refresh_result(payload)

