from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..core.errors import InvalidArgumentError, NormalizationError
from ..core.types import (
    BaseNft,
    BaseNftContract,
    FloorPriceError,
    FloorPriceMarketplace,
    GetFloorPriceResponse,
    GetOwnersForContractResponse,
    GetOwnersForContractWithTokenBalancesResponse,
    GetOwnersForNftResponse,
    Media,
    Nft,
    NftAttributeRarity,
    NftAttributesResponse,
    NftContract,
    NftContractOwner,
    NftContractTokenBalance,
    NftTokenType,
    OpenSeaCollectionMetadata,
    OwnedBaseNft,
    OwnedNft,
    RefreshContractResult,
    RefreshState,
    SpamInfo,
    TokenUri,
)
from ..core.utils import is_hex, normalize_token_id


def _token_id(value: Any) -> str:
    try:
        return normalize_token_id(value)
    except InvalidArgumentError as error:
        raise NormalizationError(f"回應中的 token id 無法解析：{value!r}") from error


def _token_type(value: Any) -> NftTokenType:
    try:
        return NftTokenType(str(value).upper())
    except ValueError:
        return NftTokenType.UNKNOWN


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        if isinstance(value, str):
            return int(value, 16) if is_hex(value) else int(value, 10)
        return int(value)
    except (TypeError, ValueError) as error:
        raise NormalizationError(f"數值欄位格式不正確：{value!r}") from error


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _text(value: Any) -> str:
    # v2 偶爾以陣列回傳 description
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(part) for part in value)
    return str(value)


def _expect_dict(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise NormalizationError(f"{what} 回應格式不正確：{type(payload).__name__}")
    return payload


def _expect_list(payload: Any, what: str) -> List[Any]:
    if not isinstance(payload, list):
        raise NormalizationError(f"{what} 回應格式不正確：{type(payload).__name__}")
    return payload


def _expect_items(payload: Any, what: str) -> List[Dict[str, Any]]:
    return [_expect_dict(item, f"{what} 項目") for item in _expect_list(payload, what)]


class NftNormalizer:
    """將 Alchemy NFT API v2 的原始 JSON 轉換為模型。"""

    def contract(self, address: str, metadata: Optional[Dict[str, Any]]) -> NftContract:
        metadata = metadata or {}
        open_sea_raw = metadata.get("openSea")
        open_sea = None
        if isinstance(open_sea_raw, dict):
            open_sea = OpenSeaCollectionMetadata(
                floor_price=open_sea_raw.get("floorPrice"),
                collection_name=open_sea_raw.get("collectionName"),
                safelist_request_status=open_sea_raw.get("safelistRequestStatus"),
                image_url=open_sea_raw.get("imageUrl"),
                description=open_sea_raw.get("description"),
                external_url=open_sea_raw.get("externalUrl"),
                twitter_username=open_sea_raw.get("twitterUsername"),
                discord_url=open_sea_raw.get("discordUrl"),
                last_ingested_at=open_sea_raw.get("lastIngestedAt"),
            )
        deployed_block = metadata.get("deployedBlockNumber")
        return NftContract(
            address=address,
            token_type=_token_type(metadata.get("tokenType")),
            name=metadata.get("name"),
            symbol=metadata.get("symbol"),
            total_supply=metadata.get("totalSupply"),
            open_sea=open_sea,
            contract_deployer=metadata.get("contractDeployer"),
            deployed_block_number=_as_int(deployed_block) if deployed_block is not None else None,
        )

    def contract_metadata(self, payload: Any) -> NftContract:
        data = _expect_dict(payload, "getContractMetadata")
        return self.contract(data.get("address", ""), data.get("contractMetadata"))

    def base_nft(self, raw: Any, contract_address: Optional[str] = None) -> BaseNft:
        raw = _expect_dict(raw, "NFT")
        token = raw.get("id") or {}
        address = (raw.get("contract") or {}).get("address") or contract_address or ""
        return BaseNft(
            contract=BaseNftContract(address=address),
            token_id=_token_id(token.get("tokenId")),
            token_type=_token_type((token.get("tokenMetadata") or {}).get("tokenType")),
        )

    def nft(self, raw: Any, contract_address: Optional[str] = None) -> Nft:
        data = _expect_dict(raw, "NFT")
        try:
            return Nft(**self._nft_fields(data, contract_address))
        except ValidationError as error:
            raise NormalizationError(f"NFT 資料格式不正確：{error}") from error

    def owned_nft(self, raw: Any) -> OwnedNft:
        raw = _expect_dict(raw, "NFT")
        try:
            return OwnedNft(**self._nft_fields(raw), balance=_as_int(raw.get("balance"), 1))
        except ValidationError as error:
            raise NormalizationError(f"NFT 資料格式不正確：{error}") from error

    def owned_base_nft(self, raw: Any) -> OwnedBaseNft:
        raw = _expect_dict(raw, "NFT")
        base = self.base_nft(raw)
        return OwnedBaseNft(
            contract=base.contract,
            token_id=base.token_id,
            token_type=base.token_type,
            balance=_as_int(raw.get("balance"), 1),
        )

    def _nft_fields(self, raw: Dict[str, Any], contract_address: Optional[str] = None) -> Dict[str, Any]:
        base = self.base_nft(raw, contract_address)
        contract_metadata = dict(raw.get("contractMetadata") or {})
        contract_metadata.setdefault("tokenType", base.token_type.value)

        token_uri_raw = raw.get("tokenUri")
        token_uri = None
        if isinstance(token_uri_raw, dict):
            token_uri = TokenUri(raw=token_uri_raw.get("raw", ""), gateway=token_uri_raw.get("gateway", ""))

        media = [
            Media(
                raw=item.get("raw", ""),
                gateway=item.get("gateway", ""),
                thumbnail=item.get("thumbnail"),
                format=item.get("format"),
                bytes=item.get("bytes"),
            )
            for item in raw.get("media") or []
            if isinstance(item, dict)
        ]

        spam_raw = raw.get("spamInfo")
        spam_info = None
        if isinstance(spam_raw, dict):
            spam_info = SpamInfo(
                is_spam=_as_bool(spam_raw.get("isSpam")),
                classifications=list(spam_raw.get("classifications") or []),
            )

        metadata = raw.get("metadata")
        return {
            "contract": self.contract(base.contract.address, contract_metadata),
            "token_id": base.token_id,
            "token_type": base.token_type,
            "title": _text(raw.get("title")),
            "description": _text(raw.get("description")),
            "time_last_updated": raw.get("timeLastUpdated"),
            "metadata_error": raw.get("error"),
            "raw_metadata": metadata if isinstance(metadata, dict) else {},
            "token_uri": token_uri,
            "media": media,
            "spam_info": spam_info,
        }

    def owners_for_contract(
        self, payload: Any, with_token_balances: bool
    ) -> Union[GetOwnersForContractResponse, GetOwnersForContractWithTokenBalancesResponse]:
        data = _expect_dict(payload, "getOwnersForCollection")
        owners = data.get("ownerAddresses") or []
        if not with_token_balances:
            return GetOwnersForContractResponse(owners=list(owners), page_key=data.get("pageKey"))
        return GetOwnersForContractWithTokenBalancesResponse(
            owners=[
                NftContractOwner(
                    owner_address=owner.get("ownerAddress", ""),
                    token_balances=[
                        NftContractTokenBalance(
                            token_id=_token_id(balance.get("tokenId")),
                            balance=_as_int(balance.get("balance")),
                        )
                        for balance in _expect_items(owner.get("tokenBalances") or [], "tokenBalances")
                    ],
                )
                for owner in _expect_items(owners, "ownerAddresses")
            ],
            page_key=data.get("pageKey"),
        )

    def owners_for_nft(self, payload: Any) -> GetOwnersForNftResponse:
        data = _expect_dict(payload, "getOwnersForToken")
        return GetOwnersForNftResponse(owners=list(data.get("owners") or []), page_key=data.get("pageKey"))

    def floor_price(self, payload: Any) -> GetFloorPriceResponse:
        data = _expect_dict(payload, "getFloorPrice")
        return GetFloorPriceResponse(
            open_sea=self._marketplace(data.get("openSea")),
            looks_rare=self._marketplace(data.get("looksRare")),
        )

    @staticmethod
    def _marketplace(raw: Any) -> Optional[Union[FloorPriceMarketplace, FloorPriceError]]:
        if not isinstance(raw, dict):
            return None
        if "error" in raw:
            return FloorPriceError(error=str(raw["error"]))
        try:
            return FloorPriceMarketplace(
                floor_price=raw.get("floorPrice"),
                price_currency=raw.get("priceCurrency"),
                collection_url=raw.get("collectionUrl"),
                retrieved_at=raw.get("retrievedAt"),
            )
        except ValidationError as error:
            raise NormalizationError(f"地板價資料格式不正確：{error}") from error

    def rarity(self, payload: Any) -> List[NftAttributeRarity]:
        return [
            NftAttributeRarity(
                value=str(item.get("value")),
                trait_type=item.get("traitType", ""),
                prevalence=float(item.get("prevalence", 0.0)),
            )
            for item in _expect_items(payload, "computeRarity")
        ]

    def attributes(self, payload: Any) -> NftAttributesResponse:
        data = _expect_dict(payload, "summarizeNFTAttributes")
        return NftAttributesResponse(
            contract_address=data.get("contractAddress", ""),
            total_supply=_as_int(data.get("totalSupply")),
            summary=data.get("summary") or {},
        )

    def search_results(self, payload: Any) -> List[NftContract]:
        return [
            self.contract(item.get("address", ""), item.get("contractMetadata"))
            for item in _expect_items(payload, "searchContractMetadata")
        ]

    def refresh_result(self, payload: Any) -> RefreshContractResult:
        data = _expect_dict(payload, "reingestContract")
        try:
            state = RefreshState(data.get("reingestionState"))
        except ValueError as error:
            raise NormalizationError(f"未知的重新索引狀態：{data.get('reingestionState')!r}") from error
        return RefreshContractResult(
            contract_address=data.get("contractAddress", ""),
            refresh_state=state,
            progress=data.get("progress"),
        )
