from __future__ import annotations

import warnings
from typing import AsyncGenerator, Dict, List, Optional, Sequence, Union

from ..adapters.base import NftTransport
from ..config.settings import AlchemySettings
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
from ..core.utils import BigNumberish
from ..services import nft_api


class NftNamespace:
    """NFT 相關的所有操作。

    請勿直接建立，透過 ``Alchemy(settings).nft`` 取得。
    """

    def __init__(self, config: AlchemySettings, transport: NftTransport) -> None:
        self._config = config
        self._transport = transport

    @property
    def config(self) -> AlchemySettings:
        return self._config

    async def get_nft_metadata(
        self,
        contract_address: str,
        token_id: BigNumberish,
        token_type: Optional[NftTokenType] = None,
        token_uri_timeout_in_ms: Optional[int] = None,
    ) -> Nft:
        """取得單一 NFT 的中繼資料。

        token_uri_timeout_in_ms 為向中繼資料主機即時抓取的逾時時間；
        設為 0 時只讀取快取，不會即時抓取。
        """

        return await nft_api.get_nft_metadata(
            self._transport, contract_address, token_id, token_type, token_uri_timeout_in_ms
        )

    async def get_contract_metadata(self, contract_address: str) -> NftContract:
        """取得 NFT 集合合約的中繼資料。"""

        return await nft_api.get_contract_metadata(self._transport, contract_address)

    def get_nfts_for_owner_iterator(
        self,
        owner: str,
        options: Optional[GetNftsForOwnerOptions] = None,
    ) -> AsyncGenerator[Union[OwnedNft, OwnedBaseNft], None]:
        """逐筆產出持有者的所有 NFT，自動翻頁直到沒有 page key。

        options.omit_metadata 為 True 時產出 OwnedBaseNft。
        """

        return nft_api.get_nfts_for_owner_iterator(self._transport, owner, options)

    async def get_nfts_for_owner(
        self,
        owner: str,
        options: Optional[GetNftsForOwnerOptions] = None,
    ) -> Union[OwnedNftsResponse, OwnedBaseNftsResponse]:
        """取得持有者的一頁 NFT。"""

        return await nft_api.get_nfts_for_owner(self._transport, owner, options)

    async def get_nfts_for_contract(
        self,
        contract_address: str,
        options: Optional[GetNftsForContractOptions] = None,
    ) -> Union[NftContractNftsResponse, NftContractBaseNftsResponse]:
        """取得合約中的一頁 NFT；omit_metadata 時回傳 base NFT。"""

        return await nft_api.get_nfts_for_contract(self._transport, contract_address, options)

    def get_nfts_for_contract_iterator(
        self,
        contract_address: str,
        options: Optional[GetNftsForContractOptions] = None,
    ) -> AsyncGenerator[Union[Nft, BaseNft], None]:
        """逐筆產出合約中的所有 NFT，自動翻頁。"""

        return nft_api.get_nfts_for_contract_iterator(self._transport, contract_address, options)

    async def get_owners_for_contract(
        self,
        contract_address: str,
        options: Optional[GetOwnersForContractOptions] = None,
    ) -> Union[GetOwnersForContractResponse, GetOwnersForContractWithTokenBalancesResponse]:
        """取得合約的所有持有者。

        預設不含 token 餘額；options.with_token_balances 為 True 時
        回傳 GetOwnersForContractWithTokenBalancesResponse。
        """

        return await nft_api.get_owners_for_contract(self._transport, contract_address, options)

    async def get_owners_for_nft(
        self,
        contract_address: str,
        token_id: BigNumberish,
    ) -> GetOwnersForNftResponse:
        return await nft_api.get_owners_for_nft(self._transport, contract_address, token_id)

    async def check_nft_ownership(self, owner: str, contract_addresses: Sequence[str]) -> bool:
        """已棄用，請改用 verify_nft_ownership。"""

        warnings.warn(
            "check_nft_ownership 已棄用，請改用 verify_nft_ownership",
            DeprecationWarning,
            stacklevel=2,
        )
        return await nft_api.check_nft_ownership(self._transport, owner, contract_addresses)

    async def verify_nft_ownership(
        self,
        owner: str,
        contract_address: Union[str, Sequence[str]],
    ) -> Union[bool, Dict[str, bool]]:
        """確認持有者是否擁有指定合約的 NFT。

        傳入單一地址字串時回傳 bool；傳入地址清單時回傳
        以各地址為鍵的 {地址: bool}。其他型態會拋出 InvalidArgumentError。
        """

        return await nft_api.verify_nft_ownership(self._transport, owner, contract_address)

    async def is_spam_contract(self, contract_address: str) -> bool:
        """回傳合約是否被 Alchemy 標記為垃圾合約。"""

        return await nft_api.is_spam_contract(self._transport, contract_address)

    async def get_spam_contracts(self) -> List[str]:
        return await nft_api.get_spam_contracts(self._transport)

    async def get_floor_price(self, contract_address: str) -> GetFloorPriceResponse:
        """取得各交易市場的地板價。"""

        return await nft_api.get_floor_price(self._transport, contract_address)

    async def compute_rarity(self, contract_address: str, token_id: BigNumberish) -> List[NftAttributeRarity]:
        """計算 NFT 每個屬性的稀有度。"""

        return await nft_api.compute_rarity(self._transport, contract_address, token_id)

    async def search_contract_metadata(self, query: str) -> List[NftContract]:
        """在所有 ERC-721 與 ERC-1155 合約的中繼資料中搜尋關鍵字。"""

        return await nft_api.search_contract_metadata(self._transport, query)

    async def summarize_nft_attributes(self, contract_address: str) -> NftAttributesResponse:
        return await nft_api.summarize_nft_attributes(self._transport, contract_address)

    async def refresh_nft_metadata(self, contract_address: str, token_id: BigNumberish) -> bool:
        """刷新單一 NFT 的快取中繼資料，回傳是否確實刷新。

        後端對每個 token 全域限制 15 分鐘只能刷新一次，冷卻期間的
        拒絕會原樣拋出，不會在本地重試。上次刷新時間可由
        Nft.time_last_updated 取得。整個合約請改用 refresh_contract。
        """

        return await nft_api.refresh_nft_metadata(self._transport, contract_address, token_id)

    async def refresh_contract(self, contract_address: str) -> RefreshContractResult:
        """將合約內所有 NFT 排入重新索引佇列，適用於集合揭曉之後。"""

        return await nft_api.refresh_contract(self._transport, contract_address)
