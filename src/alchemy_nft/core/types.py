from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidArgumentError


class NftTokenType(str, Enum):
    """NFT 合約標準。"""

    ERC721 = "ERC721"
    ERC1155 = "ERC1155"
    UNKNOWN = "UNKNOWN"


class NftExcludeFilters(str, Enum):
    """getNFTs 可用的排除／包含過濾條件。"""

    SPAM = "SPAM"
    AIRDROPS = "AIRDROPS"


class NftOrdering(str, Enum):
    TRANSFERTIME = "TRANSFERTIME"


class RefreshState(str, Enum):
    """合約重新索引的狀態。"""

    DOES_NOT_EXIST = "does_not_exist"
    ALREADY_QUEUED = "already_queued"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    QUEUED = "queued"
    QUEUE_FAILED = "queue_failed"


class _Record(BaseModel):
    """由回應資料建立後即不可變的資料物件。"""

    model_config = ConfigDict(frozen=True)


class OpenSeaCollectionMetadata(_Record):
    """OpenSea 上的集合資訊。"""

    floor_price: Optional[float] = None
    collection_name: Optional[str] = None
    safelist_request_status: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    external_url: Optional[str] = None
    twitter_username: Optional[str] = None
    discord_url: Optional[str] = None
    last_ingested_at: Optional[str] = None


class BaseNftContract(_Record):
    address: str


class NftContract(BaseNftContract):
    """合約層級的中繼資料。"""

    token_type: NftTokenType = NftTokenType.UNKNOWN
    name: Optional[str] = None
    symbol: Optional[str] = None
    total_supply: Optional[str] = None
    open_sea: Optional[OpenSeaCollectionMetadata] = None
    contract_deployer: Optional[str] = None
    deployed_block_number: Optional[int] = None


class TokenUri(_Record):
    raw: str
    gateway: str


class Media(_Record):
    raw: str
    gateway: str
    thumbnail: Optional[str] = None
    format: Optional[str] = None
    bytes: Optional[int] = None


class SpamInfo(_Record):
    is_spam: bool
    classifications: List[str] = Field(default_factory=list)


class BaseNft(_Record):
    """省略中繼資料的 NFT，token_id 一律為十進位字串。"""

    contract: BaseNftContract
    token_id: str
    token_type: NftTokenType = NftTokenType.UNKNOWN


class Nft(BaseNft):
    """含完整中繼資料的 NFT。"""

    contract: NftContract
    title: str = ""
    description: str = ""
    time_last_updated: Optional[str] = None
    metadata_error: Optional[str] = None
    raw_metadata: Dict[str, Any] = Field(default_factory=dict)
    token_uri: Optional[TokenUri] = None
    media: List[Media] = Field(default_factory=list)
    spam_info: Optional[SpamInfo] = None


class OwnedBaseNft(BaseNft):
    balance: int = 0


class OwnedNft(Nft):
    balance: int = 0


class OwnedNftsResponse(_Record):
    owned_nfts: List[OwnedNft]
    page_key: Optional[str] = None
    total_count: int = 0
    block_hash: Optional[str] = None


class OwnedBaseNftsResponse(_Record):
    owned_nfts: List[OwnedBaseNft]
    page_key: Optional[str] = None
    total_count: int = 0
    block_hash: Optional[str] = None


class NftContractNftsResponse(_Record):
    nfts: List[Nft]
    page_key: Optional[str] = None


class NftContractBaseNftsResponse(_Record):
    nfts: List[BaseNft]
    page_key: Optional[str] = None


class NftContractTokenBalance(_Record):
    token_id: str
    balance: int


class NftContractOwner(_Record):
    owner_address: str
    token_balances: List[NftContractTokenBalance] = Field(default_factory=list)


class GetOwnersForContractResponse(_Record):
    owners: List[str]
    page_key: Optional[str] = None


class GetOwnersForContractWithTokenBalancesResponse(_Record):
    owners: List[NftContractOwner]
    page_key: Optional[str] = None


class GetOwnersForNftResponse(_Record):
    owners: List[str]
    page_key: Optional[str] = None


class FloorPriceMarketplace(_Record):
    floor_price: float
    price_currency: str
    collection_url: str
    retrieved_at: str


class FloorPriceError(_Record):
    error: str


class GetFloorPriceResponse(_Record):
    """各交易市場的地板價；查詢失敗的市場以 FloorPriceError 表示。"""

    open_sea: Optional[Union[FloorPriceMarketplace, FloorPriceError]] = None
    looks_rare: Optional[Union[FloorPriceMarketplace, FloorPriceError]] = None


class NftAttributeRarity(_Record):
    value: str
    trait_type: str
    prevalence: float


class NftAttributesResponse(_Record):
    contract_address: str
    total_supply: int
    summary: Dict[str, Dict[str, int]] = Field(default_factory=dict)


class RefreshContractResult(_Record):
    contract_address: str
    refresh_state: RefreshState
    progress: Optional[str] = None


class _Options(_Record):
    """查詢選項；欄位驗證失敗一律以 InvalidArgumentError 回報。"""

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as error:
            raise InvalidArgumentError(f"查詢選項不正確：{error}") from error


class GetNftsForOwnerOptions(_Options):
    """getNFTs 查詢選項；omit_metadata 為 True 時回傳 base NFT。"""

    contract_addresses: List[str] = Field(default_factory=list)
    exclude_filters: List[NftExcludeFilters] = Field(default_factory=list)
    include_filters: List[NftExcludeFilters] = Field(default_factory=list)
    page_key: Optional[str] = None
    page_size: Optional[int] = Field(None, ge=1, le=100)
    omit_metadata: bool = False
    token_uri_timeout_in_ms: Optional[int] = Field(None, ge=0)
    order_by: Optional[NftOrdering] = None


class GetNftsForContractOptions(_Options):
    page_key: Optional[str] = None
    page_size: Optional[int] = Field(None, ge=1, le=100)
    omit_metadata: bool = False
    token_uri_timeout_in_ms: Optional[int] = Field(None, ge=0)


class GetOwnersForContractOptions(_Options):
    """with_token_balances 為 True 時每位持有者附帶 token 餘額。"""

    with_token_balances: bool = False
    block: Optional[str] = None
    page_key: Optional[str] = None
