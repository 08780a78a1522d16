"""Alchemy NFT API client."""

from .client import Alchemy
from .config.settings import AlchemySettings, Network
from .core.errors import (
    AdapterError,
    AlchemyError,
    ConfigurationError,
    InvalidArgumentError,
    NormalizationError,
    RateLimitError,
)
from .core.types import (
    GetNftsForContractOptions,
    GetNftsForOwnerOptions,
    GetOwnersForContractOptions,
    NftExcludeFilters,
    NftOrdering,
    NftTokenType,
)
from .namespaces.nft import NftNamespace
from .version import __version__

__all__ = [
    "Alchemy",
    "AlchemySettings",
    "Network",
    "NftNamespace",
    "AlchemyError",
    "AdapterError",
    "ConfigurationError",
    "InvalidArgumentError",
    "NormalizationError",
    "RateLimitError",
    "GetNftsForContractOptions",
    "GetNftsForOwnerOptions",
    "GetOwnersForContractOptions",
    "NftExcludeFilters",
    "NftOrdering",
    "NftTokenType",
    "__version__",
]
