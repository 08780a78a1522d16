from __future__ import annotations

from typing import Any, Optional

from .adapters.alchemy_api import AlchemyAPIClient
from .adapters.base import NftTransport
from .config.settings import AlchemySettings, get_settings
from .config.validators import validate_settings
from .core.logging import get_logger
from .namespaces.nft import NftNamespace

log = get_logger(__name__)


class Alchemy:
    """Alchemy 用戶端入口，透過 ``alchemy.nft`` 存取 NFT 操作。

    未指定 transport 時依設定建立 AlchemyAPIClient，並於 aclose 時關閉；
    外部注入的 transport 由呼叫端自行管理。
    """

    def __init__(
        self,
        settings: Optional[AlchemySettings] = None,
        transport: Optional[NftTransport] = None,
    ) -> None:
        self._settings = settings or get_settings()
        validate_settings(self._settings)
        self._owns_transport = transport is None
        self._transport: NftTransport = transport or AlchemyAPIClient.from_settings(self._settings)
        self.nft = NftNamespace(self._settings, self._transport)
        log.debug("alchemy.client_created", network=self._settings.network.value)

    @property
    def settings(self) -> AlchemySettings:
        return self._settings

    async def aclose(self) -> None:
        """關閉由本物件建立的傳輸層。"""

        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "Alchemy":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()
