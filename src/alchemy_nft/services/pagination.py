from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from ..adapters.base import NftTransport
from ..core.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """單頁結果與續頁游標；page_key 為 None 表示已無下一頁。"""

    items: List[T] = field(default_factory=list)
    page_key: Optional[str] = None


PageParser = Callable[[Any], Page[T]]


async def fetch_page(
    transport: NftTransport,
    endpoint: str,
    params: Mapping[str, Any],
    parse: PageParser[T],
) -> Page[T]:
    """取得並解析單一頁面。"""

    payload = await transport.fetch_single(endpoint, params)
    page = parse(payload)
    log.debug(
        "nft.page_fetched",
        endpoint=endpoint,
        count=len(page.items),
        has_more=page.page_key is not None,
    )
    return page


async def paginate(
    transport: NftTransport,
    endpoint: str,
    params: Mapping[str, Any],
    parse: PageParser[T],
    *,
    request_key: str,
    page_key: Optional[str] = None,
) -> AsyncGenerator[T, None]:
    """逐筆產出所有頁面的項目。

    下一頁只會在目前頁面消耗完且呼叫端要求下一筆時才請求，
    提前停止疊代不會觸發任何額外請求。
    """

    while True:
        request: Dict[str, Any] = dict(params)
        if page_key:
            request[request_key] = page_key
        page = await fetch_page(transport, endpoint, request, parse)
        for item in page.items:
            yield item
        if not page.page_key:
            return
        page_key = page.page_key
