from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, List, NoReturn, Optional, TypeVar

import typer
from pydantic import BaseModel

from ..client import Alchemy
from ..config.settings import get_settings
from ..core.errors import AlchemyError, ConfigurationError
from ..core.logging import configure_logging
from ..core.types import (
    GetNftsForContractOptions,
    GetNftsForOwnerOptions,
    GetOwnersForContractOptions,
    NftExcludeFilters,
    NftTokenType,
)
from ..namespaces.nft import NftNamespace

app = typer.Typer(help="Alchemy NFT API CLI")

T = TypeVar("T")


def _build_client() -> Alchemy:
    return Alchemy(get_settings())


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, help="日誌等級，預設讀取 LOG_LEVEL"),
) -> None:
    """設定日誌後執行子指令。"""

    try:
        settings = get_settings()
    except ConfigurationError as error:
        exit_with_error(error)
    configure_logging(log_level or settings.log_level)


@app.command("metadata")
def command_metadata(
    contract_address: str = typer.Argument(..., help="NFT 合約地址"),
    token_id: str = typer.Argument(..., help="Token id，十進位或 0x 十六進位"),
    token_type: Optional[NftTokenType] = typer.Option(None, help="指定合約標準以加速查詢"),
    token_uri_timeout_ms: Optional[int] = typer.Option(None, help="即時抓取中繼資料的逾時（毫秒）"),
) -> None:
    """取得單一 NFT 中繼資料。"""

    _run(lambda nft: nft.get_nft_metadata(contract_address, token_id, token_type, token_uri_timeout_ms))


@app.command("contract")
def command_contract(contract_address: str) -> None:
    """取得合約中繼資料。"""

    _run(lambda nft: nft.get_contract_metadata(contract_address))


@app.command("owned")
def command_owned(
    owner: str = typer.Argument(..., help="持有者地址"),
    contract: Optional[List[str]] = typer.Option(None, "--contract", "-c", help="只查詢指定合約，可重複"),
    omit_metadata: bool = typer.Option(False, help="只回傳 base NFT"),
    exclude_spam: bool = typer.Option(False, help="排除垃圾合約"),
    page_key: Optional[str] = typer.Option(None, help="起始 page key"),
    page_size: Optional[int] = typer.Option(None, help="每頁筆數（1-100）"),
    fetch_all: bool = typer.Option(False, "--all", help="翻完所有頁面"),
) -> None:
    """列出持有者的 NFT。"""

    options = _build_options(
        GetNftsForOwnerOptions,
        contract_addresses=contract or [],
        exclude_filters=[NftExcludeFilters.SPAM] if exclude_spam else [],
        page_key=page_key,
        page_size=page_size,
        omit_metadata=omit_metadata,
    )
    if fetch_all:
        _run(lambda nft: _collect(nft.get_nfts_for_owner_iterator(owner, options)))
    else:
        _run(lambda nft: nft.get_nfts_for_owner(owner, options))


@app.command("contract-nfts")
def command_contract_nfts(
    contract_address: str = typer.Argument(..., help="NFT 合約地址"),
    omit_metadata: bool = typer.Option(False, help="只回傳 base NFT"),
    page_key: Optional[str] = typer.Option(None, help="起始 token"),
    page_size: Optional[int] = typer.Option(None, help="每頁筆數（1-100）"),
    fetch_all: bool = typer.Option(False, "--all", help="翻完所有頁面"),
) -> None:
    """列出合約中的 NFT。"""

    options = _build_options(
        GetNftsForContractOptions, page_key=page_key, page_size=page_size, omit_metadata=omit_metadata
    )
    if fetch_all:
        _run(lambda nft: _collect(nft.get_nfts_for_contract_iterator(contract_address, options)))
    else:
        _run(lambda nft: nft.get_nfts_for_contract(contract_address, options))


@app.command("owners")
def command_owners(
    contract_address: str = typer.Argument(..., help="NFT 合約地址"),
    with_token_balances: bool = typer.Option(False, help="附帶每位持有者的 token 餘額"),
    block: Optional[str] = typer.Option(None, help="查詢指定區塊的持有狀態"),
    page_key: Optional[str] = typer.Option(None, help="page key"),
) -> None:
    """列出合約的持有者。"""

    options = _build_options(
        GetOwnersForContractOptions, with_token_balances=with_token_balances, block=block, page_key=page_key
    )
    _run(lambda nft: nft.get_owners_for_contract(contract_address, options))


@app.command("nft-owners")
def command_nft_owners(contract_address: str, token_id: str) -> None:
    """列出單一 NFT 的持有者。"""

    _run(lambda nft: nft.get_owners_for_nft(contract_address, token_id))


@app.command("verify")
def command_verify(
    owner: str = typer.Argument(..., help="持有者地址"),
    contracts: List[str] = typer.Argument(..., help="一或多個合約地址"),
) -> None:
    """確認持有者是否擁有指定合約的 NFT。"""

    target = contracts[0] if len(contracts) == 1 else list(contracts)
    _run(lambda nft: nft.verify_nft_ownership(owner, target))


@app.command("spam")
def command_spam(contract_address: str) -> None:
    """判斷合約是否為垃圾合約。"""

    _run(lambda nft: nft.is_spam_contract(contract_address))


@app.command("spam-contracts")
def command_spam_contracts() -> None:
    """列出所有垃圾合約。"""

    _run(lambda nft: nft.get_spam_contracts())


@app.command("floor-price")
def command_floor_price(contract_address: str) -> None:
    """查詢各交易市場的地板價。"""

    _run(lambda nft: nft.get_floor_price(contract_address))


@app.command("rarity")
def command_rarity(contract_address: str, token_id: str) -> None:
    """計算 NFT 屬性稀有度。"""

    _run(lambda nft: nft.compute_rarity(contract_address, token_id))


@app.command("attributes")
def command_attributes(contract_address: str) -> None:
    """彙整集合的屬性分布。"""

    _run(lambda nft: nft.summarize_nft_attributes(contract_address))


@app.command("search")
def command_search(query: str) -> None:
    """以關鍵字搜尋合約中繼資料。"""

    _run(lambda nft: nft.search_contract_metadata(query))


@app.command("refresh")
def command_refresh(contract_address: str, token_id: str) -> None:
    """刷新單一 NFT 中繼資料（後端限制每 15 分鐘一次）。"""

    _run(lambda nft: nft.refresh_nft_metadata(contract_address, token_id))


@app.command("refresh-contract")
def command_refresh_contract(contract_address: str) -> None:
    """將整個合約排入重新索引。"""

    _run(lambda nft: nft.refresh_contract(contract_address))


async def _collect(items: Any) -> List[Any]:
    return [item async for item in items]


def _build_options(model: Callable[..., T], **fields: Any) -> T:
    try:
        return model(**fields)
    except AlchemyError as error:
        exit_with_error(error)


def _run(call: Callable[[NftNamespace], Awaitable[T]]) -> None:
    """建立用戶端、執行呼叫並輸出 JSON；錯誤時以代碼 2 結束。"""

    async def runner() -> T:
        async with _build_client() as alchemy:
            return await call(alchemy.nft)

    try:
        result = asyncio.run(runner())
    except AlchemyError as error:
        exit_with_error(error)
    _emit(result)


def exit_with_error(error: AlchemyError) -> NoReturn:
    """輸出錯誤訊息並以代碼 2 結束程式。"""

    typer.echo(f"[{type(error).__name__}] {error}", err=True)
    raise typer.Exit(code=2)


def _emit(value: Any) -> None:
    typer.echo(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    return value
