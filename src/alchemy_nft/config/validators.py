from __future__ import annotations

from urllib.parse import urlparse

from ..core.errors import ConfigurationError
from .settings import AlchemySettings


def validate_settings(settings: AlchemySettings) -> None:
    """確認 API 金鑰與自訂網址可用於建立連線。"""

    if not settings.api_key.strip():
        raise ConfigurationError("ALCHEMY_API_KEY 不可為空")

    if settings.url:
        parsed = urlparse(settings.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"ALCHEMY_URL 格式不正確：{settings.url}")
