"""第三方认证策略实现模块"""

from .tiktok import TikTokAuthStrategy

__all__ = [
    "TikTokAuthStrategy",
]
