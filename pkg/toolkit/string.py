import uuid


def unique_trace_id() -> str:
    """生成请求级 trace_id（32 位十六进制）"""
    return uuid.uuid4().hex


def mask_secret(value: str | None, *, keep: int = 4) -> str:
    """
    脱敏敏感字符串（client_secret、access_token、code 等），仅保留前 keep 位。

    >>> mask_secret("act.abcdef123456")
    'act.****'
    >>> mask_secret("")
    ''
    """
    if not value:
        return ""
    if len(value) <= keep:
        return "*" * len(value)
    return f"{value[:keep]}****"
