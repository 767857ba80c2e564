"""OAuth state 生成与一次性校验

state 只保存在进程内存中，带 TTL，回调时消费一次即失效。
多 worker 部署时每个进程各自持有一份。
"""

import secrets
import time
from collections import OrderedDict
from collections.abc import Callable
from threading import Lock

from .errors import StateGenerationError

STATE_BYTES = 16


def generate_state() -> str:
    """生成 32 位小写十六进制的随机 state"""
    try:
        return secrets.token_hex(STATE_BYTES)
    except (OSError, NotImplementedError) as e:
        raise StateGenerationError(f"entropy source unavailable: {e}") from e


class OAuthStateStore:
    """
    按签发顺序保存 state（时钟单调，插入顺序即时间顺序），
    过期项从队首清理，超过 max_entries 时淘汰最早签发的 state。
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._states: OrderedDict[str, float] = OrderedDict()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def issue(self) -> str:
        """生成新的 state 并登记"""
        state = generate_state()
        self.save(state)
        return state

    def save(self, state: str) -> None:
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            self._states[state] = now
            self._states.move_to_end(state)
            while len(self._states) > self.max_entries:
                self._states.popitem(last=False)

    def consume(self, state: str) -> bool:
        """
        消费 state，只有在已登记、未过期、未被使用过时返回 True
        """
        if not state:
            return False
        now = self._clock()
        with self._lock:
            issued_at = self._states.pop(state, None)
            self._purge_expired(now)
        if issued_at is None:
            return False
        return now - issued_at <= self.ttl_seconds

    def _purge_expired(self, now: float) -> None:
        # 遇到第一个未过期的即停止
        while self._states:
            key, issued_at = next(iter(self._states.items()))
            if now - issued_at <= self.ttl_seconds:
                break
            self._states.popitem(last=False)
