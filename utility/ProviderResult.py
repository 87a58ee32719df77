# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: ProviderResult
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Generic, Optional, TypeVar

T = TypeVar("T")


class ProviderStatus(str, Enum):
    OK = "ok"
    UNCONFIGURED = "unconfigured"
    FAILED = "failed"


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """
    Outcome of a call across an external boundary (embedding provider,
    generation provider, row store).

    Callers branch on `ok` instead of catching exceptions; `error` holds a
    short description for logging when the call failed.
    """

    status: ProviderStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ProviderStatus.OK

    @property
    def unconfigured(self) -> bool:
        return self.status is ProviderStatus.UNCONFIGURED

    @classmethod
    def success(cls, value: T) -> "ProviderResult[T]":
        return cls(status=ProviderStatus.OK, value=value)

    @classmethod
    def not_configured(cls) -> "ProviderResult[T]":
        return cls(status=ProviderStatus.UNCONFIGURED)

    @classmethod
    def failure(cls, error: str) -> "ProviderResult[T]":
        return cls(status=ProviderStatus.FAILED, error=error)

    def value_or(self, default: Any) -> Any:
        return self.value if self.ok else default


async def capture(
        awaitable: Awaitable[T],
        *,
        timeout: Optional[float] = None,
) -> ProviderResult[T]:
    """
    Await `awaitable` and fold any exception (timeouts included) into a
    FAILED result.
    """
    try:
        if timeout is not None:
            value = await asyncio.wait_for(awaitable, timeout=timeout)
        else:
            value = await awaitable
        return ProviderResult.success(value)
    except asyncio.TimeoutError:
        return ProviderResult.failure(f"timed out after {timeout}s")
    except Exception as e:
        return ProviderResult.failure(f"{type(e).__name__}: {e}")
