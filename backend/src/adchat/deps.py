"""
Per-request execution context passed explicitly into every tool invocation.
"""

from __future__ import annotations

from dataclasses import dataclass

from .ports import AdsApiPort


@dataclass(frozen=True)
class Deps:
    thread_id: str
    user_id: str
    ad_account_id: str | None
    ads: AdsApiPort
