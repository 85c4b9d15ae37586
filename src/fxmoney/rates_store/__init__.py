"""Storage of currency conversion rates."""

from fxmoney.rates_store.memory import MemoryRateStore, RateSnapshot
from fxmoney.rates_store.protocol import RateStore

__all__ = ["MemoryRateStore", "RateSnapshot", "RateStore"]
