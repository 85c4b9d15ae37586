from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import contextmanager
from decimal import Decimal
from threading import RLock, get_ident
from typing import Dict, Iterator, Tuple

from fxmoney.domain.monetary.currency import DEFAULT_DIRECTORY, CurrencyDirectory, CurrencyLike
from fxmoney.utils.decimal_tools import DecimalLike, as_decimal

logger = logging.getLogger(__name__)

RateKey = Tuple[str, str]


class RateSnapshot:
    """Immutable, restartable view of the rates present when the snapshot was taken.

    Iterating yields `(from_code, to_code, rate)` triples lazily. The order is the insertion
    order of the underlying mapping and is the same for every iteration.
    """

    __slots__ = ("_items",)

    def __init__(self, items: tuple[tuple[RateKey, Decimal], ...]):
        self._items = items

    def __iter__(self) -> Iterator[tuple[str, str, Decimal]]:
        for (from_code, to_code), rate in self._items:
            yield from_code, to_code, rate

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({len(self._items)} rates)"


class MemoryRateStore:
    """In-memory, thread-safe `RateStore`.

    Concurrency:
    - `get_rate` never blocks. It reads the currently published mapping, so a reader
      sees either all or none of the writes of a transaction.
    - Writes and transactions are serialized by one re-entrant lock.
    - A transaction works on a private copy of the mapping ("staged" rates) and publishes
      it with a single reference swap when the `with` block exits without exception.
      If the block raises, the copy is dropped and the store is unchanged.
    - Code running inside a transaction (same thread) reads the staged rates.
    """

    def __init__(self, rates: Mapping[RateKey, DecimalLike] | None = None, directory: CurrencyDirectory | None = None):
        """Initialize the store.

        Args:
            rates: Optional initial rates keyed by `(from, to)` currency pairs.
            directory: Resolves currency identifiers. Defaults to the `Currency` registry.
        """
        self._directory: CurrencyDirectory = directory if directory is not None else DEFAULT_DIRECTORY
        self._lock = RLock()
        self._rates: Dict[RateKey, Decimal] = {}
        self._staged: Dict[RateKey, Decimal] | None = None
        self._transaction_owner: int | None = None
        self._transaction_depth = 0

        if rates:
            with self.transaction():
                for (from_currency, to_currency), rate in rates.items():
                    self.add_rate(from_currency, to_currency, rate)

    @property
    def directory(self) -> CurrencyDirectory:
        return self._directory

    # region Protocol RateStore

    def add_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike, rate: DecimalLike) -> Decimal:
        """Implements: RateStore.add_rate"""
        key = self._rate_key(from_currency, to_currency)
        value = self._validate_rate(rate)

        with self._lock:
            self._writable_rates()[key] = value

        logger.debug(f"Stored rate {key[0]} -> {key[1]} = {value}")
        return value

    def get_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike) -> Decimal | None:
        """Implements: RateStore.get_rate"""
        key = self._rate_key(from_currency, to_currency)
        return self._readable_rates().get(key)

    def each_rate(self) -> RateSnapshot:
        """Implements: RateStore.each_rate"""
        with self._lock:
            items = tuple(self._readable_rates().items())
        return RateSnapshot(items)

    @contextmanager
    def transaction(self) -> Iterator[MemoryRateStore]:
        """Implements: RateStore.transaction

        Nested transactions on the same thread join the outermost one; only the outermost
        transaction publishes or discards the staged rates.
        """
        with self._lock:
            # Nested: already staging in this thread
            if self._transaction_depth:
                self._transaction_depth += 1
                try:
                    yield self
                finally:
                    self._transaction_depth -= 1
                return

            self._staged = dict(self._rates)
            self._transaction_owner = get_ident()
            self._transaction_depth = 1
            try:
                yield self
            except BaseException:
                logger.debug("Rate store transaction rolled back")
                raise
            else:
                self._rates = self._staged
            finally:
                self._staged = None
                self._transaction_owner = None
                self._transaction_depth = 0

    # endregion

    def clear(self) -> None:
        """Remove all rates."""
        with self._lock:
            if self._staged is not None:
                self._staged.clear()
            else:
                self._rates = {}

    def __len__(self) -> int:
        return len(self._readable_rates())

    # region Utilities

    def _rate_key(self, from_currency: CurrencyLike, to_currency: CurrencyLike) -> RateKey:
        return self._directory.resolve(from_currency).code, self._directory.resolve(to_currency).code

    @staticmethod
    def _validate_rate(rate: DecimalLike) -> Decimal:
        value = as_decimal(rate)

        # Raise: a stored rate must be usable for conversion
        if not value.is_finite() or value <= 0:
            raise ValueError(f"$rate must be a positive finite number, but provided value is: {rate!r}")

        return value

    def _readable_rates(self) -> Dict[RateKey, Decimal]:
        staged = self._staged
        if staged is not None and self._transaction_owner == get_ident():
            return staged
        return self._rates

    def _writable_rates(self) -> Dict[RateKey, Decimal]:
        # Caller holds the lock, so a staged mapping can only belong to this thread
        if self._staged is not None:
            return self._staged
        return self._rates

    # endregion

    # region Pickling

    def __getstate__(self) -> dict:
        with self._lock:
            return {"rates": dict(self._rates), "directory": self._directory}

    def __setstate__(self, state: dict) -> None:
        self.__init__(directory=state["directory"])
        self._rates = dict(state["rates"])

    # endregion

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({len(self._rates)} rates)"
