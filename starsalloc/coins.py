"""Coins, coin collections and fixed-precision decimal helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from itertools import pairwise
from typing import Iterable, Iterator

DECIMAL_PLACES = 18
_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)

_DENOM = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_DENOM_RE = re.compile(_DENOM)
_DEC_COIN_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?|\.[0-9]+)\s*(" + _DENOM + r")")


def to_dec(value) -> Decimal:
    """Convert ``value`` to a decimal with 18 fractional digits."""
    if isinstance(value, bool):
        raise TypeError("a boolean is not a decimal value")
    try:
        number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid decimal value: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"invalid decimal value: {value!r}")
    with localcontext() as ctx:
        ctx.prec = 120
        return number.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN)


def truncate(value) -> int:
    """Drop the fractional part of ``value``, rounding toward zero."""
    with localcontext() as ctx:
        ctx.prec = 120
        return int(to_dec(value).to_integral_value(rounding=ROUND_DOWN))


def _is_valid_denom(denom: str) -> bool:
    return isinstance(denom, str) and _DENOM_RE.fullmatch(denom) is not None


@dataclass(frozen=True, slots=True)
class Coin:
    """An amount of a single denomination."""

    denom: str
    amount: int

    def __post_init__(self) -> None:
        if not _is_valid_denom(self.denom):
            raise ValueError(f"invalid denom: {self.denom}")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(
                f"coin amount must be an integer, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValueError(f"negative coin amount: {self.amount}")

    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class Coins:
    """An ordered collection of coins."""

    __slots__ = ("_coins",)

    def __init__(self, coins: Iterable[Coin] = ()) -> None:
        items = tuple(coins)
        for coin in items:
            if not isinstance(coin, Coin):
                raise TypeError(f"expected Coin, got {type(coin).__name__}")
        self._coins = items

    def __eq__(self, other) -> bool:
        if not isinstance(other, Coins):
            return NotImplemented
        return self._coins == other._coins

    def __hash__(self) -> int:
        return hash(self._coins)

    def __repr__(self) -> str:
        return f"Coins({list(self._coins)!r})"

    def __getitem__(self, index):
        return self._coins[index]

    def is_valid(self) -> bool:
        coins = self._coins
        if not coins:
            return True
        if any(coin.amount <= 0 for coin in coins):
            return False
        return all(low.denom < high.denom for low, high in pairwise(coins))

    def is_all_positive(self) -> bool:
        if not self._coins:
            return False
        return all(coin.amount > 0 for coin in self._coins)

    def is_zero(self) -> bool:
        return all(coin.is_zero() for coin in self._coins)

    def amount_of(self, denom: str) -> int:
        return sum(coin.amount for coin in self._coins if coin.denom == denom)

    def __iter__(self) -> Iterator[Coin]:
        return iter(self._coins)

    def __len__(self) -> int:
        return len(self._coins)

    def __str__(self) -> str:
        return ",".join(str(coin) for coin in self._coins)


def _check_unique(denoms: list[str]) -> None:
    for low, high in pairwise(denoms):
        if low == high:
            raise ValueError(f"duplicate denomination {high}")


def new_coins(*args: Coin) -> Coins:
    """Build a sorted collection without zero coins; duplicates are an error."""
    kept = sorted((coin for coin in args if not coin.is_zero()), key=lambda c: c.denom)
    _check_unique([coin.denom for coin in kept])
    return Coins(kept)


def parse_coins(text: str) -> Coins:
    """Parse ``"10stake,1.5atom"`` style text, truncating decimal amounts."""
    text = text.strip()
    if not text:
        return Coins()
    parsed: list[tuple[str, Decimal]] = []
    for part in text.split(","):
        match = _DEC_COIN_RE.fullmatch(part.strip())
        if match is None:
            raise ValueError(f"invalid decimal coin expression: {part}")
        parsed.append((match[2], to_dec(match[1])))
    kept = sorted((item for item in parsed if item[1] != 0), key=lambda item: item[0])
    _check_unique([denom for denom, _ in kept])
    return Coins(Coin(denom, truncate(amount)) for denom, amount in kept)