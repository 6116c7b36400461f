"""Translation of contract custom messages into allocation module messages."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

from starsalloc.address import AccAddress
from starsalloc.coins import Coin, Coins, new_coins
from starsalloc.messages import InvalidCoinsError, JSONUnmarshalError, MsgFundFairburnPool

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _convert_coins(pairs) -> Coins:
    totals: dict[str, int] = {}
    for denom, amount_text in pairs:
        if not _INT_RE.fullmatch(amount_text):
            raise InvalidCoinsError(amount_text + denom)
        amount = int(amount_text)
        try:
            Coin(denom, amount)
        except ValueError as exc:
            raise InvalidCoinsError(str(exc)) from exc
        totals[denom] = totals.get(denom, 0) + amount
    return new_coins(*(Coin(denom, amount) for denom, amount in totals.items()))


@dataclass
class FundFairburnPool:
    """Contract request to fund the fairburn pool; amounts are decimal strings."""

    amount: list[tuple[str, str]] = field(default_factory=list)

    def encode(self, contract: AccAddress) -> list[MsgFundFairburnPool]:
        return [MsgFundFairburnPool.create(contract, _convert_coins(self.amount))]


def _parse_fund_fairburn_pool(raw) -> FundFairburnPool:
    if not isinstance(raw, dict):
        raise JSONUnmarshalError("fund_fairburn_pool must be an object")
    coins = raw.get("amount")
    if coins is None:
        return FundFairburnPool()
    if not isinstance(coins, list):
        raise JSONUnmarshalError("amount must be an array of coins")
    pairs = []
    for coin in coins:
        if not isinstance(coin, dict):
            raise JSONUnmarshalError("coin must be an object")
        denom = coin.get("denom", "")
        amount = coin.get("amount", "")
        if not isinstance(denom, str) or not isinstance(amount, str):
            raise JSONUnmarshalError("coin denom and amount must be strings")
        pairs.append((denom, amount))
    return FundFairburnPool(pairs)


def encode(contract: AccAddress, data, version: str) -> list[MsgFundFairburnPool]:
    """Decode a contract's custom JSON message into module messages."""
    try:
        payload = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise JSONUnmarshalError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise JSONUnmarshalError("custom alloc message must be an object")
    raw = payload.get("fund_fairburn_pool")
    if raw is None:
        raise ValueError("wasm: invalid custom alloc message")
    return _parse_fund_fairburn_pool(raw).encode(contract)