"""Messages of the allocation module and the errors they report."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from starsalloc.address import AccAddress
from starsalloc.coins import Coins
from starsalloc.keys import ROUTER_KEY

TYPE_MSG_CREATE_VESTING_ACCOUNT = "msg_create_vesting_account"
TYPE_MSG_FUND_FAIRBURN_POOL = "fund_fairburn_pool"


class AllocError(Exception):
    """Base error; the message is the detail followed by the error's description."""

    code = 1
    description = "internal"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{detail}: {self.description}" if detail else self.description)


class UnauthorizedError(AllocError):
    code = 4
    description = "unauthorized"


class UnknownRequestError(AllocError):
    code = 6
    description = "unknown request"


class InvalidAddressError(AllocError):
    code = 7
    description = "invalid address"


class InvalidCoinsError(AllocError):
    code = 10
    description = "invalid coins"


class InvalidRequestError(AllocError):
    code = 18
    description = "invalid request"


class JSONUnmarshalError(AllocError):
    code = 36
    description = "failed to unmarshal JSON bytes"


def _coins_json(coins: Coins) -> list[dict]:
    return [{"amount": str(coin.amount), "denom": coin.denom} for coin in coins]


def _sorted_json(value) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":")).encode()


def _as_coins(value) -> Coins:
    return value if isinstance(value, Coins) else Coins(value)


@dataclass
class MsgCreateVestingAccount:
    from_address: str = ""
    to_address: str = ""
    amount: Coins = field(default_factory=Coins)
    start_time: int = 0
    end_time: int = 0
    delayed: bool = False

    def __post_init__(self) -> None:
        self.amount = _as_coins(self.amount)

    @classmethod
    def create(cls, from_addr, to_addr, amount, start_time, end_time, delayed):
        return cls(str(from_addr), str(to_addr), amount, start_time, end_time, delayed)

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_CREATE_VESTING_ACCOUNT

    def validate_basic(self) -> None:
        try:
            AccAddress.from_bech32(self.from_address)
        except ValueError as exc:
            raise InvalidAddressError(f"invalid 'from' address: {exc}") from exc
        try:
            AccAddress.from_bech32(self.to_address)
        except ValueError as exc:
            raise InvalidAddressError(f"invalid 'to' address: {exc}") from exc
        if not self.amount.is_valid() or not self.amount.is_all_positive():
            raise InvalidCoinsError(str(self.amount))
        if self.start_time <= 0:
            raise InvalidRequestError("invalid start time")
        if self.end_time <= 0:
            raise InvalidRequestError("invalid end time")
        if self.start_time >= self.end_time:
            raise InvalidRequestError("invalid start time")

    def get_sign_bytes(self) -> bytes:
        value: dict = {}
        if self.from_address:
            value["from_address"] = self.from_address
        if self.to_address:
            value["to_address"] = self.to_address
        if len(self.amount):
            value["amount"] = _coins_json(self.amount)
        if self.start_time:
            value["start_time"] = str(self.start_time)
        if self.end_time:
            value["end_time"] = str(self.end_time)
        if self.delayed:
            value["delayed"] = True
        return _sorted_json(value)

    def get_signers(self) -> list[AccAddress]:
        return [AccAddress.from_bech32(self.from_address)]


@dataclass
class MsgFundFairburnPool:
    sender: str = ""
    amount: Coins = field(default_factory=Coins)

    def __post_init__(self) -> None:
        self.amount = _as_coins(self.amount)

    @classmethod
    def create(cls, sender, amount):
        return cls(str(sender), amount)

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_FUND_FAIRBURN_POOL

    def get_signers(self) -> list[AccAddress]:
        return [AccAddress.from_bech32(self.sender)]

    def get_sign_bytes(self) -> bytes:
        return _sorted_json({"sender": self.sender, "amount": _coins_json(self.amount)})

    def validate_basic(self) -> None:
        try:
            AccAddress.from_bech32(self.sender)
        except ValueError as exc:
            raise InvalidAddressError(f"invalid sender address ({exc})") from exc