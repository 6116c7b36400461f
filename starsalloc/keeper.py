"""Keeper of the allocation module and in-memory keepers it works with."""

from __future__ import annotations

import copy
import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, localcontext

from starsalloc.address import AccAddress
from starsalloc.coins import Coin, Coins, new_coins, to_dec, truncate
from starsalloc.keys import (
    ATTRIBUTE_VALUE_CATEGORY,
    EVENT_TYPE_FUND_FAIRBURN_POOL,
    FAIRBURN_POOL_NAME,
    MODULE_NAME,
)
from starsalloc.messages import (
    AllocError,
    InvalidRequestError,
    MsgCreateVestingAccount,
    MsgFundFairburnPool,
    UnauthorizedError,
)
from starsalloc.params import Params, default_params

FEE_COLLECTOR_NAME = "fee_collector"
DISTRIBUTION_MODULE_NAME = "distribution"
MINT_MODULE_NAME = "mint"
DEFAULT_BOND_DENOM = "stake"
VESTING_ATTRIBUTE_VALUE_CATEGORY = "vesting"
EVENT_TYPE_MESSAGE = "message"
ATTRIBUTE_KEY_MODULE = "module"
ATTRIBUTE_KEY_SENDER = "sender"
ATTRIBUTE_KEY_AMOUNT = "amount"
COMMUNITY_POOL_FUNDER = "8CEF4A78C2225BBD62040BCD0FF0B12FFD48C1BF"

_log = logging.getLogger(f"starsalloc.x/{MODULE_NAME}")


class _InsufficientFundsError(AllocError):
    code = 5
    description = "insufficient funds"


class _SendDisabledError(AllocError):
    code = 2
    description = "send transactions are disabled"


def _mul(a, b) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 120
        return to_dec(to_dec(a) * to_dec(b))


@dataclass(frozen=True)
class Event:
    """A typed event with ordered key/value attributes."""

    type: str
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass
class BaseAccount:
    address: AccAddress
    account_number: int = 0
    sequence: int = 0


@dataclass
class _ModuleAccount(BaseAccount):
    name: str = ""


@dataclass
class DelayedVestingAccount:
    base_account: BaseAccount
    original_vesting: Coins
    end_time: int

    @property
    def address(self) -> AccAddress:
        return self.base_account.address


@dataclass
class ContinuousVestingAccount:
    base_account: BaseAccount
    original_vesting: Coins
    end_time: int
    start_time: int

    @property
    def address(self) -> AccAddress:
        return self.base_account.address


class AccountKeeper:
    """In-memory account store."""

    def __init__(self) -> None:
        self._accounts: dict[bytes, object] = {}
        self._next_number = 0

    def new_account_with_address(self, addr: AccAddress) -> BaseAccount:
        account = BaseAccount(addr, self._next_number)
        self._next_number += 1
        return account

    def get_account(self, addr: AccAddress):
        return self._accounts.get(bytes(addr))

    def set_account(self, account) -> None:
        self._accounts[bytes(account.address)] = account

    def get_module_address(self, name: str) -> AccAddress:
        return AccAddress.module_address(name)

    def get_module_account(self, name: str) -> _ModuleAccount:
        addr = self.get_module_address(name)
        account = self.get_account(addr)
        if isinstance(account, _ModuleAccount):
            return account
        account = _ModuleAccount(addr, self._next_number, name=name)
        self._next_number += 1
        self.set_account(account)
        return account


class BankKeeper:
    """In-memory balances with module accounts addressed by name."""

    def __init__(self, blocked_addrs=(), send_disabled_denoms=()) -> None:
        self._balances: dict[bytes, defaultdict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._blocked = {bytes(addr) for addr in blocked_addrs}
        self._send_disabled = set(send_disabled_denoms)

    def _credit(self, addr: AccAddress, amount: Coins) -> None:
        held = self._balances[bytes(addr)]
        for coin in amount:
            held[coin.denom] += coin.amount

    def _debit(self, addr: AccAddress, amount: Coins) -> None:
        held = self._balances[bytes(addr)]
        for coin in amount:
            if held[coin.denom] < coin.amount:
                raise _InsufficientFundsError(
                    f"{held[coin.denom]}{coin.denom} is smaller than {coin}"
                )
        for coin in amount:
            held[coin.denom] -= coin.amount

    def is_send_enabled_coins(self, *coins: Coin) -> None:
        for coin in coins:
            if coin.denom in self._send_disabled:
                raise _SendDisabledError(f"{coin.denom} transfers are currently disabled")

    def blocked_addr(self, addr: AccAddress) -> bool:
        return bytes(addr) in self._blocked

    def send_coins(self, from_addr: AccAddress, to_addr: AccAddress, amount: Coins) -> None:
        self._debit(from_addr, amount)
        self._credit(to_addr, amount)

    def send_coins_from_module_to_module(self, sender_module, recipient_module, amount) -> None:
        self.send_coins(
            AccAddress.module_address(sender_module),
            AccAddress.module_address(recipient_module),
            amount,
        )

    def send_coins_from_account_to_module(self, sender_addr, recipient_module, amount) -> None:
        self.send_coins(sender_addr, AccAddress.module_address(recipient_module), amount)

    def send_coins_from_module_to_account(self, sender_module, recipient_addr, amount) -> None:
        if self.blocked_addr(recipient_addr):
            raise UnauthorizedError(f"{recipient_addr} is not allowed to receive funds")
        self.send_coins(AccAddress.module_address(sender_module), recipient_addr, amount)

    def mint_coins(self, module_name: str, amount: Coins) -> None:
        self._credit(AccAddress.module_address(module_name), amount)

    def get_balance(self, addr: AccAddress, denom: str) -> Coin:
        held = self._balances.get(bytes(addr), {})
        return Coin(denom, held.get(denom, 0))

    def get_all_balances(self, addr: AccAddress) -> Coins:
        held = self._balances.get(bytes(addr), {})
        return new_coins(*(Coin(denom, amount) for denom, amount in held.items() if amount))


class StakingKeeper:
    """Provides the bond denomination."""

    def __init__(self, bond_denom: str = DEFAULT_BOND_DENOM) -> None:
        self._bond_denom = bond_denom

    def bond_denom(self) -> str:
        return self._bond_denom


class DistrKeeper:
    """Community pool bookkeeping backed by a bank keeper."""

    def __init__(self, bank_keeper: BankKeeper) -> None:
        self._bank = bank_keeper
        self._pool: dict[str, Decimal] = {}

    def fund_community_pool(self, amount: Coins, sender: AccAddress) -> None:
        self._bank.send_coins_from_account_to_module(sender, DISTRIBUTION_MODULE_NAME, amount)
        for coin in amount:
            self._pool[coin.denom] = self._pool.get(coin.denom, Decimal(0)) + to_dec(coin.amount)

    @property
    def community_pool(self) -> dict[str, Decimal]:
        return dict(self._pool)

    def community_pool_amount_of(self, denom: str) -> Decimal:
        return self._pool.get(denom, to_dec(0))


class Keeper:
    """State access and inflation distribution of the allocation module."""

    def __init__(self, account_keeper, bank_keeper, staking_keeper, distr_keeper, params=None):
        self.account_keeper = account_keeper
        self.bank_keeper = bank_keeper
        self.staking_keeper = staking_keeper
        self.distr_keeper = distr_keeper
        self._params = copy.deepcopy(params if params is not None else default_params())

    def get_params(self) -> Params:
        return copy.deepcopy(self._params)

    def set_params(self, params: Params) -> None:
        self._params = copy.deepcopy(params)

    def query_params(self) -> Params:
        return self.get_params()

    def get_module_account_address(self) -> AccAddress:
        return self.account_keeper.get_module_address(MODULE_NAME)

    def get_module_account(self, module_name: str):
        return self.account_keeper.get_module_account(module_name)

    def _send_to_fairburn_pool(self, sender: AccAddress, amount: Coins) -> None:
        self.bank_keeper.send_coins_from_account_to_module(sender, FAIRBURN_POOL_NAME, amount)

    def distribute_inflation(self) -> None:
        """Split the fee collector's bond-denom balance and recycle fairburn fees."""
        denom = self.staking_keeper.bond_denom()
        inflation_addr = self.account_keeper.get_module_account(FEE_COLLECTOR_NAME).address
        block_inflation = to_dec(self.bank_keeper.get_balance(inflation_addr, denom).amount)

        params = self.get_params()
        proportions = params.distribution_proportions

        nft_coin = Coin(denom, truncate(_mul(block_inflation, proportions.nft_incentives)))
        # NFT incentives go to the community pool until they are set up.
        self.distr_keeper.fund_community_pool(new_coins(nft_coin), inflation_addr)
        _log.debug("funded community pool amount=%s from=%s", nft_coin, inflation_addr)

        dev_coin = Coin(denom, truncate(_mul(block_inflation, proportions.developer_rewards)))
        for receiver in params.weighted_developer_rewards_receivers:
            portion = new_coins(self.get_proportions(dev_coin, receiver.weight))
            if not receiver.address:
                self.distr_keeper.fund_community_pool(portion, inflation_addr)
                continue
            dev_addr = AccAddress.from_bech32(receiver.address)
            self.bank_keeper.send_coins(inflation_addr, dev_addr, portion)
            _log.debug("sent coins to developer amount=%s from=%s", portion, inflation_addr)

        fairburn_addr = self.account_keeper.get_module_account(FAIRBURN_POOL_NAME).address
        collected = self.bank_keeper.get_balance(fairburn_addr, denom)
        if collected.is_zero():
            return
        self.bank_keeper.send_coins_from_module_to_module(
            FAIRBURN_POOL_NAME, FEE_COLLECTOR_NAME, new_coins(collected)
        )

    def get_proportions(self, minted_coin: Coin, ratio) -> Coin:
        return Coin(minted_coin.denom, truncate(_mul(minted_coin.amount, ratio)))

    def fund_community_pool(self) -> None:
        """Move the whole balance of the designated funder into the community pool."""
        funder = AccAddress.from_hex(COMMUNITY_POOL_FUNDER)
        balances = self.bank_keeper.get_all_balances(funder)
        if balances.is_zero():
            return
        self.distr_keeper.fund_community_pool(balances, funder)


class MsgServer:
    """Handles the module's messages; each handler returns the events it emitted."""

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def create_vesting_account(self, msg: MsgCreateVestingAccount) -> list[Event]:
        accounts = self.keeper.account_keeper
        bank = self.keeper.bank_keeper

        bank.is_send_enabled_coins(*msg.amount)
        from_addr = AccAddress.from_bech32(msg.from_address)
        to_addr = AccAddress.from_bech32(msg.to_address)

        if bank.blocked_addr(to_addr):
            raise UnauthorizedError(f"{msg.to_address} is not allowed to receive funds")
        if accounts.get_account(to_addr) is not None:
            raise InvalidRequestError(f"account {msg.to_address} already exists")

        base = accounts.new_account_with_address(to_addr)
        if type(base) is not BaseAccount:
            raise InvalidRequestError(
                f"invalid account type; expected: BaseAccount, got: {type(base).__name__}"
            )

        original = Coins(sorted(msg.amount, key=lambda coin: coin.denom))
        if msg.delayed:
            account = DelayedVestingAccount(base, original, msg.end_time)
        else:
            account = ContinuousVestingAccount(base, original, msg.end_time, msg.start_time)
        accounts.set_account(account)

        bank.send_coins(from_addr, to_addr, msg.amount)
        return [
            Event(
                EVENT_TYPE_MESSAGE,
                ((ATTRIBUTE_KEY_MODULE, VESTING_ATTRIBUTE_VALUE_CATEGORY),),
            )
        ]

    def fund_fairburn_pool(self, msg: MsgFundFairburnPool) -> list[Event]:
        sender = AccAddress.from_bech32(msg.sender)
        self.keeper._send_to_fairburn_pool(sender, msg.amount)
        return [
            Event(
                EVENT_TYPE_MESSAGE,
                (
                    (ATTRIBUTE_KEY_MODULE, ATTRIBUTE_VALUE_CATEGORY),
                    (ATTRIBUTE_KEY_SENDER, msg.sender),
                ),
            ),
            Event(EVENT_TYPE_FUND_FAIRBURN_POOL, ((ATTRIBUTE_KEY_AMOUNT, str(msg.amount)),)),
        ]