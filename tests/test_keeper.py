from decimal import Decimal
from types import SimpleNamespace

import pytest

from starsalloc.address import AccAddress
from starsalloc.coins import Coin, new_coins
from starsalloc.keeper import (
    COMMUNITY_POOL_FUNDER,
    FEE_COLLECTOR_NAME,
    MINT_MODULE_NAME,
    AccountKeeper,
    BankKeeper,
    ContinuousVestingAccount,
    DelayedVestingAccount,
    DistrKeeper,
    Event,
    Keeper,
    MsgServer,
    StakingKeeper,
)
from starsalloc.keys import FAIRBURN_POOL_NAME
from starsalloc.messages import (
    AllocError,
    InvalidRequestError,
    MsgCreateVestingAccount,
    MsgFundFairburnPool,
    UnauthorizedError,
)
from starsalloc.params import WeightedAddress, default_params

FROM_ADDR = AccAddress(b"vesting-funder-00001")
TO_ADDR = AccAddress(b"vesting-target-00001")


def make_app(bank=None):
    accounts = AccountKeeper()
    bank = bank or BankKeeper()
    staking = StakingKeeper()
    distr = DistrKeeper(bank)
    keeper = Keeper(accounts, bank, staking, distr, default_params())
    return SimpleNamespace(accounts=accounts, bank=bank, staking=staking, distr=distr, keeper=keeper)


@pytest.fixture
def app():
    return make_app()


def fund_account(bank, addr, amounts):
    bank.mint_coins(MINT_MODULE_NAME, amounts)
    bank.send_coins_from_module_to_account(MINT_MODULE_NAME, addr, amounts)


def fund_module_account(bank, module, amounts):
    bank.mint_coins(MINT_MODULE_NAME, amounts)
    bank.send_coins_from_module_to_module(MINT_MODULE_NAME, module, amounts)


def set_dev_receiver(app, receiver):
    params = app.keeper.get_params()
    params.distribution_proportions.nft_incentives = Decimal("0.45")
    params.distribution_proportions.developer_rewards = Decimal("0.15")
    params.weighted_developer_rewards_receivers = [WeightedAddress(str(receiver), Decimal(1))]
    app.keeper.set_params(params)
    return params


def test_distribution(app):
    denom = app.staking.bond_denom()
    receiver = AccAddress(b"addr1---------------")
    params = set_dev_receiver(app, receiver)

    fee_collector = app.accounts.get_module_address(FEE_COLLECTOR_NAME)
    assert app.bank.get_all_balances(fee_collector).amount_of(denom) == 0
    assert app.distr.community_pool_amount_of(denom) == Decimal(0)

    mint_coin = Coin(denom, 100_000)
    account = app.accounts.get_module_account(FEE_COLLECTOR_NAME)
    assert account.name == FEE_COLLECTOR_NAME
    fund_module_account(app.bank, account.name, new_coins(mint_coin))
    assert app.bank.get_all_balances(fee_collector).amount_of(denom) == 100_000
    assert app.distr.community_pool_amount_of(denom) == Decimal(0)

    app.keeper.distribute_inflation()

    assert app.bank.get_all_balances(fee_collector).amount_of(denom) == 40_000
    assert app.bank.get_balance(receiver, denom).amount == 15_000
    assert app.distr.community_pool_amount_of(denom) == Decimal(100_000) * (
        params.distribution_proportions.nft_incentives
    )


def test_fairburn_pool(app):
    addr1 = AccAddress(b"fairburn-funder-0001")
    denom = app.staking.bond_denom()
    set_dev_receiver(app, AccAddress(b"addr1---------------"))
    fund_amount = new_coins(Coin(denom, 100_000_000))

    fairburn = app.accounts.get_module_address(FAIRBURN_POOL_NAME)
    fee_collector = app.accounts.get_module_address(FEE_COLLECTOR_NAME)

    assert app.bank.get_balance(fairburn, denom).is_zero()
    assert app.bank.get_balance(fee_collector, denom).is_zero()
    app.keeper.distribute_inflation()
    assert app.bank.get_balance(fairburn, denom).is_zero()
    assert app.bank.get_balance(fee_collector, denom).is_zero()

    server = MsgServer(app.keeper)
    fund_account(app.bank, addr1, fund_amount)
    assert app.bank.get_balance(fairburn, denom).is_zero()
    events = server.fund_fairburn_pool(MsgFundFairburnPool.create(addr1, fund_amount))
    assert events[1] == Event("fund_fairburn_pool", (("amount", "100000000stake"),))

    assert str(app.bank.get_balance(fairburn, denom)) == str(fund_amount)
    assert app.bank.get_balance(fee_collector, denom).is_zero()

    app.keeper.distribute_inflation()

    assert str(app.bank.get_balance(fee_collector, denom)) == str(fund_amount)
    assert app.bank.get_balance(fairburn, denom).is_zero()


def test_fund_fairburn_pool_message_event(app):
    sender = AccAddress(b"fairburn-funder-0001")
    coins = new_coins(Coin("stake", 5))
    fund_account(app.bank, sender, coins)
    events = MsgServer(app.keeper).fund_fairburn_pool(MsgFundFairburnPool.create(sender, coins))
    assert events[0] == Event("message", (("module", "alloc"), ("sender", str(sender))))


def test_fund_fairburn_pool_insufficient_funds(app):
    sender = AccAddress(b"fairburn-funder-0001")
    msg = MsgFundFairburnPool.create(sender, new_coins(Coin("stake", 5)))
    with pytest.raises(AllocError, match="insufficient funds"):
        MsgServer(app.keeper).fund_fairburn_pool(msg)


def test_get_params_returns_copy(app):
    params = app.keeper.get_params()
    params.weighted_developer_rewards_receivers.append(WeightedAddress("", Decimal(1)))
    assert app.keeper.get_params().weighted_developer_rewards_receivers == []
    assert app.keeper.query_params() == default_params()


def test_module_account_address(app):
    assert app.keeper.get_module_account_address() == AccAddress.module_address("alloc")
    pool = app.keeper.get_module_account(FAIRBURN_POOL_NAME)
    assert pool.address == AccAddress.module_address(FAIRBURN_POOL_NAME)


def test_get_proportions_truncates(app):
    coin = app.keeper.get_proportions(Coin("stake", 1000), Decimal("0.333"))
    assert coin == Coin("stake", 333)


def test_empty_receiver_address_funds_community_pool(app):
    params = app.keeper.get_params()
    params.weighted_developer_rewards_receivers = [WeightedAddress("", Decimal(1))]
    app.keeper.set_params(params)
    fund_module_account(app.bank, FEE_COLLECTOR_NAME, new_coins(Coin("stake", 1000)))
    app.keeper.distribute_inflation()
    assert app.distr.community_pool_amount_of("stake") == Decimal(600)
    fee_collector = app.accounts.get_module_address(FEE_COLLECTOR_NAME)
    assert app.bank.get_balance(fee_collector, "stake").amount == 400


def test_fund_community_pool_moves_funder_balance(app):
    funder = AccAddress.from_hex(COMMUNITY_POOL_FUNDER)
    fund_account(app.bank, funder, new_coins(Coin("stake", 77)))
    app.keeper.fund_community_pool()
    assert app.bank.get_all_balances(funder).is_zero()
    assert app.distr.community_pool_amount_of("stake") == Decimal(77)


def test_fund_community_pool_without_balance(app):
    app.keeper.fund_community_pool()
    assert app.distr.community_pool == {}


def _vesting_msg(delayed):
    return MsgCreateVestingAccount.create(
        FROM_ADDR, TO_ADDR, new_coins(Coin("stake", 10)), 100, 200, delayed
    )


def test_create_continuous_vesting_account(app):
    fund_account(app.bank, FROM_ADDR, new_coins(Coin("stake", 10)))
    events = MsgServer(app.keeper).create_vesting_account(_vesting_msg(False))
    account = app.accounts.get_account(TO_ADDR)
    assert isinstance(account, ContinuousVestingAccount)
    assert (account.start_time, account.end_time) == (100, 200)
    assert account.original_vesting == new_coins(Coin("stake", 10))
    assert app.bank.get_balance(TO_ADDR, "stake").amount == 10
    assert events == [Event("message", (("module", "vesting"),))]


def test_create_delayed_vesting_account(app):
    fund_account(app.bank, FROM_ADDR, new_coins(Coin("stake", 10)))
    MsgServer(app.keeper).create_vesting_account(_vesting_msg(True))
    account = app.accounts.get_account(TO_ADDR)
    assert isinstance(account, DelayedVestingAccount)
    assert account.end_time == 200
    assert account.address == TO_ADDR


def test_create_vesting_account_existing(app):
    app.accounts.set_account(app.accounts.new_account_with_address(TO_ADDR))
    with pytest.raises(InvalidRequestError, match="already exists"):
        MsgServer(app.keeper).create_vesting_account(_vesting_msg(False))


def test_create_vesting_account_blocked():
    app = make_app(BankKeeper(blocked_addrs=[TO_ADDR]))
    with pytest.raises(UnauthorizedError, match="not allowed to receive funds"):
        MsgServer(app.keeper).create_vesting_account(_vesting_msg(False))


def test_create_vesting_account_send_disabled():
    app = make_app(BankKeeper(send_disabled_denoms=["stake"]))
    with pytest.raises(AllocError, match="transfers are currently disabled"):
        MsgServer(app.keeper).create_vesting_account(_vesting_msg(False))
    assert app.accounts.get_account(TO_ADDR) is None


def test_create_vesting_account_insufficient_funds(app):
    with pytest.raises(AllocError, match="insufficient funds"):
        MsgServer(app.keeper).create_vesting_account(_vesting_msg(False))