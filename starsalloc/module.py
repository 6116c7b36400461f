"""Genesis handling, block hooks and message routing of the allocation module."""

from __future__ import annotations

import json

from starsalloc.keeper import Keeper, MsgServer
from starsalloc.keys import FAIRBURN_POOL_NAME, MODULE_NAME
from starsalloc.messages import MsgCreateVestingAccount, MsgFundFairburnPool, UnknownRequestError
from starsalloc.params import GenesisState, ParamsError, default_genesis

CONSENSUS_VERSION = 2


def begin_blocker(keeper: Keeper) -> None:
    """Distribute module-specific inflation; any failure is fatal."""
    try:
        keeper.distribute_inflation()
    except Exception as exc:
        raise RuntimeError(f"Error distribute inflation: {exc}") from exc


def init_genesis(keeper: Keeper, gen_state: GenesisState) -> None:
    keeper.set_params(gen_state.params)
    keeper.get_module_account(FAIRBURN_POOL_NAME)
    keeper.fund_community_pool()


def export_genesis(keeper: Keeper) -> GenesisState:
    return GenesisState(keeper.get_params())


def new_handler(keeper: Keeper):
    """Return a callable that routes a message and returns its events."""
    server = MsgServer(keeper)

    def handle(msg):
        if isinstance(msg, MsgCreateVestingAccount):
            return server.create_vesting_account(msg)
        if isinstance(msg, MsgFundFairburnPool):
            return server.fund_fairburn_pool(msg)
        raise UnknownRequestError(
            f"unrecognized {MODULE_NAME} message type: {type(msg).__name__}"
        )

    return handle


def _load_genesis(data) -> GenesisState:
    try:
        raw = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise ParamsError(f"failed to unmarshal {MODULE_NAME} genesis state: {exc}") from exc
    return GenesisState.from_dict(raw)


def _dump_genesis(state: GenesisState) -> bytes:
    return json.dumps(state.to_dict()).encode()


class AppModule:
    """The allocation module as seen by the application."""

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def name(self) -> str:
        return MODULE_NAME

    def default_genesis(self) -> bytes:
        return _dump_genesis(default_genesis())

    def validate_genesis(self, data) -> None:
        _load_genesis(data).validate()

    def init_genesis(self, data) -> list:
        init_genesis(self.keeper, _load_genesis(data))
        return []

    def export_genesis(self) -> bytes:
        return _dump_genesis(export_genesis(self.keeper))

    def begin_block(self) -> None:
        begin_blocker(self.keeper)

    def end_block(self) -> list:
        return []

    def consensus_version(self) -> int:
        return CONSENSUS_VERSION