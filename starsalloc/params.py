"""Parameters and genesis state of the allocation module."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal

from starsalloc.address import AccAddress
from starsalloc.coins import to_dec
from starsalloc.keys import MODULE_NAME

KEY_DISTRIBUTION_PROPORTIONS = b"DistributionProportions"
KEY_DEVELOPER_REWARDS_RECEIVER = b"DeveloperRewardsReceiver"

MODULE_SHARE = Decimal("0.60")


class ParamsError(ValueError):
    """Raised when parameters or genesis state are malformed or invalid."""


def _dec_text(value: Decimal) -> str:
    return format(to_dec(value), "f")


def _parse_dec(value) -> Decimal:
    try:
        return to_dec(value)
    except (TypeError, ValueError) as exc:
        raise ParamsError(f"invalid decimal: {value!r}") from exc


@dataclass
class DistributionProportions:
    nft_incentives: Decimal = Decimal(0)
    developer_rewards: Decimal = Decimal(0)

    def __post_init__(self) -> None:
        self.nft_incentives = to_dec(self.nft_incentives)
        self.developer_rewards = to_dec(self.developer_rewards)


@dataclass
class WeightedAddress:
    address: str = ""
    weight: Decimal = Decimal(0)

    def __post_init__(self) -> None:
        self.weight = to_dec(self.weight)


@dataclass
class Params:
    distribution_proportions: DistributionProportions = field(
        default_factory=DistributionProportions
    )
    weighted_developer_rewards_receivers: list[WeightedAddress] = field(default_factory=list)

    def validate(self) -> None:
        validate_distribution_proportions(self.distribution_proportions)
        validate_weighted_developer_rewards_receivers(self.weighted_developer_rewards_receivers)

    def to_dict(self) -> dict:
        proportions = self.distribution_proportions
        return {
            "distribution_proportions": {
                "nft_incentives": _dec_text(proportions.nft_incentives),
                "developer_rewards": _dec_text(proportions.developer_rewards),
            },
            "weighted_developer_rewards_receivers": [
                {"address": w.address, "weight": _dec_text(w.weight)}
                for w in self.weighted_developer_rewards_receivers
            ],
        }

    @classmethod
    def from_dict(cls, data) -> Params:
        if not isinstance(data, dict):
            raise ParamsError("params must be an object")
        proportions = data.get("distribution_proportions") or {}
        receivers = data.get("weighted_developer_rewards_receivers") or []
        if not isinstance(proportions, dict) or not isinstance(receivers, list):
            raise ParamsError("malformed params")
        parsed_receivers = []
        for entry in receivers:
            if not isinstance(entry, dict):
                raise ParamsError("malformed weighted address")
            address = entry.get("address", "")
            if not isinstance(address, str):
                raise ParamsError("weighted address must be a string")
            parsed_receivers.append(
                WeightedAddress(address, _parse_dec(entry.get("weight", "0")))
            )
        return cls(
            DistributionProportions(
                _parse_dec(proportions.get("nft_incentives", "0")),
                _parse_dec(proportions.get("developer_rewards", "0")),
            ),
            parsed_receivers,
        )


@dataclass
class GenesisState:
    params: Params = field(default_factory=Params)

    def validate(self) -> None:
        self.params.validate()

    def to_dict(self) -> dict:
        return {"params": self.params.to_dict()}

    @classmethod
    def from_dict(cls, data) -> GenesisState:
        if not isinstance(data, dict):
            raise ParamsError("genesis state must be an object")
        return cls(Params.from_dict(data.get("params") or {}))


def default_params() -> Params:
    return Params(
        DistributionProportions(
            nft_incentives=Decimal("0.45"),
            developer_rewards=Decimal("0.15"),
        ),
        [],
    )


def default_genesis() -> GenesisState:
    return GenesisState(default_params())


def validate_distribution_proportions(value) -> None:
    if not isinstance(value, DistributionProportions):
        raise ParamsError(f"invalid parameter type: {type(value).__name__}")
    if value.nft_incentives < 0:
        raise ParamsError("NFT incentives distribution ratio should not be negative")
    if value.developer_rewards < 0:
        raise ParamsError("developer rewards distribution ratio should not be negative")
    # 60% goes to this module, 35% to validators and 5% to the community pool.
    if value.nft_incentives + value.developer_rewards != MODULE_SHARE:
        raise ParamsError("total distributions ratio should be 60%")


def validate_weighted_developer_rewards_receivers(value) -> None:
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(w, WeightedAddress) for w in value
    ):
        raise ParamsError(f"invalid parameter type: {type(value).__name__}")
    if not value:
        return
    weight_sum = Decimal(0)
    for index, receiver in enumerate(value):
        # An empty address sends the share to the community pool.
        if receiver.address:
            try:
                AccAddress.from_bech32(receiver.address)
            except ValueError:
                raise ParamsError(f"invalid address at {index}th") from None
        if receiver.weight <= 0:
            raise ParamsError(f"non-positive weight at {index}th")
        if receiver.weight > 1:
            raise ParamsError(f"more than 1 weight at {index}th")
        weight_sum += receiver.weight
    if weight_sum != 1:
        raise ParamsError(f"invalid weight sum: {_dec_text(weight_sum)}")


def genesis_state_from_app_state(app_state) -> GenesisState:
    """Extract this module's genesis state from an application state mapping."""
    raw = app_state.get(MODULE_NAME)
    if raw is None:
        return GenesisState()
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParamsError(f"invalid genesis JSON: {exc}") from exc
    return GenesisState.from_dict(raw)