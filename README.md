# starsalloc

`starsalloc` models the inflation allocation module of a proof-of-stake chain
in plain Python: module parameters and genesis state, the module's messages
and their validation, a keeper that splits each block's inflation between NFT
incentives, developer reward receivers and the community pool, and the
fairburn pool whose collected fees are handed back to the fee collector.

It also ships two small tools used around test networks: a chain readiness
checker and a process watcher.

## Installation

```
pip install .
```

The package depends on nothing beyond the standard library. To run the tests:

```
pip install ".[test]"
pytest
```

## Library overview

| Module | What it holds |
| --- | --- |
| `starsalloc.address` | `AccAddress` (Bech32 `stars` addresses, hex and module addresses), `bech32_encode`, `bech32_decode`, `sample_address` |
| `starsalloc.coins` | `Coin`, `Coins`, `new_coins`, `parse_coins`, and the 18-digit decimal helpers `to_dec` and `truncate` |
| `starsalloc.keys` | module, store and pool names, event names, `key_prefix` |
| `starsalloc.params` | `DistributionProportions`, `WeightedAddress`, `Params`, `GenesisState`, `ParamsError`, defaults and validators |
| `starsalloc.messages` | `MsgCreateVestingAccount`, `MsgFundFairburnPool` and the `AllocError` family |
| `starsalloc.keeper` | `Keeper`, `MsgServer`, `Event`, account types and in-memory `AccountKeeper`, `BankKeeper`, `StakingKeeper`, `DistrKeeper` |
| `starsalloc.module` | `AppModule`, `begin_blocker`, `init_genesis`, `export_genesis`, `new_handler` |
| `starsalloc.wasm` | `encode` for contract custom messages and `FundFairburnPool` |
| `starsalloc.readiness` | `ChainStatus`, `SyncInfo`, `wait_for`, and the readiness command |
| `starsalloc.watcher` | `run` and the watcher command |

### Parameters

The default parameters send 45% of each block's inflation to NFT incentives
(for now the community pool) and 15% to developer rewards, 60% in total:

```python
from starsalloc.params import default_genesis, default_params

params = default_params()
params.validate()            # raises ParamsError when invalid
default_genesis().validate()
```

The two proportions must be non-negative and add up to exactly 0.60.
Developer reward receivers are `WeightedAddress` entries whose weights must
each be positive, at most 1, and sum to exactly 1; a non-empty address must be
a valid `stars` address. An empty address sends that share to the community
pool. `Params` and `GenesisState` convert to and from plain dictionaries with
`to_dict()` and `from_dict()`, decimals written as strings.

### Coins

`Coin(denom, amount)` holds a non-negative integer amount. `new_coins(...)`
drops zero coins, sorts by denomination and rejects duplicates;
`parse_coins("10stake,1.5atom")` does the same from text, truncating decimal
amounts.

### Messages

```python
from starsalloc.address import sample_address
from starsalloc.coins import Coin, new_coins
from starsalloc.messages import InvalidRequestError, MsgCreateVestingAccount

msg = MsgCreateVestingAccount(
    from_address=sample_address(),
    to_address=sample_address(),
    amount=new_coins(Coin("stake", 10)),
    start_time=100,
    end_time=100,
)
try:
    msg.validate_basic()
except InvalidRequestError as err:
    print(err)   # invalid start time: invalid request
```

Validation errors are subclasses of `AllocError`: `InvalidAddressError`,
`InvalidCoinsError`, `InvalidRequestError`, `UnauthorizedError`,
`UnknownRequestError` and `JSONUnmarshalError`. Each message also has
`route()`, `type()`, `get_sign_bytes()` (sorted compact JSON) and
`get_signers()`.

### Distributing inflation

```python
from starsalloc.keeper import BankKeeper, AccountKeeper, DistrKeeper, Keeper, StakingKeeper

bank = BankKeeper()
keeper = Keeper(AccountKeeper(), bank, StakingKeeper(), DistrKeeper(bank))
keeper.distribute_inflation()
```

`Keeper.distribute_inflation()` reads the fee collector's balance of the bond
denomination (`"stake"` by default), funds the community pool with the NFT
incentive share, pays each developer reward receiver its weighted part of the
developer share (amounts truncated), and then moves anything collected in the
fairburn pool to the fee collector. `MsgServer.fund_fairburn_pool(msg)` moves
coins from an account into the fairburn pool; `MsgServer.create_vesting_account(msg)`
creates a delayed or continuous vesting account for a new address and funds
it. Both return the events they emit.

`AppModule` wraps a keeper with JSON genesis import, validation and export,
and calls `begin_blocker` on every `begin_block()`; `new_handler(keeper)`
returns a callable that routes either message to the message server.

### Contract messages

`starsalloc.wasm.encode(contract, data, version)` turns a contract's JSON
`{"fund_fairburn_pool": {"amount": [{"denom": ..., "amount": ...}]}}` into a
list holding one `MsgFundFairburnPool` sent by the contract address.

## Command-line tools

### Readiness checker

```
starsalloc-readiness
```

Waits until every chain in a list reports a latest block height above a
threshold, polling each node's `/status` endpoint every five seconds. It is
configured through environment variables:

- `PLUGIN_CHAIN_LIST`: comma-separated node URLs (required)
- `PLUGIN_TIMEOUT`: seconds to wait for each chain (required)
- `PLUGIN_BLOCKS`: block height to exceed; missing, invalid or below 5 means 5
- `PLUGIN_CHECK_FILE`: if set, a file that must exist before checking starts

It exits with status 1 on a configuration error or as soon as one chain times
out, and with 0 once all chains are ready.

### Watcher

```
starsalloc-watcher starsd start --home /tmp/node
```

Starts the given command and serves HTTP on port 8090. A request to `/kill`
kills the command, answers `OK` and shuts the server down; other paths get a
404. At least a program and one argument must be given. The watcher always
exits with status 1 once serving ends.

## What this package does not do

The keepers keep all state in memory: there is no persistent store, no chain
node, no transaction signing or broadcasting, and no query or transaction
command line for the module. Addresses produced by `sample_address()` come
from random bytes, not from a real key pair.