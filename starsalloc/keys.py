"""Names and keys of the allocation module."""

MODULE_NAME = "alloc"
STORE_KEY = MODULE_NAME
FAIRBURN_POOL_NAME = "fairburn_pool"
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME
MEM_STORE_KEY = "mem_alloc"

EVENT_TYPE_FUND_FAIRBURN_POOL = "fund_fairburn_pool"
ATTRIBUTE_VALUE_CATEGORY = MODULE_NAME

CREATE_VESTING_ACCOUNT_AMINO_NAME = "alloc/CreateVestingAccount"
FUND_FAIRBURN_POOL_AMINO_NAME = "alloc/FundFairburnPool"


def key_prefix(p: str) -> bytes:
    """Return the store key prefix for ``p``."""
    return p.encode()