import pytest

from starsalloc.address import (
    AccAddress,
    bech32_decode,
    bech32_encode,
    sample_address,
)

FUNDER_HEX = "8CEF4A78C2225BBD62040BCD0FF0B12FFD48C1BF"
FUNDER_BECH32 = "stars13nh557xzyfdm6csyp0xslu939l753sdlgdc2q0"


def test_hex_address_matches_known_bech32():
    assert str(AccAddress.from_hex(FUNDER_HEX)) == FUNDER_BECH32


def test_bech32_address_decodes_to_known_hex():
    assert AccAddress.from_bech32(FUNDER_BECH32).raw.hex().upper() == FUNDER_HEX


def test_encode_decode_round_trip():
    data = bytes(range(20))
    hrp, decoded = bech32_decode(bech32_encode("stars", data))
    assert hrp == "stars"
    assert decoded == data


def test_decode_accepts_upper_case():
    hrp, data = bech32_decode(FUNDER_BECH32.upper())
    assert hrp == "stars"
    assert data.hex().upper() == FUNDER_HEX


def test_decode_rejects_mixed_case():
    with pytest.raises(ValueError):
        bech32_decode("Stars" + FUNDER_BECH32[5:])


def test_bad_checksum_is_rejected():
    last = FUNDER_BECH32[-1]
    corrupted = FUNDER_BECH32[:-1] + ("q" if last != "q" else "p")
    with pytest.raises(ValueError, match="checksum"):
        AccAddress.from_bech32(corrupted)


def test_wrong_prefix_is_rejected():
    other = bech32_encode("cosmos", bytes(20))
    with pytest.raises(ValueError, match="prefix"):
        AccAddress.from_bech32(other)


@pytest.mark.parametrize("text", ["", "   ", "invalid_address"])
def test_invalid_strings_are_rejected(text):
    with pytest.raises(ValueError):
        AccAddress.from_bech32(text)


def test_from_hex_requires_input():
    with pytest.raises(ValueError, match="must provide an address"):
        AccAddress.from_hex("")


def test_empty_address_prints_empty():
    assert str(AccAddress()) == ""


def test_module_address_is_deterministic():
    first = AccAddress.module_address("fairburn_pool")
    second = AccAddress.module_address("fairburn_pool")
    assert first == second
    assert len(first.raw) == 20
    assert first != AccAddress.module_address("fee_collector")
    assert AccAddress.from_bech32(str(first)) == first


def test_sample_address_parses():
    text = sample_address()
    assert text.startswith("stars1")
    assert len(AccAddress.from_bech32(text).raw) == 20
    assert sample_address() != text