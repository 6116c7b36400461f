"""Account addresses and their Bech32 text form."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass

BECH32_PREFIX = "stars"
ADDRESS_LENGTH = 20
MAX_ADDRESS_LENGTH = 255

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_MAX_BECH32_LENGTH = 1023


def _polymod(values: list[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATORS):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _convert_bits(data, from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError(f"invalid data value: {value}")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & max_value)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or (acc << (to_bits - bits)) & max_value:
        raise ValueError("invalid padding in bech32 data")
    return out


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode 8-bit ``data`` under the human-readable part ``hrp``."""
    if not hrp or any(not 33 <= ord(c) <= 126 for c in hrp):
        raise ValueError(f"invalid human-readable part: {hrp!r}")
    words = _convert_bits(bytes(data), 8, 5, True)
    polymod = _polymod(_hrp_expand(hrp) + words + [0] * 6) ^ 1
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(_CHARSET[w] for w in words + checksum)


def bech32_decode(text: str) -> tuple[str, bytes]:
    """Decode a Bech32 string into its human-readable part and 8-bit data."""
    if len(text) > _MAX_BECH32_LENGTH:
        raise ValueError(f"bech32 string too long: {len(text)}")
    if any(not 33 <= ord(c) <= 126 for c in text):
        raise ValueError("invalid character in bech32 string")
    if text.lower() != text and text.upper() != text:
        raise ValueError("bech32 string has mixed case")
    text = text.lower()
    separator = text.rfind("1")
    if separator < 1 or separator + 7 > len(text):
        raise ValueError("invalid separator index in bech32 string")
    hrp = text[:separator]
    try:
        words = [_CHARSET.index(c) for c in text[separator + 1 :]]
    except ValueError:
        raise ValueError("invalid character in bech32 data") from None
    if _polymod(_hrp_expand(hrp) + words) != 1:
        raise ValueError("invalid bech32 checksum")
    return hrp, bytes(_convert_bits(words[:-6], 5, 8, False))


@dataclass(frozen=True)
class AccAddress:
    """Raw bytes of an account address."""

    raw: bytes = b""

    @classmethod
    def from_bech32(cls, text: str) -> AccAddress:
        if not text.strip():
            raise ValueError("empty address string is not allowed")
        hrp, data = bech32_decode(text)
        if hrp != BECH32_PREFIX:
            raise ValueError(f"invalid Bech32 prefix; expected {BECH32_PREFIX}, got {hrp}")
        if not data:
            raise ValueError("addresses cannot be empty")
        if len(data) > MAX_ADDRESS_LENGTH:
            raise ValueError(f"address max length is {MAX_ADDRESS_LENGTH}, got {len(data)}")
        return cls(data)

    @classmethod
    def from_hex(cls, text: str) -> AccAddress:
        if not text:
            raise ValueError("decoding Bech32 address failed: must provide an address")
        return cls(bytes.fromhex(text))

    @classmethod
    def module_address(cls, name: str) -> AccAddress:
        return cls(hashlib.sha256(name.encode()).digest()[:ADDRESS_LENGTH])

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        if not self.raw:
            return ""
        return bech32_encode(BECH32_PREFIX, self.raw)


def sample_address() -> str:
    """Return the Bech32 form of a freshly generated random account address."""
    public_key = secrets.token_bytes(32)
    return str(AccAddress(hashlib.sha256(public_key).digest()[:ADDRESS_LENGTH]))