"""Tests for ba_commitment.domain.codec."""

import pytest
from eth_abi.packed import encode_packed
from eth_utils import keccak

from src.ba_commitment.domain.codec import (
    COMMITMENT_DOMAIN,
    as_bytes32,
    compute_commitment,
    generate_salt,
    verify_reveal,
)
from src.ba_common.errors import CommitmentMismatchError, InvalidAddressError, InvalidOrderError

TRADER = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
SALT = b"\x07" * 32


class TestComputeCommitment:
    def test_matches_packed_keccak_layout(self) -> None:
        packed = encode_packed(
            ["bytes32", "address", "uint128", "uint128", "bool", "bytes32"],
            [COMMITMENT_DOMAIN, TRADER, 100, 1000, True, SALT],
        )
        assert compute_commitment(TRADER, 100, 1000, True, SALT) == keccak(packed)

    def test_domain_constant(self) -> None:
        assert COMMITMENT_DOMAIN == keccak(text="LATCH_COMMITMENT_V1")

    def test_is_deterministic(self) -> None:
        a = compute_commitment(TRADER, 100, 1000, True, SALT)
        b = compute_commitment(TRADER, 100, 1000, True, SALT)
        assert a == b
        assert len(a) == 32

    def test_hex_salt_equals_bytes_salt(self) -> None:
        hex_salt = "0x" + SALT.hex()
        assert compute_commitment(TRADER, 1, 1, False, hex_salt) == compute_commitment(
            TRADER, 1, 1, False, SALT
        )

    def test_address_case_does_not_matter(self) -> None:
        upper = "0x" + "AB" * 20
        assert compute_commitment(upper, 5, 6, True, SALT) == compute_commitment(
            upper.lower(), 5, 6, True, SALT
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"trader": OTHER},
            {"amount": 101},
            {"limit_price": 999},
            {"is_buy": False},
            {"salt": b"\x08" * 32},
        ],
    )
    def test_single_field_perturbation_changes_hash(self, kwargs: dict) -> None:
        base = {
            "trader": TRADER,
            "amount": 100,
            "limit_price": 1000,
            "is_buy": True,
            "salt": SALT,
        }
        assert compute_commitment(**{**base, **kwargs}) != compute_commitment(**base)

    def test_rejects_amount_above_uint128(self) -> None:
        with pytest.raises(InvalidOrderError):
            compute_commitment(TRADER, 1 << 128, 1, True, SALT)

    def test_rejects_negative_price(self) -> None:
        with pytest.raises(InvalidOrderError):
            compute_commitment(TRADER, 1, -1, True, SALT)

    def test_rejects_non_bool_side(self) -> None:
        with pytest.raises(InvalidOrderError):
            compute_commitment(TRADER, 1, 1, 1, SALT)  # type: ignore[arg-type]

    def test_rejects_bad_address(self) -> None:
        with pytest.raises(InvalidAddressError):
            compute_commitment("0x1234", 1, 1, True, SALT)


class TestAsBytes32:
    def test_short_bytes_rejected(self) -> None:
        with pytest.raises(InvalidOrderError):
            as_bytes32(b"\x01" * 31)

    def test_non_hex_string_rejected(self) -> None:
        with pytest.raises(InvalidOrderError):
            as_bytes32("0xzz")

    def test_generated_salt_is_32_bytes(self) -> None:
        salt = generate_salt()
        assert len(salt) == 32
        assert as_bytes32(salt) == salt


class TestVerifyReveal:
    def test_matching_plaintext_passes(self) -> None:
        stored = compute_commitment(TRADER, 100, 1000, True, SALT)
        verify_reveal(stored, TRADER, 100, 1000, True, SALT)

    def test_mismatch_reports_both_hashes_only(self) -> None:
        stored = compute_commitment(TRADER, 100, 1000, True, SALT)
        with pytest.raises(CommitmentMismatchError) as exc_info:
            verify_reveal(stored, TRADER, 100, 999, True, SALT)
        err = exc_info.value
        assert err.code == 3001
        assert err.expected == "0x" + stored.hex()
        assert err.actual == "0x" + compute_commitment(TRADER, 100, 999, True, SALT).hex()
        assert "999" not in err.message.replace(err.actual, "").replace(err.expected, "")
