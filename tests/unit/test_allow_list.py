"""Tests for ba_accumulator.domain.allow_list."""

import pytest

from src.ba_accumulator.domain.allow_list import MerkleAllowList, build_allow_list
from src.ba_accumulator.domain.poseidon import hash_trader
from src.ba_common.errors import NotAllowListedError

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"
MALLORY = "0x9999999999999999999999999999999999999999"


class TestBuildAllowList:
    def test_single_member_root_is_leaf(self) -> None:
        root, proofs = build_allow_list([ALICE])
        assert root == hash_trader(ALICE)
        assert proofs[ALICE] == []

    def test_duplicates_collapse(self) -> None:
        _, proofs = build_allow_list([ALICE, ALICE.lower(), BOB])
        assert set(proofs) == {ALICE, BOB}

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_allow_list([])

    def test_odd_count_pads_to_power_of_two(self) -> None:
        _, proofs = build_allow_list([ALICE, BOB, CAROL])
        assert all(len(p) == 2 for p in proofs.values())


class TestMerkleAllowList:
    def test_every_member_passes(self) -> None:
        root, proofs = build_allow_list([ALICE, BOB, CAROL])
        checker = MerkleAllowList()
        for account, proof in proofs.items():
            checker.require_member(account, root, proof)

    def test_outsider_with_borrowed_proof_fails(self) -> None:
        root, proofs = build_allow_list([ALICE, BOB])
        with pytest.raises(NotAllowListedError):
            MerkleAllowList().require_member(MALLORY, root, proofs[ALICE])

    def test_zero_root_always_fails(self) -> None:
        with pytest.raises(NotAllowListedError):
            MerkleAllowList().require_member(ALICE, 0, [])
