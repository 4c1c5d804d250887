"""Tests for ba_proof.domain.gate.ProofGate."""

from unittest.mock import MagicMock

import pytest

from src.ba_common.errors import NotOwnerError, ProofGateDisabledError, PublicInputLengthError
from src.ba_proof.domain.gate import ProofGate
from src.ba_proof.domain.public_inputs import expected_length
from src.ba_proof.infrastructure.verifiers import PermissiveVerifier, RejectingVerifier

OWNER = "0x0000000000000000000000000000000000000001"
STRANGER = "0x2222222222222222222222222222222222222222"
LENGTH = expected_length(4)


class TestProofGate:
    def test_returns_verifier_answer(self) -> None:
        assert ProofGate(PermissiveVerifier(), OWNER, True).verify(b"p", [0] * LENGTH, LENGTH)
        assert not ProofGate(RejectingVerifier(), OWNER, True).verify(
            b"p", [0] * LENGTH, LENGTH
        )

    def test_passes_proof_and_inputs_through(self) -> None:
        verifier = PermissiveVerifier()
        ProofGate(verifier, OWNER, True).verify(b"proof", list(range(LENGTH)), LENGTH)
        assert verifier.calls == [(b"proof", list(range(LENGTH)))]

    def test_wrong_length_never_reaches_verifier(self) -> None:
        verifier = MagicMock()
        gate = ProofGate(verifier, OWNER, True)
        with pytest.raises(PublicInputLengthError):
            gate.verify(b"p", [0] * (LENGTH - 1), LENGTH)
        verifier.verify.assert_not_called()

    def test_default_length_from_settings(self) -> None:
        verifier = MagicMock()
        verifier.verify.return_value = True
        assert ProofGate(verifier, OWNER, True).verify(b"p", [0] * 25)

    def test_disabled_gate_rejects(self) -> None:
        verifier = MagicMock()
        gate = ProofGate(verifier, OWNER, enabled=False)
        with pytest.raises(ProofGateDisabledError):
            gate.verify(b"p", [0] * LENGTH, LENGTH)
        verifier.verify.assert_not_called()

    def test_owner_toggles(self) -> None:
        gate = ProofGate(PermissiveVerifier(), OWNER, True)
        gate.set_enabled(OWNER, False)
        assert not gate.enabled
        gate.set_enabled(OWNER, True)
        assert gate.enabled

    def test_non_owner_cannot_toggle(self) -> None:
        gate = ProofGate(PermissiveVerifier(), OWNER, True)
        with pytest.raises(NotOwnerError):
            gate.set_enabled(STRANGER, False)
        assert gate.enabled

    def test_default_owner_from_settings(self) -> None:
        assert ProofGate(PermissiveVerifier()).owner == OWNER
