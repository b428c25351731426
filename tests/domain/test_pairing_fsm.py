"""Testes da FSM do fluxo de pareamento."""

from __future__ import annotations

import pytest

from imobi_ai.domain.pairing import (
    ACTIVE_STATES,
    TRANSITIONS,
    PairingEvent,
    PairingFlowState,
    validate_transition,
)


class TestValidTransitions:
    @pytest.mark.parametrize(
        ("state", "event", "expected"),
        [
            (PairingFlowState.IDLE, PairingEvent.SESSION_REQUESTED, PairingFlowState.WAITING_QR),
            (
                PairingFlowState.WAITING_QR,
                PairingEvent.SESSION_DOCUMENT_READY,
                PairingFlowState.QR_READY,
            ),
            (PairingFlowState.WAITING_QR, PairingEvent.REQUEST_FAILED, PairingFlowState.IDLE),
            (PairingFlowState.QR_READY, PairingEvent.COUNTDOWN_ELAPSED, PairingFlowState.EXPIRED),
            (PairingFlowState.QR_READY, PairingEvent.SCAN_CONFIRMED, PairingFlowState.PAIRED),
            (PairingFlowState.QR_READY, PairingEvent.CANCELLED, PairingFlowState.IDLE),
            (
                PairingFlowState.EXPIRED,
                PairingEvent.SESSION_REQUESTED,
                PairingFlowState.WAITING_QR,
            ),
            (PairingFlowState.PAIRED, PairingEvent.CONNECTION_CREATED, PairingFlowState.IDLE),
        ],
    )
    def test_transition(self, state, event, expected):
        ok, next_state, reason = validate_transition(state, event)

        assert ok is True
        assert next_state == expected
        assert reason == ""


class TestInvalidTransitions:
    def test_cannot_expire_twice(self):
        ok, next_state, reason = validate_transition(
            PairingFlowState.EXPIRED, PairingEvent.COUNTDOWN_ELAPSED
        )

        assert ok is False
        assert next_state is None
        assert "No transition" in reason

    def test_cannot_scan_expired_session(self):
        ok, _, _ = validate_transition(PairingFlowState.EXPIRED, PairingEvent.SCAN_CONFIRMED)

        assert ok is False

    def test_cannot_request_while_waiting(self):
        ok, _, _ = validate_transition(
            PairingFlowState.WAITING_QR, PairingEvent.SESSION_REQUESTED
        )

        assert ok is False

    def test_paired_is_not_cancellable(self):
        ok, _, _ = validate_transition(PairingFlowState.PAIRED, PairingEvent.CANCELLED)

        assert ok is False


def test_active_states():
    assert ACTIVE_STATES == {PairingFlowState.WAITING_QR, PairingFlowState.QR_READY}


def test_every_state_is_reachable():
    targets = set(TRANSITIONS.values())

    assert targets >= set(PairingFlowState)
