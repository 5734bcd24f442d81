"""Unit tests for the lane event service."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from decimal import Decimal
from unittest.mock import MagicMock, AsyncMock, patch
from tollgate.services.identity_resolver import VehicleIdentity
from tollgate.services.ledger import PaymentMethod
from tollgate.services.toll_event_service import handle_identity_event
from tollgate.services.toll_processor import TollResult, TollOutcome


def make_system(outcome=TollOutcome.ACCEPTED, reason=None):
    system = MagicMock()
    system.processor.process.return_value = TollResult(
        outcome=outcome, vehicle_id="RF1", payment_method=PaymentMethod.RFID,
        amount=Decimal("50.0"), balance=Decimal("50.0"), reason=reason,
    )
    return system


class TestTollEventService:
    @pytest.mark.asyncio
    async def test_identity_passed_to_processor(self):
        system = make_system()
        identity = VehicleIdentity("ABC-123", PaymentMethod.ANPR, lane_id="L1")

        with patch("tollgate.services.toll_event_service.raise_lane_alert", new_callable=AsyncMock):
            result = await handle_identity_event(identity, system)

        system.processor.process.assert_called_once_with("ABC-123", PaymentMethod.ANPR)
        assert result.accepted

    @pytest.mark.asyncio
    async def test_accepted_raises_no_alert(self):
        with patch("tollgate.services.toll_event_service.raise_lane_alert", new_callable=AsyncMock) as mock_alert:
            await handle_identity_event(VehicleIdentity("RF1", PaymentMethod.RFID), make_system())
            mock_alert.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejection_raises_lane_alert(self):
        system = make_system(TollOutcome.REJECTED_INSUFFICIENT_FUNDS, "insufficient balance")

        with patch("tollgate.services.toll_event_service.raise_lane_alert", new_callable=AsyncMock) as mock_alert:
            await handle_identity_event(VehicleIdentity("RF1", PaymentMethod.RFID, lane_id="L4"), system)
            mock_alert.assert_called_once()
            lane_id, result = mock_alert.call_args[0]
            assert lane_id == "L4"
            assert result.reason == "insufficient balance"
