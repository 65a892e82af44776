"""Tests for ata/state.py — shared control flags."""

from __future__ import annotations

import asyncio

import pytest

from ata.state import ControlState


class TestControlState:
    def test_defaults(self) -> None:
        state = ControlState()
        assert not state.abort
        assert not state.responding
        assert not state.pending_interrupt

    def test_flags_are_independent(self) -> None:
        state = ControlState()
        state.responding = True
        state.pending_interrupt = True
        assert not state.abort
        state.responding = False
        assert state.pending_interrupt

    def test_abort_is_sticky(self) -> None:
        state = ControlState()
        state.request_abort()
        state.request_abort()
        assert state.abort

    @pytest.mark.asyncio
    async def test_wait_for_abort_wakes_waiter(self) -> None:
        state = ControlState()
        waiter = asyncio.create_task(state.wait_for_abort())
        await asyncio.sleep(0)
        assert not waiter.done()
        state.request_abort()
        await asyncio.wait_for(waiter, timeout=1.0)

    def test_repr_lists_flags(self) -> None:
        state = ControlState()
        state.pending_interrupt = True
        assert "pending_interrupt=True" in repr(state)
