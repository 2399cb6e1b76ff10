"""Tests del ReconciliationWorker."""

import asyncio

import pytest

from rental_engine.application.use_cases.reconcile_rentals import ReconcileRentalsUseCase, ReconcileReport
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker


class TestReconciliationWorker:
    @pytest.mark.asyncio
    async def test_run_once_uses_clock_and_keeps_report(self, bundle, clock):
        use_case = ReconcileRentalsUseCase(bundle["store"], bundle["tx_manager"])
        worker = ReconciliationWorker(use_case.execute, clock, worker_id="reconciler-test")

        report = await worker.run_once()

        assert report.now == clock.now()
        assert report.vehicles_scanned == 2
        assert worker.last_report is report
        assert worker.worker_id == "reconciler-test"

    @pytest.mark.asyncio
    async def test_request_run_wakes_loop(self, clock):
        calls = []
        ran = asyncio.Event()

        async def runner(now):
            calls.append(now)
            ran.set()
            return ReconcileReport(now=now)

        worker = ReconciliationWorker(runner, clock, interval_seconds=60)
        worker.start()
        await asyncio.wait_for(ran.wait(), timeout=1)
        ran.clear()

        worker.request_run()
        await asyncio.wait_for(ran.wait(), timeout=1)
        await worker.stop()

        assert len(calls) == 2
        assert not worker.is_running

    @pytest.mark.asyncio
    async def test_failed_pass_does_not_stop_loop(self, clock):
        attempts = 0
        ran = asyncio.Event()

        async def runner(now):
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise RuntimeError("store caído")
            ran.set()
            return ReconcileReport(now=now, executed_count=1)

        worker = ReconciliationWorker(runner, clock, interval_seconds=0.01)
        worker.start()
        await asyncio.wait_for(ran.wait(), timeout=1)
        await worker.stop()

        assert attempts >= 2
        assert worker.last_report.executed_count == 1

    @pytest.mark.asyncio
    async def test_stop_without_start(self, clock):
        async def runner(now):
            return ReconcileReport(now=now)

        worker = ReconciliationWorker(runner, clock)

        await worker.stop()

        assert not worker.is_running
        assert worker.last_report is None
