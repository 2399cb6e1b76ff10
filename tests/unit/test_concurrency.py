"""
Tests de concurrencia sobre el mismo vehículo.

Dos aprobaciones simultáneas con intervalos traslapados no pueden
confirmar ambas.
"""

import asyncio
from decimal import Decimal

import pytest

from rental_engine.domain.entities.rental_order import OrderStatus
from rental_engine.domain.entities.vehicle import VehicleStatus
from rental_engine.domain.errors import ErrorKind, OptimisticLockError


class TestConcurrentAccept:
    @pytest.mark.asyncio
    async def test_only_one_overlapping_accept_succeeds(self, facade, make_request_dto, store):
        first = (await facade.create_request(make_request_dto(), "key-1")).data
        second = (await facade.create_request(make_request_dto(start_in_days=2.5), "key-2")).data

        results = await asyncio.gather(facade.accept(first.id), facade.accept(second.id))

        assert sorted(r.success for r in results) == [False, True]
        failed = next(r for r in results if not r.success)
        assert failed.error_kind == ErrorKind.CONFLICT
        active = await store.list_orders()
        assert [o.status for o in active] == [OrderStatus.ACTIVE]

    @pytest.mark.asyncio
    async def test_many_concurrent_direct_orders(self, facade, make_order_dto, store):
        results = await asyncio.gather(
            *(facade.create_order_direct(make_order_dto(start_in_days=1 + i * 0.5), f"order-{i}") for i in range(5))
        )

        assert sum(r.success for r in results) == 1
        assert len(await store.list_orders()) == 1

    @pytest.mark.asyncio
    async def test_disjoint_accepts_both_succeed(self, facade, make_request_dto, store):
        first = (await facade.create_request(make_request_dto(start_in_days=1), "key-1")).data
        second = (await facade.create_request(make_request_dto(start_in_days=10), "key-2")).data

        results = await asyncio.gather(facade.accept(first.id), facade.accept(second.id))

        assert all(r.success for r in results)
        assert len(await store.list_orders()) == 2


class TestVersionFence:
    @pytest.mark.asyncio
    async def test_stale_vehicle_version_is_rejected(self, store):
        vehicle = await store.get_vehicle("veh-1")
        await store.save_vehicle_status(vehicle.id, VehicleStatus.BOOKED, expected_version=vehicle.version)

        with pytest.raises(OptimisticLockError) as exc_info:
            await store.save_vehicle_status(vehicle.id, VehicleStatus.AVAILABLE, expected_version=vehicle.version)

        assert exc_info.value.actual_version == vehicle.version + 1

    @pytest.mark.asyncio
    async def test_stale_request_version_is_rejected(self, facade, make_request_dto, store):
        request = (await facade.create_request(make_request_dto(), "key-1")).data
        await facade.reject(request.id, "duplicada")

        request.comment = "cambio tardío"
        with pytest.raises(OptimisticLockError):
            await store.save_request(request, expected_version=request.version)

    @pytest.mark.asyncio
    async def test_insert_of_existing_id_is_rejected(self, store):
        vehicle = await store.get_vehicle("veh-1")
        vehicle.base_rate = Decimal("1")

        with pytest.raises(OptimisticLockError):
            await store.add_vehicle(vehicle)
