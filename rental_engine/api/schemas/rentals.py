from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr

from rental_engine.application.dtos.lifecycle_dto import (
    BoardEntry,
    CreateOrderDTO,
    CreateRequestDTO,
    CustomerDTO,
    EditRequestDTO,
    UnavailablePeriod,
)
from rental_engine.application.use_cases.reconcile_rentals import ReconcileReport
from rental_engine.domain.entities.rental_order import RentalOrder
from rental_engine.domain.entities.rental_request import RentalRequest
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus
from rental_engine.domain.pricing import PriceBreakdown
from rental_engine.domain.value_objects.customer import Customer

NonEmpty = constr(strip_whitespace=True, min_length=1)


# === Entrada ===


class CustomerIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: NonEmpty
    last_name: NonEmpty
    age: int
    phone: NonEmpty
    email: EmailStr | None = None

    def to_dto(self) -> CustomerDTO:
        return CustomerDTO(
            first_name=self.first_name,
            last_name=self.last_name,
            age=self.age,
            phone=self.phone,
            email=self.email,
        )


class CreateRequestIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: NonEmpty
    customer: CustomerIn
    pickup_at: datetime
    return_at: datetime
    options: dict[str, bool] | None = None
    comment: str | None = None

    def to_dto(self) -> CreateRequestDTO:
        return CreateRequestDTO(
            vehicle_id=self.vehicle_id,
            customer=self.customer.to_dto(),
            pickup_at=self.pickup_at,
            return_at=self.return_at,
            options=self.options,
            comment=self.comment,
        )


class EditRequestIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: NonEmpty | None = None
    customer: CustomerIn | None = None
    pickup_at: datetime | None = None
    return_at: datetime | None = None
    options: dict[str, bool] | None = None
    comment: str | None = None

    def to_dto(self, request_id: str) -> EditRequestDTO:
        return EditRequestDTO(
            request_id=request_id,
            vehicle_id=self.vehicle_id,
            customer=self.customer.to_dto() if self.customer else None,
            pickup_at=self.pickup_at,
            return_at=self.return_at,
            options=self.options,
            comment=self.comment,
        )


class RejectIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: str | None = None


class CreateOrderIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: NonEmpty
    customer: CustomerIn
    pickup_at: datetime
    return_at: datetime
    options: dict[str, bool] | None = None

    def to_dto(self) -> CreateOrderDTO:
        return CreateOrderDTO(
            vehicle_id=self.vehicle_id,
            customer=self.customer.to_dto(),
            pickup_at=self.pickup_at,
            return_at=self.return_at,
            options=self.options,
        )


class VehicleStatusIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: VehicleStatus


class QuoteIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: NonEmpty
    pickup_at: datetime
    return_at: datetime
    options: dict[str, bool] | None = None


# === Salida ===


class CustomerOut(BaseModel):
    first_name: str
    last_name: str
    age: int
    phone: str
    email: str | None = None

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerOut":
        return cls(
            first_name=customer.first_name,
            last_name=customer.last_name,
            age=customer.age,
            phone=customer.phone,
            email=customer.email,
        )


class RentalRequestOut(BaseModel):
    id: str
    vehicle_id: str
    customer: CustomerOut
    pickup_at: datetime
    return_at: datetime
    options: list[str]
    comment: str | None
    amount: int
    status: str
    rejection_reason: str | None
    order_id: str | None
    created_at: datetime | None
    updated_at: datetime | None
    version: int

    @classmethod
    def from_entity(cls, request: RentalRequest) -> "RentalRequestOut":
        return cls(
            id=request.id,
            vehicle_id=request.vehicle_id,
            customer=CustomerOut.from_customer(request.customer),
            pickup_at=request.interval.pickup_at,
            return_at=request.interval.return_at,
            options=[key.value for key in request.options],
            comment=request.comment,
            amount=request.amount,
            status=request.status.value,
            rejection_reason=request.rejection_reason,
            order_id=request.order_id,
            created_at=request.created_at,
            updated_at=request.updated_at,
            version=request.version,
        )


class RentalOrderOut(BaseModel):
    id: str
    vehicle_id: str
    request_id: str | None
    customer: CustomerOut
    pickup_at: datetime
    return_at: datetime
    options: list[str]
    amount: int
    daily_rate: Decimal
    status: str
    order_type: str
    payment_status: str
    created_at: datetime | None
    updated_at: datetime | None
    version: int

    @classmethod
    def from_entity(cls, order: RentalOrder) -> "RentalOrderOut":
        return cls(
            id=order.id,
            vehicle_id=order.vehicle_id,
            request_id=order.request_id,
            customer=CustomerOut.from_customer(order.customer),
            pickup_at=order.interval.pickup_at,
            return_at=order.interval.return_at,
            options=[key.value for key in order.options],
            amount=order.amount,
            daily_rate=order.daily_rate,
            status=order.status.value,
            order_type=order.order_type.value,
            payment_status=order.payment_status.value,
            created_at=order.created_at,
            updated_at=order.updated_at,
            version=order.version,
        )


class VehicleOut(BaseModel):
    id: str
    name: str
    base_rate: Decimal
    discount_percentage: Decimal
    effective_rate: Decimal
    status: str
    version: int

    @classmethod
    def from_entity(cls, vehicle: Vehicle) -> "VehicleOut":
        return cls(
            id=vehicle.id,
            name=vehicle.name,
            base_rate=vehicle.base_rate,
            discount_percentage=vehicle.discount_percentage,
            effective_rate=vehicle.effective_rate,
            status=vehicle.status.value,
            version=vehicle.version,
        )


class BoardEntryOut(BaseModel):
    type: str
    id: str
    vehicle_id: str
    vehicle_name: str
    customer_name: str
    pickup_at: datetime
    return_at: datetime
    amount: int
    status: str
    created_at: datetime | None

    @classmethod
    def from_entry(cls, entry: BoardEntry) -> "BoardEntryOut":
        return cls(
            type=entry.entry_type.value.lower(),
            id=entry.id,
            vehicle_id=entry.vehicle_id,
            vehicle_name=entry.vehicle_name,
            customer_name=entry.customer_name,
            pickup_at=entry.pickup_at,
            return_at=entry.return_at,
            amount=entry.amount,
            status=entry.status,
            created_at=entry.created_at,
        )


class UnavailablePeriodOut(BaseModel):
    order_id: str
    start: datetime
    end: datetime

    @classmethod
    def from_period(cls, period: UnavailablePeriod) -> "UnavailablePeriodOut":
        return cls(order_id=period.order_id, start=period.start, end=period.end)


class PriceBreakdownOut(BaseModel):
    whole_days: int
    remainder_hours: int
    effective_rate: Decimal
    duration_multiplier: Decimal
    base_price: Decimal
    additional_costs: Decimal
    option_costs: dict[str, Decimal]
    total: int

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "PriceBreakdownOut":
        return cls(
            whole_days=breakdown.whole_days,
            remainder_hours=breakdown.remainder_hours,
            effective_rate=breakdown.effective_rate,
            duration_multiplier=breakdown.duration_multiplier,
            base_price=breakdown.base_price,
            additional_costs=breakdown.additional_costs,
            option_costs={key.value: cost for key, cost in breakdown.option_costs.items()},
            total=breakdown.total,
        )


class ReconcileErrorOut(BaseModel):
    vehicle_id: str
    entity_id: str | None
    message: str


class ReconcileReportOut(BaseModel):
    now: datetime
    executed_count: int
    completed_count: int
    vehicles_scanned: int
    errors: list[ReconcileErrorOut] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: ReconcileReport) -> "ReconcileReportOut":
        return cls(
            now=report.now,
            executed_count=report.executed_count,
            completed_count=report.completed_count,
            vehicles_scanned=report.vehicles_scanned,
            errors=[
                ReconcileErrorOut(vehicle_id=e.vehicle_id, entity_id=e.entity_id, message=e.message)
                for e in report.errors
            ],
        )


class OperationResponse(BaseModel):
    success: bool
    data: Any = None
    error_kind: str | None = None
    error_detail: str | None = None
    error_code: str | None = None
