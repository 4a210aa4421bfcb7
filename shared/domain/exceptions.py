"""
Domain Errors

Expected business outcomes raised by the rental contexts. Every error
carries a stable ``code`` (the error kind callers branch on) and the HTTP
status the API layer answers with. Infrastructure faults are kept apart
from domain errors because retrying them is safe.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for enumerated business errors."""

    code: str = "DomainError"
    status_code: int = 400
    default_detail: str = "The operation is not allowed."

    def __init__(self, detail: str | None = None, **context):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)

    def __str__(self) -> str:
        return f"{self.code}: {self.detail}"


# ===== Identity =====

class Unauthenticated(DomainError):
    code = "Unauthenticated"
    status_code = 401
    default_detail = "Authentication is required."


class Forbidden(DomainError):
    code = "Forbidden"
    status_code = 403
    default_detail = "You are not a participant of this reservation."


class KycRequired(DomainError):
    code = "KycRequired"
    status_code = 403
    default_detail = "Identity verification must be completed before renting."


# ===== Lookups =====

class ReservationNotFound(DomainError):
    code = "ReservationNotFound"
    status_code = 404
    default_detail = "Reservation not found."


class VehicleNotFound(DomainError):
    code = "VehicleNotFound"
    status_code = 404
    default_detail = "Vehicle not found or not available for rent."


class DisputeNotFound(DomainError):
    code = "DisputeNotFound"
    status_code = 404
    default_detail = "Dispute not found."


# ===== State machine =====

class UnknownStatus(DomainError):
    code = "UnknownStatus"
    status_code = 409
    default_detail = "Reservation status is not recognised."


class InvalidTransition(DomainError):
    code = "InvalidTransition"
    status_code = 409
    default_detail = "This status change is not allowed."


class InvalidStatus(DomainError):
    code = "InvalidStatus"
    status_code = 409
    default_detail = "The reservation is not in the expected status."


class ConcurrentModification(DomainError):
    code = "ConcurrentModification"
    status_code = 409
    default_detail = "The reservation was modified concurrently, reload and retry."


# ===== Reservation creation =====

class InvalidDateRange(DomainError):
    code = "InvalidDateRange"
    default_detail = "End date must be after start date."


class DateInPast(DomainError):
    code = "DateInPast"
    default_detail = "Start date cannot be in the past."


class DurationTooLong(DomainError):
    code = "DurationTooLong"
    default_detail = "Rental duration exceeds the allowed maximum."


class CannotRentOwnVehicle(DomainError):
    code = "CannotRentOwnVehicle"
    default_detail = "Owners cannot rent their own vehicle."


class VehicleUnavailable(DomainError):
    code = "VehicleUnavailable"
    status_code = 409
    default_detail = "The vehicle is already booked for some of these dates."


class OwnerBlockedDates(DomainError):
    code = "OwnerBlockedDates"
    status_code = 409
    default_detail = "The owner has blocked some of these dates."


class AlreadyRequested(DomainError):
    code = "AlreadyRequested"
    status_code = 409
    default_detail = "You already have an active request for this vehicle."


class CooldownActive(DomainError):
    code = "CooldownActive"
    status_code = 429
    default_detail = "Please wait before requesting this vehicle again."


# ===== Payment =====

class PaymentNotInitialized(DomainError):
    code = "PaymentNotInitialized"
    status_code = 409
    default_detail = "Payment has not been initialized for this reservation."


class PaymentNotCompleted(DomainError):
    code = "PaymentNotCompleted"
    status_code = 402
    default_detail = "The payment has not succeeded yet."


# ===== Condition reports =====

class AlreadySubmitted(DomainError):
    code = "AlreadySubmitted"
    status_code = 409
    default_detail = "You already submitted a report for this phase."


class MissingRequiredPhotos(DomainError):
    code = "MissingRequiredPhotos"
    default_detail = "All required photo slots must be provided."


class TooManyDetailPhotos(DomainError):
    code = "TooManyDetailPhotos"
    default_detail = "Too many detail photos."


# ===== Disputes =====

class DisputeAlreadyOpen(DomainError):
    code = "DisputeAlreadyOpen"
    status_code = 409
    default_detail = "A dispute is already open for this reservation."


class DisputeWindowExpired(DomainError):
    code = "DisputeWindowExpired"
    status_code = 409
    default_detail = "The dispute window for this reservation has closed."


class NoCheckoutReport(DomainError):
    code = "NoCheckoutReport"
    status_code = 409
    default_detail = "A return condition report is required before opening a dispute."


class DescriptionTooShort(DomainError):
    code = "DescriptionTooShort"
    default_detail = "Please describe the problem in at least 10 characters."


class AlreadyResolved(DomainError):
    code = "AlreadyResolved"
    status_code = 409
    default_detail = "This dispute has already been resolved."


class InvalidRetainedAmount(DomainError):
    code = "InvalidRetainedAmount"
    default_detail = "Retained amount must be positive and not exceed the deposit."


# ===== Infrastructure =====

class InfrastructureError(Exception):
    """Storage or gateway fault. Safe to retry: idempotency keys absorb repeats."""

    code = "InfrastructureError"
    status_code = 503

    def __init__(self, detail: str = "A backing service is unavailable, please retry."):
        self.detail = detail
        super().__init__(detail)


class GatewayError(InfrastructureError):
    code = "GatewayError"
