"""
Order lifecycle engine: guarded handlers for every quote and booking transition.

Each public handler is one short unit of work:
1. Tag the request with a correlation ID
2. Run guards on a fresh read inside ``store.transaction()``
3. Write the new state and its audit entry, or nothing at all
4. After commit, send notifications and hand off to invoicing

Guard failures come back as a TransitionResult with a typed error; they
are never raised past this module. External calls (location capture,
photo upload) run outside the transaction with a timeout, and the guards
are re-checked once the call returns.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from fieldops.config import CompletionConfig, settings
from fieldops.errors import ErrorCode, InvalidInputError
from fieldops.lifecycle.checklist import ChecklistTracker, checklist_frequency, validate_rating
from fieldops.lifecycle.guards import (
    AuthorizationGuard,
    CompletionGuard,
    GuardRejection,
    GuardResult,
    SchedulingGuard,
    StateGuard,
    missing_evidence,
    reject,
    require,
)
from fieldops.lifecycle.notifications import DeliveryReport, NotificationDispatcher
from fieldops.lifecycle.state_machine import (
    LifecycleTrigger,
    OrderState,
    OrderStateMachine,
    booking_status_for,
    quote_status_for,
    state_of_booking,
    state_of_quote,
)
from fieldops.logging_context import begin_request, get_request_id, get_request_logger
from fieldops.schemas.actor_schema import Actor
from fieldops.schemas.booking_schema import (
    Booking,
    BookingLocation,
    BookingPhoto,
    BookingStatus,
    Employee,
    LocationType,
    PhotoType,
    StatusChange,
)
from fieldops.schemas.checklist_schema import BookingChecklistCompletion, ChecklistProgress
from fieldops.schemas.quote_schema import PropertyType, Quote, QuoteRequest
from fieldops.tools.availability import BLOCKING_STATUSES, available_employees
from fieldops.tools.evidence import EvidenceStorage, upload_photo
from fieldops.tools.invoicing import InvoiceDraft, Invoicer
from fieldops.tools.location import LocationProvider, capture_location
from fieldops.tools.pricing import estimate, format_currency
from fieldops.tools.services import resolve_service
from fieldops.tools.store import ServiceStore, new_id
from fieldops.utils import haversine_km, is_valid_time

logger = get_request_logger(__name__)


@dataclass
class TransitionResult:
    """Outcome of a lifecycle operation."""
    success: bool
    error: Optional[ErrorCode] = None
    message: Optional[str] = None
    quote: Optional[Quote] = None
    booking: Optional[Booking] = None
    completion: Optional[BookingChecklistCompletion] = None
    photo: Optional[BookingPhoto] = None
    invoice: Optional[InvoiceDraft] = None
    deliveries: list[DeliveryReport] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)
    request_id: str = ""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _booking_message_data(booking: Booking) -> dict[str, Any]:
    return {
        "service": booking.service_type,
        "date": booking.service_date.isoformat(),
        "time": booking.service_time,
        "final_price": format_currency(booking.final_price),
    }


class OrderLifecycle:
    """
    Stateless transition handlers over a shared store.

    Usage:
        lifecycle = OrderLifecycle(store, dispatcher, location_provider)
        result = lifecycle.assign_employee(admin, booking_id, employee_id)
        if not result.success:
            print(result.error, result.message)
    """

    def __init__(
        self,
        store: ServiceStore,
        dispatcher: NotificationDispatcher,
        location_provider: LocationProvider,
        evidence_storage: Optional[EvidenceStorage] = None,
        invoicer: Optional[Invoicer] = None,
        completion_policy: Optional[CompletionConfig] = None,
        location_timeout: Optional[float] = None,
        upload_timeout: Optional[float] = None,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self.location_provider = location_provider
        self.evidence_storage = evidence_storage
        self.invoicer = invoicer
        self.location_timeout = location_timeout
        self.upload_timeout = upload_timeout

        self.checklist = ChecklistTracker(store)
        self.auth = AuthorizationGuard()
        self.states = StateGuard()
        self.scheduling = SchedulingGuard()
        self.completion = CompletionGuard(self.checklist, completion_policy or settings.completion)

    # ------------------------------------------------------------------ #
    # Shared plumbing
    # ------------------------------------------------------------------ #

    def _begin(self, operation: str, actor: Actor, target: str) -> None:
        begin_request(actor.user_id)
        logger.info("%s on %s by %s (%s)", operation, target, actor.user_id, actor.role.value)

    def _rejected(self, result: GuardResult, **extra: Any) -> TransitionResult:
        logger.info("Rejected [%s]: %s", result.error.value if result.error else "-", result.message)
        return TransitionResult(
            success=False,
            error=result.error,
            message=result.message,
            request_id=get_request_id(),
            **extra,
        )

    def _quote(self, quote_id: str) -> Quote:
        quote = self.store.get_quote(quote_id)
        if quote is None:
            raise GuardRejection(reject(ErrorCode.NOT_FOUND, f"Quote {quote_id} not found."))
        return quote

    def _booking(self, booking_id: str) -> Booking:
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise GuardRejection(reject(ErrorCode.NOT_FOUND, f"Booking {booking_id} not found."))
        return booking

    def _advance(self, current: OrderState, trigger: LifecycleTrigger) -> OrderState:
        """Target state for ``trigger``, or a rejection with INVALID_STATE."""
        machine = OrderStateMachine(current)
        require(self.states.check(machine, trigger))
        return machine.current_state

    def _audit(
        self,
        entity_id: str,
        from_state: Optional[OrderState],
        to_state: OrderState,
        trigger: str,
        actor: Actor,
    ) -> None:
        self.store.add_status_change(StatusChange(
            entity_id=entity_id,
            from_state=from_state.value if from_state else None,
            to_state=to_state.value,
            trigger=trigger,
            actor_id=actor.user_id,
        ))

    def _field_employee(
        self, actor: Actor, booking_id: str, trigger: LifecycleTrigger
    ) -> tuple[Booking, Optional[Employee], OrderState]:
        """Read the booking and check the actor may apply ``trigger`` to it as its employee."""
        booking = self._booking(booking_id)
        employee = self.store.find_employee_by_user(actor.user_id)
        require(self.auth.require_assigned_employee(actor, booking, employee))
        target = self._advance(state_of_booking(booking.status), trigger)
        return booking, employee, target

    def _check_completion(self, booking_id: str) -> None:
        require(self.completion.check_checklist(booking_id))
        require(self.completion.check_evidence(self.store.list_photos(booking_id)))

    # ------------------------------------------------------------------ #
    # Quotes
    # ------------------------------------------------------------------ #

    def submit_quote(self, actor: Actor, request: QuoteRequest) -> TransitionResult:
        """Price a quote request and store it as pending."""
        self._begin("submit_quote", actor, request.service_type)
        try:
            entry = resolve_service(request.service_type)
            if entry is None or not entry.active:
                raise GuardRejection(reject(
                    ErrorCode.INVALID_INPUT, f"Unknown service type: {request.service_type!r}."
                ))
            if request.area is None or request.area <= 0:
                raise GuardRejection(reject(ErrorCode.INVALID_INPUT, "Area must be greater than zero."))
            if request.preferred_time and not is_valid_time(request.preferred_time):
                raise GuardRejection(reject(
                    ErrorCode.INVALID_INPUT, f"Preferred time must be HH:MM, got {request.preferred_time!r}."
                ))

            selected = list(dict.fromkeys(request.selected_item_ids))
            if not selected:
                raise GuardRejection(reject(
                    ErrorCode.INVALID_INPUT, "Select at least one checklist item."
                ))
            offered = {
                item.id for item in self.checklist.template_items(
                    entry.service_type, checklist_frequency(request.frequency)
                )
            }
            unknown = [item_id for item_id in selected if item_id not in offered]
            if unknown:
                raise GuardRejection(reject(
                    ErrorCode.INVALID_INPUT,
                    f"Checklist items not offered for {entry.service_type}: {', '.join(unknown)}.",
                ))

            try:
                price = estimate(
                    entry.service_type,
                    request.property_type,
                    request.area,
                    request.frequency,
                    entry.base_price,
                    entry.price_per_area_unit,
                )
            except InvalidInputError as exc:
                raise GuardRejection(reject(ErrorCode.INVALID_INPUT, str(exc))) from None

            residential = request.property_type == PropertyType.RESIDENTIAL
            quote = Quote(
                id=new_id("QT"),
                requester_id=actor.user_id,
                service_type=entry.service_type,
                property_type=request.property_type,
                area=request.area,
                frequency=request.frequency,
                bedrooms=request.bedrooms if residential else None,
                bathrooms=request.bathrooms if residential else None,
                preferred_date=request.preferred_date,
                preferred_time=request.preferred_time.strip() if request.preferred_time else None,
                price=price,
                client_notes=request.client_notes.strip(),
                selected_item_ids=selected,
            )
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        with self.store.transaction():
            quote = self.store.add_quote(quote)
            self._audit(quote.id, None, OrderState.QUOTE_PENDING, "submit", actor)
        logger.info("Quote %s submitted: %s total=%.2f", quote.id, quote.service_type, price.total)

        deliveries = self.dispatcher.notify_admins("quote_received", {
            "service": quote.service_type,
            "property_type": quote.property_type.value,
            "area": quote.area,
            "estimated_price": format_currency(price.total),
            "preferred_date": quote.preferred_date.isoformat() if quote.preferred_date else None,
        })
        return TransitionResult(
            success=True, quote=quote, deliveries=deliveries, request_id=get_request_id()
        )

    def approve_quote(
        self,
        actor: Actor,
        quote_id: str,
        service_date: Optional[date] = None,
        service_time: Optional[str] = None,
        service_address: str = "",
        final_price: Optional[float] = None,
        estimated_duration: Optional[int] = None,
        admin_notes: str = "",
    ) -> TransitionResult:
        """
        Approve a pending quote and create its confirmed booking.

        The schedule defaults to the client's preferred date and time and
        the price to the quoted total. The booking starts without an
        employee and with its checklist snapshot already in place.
        """
        self._begin("approve_quote", actor, quote_id)
        try:
            with self.store.transaction():
                require(self.auth.require_admin(actor))
                quote = self._quote(quote_id)
                from_state = state_of_quote(quote.status)
                target = self._advance(from_state, LifecycleTrigger.APPROVE)

                when = service_date or quote.preferred_date
                at = service_time or quote.preferred_time
                if when is None or not at:
                    raise GuardRejection(reject(
                        ErrorCode.INVALID_INPUT, "A service date and time are required to approve."
                    ))
                price = quote.price.total if final_price is None else final_price
                try:
                    booking = Booking(
                        id=new_id("BK"),
                        quote_id=quote.id,
                        requester_id=quote.requester_id,
                        service_type=quote.service_type,
                        service_date=when,
                        service_time=at,
                        final_price=price,
                        estimated_duration=estimated_duration,
                        service_address=service_address.strip(),
                    )
                except ValidationError as exc:
                    raise GuardRejection(reject(ErrorCode.INVALID_INPUT, str(exc))) from None

                quote.status = quote_status_for(target)
                quote.admin_notes = admin_notes.strip()
                quote.updated_at = _utcnow()
                quote = self.store.save_quote(quote)
                booking = self.store.add_booking(booking)
                self.checklist.initialize(booking.id, quote.selected_item_ids)
                self._audit(quote.id, from_state, target, LifecycleTrigger.APPROVE.value, actor)
                self._audit(booking.id, None, OrderState.CONFIRMED, LifecycleTrigger.APPROVE.value, actor)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Quote %s approved as booking %s on %s %s",
                    quote.id, booking.id, booking.service_date, booking.service_time)
        report = self.dispatcher.notify_user(
            quote.requester_id, "quote_approved", _booking_message_data(booking)
        )
        return TransitionResult(
            success=True, quote=quote, booking=booking, deliveries=[report],
            request_id=get_request_id(),
        )

    def reject_quote(self, actor: Actor, quote_id: str, reason: str = "") -> TransitionResult:
        self._begin("reject_quote", actor, quote_id)
        try:
            with self.store.transaction():
                require(self.auth.require_admin(actor))
                quote = self._quote(quote_id)
                from_state = state_of_quote(quote.status)
                target = self._advance(from_state, LifecycleTrigger.REJECT)

                quote.status = quote_status_for(target)
                quote.admin_notes = reason.strip()
                quote.updated_at = _utcnow()
                quote = self.store.save_quote(quote)
                self._audit(quote.id, from_state, target, LifecycleTrigger.REJECT.value, actor)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Quote %s rejected", quote.id)
        report = self.dispatcher.notify_user(
            quote.requester_id, "quote_rejected", {"service": quote.service_type, "reason": reason}
        )
        return TransitionResult(
            success=True, quote=quote, deliveries=[report], request_id=get_request_id()
        )

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def assign_employee(self, actor: Actor, booking_id: str, employee_id: str) -> TransitionResult:
        """
        Assign an employee to a confirmed booking.

        The skill check and the overlap check both run on bookings read
        inside the transaction, so two concurrent assignments of the same
        employee to overlapping slots cannot both succeed.
        """
        self._begin("assign_employee", actor, booking_id)
        try:
            with self.store.transaction():
                require(self.auth.require_admin(actor))
                booking = self._booking(booking_id)
                from_state = state_of_booking(booking.status)
                target = self._advance(from_state, LifecycleTrigger.ASSIGN)

                employee = self.store.get_employee(employee_id)
                if employee is None:
                    raise GuardRejection(reject(ErrorCode.NOT_FOUND, f"Employee {employee_id} not found."))
                require(self.scheduling.check_employee(employee, booking))
                existing = self.store.list_bookings(
                    employee_id=employee.id,
                    service_date=booking.service_date,
                    statuses=BLOCKING_STATUSES,
                )
                require(self.scheduling.check_availability(employee, booking, existing))

                booking.employee_id = employee.id
                booking.updated_at = _utcnow()
                booking = self.store.save_booking(booking)
                self._audit(booking.id, from_state, target, LifecycleTrigger.ASSIGN.value, actor)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Employee %s assigned to booking %s", employee.id, booking.id)
        data = _booking_message_data(booking)
        data["employee_name"] = employee.name
        report = self.dispatcher.notify_user(booking.requester_id, "employee_assigned", data)
        return TransitionResult(
            success=True, booking=booking, deliveries=[report], request_id=get_request_id()
        )

    def unassign_employee(self, actor: Actor, booking_id: str) -> TransitionResult:
        self._begin("unassign_employee", actor, booking_id)
        try:
            with self.store.transaction():
                require(self.auth.require_admin(actor))
                booking = self._booking(booking_id)
                from_state = state_of_booking(booking.status)
                target = self._advance(from_state, LifecycleTrigger.UNASSIGN)
                if booking.employee_id is None:
                    raise GuardRejection(reject(
                        ErrorCode.INVALID_STATE, f"Booking {booking.id} has no employee assigned."
                    ))

                previous = booking.employee_id
                booking.employee_id = None
                booking.updated_at = _utcnow()
                booking = self.store.save_booking(booking)
                self._audit(booking.id, from_state, target, LifecycleTrigger.UNASSIGN.value, actor)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Employee %s unassigned from booking %s", previous, booking.id)
        return TransitionResult(
            success=True, booking=booking, details={"previous_employee_id": previous},
            request_id=get_request_id(),
        )

    def eligible_employees(self, booking_id: str) -> list[Employee]:
        """Active, qualified employees free at the booking's slot."""
        booking = self.store.get_booking(booking_id)
        if booking is None:
            return []
        existing = self.store.list_bookings(
            service_date=booking.service_date, statuses=BLOCKING_STATUSES
        )
        return available_employees(self.store.list_employees(), booking, existing)

    # ------------------------------------------------------------------ #
    # Field execution
    # ------------------------------------------------------------------ #

    def start_work(self, actor: Actor, booking_id: str) -> TransitionResult:
        """Start a confirmed booking. A location fix is mandatory."""
        self._begin("start_work", actor, booking_id)
        try:
            self._field_employee(actor, booking_id, LifecycleTrigger.START)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        location = capture_location(self.location_provider, self.location_timeout)
        if not location.success or location.fix is None:
            return self._rejected(reject(
                ErrorCode.LOCATION_UNAVAILABLE, f"Could not capture start location: {location.error}"
            ))

        try:
            with self.store.transaction():
                booking, _, target = self._field_employee(actor, booking_id, LifecycleTrigger.START)
                from_state = state_of_booking(booking.status)

                booking.status = booking_status_for(target)
                booking.updated_at = _utcnow()
                booking = self.store.save_booking(booking)
                self.store.add_location(BookingLocation(
                    id=new_id("LOC"),
                    booking_id=booking.id,
                    location_type=LocationType.START,
                    latitude=location.fix.latitude,
                    longitude=location.fix.longitude,
                    accuracy=location.fix.accuracy,
                ))
                self._audit(booking.id, from_state, target, LifecycleTrigger.START.value, actor)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Work started on booking %s", booking.id)
        return TransitionResult(
            success=True, booking=booking, details={"start_location": location.fix},
            request_id=get_request_id(),
        )

    def complete_work(self, actor: Actor, booking_id: str, notes: str = "") -> TransitionResult:
        """
        Complete an in-progress booking.

        Requires the checklist gate to pass and an end-location fix. Missing
        photos block completion only when photo evidence is mandatory;
        otherwise they are reported as a warning.
        """
        self._begin("complete_work", actor, booking_id)
        try:
            self._field_employee(actor, booking_id, LifecycleTrigger.COMPLETE)
            self._check_completion(booking_id)
        except GuardRejection as rejection:
            return self._rejected(rejection.result, details={"progress": self.checklist.progress(booking_id)})

        location = capture_location(self.location_provider, self.location_timeout)
        if not location.success or location.fix is None:
            return self._rejected(reject(
                ErrorCode.LOCATION_UNAVAILABLE, f"Could not capture end location: {location.error}"
            ))

        try:
            with self.store.transaction():
                booking, _, target = self._field_employee(actor, booking_id, LifecycleTrigger.COMPLETE)
                self._check_completion(booking_id)
                from_state = state_of_booking(booking.status)

                booking.status = booking_status_for(target)
                if notes.strip():
                    booking.employee_notes = notes.strip()
                booking.updated_at = _utcnow()
                booking = self.store.save_booking(booking)
                self.store.add_location(BookingLocation(
                    id=new_id("LOC"),
                    booking_id=booking.id,
                    location_type=LocationType.END,
                    latitude=location.fix.latitude,
                    longitude=location.fix.longitude,
                    accuracy=location.fix.accuracy,
                ))
                self._audit(booking.id, from_state, target, LifecycleTrigger.COMPLETE.value, actor)
                photos = self.store.list_photos(booking.id)
                starts = [
                    loc for loc in self.store.list_locations(booking.id)
                    if loc.location_type == LocationType.START
                ]
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Work completed on booking %s", booking.id)
        result = TransitionResult(success=True, booking=booking, request_id=get_request_id())

        missing = missing_evidence(photos)
        if missing:
            result.warnings.append(f"No {' or '.join(missing)} photos were uploaded.")
        if starts:
            result.details["distance_km"] = round(haversine_km(
                starts[0].latitude, starts[0].longitude,
                location.fix.latitude, location.fix.longitude,
            ), 3)

        result.deliveries.append(self.dispatcher.notify_user(
            booking.requester_id, "work_completed", _booking_message_data(booking)
        ))

        if self.invoicer is not None:
            try:
                result.invoice = self.invoicer.create_invoice(booking, self.store.get_quote(booking.quote_id))
            except Exception:
                logger.exception("Invoice creation failed for booking %s", booking.id)
                result.warnings.append("Invoice could not be created; it must be issued manually.")
        return result

    def cancel_booking(self, actor: Actor, booking_id: str) -> TransitionResult:
        self._begin("cancel_booking", actor, booking_id)
        try:
            with self.store.transaction():
                require(self.auth.require_admin(actor))
                booking = self._booking(booking_id)
                from_state = state_of_booking(booking.status)
                target = self._advance(from_state, LifecycleTrigger.CANCEL)

                booking.status = booking_status_for(target)
                booking.updated_at = _utcnow()
                booking = self.store.save_booking(booking)
                self._audit(booking.id, from_state, target, LifecycleTrigger.CANCEL.value, actor)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        logger.info("Booking %s cancelled", booking.id)
        return TransitionResult(success=True, booking=booking, request_id=get_request_id())

    # ------------------------------------------------------------------ #
    # Checklist and evidence during execution
    # ------------------------------------------------------------------ #

    def update_checklist_item(
        self,
        actor: Actor,
        completion_id: str,
        completed: Optional[bool] = None,
        rating: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """Toggle, rate or annotate one checklist row of an in-progress booking."""
        self._begin("update_checklist_item", actor, completion_id)
        try:
            if rating is not None:
                try:
                    validate_rating(rating)
                except InvalidInputError as exc:
                    raise GuardRejection(reject(ErrorCode.INVALID_INPUT, str(exc))) from None

            with self.store.transaction():
                row = self.store.get_completion(completion_id)
                if row is None:
                    raise GuardRejection(reject(
                        ErrorCode.NOT_FOUND, f"Checklist item {completion_id} not found."
                    ))
                booking = self._booking(row.booking_id)
                employee = self.store.find_employee_by_user(actor.user_id)
                require(self.auth.require_assigned_employee(actor, booking, employee))
                if booking.status != BookingStatus.IN_PROGRESS:
                    raise GuardRejection(reject(
                        ErrorCode.INVALID_STATE,
                        f"Checklist can only be updated while work is in progress "
                        f"(booking is {booking.status.value}).",
                    ))

                if completed is not None:
                    row = self.checklist.toggle(row.id, completed)
                if rating is not None:
                    row = self.checklist.rate(row.id, rating)
                if notes is not None:
                    row = self.checklist.annotate(row.id, notes)
                progress: ChecklistProgress = self.checklist.progress(booking.id)
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        return TransitionResult(
            success=True, booking=booking, completion=row, details={"progress": progress},
            request_id=get_request_id(),
        )

    def attach_photo(
        self,
        actor: Actor,
        booking_id: str,
        photo_type: PhotoType,
        content: bytes,
        content_type: str,
        room_area: Optional[str] = None,
    ) -> TransitionResult:
        """Upload a before/after photo for an in-progress booking."""
        self._begin("attach_photo", actor, booking_id)
        if self.evidence_storage is None:
            return self._rejected(reject(ErrorCode.UPLOAD_FAILED, "No evidence storage configured."))

        def check() -> Booking:
            booking = self._booking(booking_id)
            employee = self.store.find_employee_by_user(actor.user_id)
            require(self.auth.require_assigned_employee(actor, booking, employee))
            if booking.status != BookingStatus.IN_PROGRESS:
                raise GuardRejection(reject(
                    ErrorCode.INVALID_STATE,
                    f"Photos can only be added while work is in progress "
                    f"(booking is {booking.status.value}).",
                ))
            return booking

        try:
            check()
        except GuardRejection as rejection:
            return self._rejected(rejection.result)

        upload = upload_photo(
            self.evidence_storage, booking_id, photo_type, content, content_type, self.upload_timeout
        )
        if not upload.success or upload.url is None:
            return self._rejected(reject(ErrorCode.UPLOAD_FAILED, upload.error or "Upload failed."))

        try:
            with self.store.transaction():
                check()
                photo = self.store.add_photo(BookingPhoto(
                    id=new_id("PH"),
                    booking_id=booking_id,
                    photo_type=photo_type,
                    photo_url=upload.url,
                    uploaded_by=actor.user_id,
                    room_area=room_area,
                ))
        except GuardRejection as rejection:
            logger.warning("Uploaded %s is not linked to booking %s", upload.url, booking_id)
            return self._rejected(rejection.result)

        logger.info("%s photo added to booking %s", photo_type.value.capitalize(), booking_id)
        return TransitionResult(success=True, photo=photo, request_id=get_request_id())

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def checklist_progress(self, booking_id: str) -> ChecklistProgress:
        return self.checklist.progress(booking_id)

    def history(self, entity_id: str) -> list[StatusChange]:
        return self.store.list_history(entity_id)
