import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from database import JsonRecordStore
from schemas import (
    CUSTOMERS,
    MENU,
    ORDERS,
    RESERVATIONS,
    Customer,
    Order,
    Reservation,
    SignupRequest,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ServiceError(Exception):
    pass


class DuplicateEmail(ServiceError):
    def __init__(self, email: str):
        super().__init__(f"A customer with email {email!r} already exists")
        self.email = email


class Unauthorized(ServiceError):
    pass


class InvalidMenu(ServiceError):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(ts: datetime) -> str:
    """2026-10-19T10:03:00.123Z"""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def next_id(records: List[Any], ts: datetime) -> int:
    """Millisecond timestamp, bumped past the highest id already stored."""
    now_ms = (ts - EPOCH) // timedelta(milliseconds=1)
    last = max(
        (r["id"] for r in records
         if isinstance(r, dict) and isinstance(r.get("id"), int) and not isinstance(r.get("id"), bool)),
        default=0,
    )
    return max(now_ms, last + 1)


class MenuService:
    def __init__(self, store: JsonRecordStore, admin_password: Optional[str]):
        self.store = store
        self.admin_password = admin_password

    def get_all(self) -> List[Any]:
        return self.store.load(MENU)

    def replace_all(self, new_menu: Any, supplied_secret: Any) -> None:
        if (
            self.admin_password is None
            or not isinstance(supplied_secret, str)
            or not hmac.compare_digest(supplied_secret.encode("utf-8"), self.admin_password.encode("utf-8"))
        ):
            logger.warning("Rejected menu update with invalid admin password")
            raise Unauthorized("Unauthorized")
        if not isinstance(new_menu, list):
            raise InvalidMenu(f"menu must be a list, got {type(new_menu).__name__}")
        with self.store.lock(MENU):
            self.store.save(MENU, new_menu)
        logger.info("Menu replaced with %d items", len(new_menu))


class CustomerService:
    def __init__(self, store: JsonRecordStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def get_all(self) -> List[Any]:
        return self.store.load(CUSTOMERS)

    def sign_up(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        request = SignupRequest.model_validate(fields)
        with self.store.lock(CUSTOMERS):
            customers = self.store.load(CUSTOMERS)
            if any(isinstance(c, dict) and c.get("email") == request.email for c in customers):
                logger.warning("Signup rejected, email already registered")
                raise DuplicateEmail(request.email)

            now = self.clock()
            customer = Customer(
                id=next_id(customers, now),
                signupDate=iso_timestamp(now),
                **request.model_dump(exclude={"password"}),
            ).model_dump()
            customers.append(customer)
            self.store.save(CUSTOMERS, customers)

        logger.info("Registered customer %s", customer["id"])
        return customer


class SubmissionService:
    """Append-only collection of caller-shaped records (orders, reservations)."""

    collection: str = ""
    model = Order

    def __init__(self, store: JsonRecordStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def get_all(self) -> List[Any]:
        return self.store.load(self.collection)

    def submit(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(fields, dict):
            raise TypeError(f"{self.collection} payload must be a JSON object")
        with self.store.lock(self.collection):
            records = self.store.load(self.collection)
            now = self.clock()
            record: Dict[str, Any] = {"id": next_id(records, now), "date": iso_timestamp(now)}
            # Generated keys win over caller-supplied id/date
            record.update((k, v) for k, v in fields.items() if k not in record)
            record = self.model.model_validate(record).model_dump()
            records.append(record)
            self.store.save(self.collection, records)

        logger.info("Saved %s record %s", self.collection, record["id"])
        return record


class OrderService(SubmissionService):
    collection = ORDERS
    model = Order


class ReservationService(SubmissionService):
    collection = RESERVATIONS
    model = Reservation
