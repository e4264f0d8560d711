import secrets
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pymongo.errors import DuplicateKeyError

from app.core.errors import StorageError
from app.core.logger import logger


class DoctorBookingLock:
    """
    Mutual exclusion over one doctor's slot calendar, held in the
    booking_locks collection.

    The lock document's _id is the doctor id, so MongoDB's primary key
    uniqueness lets only one owner insert it. A lock whose lease has
    expired (crashed holder) can be taken over atomically.
    """

    def __init__(self, db, ttl_seconds: float = 30, wait_seconds: float = 5, poll_seconds: float = 0.05):
        self.collection = db.booking_locks
        self.ttl_seconds = ttl_seconds
        self.wait_seconds = wait_seconds
        self.poll_seconds = poll_seconds

    def try_acquire(self, doctor_id: str, owner: str) -> bool:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        try:
            self.collection.insert_one({"_id": doctor_id, "owner": owner, "expires_at": expires_at})
            return True
        except DuplicateKeyError:
            pass

        # Take over an expired lease
        taken = self.collection.find_one_and_update(
            {"_id": doctor_id, "expires_at": {"$lt": now}},
            {"$set": {"owner": owner, "expires_at": expires_at}},
        )
        if taken is not None:
            logger.warning(f"Took over expired booking lock for doctor {doctor_id}")
            return True
        return False

    def release(self, doctor_id: str, owner: str):
        self.collection.delete_one({"_id": doctor_id, "owner": owner})

    @contextmanager
    def hold(self, doctor_id: str):
        owner = secrets.token_hex(8)
        deadline = time.monotonic() + self.wait_seconds
        while not self.try_acquire(doctor_id, owner):
            if time.monotonic() >= deadline:
                logger.warning(f"Booking lock for doctor {doctor_id} still busy after {self.wait_seconds}s")
                raise StorageError("Another booking for this doctor is in progress, please retry")
            time.sleep(self.poll_seconds)
        try:
            yield owner
        finally:
            self.release(doctor_id, owner)
