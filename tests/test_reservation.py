from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from vaccine_scheduler.core.exceptions import (
    Forbidden, InvalidInput, NoAvailability, OutOfStock, StorageFailure,
    Unauthorized, VaccineNotFound
)
from vaccine_scheduler.core.security import UserRole
from vaccine_scheduler.core.session import SessionState
from vaccine_scheduler.models import Appointment, Vaccine
from vaccine_scheduler.services.availability_service import AvailabilityService
from vaccine_scheduler.services.inventory_service import InventoryService
from vaccine_scheduler.services.reservation_service import ReservationService

JUNE_FIRST = date(2024, 6, 1)

@pytest.fixture
def stocked(db, caregiver):
    """Caregiver carol is open on 2024-06-01 and Pfizer has 5 doses."""
    AvailabilityService(db).upload_availability(caregiver, "2024-06-01")
    InventoryService(db).add_doses(caregiver, "Pfizer", 5)
    return caregiver

def doses(db, name="Pfizer"):
    db.expire_all()
    return db.query(Vaccine).filter(Vaccine.name == name).one().doses

def assert_untouched(db, slots=("carol",), stock=5):
    assert db.query(Appointment).count() == 0
    assert AvailabilityService(db).query(JUNE_FIRST) == list(slots)
    assert doses(db) == stock

class TestReserve:

    def test_successful_reservation(self, db, stocked, patient):
        reservation = ReservationService(db).reserve(patient, "2024-06-01", "Pfizer")

        assert reservation.appointment_id == 1
        assert reservation.caregiver == "carol"
        assert reservation.date == JUNE_FIRST

        appointment = db.query(Appointment).one()
        assert (appointment.vaccine_name, appointment.patient_name, appointment.caregiver_name) == (
            "Pfizer", "pat", "carol"
        )
        assert AvailabilityService(db).search_schedule(patient, "2024-06-01").caregivers == []
        assert doses(db) == 4

    def test_ids_increase_without_gaps(self, db, stocked, patient, make_account):
        AvailabilityService(db).upload_availability(make_account(UserRole.CAREGIVER, "dave"), "2024-06-01")
        service = ReservationService(db)

        first = service.reserve(patient, "2024-06-01", "Pfizer")
        second = service.reserve(patient, "2024-06-01", "Pfizer")

        assert (first.appointment_id, second.appointment_id) == (1, 2)
        assert (first.caregiver, second.caregiver) == ("carol", "dave")
        assert doses(db) == 3

    def test_smallest_username_is_chosen(self, db, stocked, patient, make_account):
        AvailabilityService(db).upload_availability(make_account(UserRole.CAREGIVER, "alice"), "2024-06-01")

        reservation = ReservationService(db).reserve(patient, "2024-06-01", "Pfizer")

        assert reservation.caregiver == "alice"
        assert AvailabilityService(db).query(JUNE_FIRST) == ["carol"]

    def test_out_of_stock(self, db, caregiver, patient):
        AvailabilityService(db).upload_availability(caregiver, "2024-06-01")
        InventoryService(db).add_doses(caregiver, "Pfizer", 0)

        with pytest.raises(OutOfStock):
            ReservationService(db).reserve(patient, "2024-06-01", "Pfizer")

        assert_untouched(db, stock=0)

    def test_unknown_vaccine(self, db, stocked, patient):
        with pytest.raises(VaccineNotFound):
            ReservationService(db).reserve(patient, "2024-06-01", "pfizer")
        assert_untouched(db)

    def test_no_availability(self, db, stocked, patient):
        with pytest.raises(NoAvailability):
            ReservationService(db).reserve(patient, "2024-06-02", "Pfizer")
        assert_untouched(db)

    def test_invalid_date(self, db, stocked, patient):
        with pytest.raises(InvalidInput):
            ReservationService(db).reserve(patient, "2024/06/01", "Pfizer")
        assert_untouched(db)

    def test_requires_patient(self, db, stocked):
        with pytest.raises(Forbidden):
            ReservationService(db).reserve(stocked, "2024-06-01", "Pfizer")
        with pytest.raises(Unauthorized):
            ReservationService(db).reserve(SessionState(), "2024-06-01", "Pfizer")
        assert_untouched(db)

    def test_last_dose_goes_to_one_patient(self, db, caregiver, patient, make_account):
        AvailabilityService(db).upload_availability(caregiver, "2024-06-01")
        AvailabilityService(db).upload_availability(make_account(UserRole.CAREGIVER, "dave"), "2024-06-01")
        InventoryService(db).add_doses(caregiver, "Pfizer", 1)
        service = ReservationService(db)

        service.reserve(patient, "2024-06-01", "Pfizer")
        with pytest.raises(OutOfStock):
            service.reserve(make_account(UserRole.PATIENT, "other"), "2024-06-01", "Pfizer")

        assert db.query(Appointment).count() == 1
        assert doses(db) == 0

class TestReservationAtomicity:

    def test_failed_decrement_rolls_back_everything(self, db, stocked, patient, monkeypatch):
        service = ReservationService(db)

        def broken_decrement(name, count=1):
            raise OperationalError("UPDATE vaccines", {}, Exception("disk I/O error"))

        monkeypatch.setattr(service.inventory, "decrement", broken_decrement)

        with pytest.raises(StorageFailure):
            service.reserve(patient, "2024-06-01", "Pfizer")

        assert_untouched(db)

    def test_failed_reservation_does_not_reuse_its_id(self, db, stocked, patient, monkeypatch):
        service = ReservationService(db)
        real_decrement = service.inventory.decrement

        def broken_decrement(name, count=1):
            raise OperationalError("UPDATE vaccines", {}, Exception("disk I/O error"))

        monkeypatch.setattr(service.inventory, "decrement", broken_decrement)
        with pytest.raises(StorageFailure):
            service.reserve(patient, "2024-06-01", "Pfizer")

        monkeypatch.setattr(service.inventory, "decrement", real_decrement)
        reservation = service.reserve(patient, "2024-06-01", "Pfizer")

        assert reservation.appointment_id == 2

    def test_slot_taken_after_validation(self, db, stocked, patient, monkeypatch):
        """Another booking wins the slot between the checks and the writes."""
        service = ReservationService(db)
        real_next_id = service.appointments.next_id

        def racing_next_id():
            service.availability.remove("carol", JUNE_FIRST)
            db.commit()
            return real_next_id()

        monkeypatch.setattr(service.appointments, "next_id", racing_next_id)

        with pytest.raises(NoAvailability):
            service.reserve(patient, "2024-06-01", "Pfizer")

        assert_untouched(db, slots=())

    def test_last_dose_taken_after_validation(self, db, stocked, patient, monkeypatch):
        service = ReservationService(db)
        real_next_id = service.appointments.next_id

        def racing_next_id():
            db.query(Vaccine).filter(Vaccine.name == "Pfizer").update({Vaccine.doses: 0})
            db.commit()
            return real_next_id()

        monkeypatch.setattr(service.appointments, "next_id", racing_next_id)

        with pytest.raises(OutOfStock):
            service.reserve(patient, "2024-06-01", "Pfizer")

        assert_untouched(db, stock=0)
