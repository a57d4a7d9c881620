import pytest

from agenda.models import Store, Staff, WorkingHourRule, AvailabilityBlock
from agenda.services import store_service, booking_service
from agenda.validation import ValidationError, NotFoundError, ConflictError
from conftest import MONDAY, MONDAY_8AM


class TestStores:
    def test_slug_derived_from_name(self, db_session):
        store = store_service.create_store("Barbearia São João")
        assert store.slug == "barbearia-sao-joao"
        assert store.timezone == "Europe/Lisbon"

    def test_explicit_slug_and_zone(self, db_session):
        store = store_service.create_store("Corner Cuts", slug="corner", timezone="America/New_York")
        assert store_service.get_store_by_slug("corner").timezone == "America/New_York"
        assert store.to_public_dict() == {"slug": "corner", "name": "Corner Cuts"}

    def test_duplicate_slug_is_conflict(self, db_session, store):
        with pytest.raises(ConflictError):
            store_service.create_store("Another", slug=store.slug)

    def test_unknown_zone_rejected(self, db_session):
        with pytest.raises(ValidationError):
            store_service.create_store("Nowhere", timezone="Nowhere/Land")
        assert db_session.query(Store).count() == 0

    def test_name_required(self, db_session):
        with pytest.raises(ValidationError):
            store_service.create_store("   ")

    def test_unknown_slug_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            store_service.get_store_by_slug("missing")

    def test_list_is_ordered_by_slug(self, db_session, store, other_store):
        assert [s.slug for s in store_service.list_stores()] == ["barbearia-central", "salao-norte"]

    def test_slugify_collapses_symbols(self):
        assert store_service.slugify("  Hair & Beauty -- Lisboa!! ") == "hair-beauty-lisboa"


class TestStaff:
    def test_add_and_list(self, db_session, store):
        store_service.add_staff(store.slug, "Ana", email="ana@example.com")
        store_service.add_staff(store.slug, "Bruno")
        assert [member.name for member in store_service.list_staff(store.slug)] == ["Ana", "Bruno"]

    def test_list_is_store_scoped(self, db_session, store, staff, other_staff):
        assert [member.id for member in store_service.list_staff(store.slug)] == [staff.id]

    def test_remove_clears_schedule_and_blocks(self, db_session, store, staff, monday_schedule):
        db_session.add(AvailabilityBlock(
            store_id=store.id, staff_id=staff.id,
            start_at=MONDAY_8AM, end_at=MONDAY_8AM.replace(hour=12),
        ))
        db_session.commit()
        staff_id = staff.id

        store_service.remove_staff(store.slug, staff_id)

        assert db_session.query(Staff).filter_by(id=staff_id).count() == 0
        assert db_session.query(WorkingHourRule).filter_by(staff_id=staff_id).count() == 0
        assert db_session.query(AvailabilityBlock).filter_by(staff_id=staff_id).count() == 0

    def test_remove_refused_with_appointments(self, db_session, store, staff, service, monday_schedule):
        booking_service.create_booking(
            store.slug, staff.id, service.id, MONDAY.isoformat(), "10:00",
            "Ana Silva", "912345678", now=MONDAY_8AM,
        )
        with pytest.raises(ConflictError):
            store_service.remove_staff(store.slug, staff.id)

    def test_remove_other_store_staff_not_found(self, db_session, store, other_staff):
        with pytest.raises(NotFoundError):
            store_service.remove_staff(store.slug, other_staff.id)


class TestServices:
    def test_add_service(self, db_session, store):
        service = store_service.add_service(store.slug, "Barba", duration_minutes="20", price_cents=800)
        assert service.duration_minutes == 20
        assert service.to_public_dict()["price_cents"] == 800

    @pytest.mark.parametrize("duration", [0, -10, 12.5, 481, "long"])
    def test_invalid_duration(self, db_session, store, duration):
        with pytest.raises(ValidationError):
            store_service.add_service(store.slug, "Corte", duration_minutes=duration)

    def test_service_lookup_is_store_scoped(self, db_session, store, other_service):
        with pytest.raises(NotFoundError):
            store_service.get_service_in_store(store, other_service.id)
