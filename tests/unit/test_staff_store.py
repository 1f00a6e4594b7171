"""
Unit tests for Staff Store.
"""

import pytest

from food_delivery.auth import StaffStore, StaffRole, DuplicateRecordError


class TestStaffStore:
    """Tests for StaffStore class."""

    @pytest.mark.unit
    def test_create_staff(self, staff_store, password_handler):
        member = staff_store.create_staff(
            email="Chef@Example.com",
            password="ChefPassword1",
            role="CHEF",
            first_name="Ana",
            last_name="Lima",
            location_id="loc-1"
        )

        assert member.email == "chef@example.com"
        assert member.role == StaffRole.CHEF
        assert member.is_active is True
        assert password_handler.verify("ChefPassword1", member.password_hash)

    @pytest.mark.unit
    def test_unknown_role_is_rejected(self, staff_store):
        with pytest.raises(ValueError):
            staff_store.create_staff(email="x@example.com", password="password1", role="JANITOR")

    @pytest.mark.unit
    def test_duplicate_email(self, make_staff):
        make_staff(email="dup@example.com")

        with pytest.raises(DuplicateRecordError):
            make_staff(email="dup@example.com")

    @pytest.mark.unit
    def test_duplicate_phone(self, make_staff):
        make_staff(phone="+5511977776666")

        with pytest.raises(DuplicateRecordError):
            make_staff(phone="+55 11 97777-6666")

    @pytest.mark.unit
    def test_role_round_trips_through_file(self, temp_data_dir, password_handler, make_staff):
        member = make_staff(StaffRole.NUTRITIONIST)

        reloaded = StaffStore(temp_data_dir / "staff.json", password_handler).get_by_id(member.staff_id)
        assert reloaded.role is StaffRole.NUTRITIONIST

    @pytest.mark.unit
    def test_update_rechecks_uniqueness(self, staff_store, make_staff):
        first = make_staff(email="first@example.com")
        second = make_staff(email="second@example.com")

        second.email = first.email
        with pytest.raises(DuplicateRecordError):
            staff_store.update_staff(second)

    @pytest.mark.unit
    def test_deactivate(self, staff_store, make_staff):
        member = make_staff()

        assert staff_store.deactivate(member.staff_id) is True
        assert staff_store.get_by_id(member.staff_id).is_active is False
        assert staff_store.deactivate("missing") is False

    @pytest.mark.unit
    def test_set_password_does_not_persist(self, staff_store, password_handler, make_staff):
        member = make_staff()

        staff_store.set_password(member, "NewPassword1")
        assert password_handler.verify("NewPassword1", member.password_hash)

        stored = staff_store.get_by_id(member.staff_id)
        assert not password_handler.verify("NewPassword1", stored.password_hash)

    @pytest.mark.unit
    def test_list_filters_and_search(self, staff_store, make_staff):
        make_staff(StaffRole.CHEF, first_name="Bruno", location_id="loc-1")
        make_staff(StaffRole.CHEF, first_name="Carla", location_id="loc-2")
        driver = make_staff(StaffRole.DELIVERY_DRIVER, first_name="Diego", location_id="loc-1")
        staff_store.deactivate(driver.staff_id)

        assert len(staff_store.list_staff()) == 3
        assert {s.first_name for s in staff_store.list_staff(role=StaffRole.CHEF)} == {"Bruno", "Carla"}
        assert {s.first_name for s in staff_store.list_staff(location_id="loc-1")} == {"Bruno", "Diego"}
        assert [s.first_name for s in staff_store.list_staff(is_active=False)] == ["Diego"]
        assert [s.first_name for s in staff_store.list_staff(search="carl")] == ["Carla"]

    @pytest.mark.unit
    def test_list_newest_first(self, staff_store, make_staff):
        older = make_staff()
        newer = make_staff()

        # Same-second timestamps are possible; make the order explicit
        older.created_at = "2026-01-01T00:00:00+00:00"
        newer.created_at = "2026-01-02T00:00:00+00:00"
        staff_store.update_staff(older)
        staff_store.update_staff(newer)

        assert [s.staff_id for s in staff_store.list_staff()] == [newer.staff_id, older.staff_id]
