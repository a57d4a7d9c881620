# Overview: Pytest coverage for the setup and inspection CLI commands.

from agenda.models import Store, Staff, WorkingHourRule
from conftest import MONDAY


class TestSetupCommands:
    def test_store_staff_hours_slots_flow(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["stores", "create", "--name", "Estudio Sul", "--timezone", "Europe/Lisbon"])
        assert "PASS Created store" in result.output
        assert db_session.query(Store).filter_by(slug="estudio-sul").count() == 1

        result = runner.invoke(args=["staff", "add", "--slug", "estudio-sul", "--name", "Marta"])
        assert "PASS Added staff member" in result.output
        staff_id = db_session.query(Staff.id).filter_by(name="Marta").scalar()

        result = runner.invoke(args=[
            "hours", "set", "--slug", "estudio-sul", "--staff-id", str(staff_id), "--day", "0",
            "--shift", "09:00-10:00", "--shift", "14:00-15:00",
        ])
        assert "PASS Mon" in result.output
        assert db_session.query(WorkingHourRule).filter_by(staff_id=staff_id).count() == 2

        result = runner.invoke(args=[
            "slots", "show", "--slug", "estudio-sul", "--staff-id", str(staff_id),
            "--date", MONDAY.isoformat(), "--service-minutes", "30", "--step", "30", "--lead", "0",
        ])
        assert result.output.strip() == "09:00 09:30 14:00 14:30"

        result = runner.invoke(args=["hours", "show", "--slug", "estudio-sul", "--staff-id", str(staff_id)])
        assert "Mon  09:00-10:00, 14:00-15:00" in result.output
        assert "Tue  closed" in result.output

    def test_duplicate_store_reports_failure(self, app, db_session, store):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["stores", "create", "--name", "Copy", "--slug", store.slug])
        assert result.output.startswith("FAIL")

    def test_bad_shift_range(self, app, db_session, store, staff):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "hours", "set", "--slug", store.slug, "--staff-id", str(staff.id), "--day", "0", "--shift", "0900",
        ])
        assert result.exit_code != 0

    def test_list_stores(self, app, db_session, store):
        result = app.test_cli_runner().invoke(args=["stores", "list"])
        assert "barbearia-central" in result.output
