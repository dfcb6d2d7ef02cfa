"""
Tests for the entity repositories against both storage backends.
"""

from datetime import timedelta

import pytest

from jalsuraksha.exceptions import ValidationFailure
from jalsuraksha.schemas import DiseaseReportCreate

from conftest import NOW


def report_on(store, sample_disease_report, when, **overrides):
    return store.disease_reports.create({**sample_disease_report, "reportDate": when, **overrides})


class TestCreateAndGet:
    """Identifier assignment and round-tripping."""

    def test_create_assigns_id_and_timestamp(self, store, sample_phc):
        phc = store.phcs.create(sample_phc)

        assert phc.id
        assert phc.created_at == NOW
        assert phc.status == "active"
        assert phc.contact_phone == "+91-98765-43210"

    def test_get_returns_created_record(self, store, sample_phc, sample_disease_report,
                                        sample_water_test, sample_alert, sample_user):
        created = [
            (store.phcs, store.phcs.create(sample_phc)),
            (store.disease_reports, store.disease_reports.create(sample_disease_report)),
            (store.water_tests, store.water_tests.create(sample_water_test)),
            (store.alerts, store.alerts.create(sample_alert)),
            (store.users, store.users.create(sample_user)),
        ]
        for repository, record in created:
            assert repository.get(record.id) == record

    def test_ids_unique_across_repositories(self, store, sample_phc, sample_disease_report,
                                            sample_water_test, sample_alert):
        ids = []
        for _ in range(5):
            ids.append(store.phcs.create(sample_phc).id)
            ids.append(store.disease_reports.create(sample_disease_report).id)
            ids.append(store.water_tests.create(sample_water_test).id)
            ids.append(store.alerts.create(sample_alert).id)

        assert len(ids) == len(set(ids))

    def test_get_unknown_id(self, store):
        assert store.phcs.get("nonexistent-id") is None

    def test_create_accepts_validated_schema(self, store, sample_disease_report):
        data = DiseaseReportCreate.model_validate(sample_disease_report)

        report = store.disease_reports.create(data)

        assert report.case_count == 4
        assert report.verified is False

    def test_server_fields_in_payload_are_ignored(self, store, sample_phc):
        phc = store.phcs.create({**sample_phc, "id": "chosen-id", "createdAt": "2000-01-01"})

        assert phc.id != "chosen-id"
        assert phc.created_at == NOW

    def test_optional_water_measurements_default_to_none(self, store, sample_water_test):
        payload = {k: v for k, v in sample_water_test.items()
                   if k not in ("phValue", "turbidity", "bacteria", "chlorine", "status")}

        test = store.water_tests.create(payload)

        assert test.ph_value is None
        assert test.bacteria is None
        assert test.status == "pending"


class TestValidationRejection:
    """Invalid payloads never reach storage."""

    @pytest.mark.parametrize("field,value", [("caseCount", 0), ("diseaseType", "flu")])
    def test_invalid_disease_report_rejected(self, store, sample_disease_report, field, value):
        with pytest.raises(ValidationFailure) as exc_info:
            store.disease_reports.create({**sample_disease_report, field: value})

        assert exc_info.value.errors[0].field == field
        assert store.disease_reports.list() == []

    def test_latitude_out_of_range(self, store, sample_phc):
        with pytest.raises(ValidationFailure) as exc_info:
            store.phcs.create({**sample_phc, "latitude": 91})

        assert exc_info.value.errors[0].field == "latitude"
        assert store.phcs.count() == 0

    @pytest.mark.parametrize("field", ["turbidity", "bacteria", "chlorine", "phValue"])
    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_measurement_rejected(self, store, sample_water_test, field, value):
        with pytest.raises(ValidationFailure) as exc_info:
            store.water_tests.create({**sample_water_test, field: value})

        assert exc_info.value.errors[0].field == field
        assert store.water_tests.count() == 0

    def test_duplicate_email_rejected(self, store, sample_user):
        store.users.create(sample_user)

        with pytest.raises(ValidationFailure) as exc_info:
            store.users.create({**sample_user, "name": "Someone Else"})

        assert exc_info.value.errors[0].field == "email"
        assert store.users.count() == 1


class TestUpdate:
    """Partial replacement of records."""

    def test_update_changes_only_given_field(self, store, sample_disease_report):
        report = store.disease_reports.create(sample_disease_report)

        updated = store.disease_reports.update(report.id, {"caseCount": 9})

        assert updated.case_count == 9
        before = report.model_dump(exclude={"case_count"})
        after = updated.model_dump(exclude={"case_count"})
        assert before == after
        assert store.disease_reports.get(report.id) == updated

    def test_update_leaves_previous_version_untouched(self, store, sample_phc):
        phc = store.phcs.create(sample_phc)

        store.phcs.update(phc.id, {"status": "inactive"})

        assert phc.status == "active"
        assert store.phcs.get(phc.id).status == "inactive"

    def test_update_unknown_id_returns_none(self, store):
        assert store.phcs.update("nonexistent-id", {"name": "Renamed"}) is None

    def test_update_invalid_value_rejected(self, store, sample_disease_report):
        report = store.disease_reports.create(sample_disease_report)

        with pytest.raises(ValidationFailure):
            store.disease_reports.update(report.id, {"severity": "catastrophic"})

        assert store.disease_reports.get(report.id).severity == "moderate"

    def test_update_cannot_null_required_field(self, store, sample_phc):
        phc = store.phcs.create(sample_phc)

        with pytest.raises(ValidationFailure) as exc_info:
            store.phcs.update(phc.id, {"name": None})

        assert exc_info.value.errors[0].field == "name"

    def test_update_can_clear_optional_field(self, store, sample_phc):
        phc = store.phcs.create(sample_phc)

        updated = store.phcs.update(phc.id, {"adminName": None})

        assert updated.admin_name is None

    def test_empty_update_returns_record(self, store, sample_phc):
        phc = store.phcs.create(sample_phc)

        assert store.phcs.update(phc.id, {}) == phc

    def test_user_email_change_to_taken_address(self, store, sample_user):
        store.users.create(sample_user)
        other = store.users.create({**sample_user, "email": "other@jalsuraksha.gov.in"})

        with pytest.raises(ValidationFailure):
            store.users.update(other.id, {"email": sample_user["email"]})

        # keeping one's own address is not a conflict
        assert store.users.update(other.id, {"email": "other@jalsuraksha.gov.in"}) is not None


class TestDelete:
    """Explicit removal."""

    def test_delete_is_final(self, store, sample_phc):
        phc = store.phcs.create(sample_phc)

        assert store.phcs.delete(phc.id) is True
        assert store.phcs.get(phc.id) is None
        assert store.phcs.delete(phc.id) is False

    def test_deleting_phc_keeps_its_reports(self, store, sample_phc, sample_disease_report):
        phc = store.phcs.create(sample_phc)
        report = store.disease_reports.create({**sample_disease_report, "phcId": phc.id})

        store.phcs.delete(phc.id)

        assert store.disease_reports.get(report.id) is not None


class TestFilteredQueries:
    """Attribute and date-window filters."""

    def test_phcs_by_state_and_district(self, store, sample_phc):
        store.phcs.create(sample_phc)
        store.phcs.create({**sample_phc, "name": "Silchar PHC", "district": "Cachar"})
        store.phcs.create({**sample_phc, "name": "Imphal PHC", "district": "Imphal West", "state": "Manipur"})

        assert len(store.phcs.list_by_state("Assam")) == 2
        assert [p.name for p in store.phcs.list_by_district("Cachar")] == ["Silchar PHC"]
        assert store.phcs.list_by_state("Kerala") == []

    def test_reports_by_phc(self, store, sample_disease_report):
        store.disease_reports.create(sample_disease_report)
        store.disease_reports.create({**sample_disease_report, "phcId": "PHC002"})

        reports = store.disease_reports.list_by_phc("PHC002")

        assert len(reports) == 1
        assert reports[0].phc_id == "PHC002"

    def test_recent_boundary(self, store, sample_disease_report):
        at_cutoff = report_on(store, sample_disease_report, NOW - timedelta(days=7))
        report_on(store, sample_disease_report, NOW - timedelta(days=8))

        recent = store.disease_reports.list_recent(7)

        assert [r.id for r in recent] == [at_cutoff.id]

    def test_recent_newest_first(self, store, sample_water_test):
        oldest = store.water_tests.create({**sample_water_test, "testDate": NOW - timedelta(days=5)})
        newest = store.water_tests.create({**sample_water_test, "testDate": NOW})
        middle = store.water_tests.create({**sample_water_test, "testDate": NOW - timedelta(days=2)})

        recent = store.water_tests.list_recent()

        assert [t.id for t in recent] == [newest.id, middle.id, oldest.id]

    def test_recent_rejects_non_positive_days(self, store):
        with pytest.raises(ValidationFailure):
            store.disease_reports.list_recent(0)

    def test_date_range_inclusive(self, store, sample_disease_report):
        start = NOW - timedelta(days=10)
        end = NOW - timedelta(days=3)
        first = report_on(store, sample_disease_report, start)
        last = report_on(store, sample_disease_report, end)
        report_on(store, sample_disease_report, start - timedelta(seconds=1))
        report_on(store, sample_disease_report, end + timedelta(seconds=1))

        in_range = store.disease_reports.list_by_date_range(start, end)

        assert {r.id for r in in_range} == {first.id, last.id}

    def test_user_by_email(self, store, sample_user):
        user = store.users.create(sample_user)

        assert store.users.get_by_email(sample_user["email"]) == user
        assert store.users.get_by_email("nobody@example.org") is None

    def test_user_by_email_with_mixed_case_domain(self, store, sample_user):
        address = "Priya.Sharma@JalSuraksha.GOV.in"
        user = store.users.create({**sample_user, "email": address})

        assert user.email == "Priya.Sharma@jalsuraksha.gov.in"
        assert store.users.get_by_email(address) == user
        assert store.users.get_by_email(user.email) == user

    def test_alerts_by_status_and_severity(self, store, sample_alert):
        high = store.alerts.create(sample_alert)
        critical = store.alerts.create({**sample_alert, "severity": "critical"})
        store.alert_service.resolve(high.id, "Dr. Sharma")

        assert [a.id for a in store.alerts.list_by_status("resolved")] == [high.id]
        assert [a.id for a in store.alerts.list_by_severity("critical")] == [critical.id]
        assert [a.id for a in store.alerts.list_active()] == [critical.id]

    def test_recent_alerts_by_alerted_at(self, store, clock, sample_alert):
        old = store.alerts.create(sample_alert)
        clock.advance(timedelta(days=9))
        new = store.alerts.create(sample_alert)

        assert [a.id for a in store.alerts.list_recent(7)] == [new.id]
        assert [a.id for a in store.alerts.list_recent(10)] == [new.id, old.id]

    def test_alerts_by_phc_newest_first(self, store, clock, sample_alert):
        first = store.alerts.create(sample_alert)
        clock.advance(timedelta(hours=1))
        second = store.alerts.create(sample_alert)
        store.alerts.create({**sample_alert, "phcId": "PHC002"})

        assert [a.id for a in store.alerts.list_by_phc("PHC001")] == [second.id, first.id]
