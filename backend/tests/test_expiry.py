from datetime import date, timedelta

from icalendar import Calendar

from hrdocs.config import settings
from hrdocs.services.expiry_service import build_expiry_event, reminder_type

API = "/api/v1"


class TestReminderType:
    def test_classification(self):
        today = date(2025, 6, 1)
        assert reminder_type(date(2025, 5, 31), today) == "expired"
        assert reminder_type(today, today) == "expiry_due"
        assert reminder_type(date(2025, 6, 20), today) == "expiry_warning"

    def test_event_alarms(self):
        event = build_expiry_event("Passport", "K1234567", "2030-01-15", uid="doc-1")
        assert event["summary"] == "Expiry: Passport (K1234567)"
        assert str(event["uid"]) == "doc-1@hrdocs"
        assert event.decoded("dtstart") == date(2030, 1, 15)
        assert len(event.subcomponents) == len(settings.expiry_reminder_days)


class TestExpiringDocuments:
    def _setup(self, client, headers, folder_id):
        type_id = client.post(f"{API}/document-types", json={
            "folder_id": folder_id, "code": "VISA", "name": "Visa",
            "allow_single": False, "allow_multiple": True, "allow_not_applicable": True,
        }, headers=headers).json()["id"]
        today = date.today()
        for days in (10, 100, -3):
            client.post(f"{API}/employees/emp-1/documents", json={
                "document_type_id": type_id, "file_name": "visa.pdf", "file_path": "/files/visa.pdf",
                "expiry_date": (today + timedelta(days=days)).isoformat(),
            }, headers=headers)
        client.post(f"{API}/employees/emp-1/documents", json={
            "document_type_id": type_id, "is_not_applicable": True, "not_applicable_reason": "Citizen",
            "expiry_date": (today + timedelta(days=5)).isoformat(),
        }, headers=headers)
        return type_id

    def test_expiring_window(self, client, headers, folder_id):
        self._setup(client, headers, folder_id)
        r = client.get(f"{API}/employees/emp-1/documents/expiring", headers=headers)
        assert r.status_code == 200
        data = r.json()
        assert [(d["days_until_expiry"], d["reminder_type"]) for d in data] == [
            (-3, "expired"), (10, "expiry_warning"),
        ]
        assert data[0]["document_type_name"] == "Visa"

        r = client.get(f"{API}/employees/emp-1/documents/expiring", params={"within_days": 365}, headers=headers)
        assert len(r.json()) == 3

    def test_calendar_feed(self, client, headers, folder_id):
        self._setup(client, headers, folder_id)
        r = client.get(f"{API}/employees/emp-1/documents/calendar", headers=headers)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/calendar")

        cal = Calendar.from_ical(r.content)
        events = [c for c in cal.walk("VEVENT")]
        assert len(events) == 3
        expected = (date.today() + timedelta(days=10)).strftime("%Y%m%d")
        assert f"DTSTART;VALUE=DATE:{expected}" in r.text

    def test_calendar_empty_for_other_employee(self, client, headers, folder_id):
        self._setup(client, headers, folder_id)
        r = client.get(f"{API}/employees/emp-9/documents/calendar", headers=headers)
        cal = Calendar.from_ical(r.content)
        assert cal.walk("VEVENT") == []
