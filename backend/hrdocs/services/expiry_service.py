from datetime import date, datetime, timedelta

from icalendar import Alarm, Calendar, Event
from sqlalchemy.orm import Session

from hrdocs.config import settings
from hrdocs.models.employee_document import EmployeeDocument


def reminder_type(expiry: date, today: date) -> str:
    if expiry < today:
        return "expired"
    if expiry == today:
        return "expiry_due"
    return "expiry_warning"


def expiring_documents(
    db: Session,
    company_id: str,
    within_days: int | None = None,
    employee_id: str | None = None,
    today: date | None = None,
) -> list[tuple[EmployeeDocument, int, str]]:
    """Active, non-NA documents expiring within N days (already expired included).

    Returns (document, days_until_expiry, reminder_type) ordered by expiry.
    """
    today = today or date.today()
    horizon = today + timedelta(days=settings.expiry_warning_days if within_days is None else within_days)

    query = db.query(EmployeeDocument).filter(
        EmployeeDocument.company_id == company_id,
        EmployeeDocument.is_active.is_(True),
        EmployeeDocument.is_not_applicable.is_(False),
        EmployeeDocument.expiry_date.isnot(None),
        EmployeeDocument.expiry_date <= horizon.isoformat(),
    )
    if employee_id:
        query = query.filter(EmployeeDocument.employee_id == employee_id)

    results = []
    for doc in query.order_by(EmployeeDocument.expiry_date.asc()).all():
        expiry = date.fromisoformat(doc.expiry_date)
        results.append((doc, (expiry - today).days, reminder_type(expiry, today)))
    return results


def build_expiry_event(document_name: str, document_number: str | None,
                       expiry_date: str, uid: str) -> Event:
    event = Event()
    summary = f"Expiry: {document_name}"
    if document_number:
        summary += f" ({document_number})"
    event.add("summary", summary)
    event.add("uid", f"{uid}@hrdocs")

    expiry = datetime.strptime(expiry_date, "%Y-%m-%d").date()
    event.add("dtstart", expiry)
    event.add("dtend", expiry + timedelta(days=1))

    for days in settings.expiry_reminder_days:
        alarm = Alarm()
        alarm.add("action", "DISPLAY")
        alarm.add("trigger", -timedelta(days=days))
        alarm.add("description", f"{document_name} expires on {expiry_date}")
        event.add_component(alarm)
    return event


def expiry_calendar(db: Session, company_id: str, employee_id: str) -> bytes:
    """iCalendar feed with one all-day event per active, dated document."""
    cal = Calendar()
    cal.add("prodid", "-//HRDocs//Document Expiry//EN")
    cal.add("version", "2.0")

    documents = (
        db.query(EmployeeDocument)
        .filter(
            EmployeeDocument.company_id == company_id,
            EmployeeDocument.employee_id == employee_id,
            EmployeeDocument.is_active.is_(True),
            EmployeeDocument.is_not_applicable.is_(False),
            EmployeeDocument.expiry_date.isnot(None),
        )
        .order_by(EmployeeDocument.expiry_date.asc())
        .all()
    )
    for doc in documents:
        cal.add_component(build_expiry_event(
            document_name=doc.document_type.name,
            document_number=doc.document_number,
            expiry_date=doc.expiry_date,
            uid=doc.id,
        ))
    return cal.to_ical()
