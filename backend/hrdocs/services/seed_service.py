"""
Default folder and document type structure for a new company.
Seeded types are system-reserved: their codes are fixed and they cannot be
deleted.
"""
import logging

from sqlalchemy.orm import Session

from hrdocs.database import atomic
from hrdocs.models.document_type import DocumentType
from hrdocs.models.folder import DocumentFolder
from hrdocs.services.folder_service import create_folder
from hrdocs.utils.ids import new_id, utc_now

logger = logging.getLogger("hrdocs.seed")

IMAGE_OR_PDF = "pdf,jpg,jpeg,png"


def _single(code, name, description, **extra):
    return {"code": code, "name": name, "description": description,
            "allow_single": True, "allow_multiple": False, **extra}


def _multiple(code, name, description, **extra):
    return {"code": code, "name": name, "description": description,
            "allow_single": False, "allow_multiple": True, **extra}


DEFAULT_STRUCTURE = [
    {
        "folder_name": "Employee Documents",
        "folder_description": "All employee related documents",
        "is_system_folder": True,
        "document_types": [
            _single("AADHAAR_CARD", "Aadhaar Card", "Government issued Aadhaar card",
                    is_mandatory=True, allowed_file_types=IMAGE_OR_PDF),
            _single("PAN_CARD", "PAN Card", "Permanent Account Number card",
                    is_mandatory=True, allowed_file_types=IMAGE_OR_PDF),
            _single("PASSPORT", "Passport", "Passport document",
                    allow_not_applicable=True, require_expiry_date=True,
                    allowed_file_types=IMAGE_OR_PDF),
            _single("DRIVING_LICENSE", "Driving License", "Driving license document",
                    allow_not_applicable=True, require_expiry_date=True,
                    allowed_file_types=IMAGE_OR_PDF),
            _multiple("EDUCATIONAL_CERT", "Educational Certificates",
                      "Degree and educational certificates",
                      is_mandatory=True, allowed_file_types=IMAGE_OR_PDF, max_file_size_mb=10.0),
            _multiple("EXPERIENCE_LETTER", "Experience Letters",
                      "Previous employment experience letters",
                      allow_not_applicable=True, allowed_file_types=IMAGE_OR_PDF,
                      max_file_size_mb=10.0),
            _single("BANK_DETAILS", "Bank Account Details",
                    "Bank account details and cancelled cheque",
                    is_mandatory=True, allowed_file_types=IMAGE_OR_PDF),
            _single("ADDRESS_PROOF", "Address Proof", "Address verification documents",
                    is_mandatory=True, allowed_file_types=IMAGE_OR_PDF),
        ],
    },
    {
        "folder_name": "Employment Letters",
        "folder_description": "Employment related letters and communications",
        "is_system_folder": True,
        "document_types": [
            _single("OFFER_LETTER", "Offer Letter", "Employment offer letter", allowed_file_types="pdf"),
            _single("APPOINTMENT_LETTER", "Appointment Letter", "Appointment letter",
                    allowed_file_types="pdf"),
            _single("CONFIRMATION_LETTER", "Confirmation Letter", "Probation confirmation letter",
                    allowed_file_types="pdf"),
            _multiple("INCREMENT_LETTER", "Increment Letter", "Salary increment letter",
                      allowed_file_types="pdf"),
            _multiple("PROMOTION_LETTER", "Promotion Letter", "Promotion letter",
                      allowed_file_types="pdf"),
        ],
    },
    {
        "folder_name": "Payroll Documents",
        "folder_description": "Payroll and salary related documents",
        "is_system_folder": True,
        "document_types": [
            _multiple("SALARY_SLIP", "Salary Slip", "Monthly salary slip", allowed_file_types="pdf"),
            _multiple("FORM_16", "Form 16", "Annual Form 16 (TDS Certificate)", allowed_file_types="pdf"),
            _multiple("INVESTMENT_DECLARATION", "Investment Declaration",
                      "Tax saving investment declaration",
                      allowed_file_types=IMAGE_OR_PDF, max_file_size_mb=10.0),
        ],
    },
    {
        "folder_name": "Exit Documents",
        "folder_description": "Employee exit related documents",
        "is_system_folder": True,
        "document_types": [
            _single("RESIGNATION_LETTER", "Resignation Letter", "Employee resignation letter",
                    allowed_file_types=IMAGE_OR_PDF),
            _single("RELIEVING_LETTER", "Relieving Letter", "Employee relieving letter",
                    allowed_file_types="pdf"),
            _single("EXPERIENCE_CERTIFICATE", "Experience Certificate",
                    "Experience certificate issued by company", allowed_file_types="pdf"),
        ],
    },
    {
        "folder_name": "Miscellaneous",
        "folder_description": "Other documents",
        "is_system_folder": False,
        "document_types": [
            _multiple("OTHER_DOCUMENT", "Other Document", "Other miscellaneous documents",
                      allow_not_applicable=True,
                      allowed_file_types="pdf,jpg,jpeg,png,doc,docx,xls,xlsx",
                      max_file_size_mb=10.0),
        ],
    },
]


def structure_exists(db: Session, company_id: str) -> bool:
    return (
        db.query(DocumentFolder.id)
        .filter(DocumentFolder.company_id == company_id, DocumentFolder.is_system_folder.is_(True))
        .first()
        is not None
    )


def seed_default_structure(db: Session, company_id: str, user_id: str) -> dict:
    """Create the default folders and system document types for a company."""
    if structure_exists(db, company_id):
        logger.info("Document structure already present for company %s", company_id)
        return {"folders_created": 0, "document_types_created": 0, "skipped": True}

    folders_created = 0
    types_created = 0
    with atomic(db):
        for folder_order, folder_config in enumerate(DEFAULT_STRUCTURE, start=1):
            folder = create_folder(
                db, company_id, user_id,
                folder_name=folder_config["folder_name"],
                folder_description=folder_config["folder_description"],
                display_order=folder_order,
                is_system_folder=folder_config["is_system_folder"],
            )
            folders_created += 1
            for type_order, config in enumerate(folder_config["document_types"], start=1):
                now = utc_now()
                db.add(DocumentType(
                    id=new_id(),
                    company_id=company_id,
                    folder_id=folder.id,
                    code=config["code"],
                    name=config["name"],
                    description=config["description"],
                    allow_single=config["allow_single"],
                    allow_multiple=config["allow_multiple"],
                    is_mandatory=config.get("is_mandatory", False),
                    allow_not_applicable=config.get("allow_not_applicable", False),
                    require_expiry_date=config.get("require_expiry_date", False),
                    allowed_file_types=config["allowed_file_types"],
                    max_file_size_mb=config.get("max_file_size_mb", 5.0),
                    display_order=type_order,
                    is_system_type=True,
                    is_active=True,
                    created_by=user_id,
                    created_at=now,
                    updated_at=now,
                ))
                types_created += 1

    logger.info(
        "Seeded %d folders and %d document types for company %s",
        folders_created, types_created, company_id,
    )
    return {"folders_created": folders_created, "document_types_created": types_created, "skipped": False}
