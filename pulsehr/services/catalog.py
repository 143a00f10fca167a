"""
Reference data seeded into an empty database: HR policy categories,
identity document types and the onboarding wizard steps.
"""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from pulsehr.db.models import DocumentType, HRCategory

logger = logging.getLogger(__name__)

COMPANY_DESCRIPTION = "Company Description"

DEFAULT_HR_CATEGORIES = [
    (COMPANY_DESCRIPTION, "Who we are, our mission and culture"),
    ("Code of Conduct", "Expected behaviour and ethics"),
    ("Attendance & Leave", "Working days, holidays and leave entitlements"),
    ("Working Hours", "Office timings, shifts and overtime"),
    ("Compensation & Payroll", "Salary structure, payroll cycle and deductions"),
    ("Employee Benefits", "Insurance, allowances and perks"),
    ("Performance Management", "Goals, reviews and appraisals"),
    ("Prevention of Sexual Harassment", "POSH policy and internal committee"),
    ("Health & Safety", "Workplace safety and emergency procedures"),
    ("IT & Data Security", "Acceptable use, passwords and data protection"),
    ("Travel & Expenses", "Business travel and reimbursement rules"),
    ("Remote Work", "Work from home eligibility and expectations"),
    ("Grievance Redressal", "Raising and resolving complaints"),
    ("Disciplinary Action", "Misconduct and disciplinary process"),
    ("Training & Development", "Learning programs and certifications"),
    ("Exit & Separation", "Resignation, notice period and full and final settlement"),
]

# (type_key, display_name, description, is_mandatory)
DEFAULT_DOCUMENT_TYPES = [
    ("aadhar_card", "Aadhaar Card", "Front and back in a single file", True),
    ("pan_card", "PAN Card", "Permanent account number card", True),
    ("passport_photo", "Passport Size Photo", "Recent photograph, plain background", True),
    ("education_certificate", "Education Certificates", "Highest degree and mark sheets", True),
    ("bank_proof", "Cancelled Cheque / Passbook", "For salary account verification", True),
    ("experience_letter", "Experience Letter", "From the previous employer, if any", False),
    ("relieving_letter", "Relieving Letter", "From the previous employer, if any", False),
    ("driving_license", "Driving License", "Optional identity proof", False),
]

ONBOARDING_STEPS = [
    {
        "title": "Employee Details",
        "description": "Basic personal information",
        "fields": ["employee_name", "date_of_birth", "gender", "nationality", "marital_status", "number_of_kids"],
        "required": ["employee_name", "date_of_birth", "gender", "nationality", "marital_status"],
    },
    {
        "title": "Contact Information",
        "description": "Address and contact details",
        "fields": ["personal_email", "contact_number", "current_address", "current_city", "state"],
        "required": ["personal_email", "contact_number", "current_address", "current_city", "state"],
    },
    {
        "title": "Job Details",
        "description": "Employment information",
        "fields": ["joining_date", "reporting_manager", "office_time", "office_department", "job_status", "job_title"],
        "required": ["joining_date", "reporting_manager", "office_time", "office_department", "job_title"],
    },
    {
        "title": "Identification",
        "description": "ID documents",
        "fields": ["aadhar_card", "pan_number", "driving_license"],
        "required": ["aadhar_card", "pan_number"],
    },
    {
        "title": "Emergency Contact",
        "description": "Emergency contact person",
        "fields": ["emergency_contact_person", "emergency_contact_number", "emergency_relationship"],
        "required": ["emergency_contact_person", "emergency_contact_number", "emergency_relationship"],
    },
    {
        "title": "Health Information",
        "description": "Health and medical details",
        "fields": ["blood_type", "has_health_problem", "health_problem_details"],
        "required": ["blood_type"],
    },
    {
        "title": "Banking Information",
        "description": "Bank account details",
        "fields": ["account_holder_name", "bank_name", "account_number", "ifsc_code"],
        "required": ["account_holder_name", "bank_name", "account_number", "ifsc_code"],
    },
    {
        "title": "Nominee Details",
        "description": "Nominee information (optional)",
        "fields": ["nominee_name", "nominee_relation", "nominee_gender", "nominee_date_of_birth", "nominee_aadhar_number"],
        "required": [],
    },
    {
        "title": "Previous Employment",
        "description": "Previous work experience",
        "fields": ["previous_company_name"],
        "required": [],
    },
    {
        "title": "Education",
        "description": "Educational background",
        "fields": ["graduation_degree"],
        "required": [],
    },
]

INDIAN_STATES = [
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh",
    "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jharkhand",
    "Karnataka", "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur",
    "Meghalaya", "Mizoram", "Nagaland", "Odisha", "Punjab",
    "Rajasthan", "Sikkim", "Tamil Nadu", "Telangana", "Tripura",
    "Uttar Pradesh", "Uttarakhand", "West Bengal",
]

BLOOD_TYPES = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


def is_company_description(category: HRCategory) -> bool:
    return category.name.strip().lower() == COMPANY_DESCRIPTION.lower()


def policy_categories(db: Session) -> List[HRCategory]:
    """
    Every HR category an employee has to acknowledge, i.e. all but the
    Company Description.
    """
    return [c for c in db.execute(select(HRCategory)).scalars().all() if not is_company_description(c)]


def ensure_hr_categories(db: Session) -> List[HRCategory]:
    """
    Insert the missing default categories; existing rows are left untouched.
    """
    existing = {c.name for c in db.execute(select(HRCategory)).scalars().all()}
    added = 0
    for i, (name, description) in enumerate(DEFAULT_HR_CATEGORIES, start=1):
        if name in existing:
            continue
        db.add(HRCategory(name=name, description=description, order_index=i))
        added += 1
    if added:
        db.commit()
        logger.info("Seeded %d HR categories", added)

    return list(db.execute(select(HRCategory).order_by(HRCategory.order_index, HRCategory.id)).scalars().all())


def ensure_document_types(db: Session) -> None:
    """
    Seed the default document types when the table is empty.
    """
    if db.execute(select(DocumentType.id).limit(1)).first() is not None:
        return
    for i, (key, name, description, mandatory) in enumerate(DEFAULT_DOCUMENT_TYPES, start=1):
        db.add(
            DocumentType(
                type_key=key,
                display_name=name,
                description=description,
                is_mandatory=mandatory,
                is_applicable=True,
                order_index=i,
            )
        )
    db.commit()
    logger.info("Seeded %d document types", len(DEFAULT_DOCUMENT_TYPES))
