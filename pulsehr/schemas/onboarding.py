from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from pulsehr.services.catalog import BLOOD_TYPES, INDIAN_STATES


class OnboardingStep(BaseModel):
    index: int
    title: str
    description: str
    fields: list[str]
    required: list[str]


class OnboardingStepsOut(BaseModel):
    steps: list[OnboardingStep]
    states: list[str]
    blood_types: list[str]


class OnboardingFields(BaseModel):
    # Employee details
    employee_name: str = ""
    date_of_birth: Optional[date] = None
    gender: str = ""
    nationality: str = ""
    marital_status: str = ""
    number_of_kids: int = Field(0, ge=0, le=20)

    # Contact
    personal_email: str = ""
    contact_number: str = ""
    current_address: str = ""
    current_city: str = ""
    state: str = ""

    # Job
    joining_date: Optional[date] = None
    reporting_manager: str = ""
    office_time: str = ""
    office_department: str = ""
    job_status: str = ""
    job_title: str = ""

    # Identification
    aadhar_card: str = ""
    pan_number: str = ""
    driving_license: str = ""

    # Emergency contact
    emergency_contact_person: str = ""
    emergency_contact_number: str = ""
    emergency_relationship: str = ""

    # Health
    blood_type: str = ""
    has_health_problem: bool = False
    health_problem_details: str = ""

    # Banking
    account_holder_name: str = ""
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = ""

    # Nominee
    nominee_name: str = ""
    nominee_relation: str = ""
    nominee_gender: str = ""
    nominee_date_of_birth: Optional[date] = None
    nominee_aadhar_number: str = ""

    # Previous employment / education
    previous_company_name: str = ""
    graduation_degree: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("date_of_birth", "joining_date", "nominee_date_of_birth", mode="before")
    @classmethod
    def empty_date(cls, v):
        # html date inputs send "" when untouched
        return None if v == "" else v

    @field_validator("blood_type")
    @classmethod
    def known_blood_type(cls, v: str) -> str:
        if v and v not in BLOOD_TYPES:
            raise ValueError(f"blood_type must be one of {', '.join(BLOOD_TYPES)}")
        return v

    @field_validator("state")
    @classmethod
    def known_state(cls, v: str) -> str:
        if v and v not in INDIAN_STATES:
            raise ValueError("Unknown state")
        return v


class OnboardingIn(OnboardingFields):
    employee_id: str = Field(..., min_length=1)


class OnboardingOut(OnboardingFields):
    employee_id: str
    completed: bool
    submitted_at: Optional[datetime] = None
