import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.pagination import apply_sort, page_bounds, paginate
from ..core.security import get_password_hash
from ..core.validators import age_on
from ..models.patient import Patient
from ..schemas.common import Page
from ..schemas.patient import PatientRegistrationRequest, PatientResponse

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Patient.created_at,
    "createdAt": Patient.created_at,
    "last_name": Patient.last_name,
    "lastName": Patient.last_name,
    "date_of_birth": Patient.date_of_birth,
}


class PatientService:
    def __init__(self, db: Session):
        self.db = db

    def register_patient(self, data: PatientRegistrationRequest) -> Patient:
        if age_on(data.date_of_birth, date.today()) < settings.MIN_PATIENT_AGE:
            raise ValidationError(f"Patient must be at least {settings.MIN_PATIENT_AGE} years old")

        if self.db.query(Patient.id).filter(Patient.email == data.email).first():
            raise ConflictError("Email already exists")
        if self.db.query(Patient.id).filter(Patient.phone_number == data.phone_number).first():
            raise ConflictError("Phone number already exists")

        contact = data.emergency_contact
        insurance = data.insurance_info
        patient = Patient(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            password_hash=get_password_hash(data.password),
            date_of_birth=data.date_of_birth,
            gender=data.gender,
            street=data.address.street,
            city=data.address.city,
            state=data.address.state,
            zip_code=data.address.zip,
            emergency_contact_name=contact.name if contact else None,
            emergency_contact_phone=contact.phone if contact else None,
            emergency_contact_relationship=contact.relationship if contact else None,
            medical_history=data.medical_history,
            insurance_provider=insurance.provider if insurance else None,
            insurance_policy_number=insurance.policy_number if insurance else None,
            email_verified=False,
            phone_verified=False,
            is_active=True,
        )

        self.db.add(patient)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Patient with these details already exists") from e
        self.db.refresh(patient)

        logger.info(f"Registered patient {patient.id}")
        return patient

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError(f"Patient not found with id: {patient_id}")
        return patient

    def set_active(self, patient_id: int, is_active: bool) -> Patient:
        patient = self.get_patient(patient_id)
        patient.is_active = is_active
        self.db.commit()
        self.db.refresh(patient)
        return patient

    def list_patients(
        self,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
    ) -> Page[PatientResponse]:
        page, size = page_bounds(page, size)
        query = apply_sort(self.db.query(Patient), SORTABLE_COLUMNS, sort_by, sort_dir)
        rows, total = paginate(query, page, size)
        content = [PatientResponse.model_validate(p) for p in rows]
        return Page[PatientResponse].build(content, page, size, total)
