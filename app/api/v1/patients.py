from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...api.deps import get_current_patient
from ...models.patient import Patient
from ...schemas.auth import LoginRequest, PatientLoginResponse
from ...schemas.common import Page
from ...schemas.patient import PatientRegistrationRequest, PatientResponse
from ...services.auth_service import AuthService
from ...services.patient_service import PatientService

router = APIRouter(prefix="/patient", tags=["Patients"])

def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    return PatientService(db)

@router.post("/register", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def register_patient(
    data: PatientRegistrationRequest,
    service: PatientService = Depends(get_patient_service)
):
    """Register a new patient account."""
    return PatientResponse.model_validate(service.register_patient(data))

@router.post("/login", response_model=PatientLoginResponse)
async def login_patient(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    return AuthService(db).authenticate_patient(login_data)

@router.get("/me", response_model=PatientResponse)
async def get_current_patient_info(
    current_patient: Patient = Depends(get_current_patient)
):
    return PatientResponse.model_validate(current_patient)

@router.get("/list", response_model=Page[PatientResponse])
async def list_patients(
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    service: PatientService = Depends(get_patient_service)
):
    return service.list_patients(page, size, sort_by, sort_dir)

@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: int,
    service: PatientService = Depends(get_patient_service)
):
    return PatientResponse.model_validate(service.get_patient(patient_id))

@router.patch("/{patient_id}/deactivate", response_model=PatientResponse)
async def deactivate_patient(
    patient_id: int,
    service: PatientService = Depends(get_patient_service)
):
    return PatientResponse.model_validate(service.set_active(patient_id, False))

@router.patch("/{patient_id}/activate", response_model=PatientResponse)
async def activate_patient(
    patient_id: int,
    service: PatientService = Depends(get_patient_service)
):
    return PatientResponse.model_validate(service.set_active(patient_id, True))
