"""Initial schema - providers, patients, availability windows and slots

Revision ID: 0001_initial_schema
Revises: None
Create Date: 2026-10-19

Tables created:
- providers: provider accounts (unique email, phone and license)
- patients: patient accounts (unique email and phone)
- provider_availability: availability windows with range check constraints
  and a unique (provider_id, date, start_time)
- appointment_slots: slots generated from a window, deleted with it
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

verification_status = sa.Enum("PENDING", "VERIFIED", "REJECTED", name="verificationstatus")
gender = sa.Enum("MALE", "FEMALE", "OTHER", "PREFER_NOT_TO_SAY", name="gender")
recurrence_pattern = sa.Enum("DAILY", "WEEKLY", "MONTHLY", name="recurrencepattern")
availability_status = sa.Enum(
    "AVAILABLE", "BOOKED", "CANCELLED", "BLOCKED", "MAINTENANCE", name="availabilitystatus"
)
appointment_type = sa.Enum(
    "CONSULTATION", "FOLLOW_UP", "EMERGENCY", "TELEMEDICINE", name="appointmenttype"
)
location_type = sa.Enum("CLINIC", "HOSPITAL", "TELEMEDICINE", "HOME_VISIT", name="locationtype")
slot_status = sa.Enum("AVAILABLE", "BOOKED", "CANCELLED", "BLOCKED", name="slotstatus")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "providers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("specialization", sa.String(100), nullable=False),
        sa.Column("license_number", sa.String(50), nullable=False, unique=True),
        sa.Column("years_of_experience", sa.Integer(), nullable=True),
        sa.Column("clinic_street", sa.String(200), nullable=False),
        sa.Column("clinic_city", sa.String(100), nullable=False),
        sa.Column("clinic_state", sa.String(50), nullable=False),
        sa.Column("clinic_zip", sa.String(20), nullable=False),
        sa.Column("verification_status", verification_status, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_providers_id", "providers", ["id"])
    op.create_index("ix_providers_email", "providers", ["email"], unique=True)
    op.create_index("ix_providers_specialization", "providers", ["specialization"])

    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", gender, nullable=False),
        sa.Column("street", sa.String(200), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(50), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=False),
        sa.Column("emergency_contact_name", sa.String(100), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(20), nullable=True),
        sa.Column("emergency_contact_relationship", sa.String(50), nullable=True),
        sa.Column("medical_history", sa.JSON(), nullable=True),
        sa.Column("insurance_provider", sa.String(100), nullable=True),
        sa.Column("insurance_policy_number", sa.String(100), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False),
        sa.Column("phone_verified", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_patients_id", "patients", ["id"])
    op.create_index("ix_patients_email", "patients", ["email"], unique=True)

    op.create_table(
        "provider_availability",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), sa.ForeignKey("providers.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("slot_duration", sa.Integer(), nullable=False),
        sa.Column("break_duration", sa.Integer(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("recurrence_pattern", recurrence_pattern, nullable=True),
        sa.Column("recurrence_end_date", sa.Date(), nullable=True),
        sa.Column("status", availability_status, nullable=False),
        sa.Column("max_appointments_per_slot", sa.Integer(), nullable=False),
        sa.Column("current_appointments", sa.Integer(), nullable=False),
        sa.Column("appointment_type", appointment_type, nullable=False),
        sa.Column("location_type", location_type, nullable=False),
        sa.Column("location_address", sa.String(255), nullable=True),
        sa.Column("room_number", sa.String(50), nullable=True),
        sa.Column("base_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("insurance_accepted", sa.Boolean(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("special_requirements", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        sa.CheckConstraint("slot_duration BETWEEN 15 AND 480", name="ck_availability_slot_duration"),
        sa.CheckConstraint("break_duration BETWEEN 0 AND 120", name="ck_availability_break_duration"),
        sa.CheckConstraint(
            "max_appointments_per_slot BETWEEN 1 AND 10", name="ck_availability_max_appointments"
        ),
        sa.CheckConstraint("current_appointments >= 0", name="ck_availability_current_appointments"),
        sa.UniqueConstraint(
            "provider_id", "date", "start_time", name="uq_availability_provider_date_start"
        ),
    )
    op.create_index("ix_provider_availability_id", "provider_availability", ["id"])
    op.create_index(
        "ix_availability_provider_date", "provider_availability", ["provider_id", "date"]
    )

    op.create_table(
        "appointment_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "availability_id",
            sa.Integer(),
            sa.ForeignKey("provider_availability.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider_id", sa.Integer(), sa.ForeignKey("providers.id"), nullable=False),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=True),
        sa.Column("slot_start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("slot_end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", slot_status, nullable=False),
        sa.Column("appointment_type", sa.String(50), nullable=False),
        sa.Column("booking_reference", sa.String(100), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_appointment_slots_id", "appointment_slots", ["id"])
    op.create_index("ix_appointment_slots_availability_id", "appointment_slots", ["availability_id"])
    op.create_index("ix_appointment_slots_provider_id", "appointment_slots", ["provider_id"])
    op.create_index("ix_appointment_slots_slot_start_time", "appointment_slots", ["slot_start_time"])


def downgrade() -> None:
    op.drop_table("appointment_slots")
    op.drop_table("provider_availability")
    op.drop_table("patients")
    op.drop_table("providers")

    bind = op.get_bind()
    for enum_type in (
        slot_status, location_type, appointment_type, availability_status,
        recurrence_pattern, gender, verification_status,
    ):
        enum_type.drop(bind, checkfirst=True)
