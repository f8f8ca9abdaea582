"""Pydantic schemas for employee records and their stored form."""

from pydantic import BaseModel, EmailStr, Field


class Address(BaseModel):
    street: str
    city: str
    state: str
    postal_code: str
    country: str


class ContactDetails(BaseModel):
    email: EmailStr
    phone_number: str


class JobDetails(BaseModel):
    job_title: str
    department: str
    hire_date: str
    employment_type: str
    salary: float
    currency: str


class WorkLocation(BaseModel):
    nearest_office: str
    is_remote: bool


class PerformanceReview(BaseModel):
    review_date: str
    rating: float
    comments: str


class Benefits(BaseModel):
    health_insurance: str
    retirement_plan: str
    paid_time_off: int


class EmergencyContact(BaseModel):
    name: str
    relationship: str
    phone_number: str


class EmployeeRecord(BaseModel):
    """One employee as authored by HR (or by the synthetic generator)."""
    employee_id: str = Field(min_length=1)
    first_name: str
    last_name: str
    date_of_birth: str
    address: Address
    contact_details: ContactDetails
    job_details: JobDetails
    work_location: WorkLocation
    reporting_manager: str | None = None
    skills: list[str] = []
    performance_reviews: list[PerformanceReview] = []
    benefits: Benefits
    emergency_contact: EmergencyContact
    notes: str = ""


class EmployeeBatch(BaseModel):
    """Wrapper the synthetic generator asks the model to fill."""
    employees: list[EmployeeRecord]


class StoredEmployee(BaseModel):
    """A record as it sits in the store: fields plus derived summary and embedding."""
    record: EmployeeRecord
    summary: str
    embedding: list[float]


class EmployeeMatch(BaseModel):
    """One similarity-search hit. Higher score = closer match."""
    record: EmployeeRecord
    summary: str
    score: float

    def to_payload(self) -> dict:
        """Tool-facing shape: {"record": {...fields, "summary"}, "score"}."""
        record = self.record.model_dump(mode="json")
        record["summary"] = self.summary
        return {"record": record, "score": self.score}
