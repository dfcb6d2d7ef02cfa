"""
Pydantic schemas for store inputs, stored records and API responses.

Input schemas (``*Create`` / ``*Update``) are the typed values produced by the
validation boundary. Record schemas are frozen: an update replaces the record
with a new version rather than mutating it.
"""

from datetime import date, datetime, timezone
from typing import Annotated, Any, ClassVar, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


PHCStatus = Literal["active", "inactive"]
DiseaseType = Literal["cholera", "diarrhea", "typhoid", "hepatitis_a", "dysentery", "gastroenteritis"]
AgeGroup = Literal["0-5", "6-18", "19-60", "60+"]
ReportSeverity = Literal["mild", "moderate", "severe"]
WaterSource = Literal["borewell", "hand_pump", "river", "pond", "municipal_supply", "other"]
WaterTestStatus = Literal["safe", "contaminated", "pending"]
AlertSeverity = Literal["low", "medium", "high", "critical"]
AlertStatus = Literal["active", "verified", "resolved", "false-alarm"]
UserRole = Literal["admin", "phc_worker", "data_entry", "viewer"]
Language = Literal["en", "as", "bn"]


def to_naive_utc(value: Any) -> Any:
    """
    Normalize timestamps to naive UTC.

    Plain dates (objects or ``YYYY-MM-DD`` strings) become midnight; aware
    datetimes are converted to UTC and stripped of tzinfo.
    """
    if isinstance(value, str) and len(value) == 10:
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


Timestamp = Annotated[datetime, BeforeValidator(to_naive_utc)]
RequiredText = Annotated[str, Field(min_length=1)]


class _Schema(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        allow_inf_nan = False


class _PartialSchema(_Schema):
    """
    Base for partial updates: every field is optional, but a field that is
    required on the record may not be explicitly set to null.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @field_validator("*")
    @classmethod
    def _reject_nulls(cls, value, info):
        if value is None and info.field_name not in cls.nullable_fields:
            raise ValueError("cannot be null")
        return value

    def changes(self) -> dict:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)


class _Record(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        frozen = True


# PHC schemas
class PHCCreate(_Schema):
    name: RequiredText = Field(..., description="PHC name")
    district: RequiredText = Field(..., description="District")
    state: RequiredText = Field(..., description="State")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    contact_phone: Optional[str] = None
    admin_name: Optional[str] = None
    status: PHCStatus = "active"


class PHCUpdate(_PartialSchema):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"contact_phone", "admin_name"})

    name: Optional[RequiredText] = None
    district: Optional[RequiredText] = None
    state: Optional[RequiredText] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    contact_phone: Optional[str] = None
    admin_name: Optional[str] = None
    status: Optional[PHCStatus] = None


class PHCRecord(_Record):
    id: str
    name: str
    district: str
    state: str
    latitude: float
    longitude: float
    contact_phone: Optional[str] = None
    admin_name: Optional[str] = None
    status: PHCStatus
    created_at: datetime


# Disease report schemas
class DiseaseReportCreate(_Schema):
    phc_id: RequiredText = Field(..., description="Reporting PHC")
    report_date: Timestamp = Field(..., description="Date of report")
    disease_type: DiseaseType
    case_count: int = Field(..., ge=1, description="At least 1 case must be reported")
    age_group: AgeGroup
    severity: ReportSeverity
    symptoms: Optional[str] = None
    notes: Optional[str] = None
    reported_by: RequiredText = Field(..., description="Reporter name")
    verified: bool = False


class DiseaseReportUpdate(_PartialSchema):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"symptoms", "notes"})

    phc_id: Optional[RequiredText] = None
    report_date: Optional[Timestamp] = None
    disease_type: Optional[DiseaseType] = None
    case_count: Optional[int] = Field(None, ge=1)
    age_group: Optional[AgeGroup] = None
    severity: Optional[ReportSeverity] = None
    symptoms: Optional[str] = None
    notes: Optional[str] = None
    reported_by: Optional[RequiredText] = None
    verified: Optional[bool] = None


class DiseaseReportRecord(_Record):
    id: str
    phc_id: str
    report_date: datetime
    disease_type: DiseaseType
    case_count: int
    age_group: AgeGroup
    severity: ReportSeverity
    symptoms: Optional[str] = None
    notes: Optional[str] = None
    reported_by: str
    verified: bool
    created_at: datetime


# Water quality test schemas
class WaterQualityTestCreate(_Schema):
    phc_id: RequiredText = Field(..., description="Testing PHC")
    test_date: Timestamp = Field(..., description="Date of test")
    location: RequiredText = Field(..., description="Test location")
    source: WaterSource
    ph_value: Optional[float] = Field(None, ge=0, le=14)
    turbidity: Optional[float] = Field(None, ge=0)
    bacteria: Optional[float] = Field(None, ge=0, description="E. coli count")
    chlorine: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    tested_by: RequiredText = Field(..., description="Tester name")
    status: WaterTestStatus = "pending"


class WaterQualityTestUpdate(_PartialSchema):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset(
        {"ph_value", "turbidity", "bacteria", "chlorine", "notes"}
    )

    phc_id: Optional[RequiredText] = None
    test_date: Optional[Timestamp] = None
    location: Optional[RequiredText] = None
    source: Optional[WaterSource] = None
    ph_value: Optional[float] = Field(None, ge=0, le=14)
    turbidity: Optional[float] = Field(None, ge=0)
    bacteria: Optional[float] = Field(None, ge=0)
    chlorine: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    tested_by: Optional[RequiredText] = None
    status: Optional[WaterTestStatus] = None


class WaterQualityTestRecord(_Record):
    id: str
    phc_id: str
    test_date: datetime
    location: str
    source: WaterSource
    ph_value: Optional[float] = None
    turbidity: Optional[float] = None
    bacteria: Optional[float] = None
    chlorine: Optional[float] = None
    notes: Optional[str] = None
    tested_by: str
    status: WaterTestStatus
    created_at: datetime


# Alert schemas
class AlertCreate(_Schema):
    """New alerts always start out active; status is not accepted here."""

    title: RequiredText
    description: RequiredText
    severity: AlertSeverity
    phc_id: RequiredText
    affected_population: int = Field(..., ge=1, description="Affected population must be greater than 0")
    estimated_cases: int = Field(..., ge=1, description="Estimated cases must be greater than 0")
    confidence: int = Field(..., ge=0, le=100, description="Confidence between 0-100")
    risk_factors: List[str] = Field(default_factory=list)


class AlertUpdate(_PartialSchema):
    title: Optional[RequiredText] = None
    description: Optional[RequiredText] = None
    severity: Optional[AlertSeverity] = None
    status: Optional[AlertStatus] = None
    phc_id: Optional[RequiredText] = None
    affected_population: Optional[int] = Field(None, ge=1)
    estimated_cases: Optional[int] = Field(None, ge=1)
    confidence: Optional[int] = Field(None, ge=0, le=100)
    risk_factors: Optional[List[str]] = None


class AlertRecord(_Record):
    id: str
    title: str
    description: str
    severity: AlertSeverity
    status: AlertStatus
    phc_id: str
    affected_population: int
    estimated_cases: int
    confidence: int
    risk_factors: Tuple[str, ...] = ()
    alerted_at: datetime
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    created_at: datetime


class AlertVerifyRequest(_Schema):
    verified_by: RequiredText


class AlertResolveRequest(_Schema):
    resolved_by: RequiredText


# User schemas
class UserCreate(_Schema):
    name: RequiredText
    email: EmailStr
    role: UserRole
    phc_id: Optional[str] = None
    language: Language = "en"
    phone: Optional[str] = None


class UserUpdate(_PartialSchema):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"phc_id", "phone"})

    name: Optional[RequiredText] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    phc_id: Optional[str] = None
    language: Optional[Language] = None
    phone: Optional[str] = None


class UserRecord(_Record):
    id: str
    name: str
    email: str
    role: UserRole
    phc_id: Optional[str] = None
    language: Language
    phone: Optional[str] = None
    created_at: datetime


# Dashboard schemas
class DashboardSummary(_Record):
    total_phcs: int = Field(..., alias="totalPHCs")
    active_alerts: int
    recent_disease_reports: int
    recent_water_tests: int
    critical_alerts: int
    high_risk_phcs: int = Field(..., alias="highRiskPHCs")


class CaseTrendPoint(_Record):
    day: date
    cases: int
    reports: int


class AlertStatistics(_Record):
    total_alerts: int
    active_alerts: int
    verified_alerts: int
    resolved_alerts: int
    false_alarms: int
    severity_counts: dict
    recent_alerts_30d: int


class PHCStatistics(_Record):
    phc_id: str = Field(..., alias="phcId")
    phc_name: str
    district: str
    state: str
    total_reports: int
    total_cases: int
    recent_cases_30d: int
    water_tests: int
    contaminated_tests: int
    active_alerts: int
