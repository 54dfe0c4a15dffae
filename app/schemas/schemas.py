"""
Pydantic Schemas - Request/Response Validation

All API request schemas in one file for simplicity.
Role-specific profile data is a tagged union keyed by `role`, so a
Student payload can only ever carry student details, and so on.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, AfterValidator, field_validator, model_validator
from typing import Annotated, Optional, List, Literal, Union
from datetime import datetime, timezone
from enum import Enum


# ============================================================
# HELPERS
# ============================================================

def to_naive_utc(value: datetime) -> datetime:
    """Store every datetime as naive UTC (pymongo returns naive UTC)."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]
ObjectIdStr = Annotated[str, Field(pattern=r"^[0-9a-fA-F]{24}$")]
MobileNumber = Annotated[str, Field(pattern=r"^\d{10}$")]


class PortalModel(BaseModel):
    """Base for schemas whose dumps are written straight into MongoDB."""
    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "Student"
    recruiter = "Recruiter"
    tnp = "TnP"


class JobStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class ApplicationStatus(str, Enum):
    applied = "Applied"
    under_review = "Under Review"
    shortlisted = "Shortlisted"
    interview_scheduled = "Interview Scheduled"
    accepted = "Accepted"
    rejected = "Rejected"


class PlacementStatus(str, Enum):
    placed = "Placed"
    not_placed = "Not Placed"


class RecruiterVerification(str, Enum):
    pending = "Pending"
    verified = "Verified"
    rejected = "Rejected"


class JobType(str, Enum):
    full_time = "Full-time"
    internship = "Internship"
    part_time = "Part-time"


class ExperienceLevel(str, Enum):
    fresher = "Fresher"
    zero_to_one = "0-1 years"
    one_to_two = "1-2 years"
    two_plus = "2+ years"


class JobCategory(str, Enum):
    technical = "Technical"
    non_technical = "Non-Technical"
    research = "Research"
    management = "Management"


class WorkMode(str, Enum):
    office = "Work from Office"
    home = "Work from Home"
    hybrid = "Hybrid"


class InterviewMode(str, Enum):
    online = "Online"
    offline = "Offline"
    phone = "Phone"


class NotificationType(str, Enum):
    job = "Job"
    application = "Application"
    system = "System"
    reminder = "Reminder"


class NotificationPriority(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"


class MarksheetKind(str, Enum):
    tenth = "tenth"
    twelfth = "twelfth"
    last_semester = "last_semester"


class AreaOfInterest(str, Enum):
    backend = "Backend Development"
    frontend = "Frontend Development"
    full_stack = "Full-Stack Development"
    mobile = "Mobile Development"
    data_science = "Data Science"
    machine_learning = "Machine Learning"
    ai = "Artificial Intelligence"
    devops = "DevOps"
    cloud = "Cloud Computing"
    security = "Cybersecurity"
    testing = "Testing/QA"
    design = "UI/UX Design"
    dba = "Database Administration"
    sysadmin = "System Administration"
    networking = "Network Engineering"
    architecture = "Software Architecture"
    product = "Product Management"
    business_analysis = "Business Analysis"
    marketing = "Digital Marketing"
    content = "Content Writing"
    graphic_design = "Graphic Design"
    video = "Video Editing"
    photography = "Photography"
    other = "Other"


class SkillProficiency(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"
    expert = "Expert"


class LanguageProficiency(str, Enum):
    basic = "Basic"
    conversational = "Conversational"
    fluent = "Fluent"
    native = "Native"


class AchievementCategory(str, Enum):
    academic = "Academic"
    technical = "Technical"
    sports = "Sports"
    cultural = "Cultural"
    leadership = "Leadership"
    other = "Other"


# ============================================================
# ROLE DETAILS (tagged by role)
# ============================================================

class Address(PortalModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: str = "India"


class StudentDetailsIn(PortalModel):
    course_name: str = Field(..., min_length=1)
    college: ObjectIdStr
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    year_of_completion: Optional[int] = Field(None, ge=2020, le=2030)
    registration_number: Optional[str] = None


class RecruiterDetailsIn(PortalModel):
    company_name: str = Field(..., min_length=1)
    industry: str = Field(..., min_length=1)
    designation: str = Field(..., min_length=1)
    company_info: Optional[str] = Field(None, max_length=1000)
    company_website: Optional[str] = None


class TnPDetailsIn(PortalModel):
    college: ObjectIdStr
    designation: str = Field(..., min_length=1)
    employee_id: Optional[str] = None


# ============================================================
# AUTH SCHEMAS
# ============================================================

class _RegisterBase(PortalModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    mobile_number: MobileNumber
    password: str = Field(..., min_length=6)


class StudentRegister(_RegisterBase):
    role: Literal["Student"]
    details: StudentDetailsIn


class RecruiterRegister(_RegisterBase):
    role: Literal["Recruiter"]
    details: RecruiterDetailsIn


class TnPRegister(_RegisterBase):
    role: Literal["TnP"]
    details: TnPDetailsIn


RegisterRequest = Union[StudentRegister, RecruiterRegister, TnPRegister]


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


# ============================================================
# USER SCHEMAS
# ============================================================

class StudentDetailsUpdate(PortalModel):
    """Students may not touch college, verification or placement."""
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    course_name: Optional[str] = Field(None, min_length=1)
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    year_of_completion: Optional[int] = Field(None, ge=2020, le=2030)
    registration_number: Optional[str] = None
    address: Optional[Address] = None
    tenth_percentage: Optional[float] = Field(None, ge=0, le=100)
    twelfth_percentage: Optional[float] = Field(None, ge=0, le=100)
    area_of_interest: Optional[List[AreaOfInterest]] = None


class RecruiterDetailsUpdate(PortalModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    company_name: Optional[str] = Field(None, min_length=1)
    industry: Optional[str] = Field(None, min_length=1)
    designation: Optional[str] = Field(None, min_length=1)
    company_info: Optional[str] = Field(None, max_length=1000)
    company_website: Optional[str] = None


class TnPDetailsUpdate(PortalModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    designation: Optional[str] = Field(None, min_length=1)
    employee_id: Optional[str] = None


DETAILS_UPDATE_MODELS = {
    UserRole.student.value: StudentDetailsUpdate,
    UserRole.recruiter.value: RecruiterDetailsUpdate,
    UserRole.tnp.value: TnPDetailsUpdate,
}


class ProfileUpdate(PortalModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    mobile_number: Optional[MobileNumber] = None
    profile_avatar: Optional[str] = None
    # validated against the caller's role by the user service
    details: Optional[dict] = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class VerifyStudentRequest(BaseModel):
    is_verified: bool
    reason: Optional[str] = Field(None, max_length=500)


# ============================================================
# JOB SCHEMAS
# ============================================================

class Eligibility(PortalModel):
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    allowed_courses: List[str] = []
    max_backlogs: int = Field(0, ge=0)
    year_of_completion: List[int] = []


class CTC(PortalModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str = "INR"

    @model_validator(mode="after")
    def min_not_above_max(self):
        if self.min > self.max:
            raise ValueError("Minimum CTC cannot exceed maximum CTC")
        return self


class InterviewRound(PortalModel):
    type: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None


class InterviewProcess(PortalModel):
    rounds: List[InterviewRound] = []
    total_rounds: int = Field(1, ge=1)


class JobCreate(PortalModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    company_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    job_type: JobType
    designation: str = Field(..., min_length=1)
    skills_required: List[str] = []
    eligibility: Eligibility = Eligibility()
    ctc: CTC
    experience_required: ExperienceLevel = ExperienceLevel.fresher
    application_deadline: UTCDateTime
    job_category: Optional[JobCategory] = None
    work_mode: WorkMode = WorkMode.office
    interview_process: InterviewProcess = InterviewProcess()

    @field_validator("application_deadline")
    @classmethod
    def deadline_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value <= datetime.utcnow():
            raise ValueError("Application deadline must be in the future")
        return value


class JobUpdate(PortalModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    company_name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    job_type: Optional[JobType] = None
    designation: Optional[str] = Field(None, min_length=1)
    skills_required: Optional[List[str]] = None
    eligibility: Optional[Eligibility] = None
    ctc: Optional[CTC] = None
    experience_required: Optional[ExperienceLevel] = None
    application_deadline: Optional[UTCDateTime] = None
    job_category: Optional[JobCategory] = None
    work_mode: Optional[WorkMode] = None
    interview_process: Optional[InterviewProcess] = None

    @field_validator("application_deadline")
    @classmethod
    def deadline_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value <= datetime.utcnow():
            raise ValueError("Application deadline must be in the future")
        return value

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class ApproveJobRequest(BaseModel):
    approval_notes: Optional[str] = Field(None, max_length=500)


class RejectJobRequest(BaseModel):
    rejection_reason: str = Field(..., max_length=500)

    @field_validator("rejection_reason")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Rejection reason is required")
        return value.strip()


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class InterviewDetails(PortalModel):
    scheduled_date: Optional[UTCDateTime] = None
    scheduled_time: Optional[str] = None
    interview_mode: Optional[InterviewMode] = None
    meeting_link: Optional[str] = None
    venue: Optional[str] = None
    instructions: Optional[str] = None
    round: int = Field(1, ge=1)


class ApplicationStatusUpdate(PortalModel):
    status: ApplicationStatus
    recruiter_notes: Optional[str] = Field(None, max_length=1000)
    rejection_reason: Optional[str] = Field(None, max_length=500)
    interview_details: Optional[InterviewDetails] = None


# ============================================================
# RESUME SCHEMAS
# ============================================================

class PersonalDetails(PortalModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    address: Optional[Address] = None


class PersonalDetailsUpdate(PortalModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    address: Optional[Address] = None


class Education(PortalModel):
    degree: str
    institution: str
    field: str
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    percentage: Optional[float] = Field(None, ge=0, le=100)
    year_of_completion: int
    achievements: List[str] = []


class TechnicalSkill(PortalModel):
    name: str
    proficiency: Optional[SkillProficiency] = None


class Language(PortalModel):
    name: str
    proficiency: Optional[LanguageProficiency] = None


class Skills(PortalModel):
    technical: List[TechnicalSkill] = []
    soft: List[str] = []
    languages: List[Language] = []


class Project(PortalModel):
    title: str
    description: str = Field(..., max_length=500)
    tech_used: List[str] = []
    link: Optional[str] = None
    github_link: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    is_ongoing: bool = False
    team_size: Optional[int] = Field(None, ge=1)
    role: Optional[str] = None


class Experience(PortalModel):
    company: str
    role: str
    start_date: UTCDateTime
    end_date: Optional[UTCDateTime] = None
    is_current_job: bool = False
    description: Optional[str] = Field(None, max_length=1000)
    technologies: List[str] = []
    achievements: List[str] = []


class Achievement(PortalModel):
    title: str
    description: Optional[str] = Field(None, max_length=300)
    date: Optional[UTCDateTime] = None
    category: Optional[AchievementCategory] = None


class Certification(PortalModel):
    name: str
    issuing_organization: str
    issue_date: Optional[UTCDateTime] = None
    expiry_date: Optional[UTCDateTime] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None


class Visibility(PortalModel):
    public: bool = False
    recruiters_only: bool = True


class ResumeCreate(PortalModel):
    personal_details: PersonalDetails
    education: List[Education] = []
    skills: Skills = Skills()
    projects: List[Project] = []
    experience: List[Experience] = []
    achievements: List[Achievement] = []
    certifications: List[Certification] = []
    template_used: str = "standard"
    visibility: Visibility = Visibility()


class ResumeUpdate(PortalModel):
    personal_details: Optional[PersonalDetailsUpdate] = None
    education: Optional[List[Education]] = None
    skills: Optional[Skills] = None
    projects: Optional[List[Project]] = None
    experience: Optional[List[Experience]] = None
    achievements: Optional[List[Achievement]] = None
    certifications: Optional[List[Certification]] = None
    template_used: Optional[str] = None
    visibility: Optional[Visibility] = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

