from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class RateLimitWindow(BaseModel):
    window_seconds: int = Field(60, gt=0)
    max_requests: int = Field(5, ge=0)


class RateLimitRules(BaseModel):
    waitlist: RateLimitWindow = Field(default_factory=RateLimitWindow)


class EmailRules(BaseModel):
    max_length: int = Field(254, gt=0)


class WaitlistRules(BaseModel):
    allowed_sources: list[str] = Field(
        default_factory=lambda: ["hero", "footer_cta", "unknown"]
    )
    default_source: str = "unknown"


class ProviderRules(BaseModel):
    tags: list[str] = Field(default_factory=lambda: ["PataDoc_Waitlist", "Pre_Launch"])
    timeout_seconds: float = Field(10.0, gt=0)


class SubmissionRules(BaseModel):
    timeout_seconds: float = Field(10.0, gt=0)
    max_attempts: int = Field(3, ge=1)
    backoff_base_ms: int = Field(1000, ge=0)
    backoff_max_ms: int = Field(5000, ge=0)
    manual_retry_delay_ms: int = Field(1000, ge=0)


class Rules(BaseModel):
    project: ProjectRules
    rate_limit: RateLimitRules = Field(default_factory=RateLimitRules)
    email: EmailRules = Field(default_factory=EmailRules)
    waitlist: WaitlistRules = Field(default_factory=WaitlistRules)
    provider: ProviderRules = Field(default_factory=ProviderRules)
    submission: SubmissionRules = Field(default_factory=SubmissionRules)
