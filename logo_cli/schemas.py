from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LogoStyle(str, Enum):
    MODERN = "modern"
    VINTAGE = "vintage"
    MINIMAL = "minimal"
    PLAYFUL = "playful"
    CLASSIC = "classic"
    BOLD = "bold"
    ELEGANT = "elegant"
    TECH = "tech"
    GEOMETRIC = "geometric"
    ABSTRACT = "abstract"
    WORDMARK = "wordmark"
    LETTERMARK = "lettermark"
    PICTORIAL = "pictorial"
    EMBLEM = "emblem"
    COMBINATION = "combination"
    CORPORATE = "corporate"


class Industry(str, Enum):
    TECHNOLOGY = "technology"
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    RETAIL = "retail"
    EDUCATION = "education"
    FOOD = "food"
    REAL_ESTATE = "real-estate"
    CONSULTING = "consulting"
    CREATIVE = "creative"
    AUTOMOTIVE = "automotive"
    ENTERTAINMENT = "entertainment"
    LEGAL = "legal"
    NONPROFIT = "nonprofit"


class ImageSize(str, Enum):
    SQUARE = "1024x1024"
    PORTRAIT = "1024x1792"
    LANDSCAPE = "1792x1024"


class ImageQuality(str, Enum):
    STANDARD = "standard"
    HD = "hd"


class TemplateCategory(str, Enum):
    MINIMAL = "minimal"
    CORPORATE = "corporate"
    CREATIVE = "creative"
    INDUSTRY_SPECIFIC = "industry-specific"


class TemplateComplexity(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CostTier(str, Enum):
    PREVIEW = "preview"
    WEB = "web"
    PRINT = "print"


class CamelModel(BaseModel):
    """Base model persisted to JSON with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _clean_colors(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    cleaned = [color.strip() for color in value if color and color.strip()]
    return cleaned or None


Colors = Annotated[Optional[List[str]], AfterValidator(_clean_colors)]


class GenerationRequest(CamelModel):
    model_config = ConfigDict(frozen=True)

    company: str = Field(..., min_length=1, description="Company or brand name.")
    prompt: str = Field(..., min_length=1, description="Free-text description of the desired logo.")
    style: Optional[LogoStyle] = None
    industry: Optional[Industry] = None
    colors: Colors = None
    size: Optional[ImageSize] = None
    quality: Optional[ImageQuality] = None


class GenerationOptions(BaseModel):
    """Per-call overrides layered on top of a GenerationRequest."""

    style: Optional[LogoStyle] = None
    industry: Optional[Industry] = None
    colors: Colors = None
    size: Optional[ImageSize] = None
    quality: Optional[ImageQuality] = None
    template: Optional[str] = None
    negative_prompts: List[str] = Field(default_factory=list)
    custom_elements: List[str] = Field(default_factory=list)
    template_params: Dict[str, str] = Field(default_factory=dict)


class ProfessionalTemplate(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    version: str = "1.0.0"
    category: TemplateCategory
    complexity: TemplateComplexity
    base_prompt: str
    negative_prompts: List[str] = Field(default_factory=list)
    required_params: List[str] = Field(default_factory=lambda: ["company"])
    optional_params: Dict[str, str] = Field(default_factory=dict)
    industry_fit: List[Industry] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)
    cost_tier: CostTier = CostTier.WEB

    def fits(self, industry: Industry) -> bool:
        return not self.industry_fit or industry in self.industry_fit


class LogoMetadata(CamelModel):
    id: str
    timestamp: int = Field(..., description="Creation time in epoch milliseconds.")
    company: str
    original_prompt: str
    final_prompt: str
    style: LogoStyle
    industry: Optional[Industry] = None
    size: ImageSize
    quality: ImageQuality
    cost: float


class GenerationResult(CamelModel):
    url: str
    revised_prompt: Optional[str] = None
    metadata: LogoMetadata
    local_path: Optional[str] = None


class CacheEntry(GenerationResult):
    expires_at: int = Field(..., description="Absolute expiry in epoch milliseconds.")
    hit: bool = False

    def to_result(self) -> GenerationResult:
        return GenerationResult.model_validate(self.model_dump(exclude={"expires_at", "hit"}))


class CacheStats(CamelModel):
    memory_entries: int
    file_entries: int
    total_size_bytes: int

    @property
    def total_size_mb(self) -> float:
        return round(self.total_size_bytes / 1024 / 1024, 2)


class BatchJob(BaseModel):
    requests: List[GenerationRequest]
    concurrency: int = Field(3, ge=1)
    output_dir: Optional[str] = None
    iteration: Optional[int] = Field(None, ge=1)
    quiet: bool = False


class FailedGeneration(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    request: GenerationRequest
    error: Exception


class BatchStats(CamelModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    total_cost: float = 0.0
    duration: float = Field(0.0, description="Wall-clock seconds.")


class BatchResult(BaseModel):
    successful: List[GenerationResult] = Field(default_factory=list)
    failed: List[FailedGeneration] = Field(default_factory=list)
    stats: BatchStats = Field(default_factory=BatchStats)


class IterationLogo(CamelModel):
    company: str
    id: str
    style: LogoStyle
    cost: float


class IterationRecord(CamelModel):
    iteration: int
    timestamp: int
    description: str
    count: int
    total_cost: float
    logos: List[IterationLogo] = Field(default_factory=list)


class UserTemplateVariation(CamelModel):
    name: str = Field(..., min_length=1)
    modifier: str = ""
    description: str = ""


class UserTemplateInfo(CamelModel):
    author: str = "unknown"
    version: str = "1.0.0"
    tags: List[str] = Field(default_factory=list)
    created: int
    updated: int


class UserTemplate(CamelModel):
    """A saved template from the user's templates directory."""

    id: str
    name: str = Field(..., min_length=1)
    description: str
    base_prompt: str = Field(..., min_length=1)
    industry: Optional[Industry] = None
    variations: List[UserTemplateVariation] = Field(..., min_length=1)
    metadata: UserTemplateInfo


# HTTP API payloads


class GenerateLogoRequest(BaseModel):
    company: str = Field(..., min_length=1, description="Company or brand name.")
    prompt: str = Field(..., min_length=1, description="Brand description or creative brief text.")
    style: Optional[LogoStyle] = None
    industry: Optional[Industry] = None
    colors: Optional[List[str]] = None
    size: Optional[ImageSize] = None
    quality: Optional[ImageQuality] = None
    template: Optional[str] = Field(None, description="Professional template id.")
    negative_prompts: List[str] = Field(default_factory=list)
    template_params: Dict[str, str] = Field(default_factory=dict)
    download: bool = Field(True, description="Save the image under the output directory.")
    iteration: Optional[int] = Field(None, ge=1)


class GenerateLogoResponse(BaseModel):
    logo: GenerationResult
    image_url: Optional[str] = None
