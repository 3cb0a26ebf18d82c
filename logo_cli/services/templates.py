"""Professional logo template library.

Each template's base prompt uses ``[SLOT]`` placeholders drawn from the closed
``TemplateSlot`` set. The catalog is checked once at import so that a
misspelled placeholder fails loudly instead of leaking into a prompt.
"""

import re
from enum import Enum
from typing import Dict, List, Optional, Set

from ..errors import TemplateNotFoundError
from ..schemas import (
    Industry,
    ProfessionalTemplate,
    TemplateCategory,
    TemplateComplexity,
)

SLOT_PATTERN = re.compile(r"\[([A-Z_]+)\]")


class TemplateSlot(str, Enum):
    COMPANY = "COMPANY"
    PROMPT = "PROMPT"
    STYLE = "STYLE"
    INDUSTRY = "INDUSTRY"
    LETTER = "LETTER"
    PRIMARY_COLOR = "PRIMARY_COLOR"
    SECONDARY_COLOR = "SECONDARY_COLOR"
    COLOR_PALETTE = "COLOR_PALETTE"
    SHAPE = "SHAPE"
    ELEMENT = "ELEMENT"
    SYMBOL = "SYMBOL"
    SPECIALTY = "SPECIALTY"
    MEDICAL_SYMBOL = "MEDICAL_SYMBOL"
    ART_MOVEMENT = "ART_MOVEMENT"
    ART_STYLE = "ART_STYLE"
    TECH_ELEMENT = "TECH_ELEMENT"
    FOOD_ELEMENT = "FOOD_ELEMENT"
    EDU_SYMBOL = "EDU_SYMBOL"
    LEGAL_SYMBOL = "LEGAL_SYMBOL"
    CRAFT_ELEMENT = "CRAFT_ELEMENT"
    MEDIA_ELEMENT = "MEDIA_ELEMENT"
    PROPERTY_SYMBOL = "PROPERTY_SYMBOL"
    AUTO_ELEMENT = "AUTO_ELEMENT"
    WELLNESS_SYMBOL = "WELLNESS_SYMBOL"
    MISSION_SYMBOL = "MISSION_SYMBOL"

    @property
    def param_name(self) -> str:
        """Name used in ``optional_params`` and caller overrides, e.g. ``medical_symbol``."""
        return self.value.lower()

    @property
    def token(self) -> str:
        return f"[{self.value}]"


def template_slots(template: ProfessionalTemplate) -> List[TemplateSlot]:
    """Return the slots referenced by *template*, in order of first use."""
    seen: List[TemplateSlot] = []
    for name in SLOT_PATTERN.findall(template.base_prompt):
        slot = TemplateSlot(name)
        if slot not in seen:
            seen.append(slot)
    return seen


_CATALOG: List[ProfessionalTemplate] = [
    # Minimal
    ProfessionalTemplate(
        id="minimal-geometric",
        name="Clean Geometric",
        description="Minimalist geometric shapes with clean lines",
        category=TemplateCategory.MINIMAL,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Minimalist geometric logo, [SHAPE] form, flat vector design, "
            "[PRIMARY_COLOR] on white background, sharp edges, scalable"
        ),
        negative_prompts=["no gradients", "no 3D effects", "no ornate details"],
        optional_params={"shape": "circle", "primary_color": "blue"},
        examples=["Circle tech logo", "Triangle design studio", "Square consulting"],
    ),
    ProfessionalTemplate(
        id="minimal-lettermark",
        name="Simple Lettermark",
        description="Single letter focus with clean typography",
        category=TemplateCategory.MINIMAL,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Single letter [LETTER] logo, sans-serif, bold weight, flat design, "
            "[PRIMARY_COLOR] monochrome, centered composition on white background"
        ),
        negative_prompts=["no decorative elements", "no complex styling", "no shadows"],
        optional_params={"primary_color": "black"},
        examples=["A for Analytics Co", "M for Marketing Plus", "T for TechStart"],
    ),
    ProfessionalTemplate(
        id="minimal-abstract",
        name="Abstract Minimal",
        description="Simple abstract shapes with artistic flair",
        category=TemplateCategory.MINIMAL,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Abstract minimal logo, flowing [SHAPE] design, [PRIMARY_COLOR] gradient, "
            "artistic simplicity, vector style on white background"
        ),
        negative_prompts=["no complex details", "no realistic elements", "no busy patterns"],
        optional_params={"shape": "curved", "primary_color": "blue"},
        examples=["Creative studio", "Design agency", "Art collective"],
    ),
    ProfessionalTemplate(
        id="minimal-wordmark",
        name="Clean Wordmark",
        description="Typography-focused minimal design",
        category=TemplateCategory.MINIMAL,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Clean wordmark logo for [COMPANY], minimal typography, [PRIMARY_COLOR] lettering, "
            "modern sans-serif style, simple and readable"
        ),
        negative_prompts=["no decorative elements", "no symbols", "no complex styling"],
        optional_params={"primary_color": "black"},
        examples=["Google", "Sony", "Netflix style"],
    ),
    ProfessionalTemplate(
        id="minimal-emblem",
        name="Simple Emblem",
        description="Badge-style minimal emblem",
        category=TemplateCategory.MINIMAL,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Simple emblem logo, circular badge design, [COMPANY] text, [PRIMARY_COLOR] and white, "
            "clean minimal styling, vector badge"
        ),
        negative_prompts=["no ornate details", "no complex patterns", "no gradients"],
        optional_params={"primary_color": "dark blue"},
        examples=["Vintage badge", "Certification mark", "Club emblem"],
    ),
    # Corporate
    ProfessionalTemplate(
        id="corporate-tech",
        name="Tech Startup Modern",
        description="Modern technology company aesthetic",
        category=TemplateCategory.CORPORATE,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Modern tech company logo featuring [ELEMENT], clean minimalist style, "
            "[PRIMARY_COLOR] and [SECONDARY_COLOR] color scheme, vector design, professional, "
            "white background"
        ),
        negative_prompts=["no realistic details", "no ornate elements", "no vintage styling"],
        optional_params={
            "element": "geometric shape",
            "primary_color": "blue",
            "secondary_color": "white",
        },
        industry_fit=[Industry.TECHNOLOGY],
        examples=["AI startup logo", "Software company", "Tech consultancy"],
    ),
    ProfessionalTemplate(
        id="corporate-finance",
        name="Financial Trust",
        description="Conservative financial services aesthetic",
        category=TemplateCategory.CORPORATE,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Conservative financial logo, [SYMBOL] emblem, navy blue and gray palette, "
            "professional grade, symmetric composition, trustworthy design"
        ),
        negative_prompts=["no casual elements", "no bright colors", "no playful styling"],
        optional_params={"symbol": "shield", "primary_color": "navy blue"},
        industry_fit=[Industry.FINANCE],
        examples=["Investment firm", "Banking service", "Financial advisor"],
    ),
    ProfessionalTemplate(
        id="corporate-consulting",
        name="Professional Consulting",
        description="Authoritative business consulting aesthetic",
        category=TemplateCategory.CORPORATE,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Professional consulting logo, clean [SYMBOL], sophisticated [PRIMARY_COLOR] and gray "
            "palette, business-grade typography, trustworthy design"
        ),
        negative_prompts=["no casual styling", "no playful elements", "no bright colors"],
        optional_params={"symbol": "abstract mark", "primary_color": "dark blue"},
        industry_fit=[Industry.CONSULTING],
        examples=["Business consulting", "Strategy firm", "Management advisory"],
    ),
    ProfessionalTemplate(
        id="corporate-professional",
        name="General Professional",
        description="Versatile professional business logo",
        category=TemplateCategory.CORPORATE,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Clean professional business logo, [ELEMENT] symbol, modern [PRIMARY_COLOR] palette, "
            "scalable design, corporate identity"
        ),
        negative_prompts=["no informal elements", "no artistic flourishes", "no complex imagery"],
        optional_params={"element": "geometric", "primary_color": "navy"},
        industry_fit=[Industry.CONSULTING, Industry.FINANCE, Industry.TECHNOLOGY],
        examples=["Law firm", "Accounting", "Business services"],
    ),
    ProfessionalTemplate(
        id="corporate-startup",
        name="Modern Startup",
        description="Contemporary startup aesthetic",
        category=TemplateCategory.CORPORATE,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Modern startup logo, innovative [ELEMENT], fresh [PRIMARY_COLOR] palette, dynamic "
            "design, entrepreneurial spirit, scalable vector"
        ),
        negative_prompts=["no traditional styling", "no conservative colors", "no formal structure"],
        optional_params={"element": "arrow", "primary_color": "vibrant blue"},
        industry_fit=[Industry.TECHNOLOGY],
        examples=["Tech startup", "Innovation lab", "Venture firm"],
    ),
    ProfessionalTemplate(
        id="corporate-legal",
        name="Legal Professional",
        description="Law firm and legal services",
        category=TemplateCategory.CORPORATE,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Legal services logo, [LEGAL_SYMBOL], authoritative [PRIMARY_COLOR] palette, "
            "professional law firm design, trustworthy aesthetic"
        ),
        negative_prompts=["no casual elements", "no bright colors", "no playful styling"],
        optional_params={"legal_symbol": "scales of justice", "primary_color": "deep blue"},
        industry_fit=[Industry.LEGAL],
        examples=["Law firm", "Legal clinic", "Attorney office"],
    ),
    # Creative
    ProfessionalTemplate(
        id="creative-abstract",
        name="Artistic Abstract",
        description="Creative and artistic expression",
        category=TemplateCategory.CREATIVE,
        complexity=TemplateComplexity.ADVANCED,
        base_prompt=(
            "Abstract creative logo inspired by [ART_MOVEMENT], bold [COLOR_PALETTE], dynamic "
            "composition, artistic expression, vector style"
        ),
        negative_prompts=["no photorealistic elements", "no literal imagery"],
        optional_params={"art_movement": "modern art", "primary_color": "vibrant"},
        industry_fit=[Industry.CREATIVE],
        examples=["Design agency", "Art studio", "Creative consultancy"],
    ),
    ProfessionalTemplate(
        id="creative-artistic",
        name="Artistic Expression",
        description="Bold artistic and creative design",
        category=TemplateCategory.CREATIVE,
        complexity=TemplateComplexity.ADVANCED,
        base_prompt=(
            "Artistic logo inspired by [ART_STYLE], creative expression, bold [COLOR_PALETTE], "
            "dynamic visual impact, artistic vector design"
        ),
        negative_prompts=["no corporate styling", "no conservative colors", "no rigid structure"],
        optional_params={"art_style": "modern art", "primary_color": "vibrant"},
        industry_fit=[Industry.CREATIVE, Industry.ENTERTAINMENT],
        examples=["Art gallery", "Creative agency", "Design studio"],
    ),
    ProfessionalTemplate(
        id="creative-playful",
        name="Playful Creative",
        description="Fun and approachable creative design",
        category=TemplateCategory.CREATIVE,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Playful creative logo, fun [ELEMENT], bright [COLOR_PALETTE], friendly design, "
            "approachable aesthetic, vector style"
        ),
        negative_prompts=["no serious tone", "no dark colors", "no formal structure"],
        optional_params={"element": "shapes", "primary_color": "bright"},
        industry_fit=[Industry.CREATIVE, Industry.EDUCATION],
        examples=["Kids brand", "Entertainment", "Creative workshop"],
    ),
    ProfessionalTemplate(
        id="creative-modern",
        name="Modern Creative",
        description="Contemporary creative expression",
        category=TemplateCategory.CREATIVE,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Modern creative logo, contemporary [ELEMENT], sophisticated [COLOR_PALETTE], "
            "artistic yet professional, creative industry standard"
        ),
        negative_prompts=["no outdated styling", "no cliché elements", "no overly busy design"],
        optional_params={"element": "abstract form", "primary_color": "sophisticated"},
        industry_fit=[Industry.CREATIVE],
        examples=["Design studio", "Creative consultancy", "Branding agency"],
    ),
    ProfessionalTemplate(
        id="creative-handcraft",
        name="Handcraft Artisan",
        description="Artisanal and handmade aesthetic",
        category=TemplateCategory.CREATIVE,
        complexity=TemplateComplexity.ADVANCED,
        base_prompt=(
            "Handcraft artisan logo, [CRAFT_ELEMENT], organic [COLOR_PALETTE], handmade aesthetic, "
            "artisanal quality, authentic design"
        ),
        negative_prompts=["no digital styling", "no corporate look", "no perfect geometry"],
        optional_params={"craft_element": "handmade symbol", "primary_color": "earthy"},
        industry_fit=[Industry.CREATIVE],
        examples=["Pottery studio", "Craft workshop", "Artisan goods"],
    ),
    ProfessionalTemplate(
        id="creative-entertainment",
        name="Entertainment Brand",
        description="Entertainment and media industry",
        category=TemplateCategory.CREATIVE,
        complexity=TemplateComplexity.ADVANCED,
        base_prompt=(
            "Entertainment logo, [MEDIA_ELEMENT], dynamic [COLOR_PALETTE], energetic design, "
            "entertainment industry standard, engaging visual"
        ),
        negative_prompts=["no boring design", "no corporate styling", "no muted colors"],
        optional_params={"media_element": "play button", "primary_color": "energetic"},
        industry_fit=[Industry.ENTERTAINMENT],
        examples=["Media company", "Entertainment venue", "Production studio"],
    ),
    # Industry-specific
    ProfessionalTemplate(
        id="industry-healthcare",
        name="Healthcare Professional",
        description="Medical and healthcare industry focused",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Medical [SPECIALTY] logo, [MEDICAL_SYMBOL], calming [PRIMARY_COLOR] palette, rounded "
            "shapes, trustworthy design, clean vector on white"
        ),
        negative_prompts=["no sharp angles", "no aggressive imagery", "no dark themes"],
        optional_params={"specialty": "practice", "medical_symbol": "cross", "primary_color": "blue"},
        industry_fit=[Industry.HEALTHCARE],
        examples=["Medical clinic", "Dental practice", "Healthcare startup"],
    ),
    ProfessionalTemplate(
        id="industry-tech",
        name="Technology Focus",
        description="Technology and innovation focused",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Technology logo featuring [TECH_ELEMENT], innovative design, [PRIMARY_COLOR] tech "
            "palette, modern digital aesthetic, scalable vector"
        ),
        negative_prompts=["no outdated styling", "no organic elements", "no handwritten fonts"],
        optional_params={"tech_element": "circuit pattern", "primary_color": "electric blue"},
        industry_fit=[Industry.TECHNOLOGY],
        examples=["Software company", "Tech startup", "Digital agency"],
    ),
    ProfessionalTemplate(
        id="industry-finance",
        name="Financial Services",
        description="Banking and finance industry standard",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Financial services logo, [SYMBOL] emblem, trustworthy [PRIMARY_COLOR] palette, stable "
            "design, professional banking aesthetic"
        ),
        negative_prompts=["no risky imagery", "no bright colors", "no playful elements"],
        optional_params={"symbol": "shield", "primary_color": "navy blue"},
        industry_fit=[Industry.FINANCE],
        examples=["Bank", "Investment firm", "Insurance company"],
    ),
    ProfessionalTemplate(
        id="industry-food",
        name="Food & Beverage",
        description="Restaurant and food industry focused",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Food and beverage logo, [FOOD_ELEMENT], appetizing [COLOR_PALETTE], warm inviting "
            "design, culinary aesthetic, vector style"
        ),
        negative_prompts=["no cold colors", "no industrial look", "no tech elements"],
        optional_params={"food_element": "chef hat", "primary_color": "warm red"},
        industry_fit=[Industry.FOOD],
        examples=["Restaurant", "Food truck", "Catering service"],
    ),
    ProfessionalTemplate(
        id="industry-education",
        name="Educational Institution",
        description="Schools and educational services",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Educational logo featuring [EDU_SYMBOL], learning-focused design, [PRIMARY_COLOR] "
            "academic palette, trustworthy educational aesthetic"
        ),
        negative_prompts=["no childish elements", "no commercial styling", "no bright neon"],
        optional_params={"edu_symbol": "book", "primary_color": "academic blue"},
        industry_fit=[Industry.EDUCATION],
        examples=["School", "Online course", "Training center"],
    ),
    ProfessionalTemplate(
        id="industry-real-estate",
        name="Real Estate Professional",
        description="Real estate and property services",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Real estate logo, [PROPERTY_SYMBOL], trustworthy [PRIMARY_COLOR] palette, professional "
            "property design, real estate industry standard"
        ),
        negative_prompts=["no casual styling", "no playful elements", "no bright colors"],
        optional_params={"property_symbol": "house", "primary_color": "professional blue"},
        industry_fit=[Industry.REAL_ESTATE],
        examples=["Real estate agency", "Property management", "Construction company"],
    ),
    ProfessionalTemplate(
        id="industry-automotive",
        name="Automotive Services",
        description="Auto and transportation industry",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Automotive logo, [AUTO_ELEMENT], strong [PRIMARY_COLOR] palette, mechanical precision, "
            "automotive industry aesthetic, durable design"
        ),
        negative_prompts=["no delicate elements", "no pastel colors", "no organic shapes"],
        optional_params={"auto_element": "gear", "primary_color": "metallic blue"},
        industry_fit=[Industry.AUTOMOTIVE],
        examples=["Auto repair", "Car dealership", "Transportation service"],
    ),
    ProfessionalTemplate(
        id="industry-wellness",
        name="Health & Wellness",
        description="Wellness and lifestyle services",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.INTERMEDIATE,
        base_prompt=(
            "Health and wellness logo, [WELLNESS_SYMBOL], calming [PRIMARY_COLOR] palette, holistic "
            "design, wellness industry aesthetic, balanced composition"
        ),
        negative_prompts=["no medical symbols", "no harsh colors", "no rigid geometry"],
        optional_params={"wellness_symbol": "zen circle", "primary_color": "calming green"},
        industry_fit=[Industry.HEALTHCARE],
        examples=["Spa", "Yoga studio", "Wellness center"],
    ),
    ProfessionalTemplate(
        id="industry-nonprofit",
        name="Non-Profit Organization",
        description="Charitable and non-profit organizations",
        category=TemplateCategory.INDUSTRY_SPECIFIC,
        complexity=TemplateComplexity.BASIC,
        base_prompt=(
            "Non-profit logo, [MISSION_SYMBOL], compassionate [PRIMARY_COLOR] palette, "
            "community-focused design, charitable organization aesthetic"
        ),
        negative_prompts=["no commercial styling", "no luxury elements", "no corporate coldness"],
        optional_params={"mission_symbol": "helping hands", "primary_color": "warm blue"},
        industry_fit=[Industry.NONPROFIT],
        examples=["Charity", "Foundation", "Community organization"],
    ),
]


def _build_index(templates: List[ProfessionalTemplate]) -> Dict[str, ProfessionalTemplate]:
    index: Dict[str, ProfessionalTemplate] = {}
    known_params: Set[str] = {slot.param_name for slot in TemplateSlot}
    for template in templates:
        if template.id in index:
            raise ValueError(f"Duplicate template id: {template.id}")
        # Raises ValueError on an unknown [TOKEN].
        template_slots(template)
        unknown = set(template.optional_params) - known_params
        if unknown:
            raise ValueError(f"Template {template.id} has unknown params: {sorted(unknown)}")
        index[template.id] = template
    return index


TEMPLATES: Dict[str, ProfessionalTemplate] = _build_index(_CATALOG)


def get_template(template_id: str) -> ProfessionalTemplate:
    try:
        return TEMPLATES[template_id]
    except KeyError:
        raise TemplateNotFoundError(template_id) from None


def templates_by_category(category: TemplateCategory) -> List[ProfessionalTemplate]:
    return [template for template in TEMPLATES.values() if template.category == category]


def templates_for_industry(industry: Industry) -> List[ProfessionalTemplate]:
    """Templates that list *industry*, plus the general-purpose ones with no industry fit."""
    return [template for template in TEMPLATES.values() if template.fits(industry)]


def list_templates(
    category: Optional[TemplateCategory] = None,
    industry: Optional[Industry] = None,
    complexity: Optional[TemplateComplexity] = None,
) -> List[ProfessionalTemplate]:
    templates = list(TEMPLATES.values())
    if category is not None:
        templates = [template for template in templates if template.category == category]
    if industry is not None:
        templates = [template for template in templates if template.fits(industry)]
    if complexity is not None:
        templates = [template for template in templates if template.complexity == complexity]
    return templates
