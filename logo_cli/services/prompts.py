"""Prompt construction for the image model.

Structured prompts follow the pattern
``[Style] logo of [Subject], [Technical requirements] on white background --[Negatives]``.
Template prompts start from a catalog entry and fill its slots.
"""

from typing import Dict, List, Optional

from ..errors import TemplateRenderError
from ..schemas import (
    GenerationOptions,
    GenerationRequest,
    Industry,
    LogoStyle,
    ProfessionalTemplate,
)
from .templates import TemplateSlot, get_template, template_slots

STYLE_KEYWORDS: Dict[LogoStyle, str] = {
    LogoStyle.MODERN: "Contemporary minimalist",
    LogoStyle.MINIMAL: "Clean minimal geometric",
    LogoStyle.GEOMETRIC: "Simple geometric flat",
    LogoStyle.ABSTRACT: "Abstract artistic",
    LogoStyle.CORPORATE: "Professional corporate",
    LogoStyle.TECH: "Modern tech sleek",
    LogoStyle.ELEGANT: "Sophisticated elegant",
    LogoStyle.BOLD: "Strong bold impactful",
    LogoStyle.VINTAGE: "Classic vintage retro",
    LogoStyle.PLAYFUL: "Creative playful dynamic",
    LogoStyle.CLASSIC: "Traditional classic timeless",
    LogoStyle.WORDMARK: "Typography-focused wordmark",
    LogoStyle.LETTERMARK: "Letter-based minimal",
    LogoStyle.PICTORIAL: "Symbolic pictorial",
    LogoStyle.EMBLEM: "Badge emblem",
    LogoStyle.COMBINATION: "Combined symbol-text",
}
DEFAULT_STYLE_KEYWORDS = "Professional"

TECHNICAL_REQUIREMENTS = ["flat vector design", "scalable", "professional quality", "high contrast"]

DEFAULT_NEGATIVES = [
    "no realistic details",
    "no photorealistic details",
    "no shading detail",
    "no gradients",
    "no 3D effects",
    "no complex textures",
]

VARIATION_MODIFIERS = [
    "with alternative composition",
    "using different color scheme",
    "with varied typography treatment",
    "featuring adjusted element positioning",
    "in alternative style approach",
]


def style_keywords(style: Optional[LogoStyle]) -> str:
    if style is None:
        return DEFAULT_STYLE_KEYWORDS
    return STYLE_KEYWORDS.get(style, DEFAULT_STYLE_KEYWORDS)


def color_clause(colors: Optional[List[str]]) -> Optional[str]:
    if not colors:
        return None
    if len(colors) == 1:
        return f"{colors[0]} color scheme"
    return f"using {', '.join(colors[:-1])} and {colors[-1]} colors"


def negative_clause(negatives: List[str]) -> str:
    if not negatives:
        return ""
    return " --" + " --".join(negatives)


def variation_prompt(base_prompt: str, index: int) -> str:
    return f"{base_prompt}, {VARIATION_MODIFIERS[index % len(VARIATION_MODIFIERS)]}"


class PromptEngine:
    """Turns a request plus per-call options into the final image prompt."""

    def build_prompt(self, request: GenerationRequest, options: Optional[GenerationOptions] = None) -> str:
        options = options or GenerationOptions()
        if options.template:
            return self.from_template(request, options)
        return self.structured(request, options)

    def structured(self, request: GenerationRequest, options: GenerationOptions) -> str:
        style = options.style or request.style or LogoStyle.MODERN
        subject = f"{request.company}, {request.prompt}"
        requirements = self.technical_requirements(request, options)
        prompt = f"{style_keywords(style)} logo of {subject}, {requirements} on white background"
        prompt += negative_clause(DEFAULT_NEGATIVES + list(options.negative_prompts))
        return prompt

    def from_template(self, request: GenerationRequest, options: GenerationOptions) -> str:
        template = get_template(options.template)
        values = self.slot_values(template, request, options)

        prompt = template.base_prompt
        for slot in template_slots(template):
            prompt = prompt.replace(slot.token, values[slot])

        prompt += ", " + self.technical_requirements(request, options)
        prompt += negative_clause(list(template.negative_prompts) + list(options.negative_prompts))
        return prompt

    def technical_requirements(self, request: GenerationRequest, options: GenerationOptions) -> str:
        requirements = list(TECHNICAL_REQUIREMENTS)
        colors = color_clause(options.colors or request.colors)
        if colors:
            requirements.append(colors)
        requirements.extend(options.custom_elements)
        return ", ".join(requirements)

    def slot_values(
        self,
        template: ProfessionalTemplate,
        request: GenerationRequest,
        options: GenerationOptions,
    ) -> Dict[TemplateSlot, str]:
        """Resolve a value for every slot used by *template*.

        Precedence per slot: request data, then caller ``template_params``, then
        the template's own defaults.
        """
        style = options.style or request.style or LogoStyle.MODERN
        industry: Optional[Industry] = options.industry or request.industry
        colors = options.colors or request.colors or []

        values: Dict[TemplateSlot, str] = {
            TemplateSlot.COMPANY: request.company,
            TemplateSlot.PROMPT: request.prompt,
            TemplateSlot.STYLE: style.value,
            TemplateSlot.INDUSTRY: industry.value if industry else "business",
            TemplateSlot.LETTER: request.company.strip()[:1].upper(),
        }
        if colors:
            values[TemplateSlot.PRIMARY_COLOR] = colors[0]
            values[TemplateSlot.SECONDARY_COLOR] = colors[1] if len(colors) > 1 else colors[0]
            values[TemplateSlot.COLOR_PALETTE] = " and ".join(colors)

        resolved: Dict[TemplateSlot, str] = {}
        for slot in template_slots(template):
            value = (
                values.get(slot)
                or options.template_params.get(slot.param_name)
                or template.optional_params.get(slot.param_name)
                or self._palette_default(slot, template, options)
            )
            if not value:
                raise TemplateRenderError(f"Template {template.id} has no value for slot {slot.token}")
            resolved[slot] = value
        return resolved

    @staticmethod
    def _palette_default(
        slot: TemplateSlot,
        template: ProfessionalTemplate,
        options: GenerationOptions,
    ) -> Optional[str]:
        # Without explicit colours, the palette slots derive from the primary colour.
        if slot not in (TemplateSlot.SECONDARY_COLOR, TemplateSlot.COLOR_PALETTE):
            return None
        return options.template_params.get("primary_color") or template.optional_params.get("primary_color")
