import pytest

from logo_cli.errors import TemplateNotFoundError, TemplateRenderError
from logo_cli.schemas import GenerationOptions, GenerationRequest, Industry, LogoStyle
from logo_cli.services.prompts import (
    DEFAULT_NEGATIVES,
    PromptEngine,
    color_clause,
    negative_clause,
    variation_prompt,
)


@pytest.fixture
def engine():
    return PromptEngine()


def test_structured_prompt_for_plain_request(engine):
    prompt = engine.build_prompt(GenerationRequest(company="Acme", prompt="bold new idea"))

    assert prompt.startswith("Contemporary minimalist logo of Acme, bold new idea, flat vector design")
    assert "on white background --no realistic details" in prompt
    assert prompt.endswith(" --no complex textures")
    assert prompt.count(" --") == len(DEFAULT_NEGATIVES)


def test_structured_prompt_uses_style_colors_and_caller_negatives(engine):
    request = GenerationRequest(company="Acme", prompt="rocket", style=LogoStyle.VINTAGE, colors=["red", "gold"])
    options = GenerationOptions(negative_prompts=["no text"], custom_elements=["subtle grain"])

    prompt = engine.build_prompt(request, options)

    assert prompt.startswith("Classic vintage retro logo of Acme, rocket")
    assert "high contrast, using red and gold colors, subtle grain on white background" in prompt
    assert prompt.endswith("--no complex textures --no text")


def test_options_override_request_fields(engine):
    request = GenerationRequest(company="Acme", prompt="rocket", style=LogoStyle.VINTAGE)

    prompt = engine.build_prompt(request, GenerationOptions(style=LogoStyle.TECH))

    assert prompt.startswith("Modern tech sleek logo of Acme")


def test_template_prompt_uses_template_defaults(engine):
    request = GenerationRequest(company="Acme", prompt="clinic")

    prompt = engine.build_prompt(request, GenerationOptions(template="industry-healthcare"))

    assert prompt.startswith("Medical practice logo, cross, calming blue palette")
    assert "clean vector on white, flat vector design, scalable" in prompt
    assert prompt.endswith("--no sharp angles --no aggressive imagery --no dark themes")
    assert "[" not in prompt


def test_template_prompt_prefers_request_colors_and_params(engine):
    request = GenerationRequest(company="Acme", prompt="clinic", colors=["teal"])
    options = GenerationOptions(
        template="industry-healthcare",
        template_params={"specialty": "dental", "primary_color": "ignored"},
        negative_prompts=["no text"],
    )

    prompt = engine.build_prompt(request, options)

    assert prompt.startswith("Medical dental logo, cross, calming teal palette")
    assert prompt.endswith("--no dark themes --no text")


def test_lettermark_template_uses_company_initial(engine):
    request = GenerationRequest(company="zenith labs", prompt="lab")

    prompt = engine.build_prompt(request, GenerationOptions(template="minimal-lettermark"))

    assert prompt.startswith("Single letter Z logo")


def test_unknown_template_raises(engine):
    request = GenerationRequest(company="Acme", prompt="bold new idea")

    with pytest.raises(TemplateNotFoundError):
        engine.build_prompt(request, GenerationOptions(template="does-not-exist"))


def test_slot_without_any_value_raises(engine, monkeypatch):
    from logo_cli.services import prompts

    template = prompts.get_template("industry-healthcare").model_copy(update={"optional_params": {}})
    monkeypatch.setattr(prompts, "get_template", lambda template_id: template)

    with pytest.raises(TemplateRenderError, match=r"\[SPECIALTY\]"):
        engine.build_prompt(
            GenerationRequest(company="Acme", prompt="clinic", industry=Industry.HEALTHCARE),
            GenerationOptions(template="industry-healthcare"),
        )


def test_color_clause():
    assert color_clause(None) is None
    assert color_clause(["blue"]) == "blue color scheme"
    assert color_clause(["red", "white", "blue"]) == "using red, white and blue colors"


def test_negative_clause():
    assert negative_clause([]) == ""
    assert negative_clause(["no text", "no gradients"]) == " --no text --no gradients"


def test_variation_prompt_rotates_modifiers():
    assert variation_prompt("base", 1) == "base, using different color scheme"
    assert variation_prompt("base", 6) == variation_prompt("base", 1)
