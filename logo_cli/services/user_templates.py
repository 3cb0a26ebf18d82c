"""User-defined templates stored as JSON files in a templates directory.

Unlike the built-in professional catalog these carry no ``[SLOT]``
placeholders: a template is a base prompt plus named variations whose
modifier is appended to it.
"""

import json
import logging
import os
import re
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

from ..errors import DownloadError, TemplateNotFoundError, UserTemplateError
from ..schemas import (
    GenerationRequest,
    GenerationResult,
    Industry,
    UserTemplate,
    UserTemplateInfo,
    UserTemplateVariation,
)
from .downloader import ImageDownloader
from .logo_generator import LogoGenerator

logger = logging.getLogger(__name__)

MAX_VARIATIONS = 5


def template_id(name: str) -> str:
    """Lowercase, dash-separated id derived from a template name."""
    return re.sub(r"-+", "-", re.sub(r"[^a-z0-9]", "-", name.lower())).strip("-")


def variation_prompt(template: UserTemplate, variation: UserTemplateVariation) -> str:
    return ", ".join(part for part in (template.base_prompt, variation.modifier.strip()) if part)


class UserTemplateLibrary:
    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, template_id_: str) -> Path:
        return self.directory / f"{template_id_}.json"

    def all_templates(self) -> List[UserTemplate]:
        """All readable templates sorted by name; broken files are skipped with a warning."""
        if not self.directory.is_dir():
            return []
        templates = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                templates.append(UserTemplate.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValidationError) as exc:
                logger.warning("Failed to load template %s: %s", path.name, exc)
        return sorted(templates, key=lambda template: template.name.lower())

    def load(self, name_or_id: str) -> UserTemplate:
        """Load a template by id, falling back to the id derived from a display name."""
        path = self._path(name_or_id)
        if not path.is_file():
            path = self._path(template_id(name_or_id))
        if not path.is_file():
            raise TemplateNotFoundError(name_or_id)
        try:
            return UserTemplate.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise UserTemplateError(f"Invalid template file {path}: {exc}") from exc

    def create(
        self,
        name: str,
        description: str,
        base_prompt: str,
        industry: Optional[Industry] = None,
        variations: Sequence[UserTemplateVariation] = (),
        author: Optional[str] = None,
    ) -> Tuple[UserTemplate, Path]:
        if len(variations) > MAX_VARIATIONS:
            raise UserTemplateError(f"A template can have at most {MAX_VARIATIONS} variations")
        new_id = template_id(name)
        if not new_id:
            raise UserTemplateError(f"Template name '{name}' has no usable characters")
        now = int(time.time() * 1000)
        try:
            template = UserTemplate(
                id=new_id,
                name=name,
                description=description,
                base_prompt=base_prompt,
                industry=industry,
                variations=list(variations) or [UserTemplateVariation(name="primary")],
                metadata=UserTemplateInfo(
                    author=author or os.getenv("USER", "unknown"),
                    created=now,
                    updated=now,
                ),
            )
        except ValidationError as exc:
            raise UserTemplateError(f"Invalid template: {exc}") from exc

        path = self._path(new_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(template.to_json_dict(), indent=2), encoding="utf-8")
        logger.debug("Saved template %s to %s", template.id, path)
        return template, path


async def generate_from_template(
    generator: LogoGenerator,
    template: UserTemplate,
    company: str,
    all_variations: bool = False,
    downloader: Optional[ImageDownloader] = None,
    output_dir: Optional[Path | str] = None,
) -> List[Tuple[str, GenerationResult]]:
    """Generate one logo per selected variation, in order.

    Only the first variation is used unless ``all_variations`` is set. A
    failed variation is logged and skipped; if every one fails a
    ``UserTemplateError`` is raised. When ``downloader`` and ``output_dir``
    are given, images land in ``<output_dir>/<template name>``.
    """
    selected = template.variations if all_variations else template.variations[:1]
    results: List[Tuple[str, GenerationResult]] = []
    for variation in selected:
        request = GenerationRequest(
            company=company,
            prompt=variation_prompt(template, variation),
            industry=template.industry,
        )
        try:
            result = await generator.generate(request)
        except Exception as exc:
            logger.error("Variation %s failed: %s", variation.name, exc)
            continue
        results.append((variation.name, result))

    if not results:
        raise UserTemplateError(f"All generations failed for template '{template.name}'")

    if downloader is not None and output_dir is not None:
        target = Path(output_dir) / template.name
        for name, result in results:
            try:
                path = await downloader.download(result, target)
            except (DownloadError, OSError) as exc:
                logger.error("Failed to download %s: %s", name, exc)
                continue
            result.local_path = str(path)
    return results
