import asyncio
import csv
import io
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..errors import BatchInputError
from ..schemas import (
    BatchJob,
    BatchResult,
    BatchStats,
    FailedGeneration,
    GenerationRequest,
    GenerationResult,
    ImageQuality,
    LogoStyle,
)
from .downloader import ImageDownloader
from .logo_generator import LogoGenerator, calculate_cost

logger = logging.getLogger(__name__)

# CSV header -> GenerationRequest field.
CSV_COLUMNS = {
    "company": "company",
    "prompt": "prompt",
    "description": "prompt",
    "style": "style",
    "colors": "colors",
    "size": "size",
    "quality": "quality",
}


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1].strip()
    return value


def parse_csv(content: str) -> List[Dict[str, Any]]:
    """Parse CSV rows into request dicts, dropping rows without company or prompt."""
    rows: List[Dict[str, Any]] = []
    reader = csv.DictReader(io.StringIO(content.strip()))
    for raw in reader:
        row: Dict[str, Any] = {}
        for header, value in raw.items():
            if header is None or value is None:
                continue
            field = CSV_COLUMNS.get(header.strip().lower())
            value = _strip_quotes(value)
            if field is None or not value:
                continue
            if field == "colors":
                row[field] = [color.strip() for color in value.split(";") if color.strip()]
            else:
                row[field] = value
        if row.get("company") and row.get("prompt"):
            rows.append(row)
    return rows


def parse_requests(entries: List[Any]) -> List[GenerationRequest]:
    requests: List[GenerationRequest] = []
    for index, entry in enumerate(entries, start=1):
        try:
            requests.append(GenerationRequest.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping batch entry %d: %s", index, exc)
    return requests


def load_batch_file(path: Path | str, fmt: str = "auto") -> List[GenerationRequest]:
    """Load generation requests from a JSON array or a CSV file.

    ``fmt="auto"`` picks JSON for ``*.json`` files and CSV for everything else.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise BatchInputError(f"Could not read batch file {path}: {exc}") from exc

    if fmt == "auto":
        fmt = "json" if path.suffix.lower() == ".json" else "csv"

    if fmt == "json":
        try:
            entries = json.loads(content)
        except ValueError as exc:
            raise BatchInputError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(entries, list):
            raise BatchInputError(f"Expected a JSON array of requests in {path}")
    elif fmt == "csv":
        entries = parse_csv(content)
    else:
        raise BatchInputError(f"Unsupported batch format: {fmt}")

    return parse_requests(entries)


def preview(requests: List[GenerationRequest]) -> Tuple[List[str], float]:
    """Return dry-run lines in input order plus the estimated total cost."""
    lines = []
    total = 0.0
    for index, request in enumerate(requests, start=1):
        style = (request.style or LogoStyle.MODERN).value
        lines.append(f'{index}. {request.company}: "{request.prompt}" ({style})')
        total += calculate_cost(request.quality or ImageQuality.STANDARD)
    return lines, total


class BatchOrchestrator:
    """Runs many generations with a cap on how many are in flight at once."""

    def __init__(self, generator: LogoGenerator, downloader: Optional[ImageDownloader] = None):
        self.generator = generator
        self.downloader = downloader or ImageDownloader()

    async def run(self, job: BatchJob) -> BatchResult:
        started = time.monotonic()
        semaphore = asyncio.Semaphore(job.concurrency)
        total = len(job.requests)
        result = BatchResult(stats=BatchStats(total=total))
        completed = 0

        async def process(request: GenerationRequest) -> None:
            nonlocal completed
            async with semaphore:
                if not job.quiet:
                    logger.info("[%d/%d] Generating: %s", completed + 1, total, request.company)
                try:
                    logo = await self.generator.generate(request)
                    if job.output_dir:
                        path = await self.downloader.download(logo, job.output_dir, job.iteration)
                        logo.local_path = str(path)
                except Exception as exc:
                    completed += 1
                    result.failed.append(FailedGeneration(request=request, error=exc))
                    logger.error("%s failed (%d/%d): %s", request.company, completed, total, exc)
                    return
                completed += 1
                result.successful.append(logo)
                if not job.quiet:
                    logger.info("%s complete (%d/%d)", request.company, completed, total)

        await asyncio.gather(*(process(request) for request in job.requests))

        result.stats.successful = len(result.successful)
        result.stats.failed = len(result.failed)
        result.stats.total_cost = sum(logo.metadata.cost for logo in result.successful)
        result.stats.duration = time.monotonic() - started

        if job.iteration and job.output_dir and result.successful:
            await self.downloader.create_iteration_manifest(
                job.output_dir,
                job.iteration,
                f"Batch generation: {total} logos",
                result.successful,
            )
        return result


def summarize(result: BatchResult, output_dir: Optional[str] = None, iteration: Optional[int] = None) -> Dict[str, Any]:
    """JSON-friendly batch summary, as printed by ``batch --quiet``."""
    target = str(Path(output_dir) / f"iteration-{iteration}") if output_dir and iteration else output_dir
    return {
        "success": True,
        "total": result.stats.total,
        "successful": result.stats.successful,
        "failed": result.stats.failed,
        "totalCost": round(result.stats.total_cost, 4),
        "duration": round(result.stats.duration),
        "outputDir": target,
        "iteration": iteration,
        "logos": [_logo_summary(logo) for logo in result.successful],
        "errors": [
            {"company": failure.request.company, "error": str(failure.error)}
            for failure in result.failed
        ],
    }


def _logo_summary(logo: GenerationResult) -> Dict[str, Any]:
    return {
        "company": logo.metadata.company,
        "id": logo.metadata.id,
        "url": logo.url,
        "cost": logo.metadata.cost,
        "localPath": logo.local_path,
    }
