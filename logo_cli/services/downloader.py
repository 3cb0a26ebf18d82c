import asyncio
import json
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import httpx

from ..errors import DownloadError
from ..schemas import (
    GenerationResult,
    IterationLogo,
    IterationRecord,
    LogoMetadata,
)

logger = logging.getLogger(__name__)

METADATA_DIRNAME = ".metadata"
MANIFEST_FILENAME = "iterations.json"
DOWNLOAD_TIMEOUT = 60.0


def iteration_dir(output_dir: Path | str, iteration: Optional[int] = None) -> Path:
    base = Path(output_dir)
    return base / f"iteration-{iteration}" if iteration else base


def logo_filename(metadata: LogoMetadata) -> str:
    """``<company>-<style>-<YYYY-MM-DD>-<last 6 of id>.png``"""
    company = re.sub(r"[^a-z0-9]", "-", metadata.company.lower())
    company = re.sub(r"-+", "-", company).strip("-")
    day = datetime.fromtimestamp(metadata.timestamp / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
    return f"{company}-{metadata.style.value}-{day}-{metadata.id[-6:]}.png"


class ImageDownloader:
    """Saves generated images and their metadata under an output directory."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self._client = client

    async def download(
        self,
        result: GenerationResult,
        output_dir: Path | str,
        iteration: Optional[int] = None,
    ) -> Path:
        target_dir = iteration_dir(output_dir, iteration)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / logo_filename(result.metadata)

        content = await self._fetch(result.url)
        try:
            await asyncio.to_thread(path.write_bytes, content)
        except OSError as exc:
            raise DownloadError(f"Failed to write image to {path}: {exc}") from exc

        await self._save_metadata(result.metadata, target_dir)
        return path

    async def download_batch(
        self,
        results: List[GenerationResult],
        output_dir: Path | str,
        iteration: Optional[int] = None,
    ) -> List[Path]:
        paths: List[Path] = []
        for result in results:
            try:
                path = await self.download(result, output_dir, iteration)
            except DownloadError as exc:
                logger.error("Failed to download %s: %s", result.metadata.company, exc)
                continue
            result.local_path = str(path)
            paths.append(path)
        return paths

    def load_metadata(self, logo_id: str, output_dir: Path | str) -> Optional[LogoMetadata]:
        path = Path(output_dir) / METADATA_DIRNAME / f"{logo_id}.json"
        try:
            return LogoMetadata.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None

    async def create_iteration_manifest(
        self,
        output_dir: Path | str,
        iteration: int,
        description: str,
        results: List[GenerationResult],
    ) -> Optional[Path]:
        """Append an iteration record to ``<output_dir>/iterations.json``."""
        record = IterationRecord(
            iteration=iteration,
            timestamp=int(time.time() * 1000),
            description=description,
            count=len(results),
            total_cost=sum(result.metadata.cost for result in results),
            logos=[
                IterationLogo(
                    company=result.metadata.company,
                    id=result.metadata.id,
                    style=result.metadata.style,
                    cost=result.metadata.cost,
                )
                for result in results
            ],
        )
        path = Path(output_dir) / MANIFEST_FILENAME
        try:
            await asyncio.to_thread(self._append_manifest, path, record)
        except OSError as exc:
            logger.warning("Failed to update iteration manifest %s: %s", path, exc)
            return None
        return path

    async def _fetch(self, url: str) -> bytes:
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=DOWNLOAD_TIMEOUT, follow_redirects=True) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DownloadError(
                f"Failed to download image: {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DownloadError(f"Failed to download image: {exc}") from exc
        return response.content

    async def _save_metadata(self, metadata: LogoMetadata, target_dir: Path) -> None:
        metadata_dir = target_dir / METADATA_DIRNAME
        path = metadata_dir / f"{metadata.id}.json"
        try:
            await asyncio.to_thread(metadata_dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(
                path.write_text,
                json.dumps(metadata.to_json_dict(), indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("Failed to write metadata for %s: %s", metadata.id, exc)

    @staticmethod
    def _append_manifest(path: Path, record: IterationRecord) -> None:
        data: dict = {"iterations": []}
        if path.exists():
            try:
                loaded = json.loads(path.read_text(encoding="utf-8"))
            except ValueError as exc:
                logger.warning("Starting a fresh manifest; %s is not valid JSON: %s", path, exc)
            else:
                if isinstance(loaded, dict) and isinstance(loaded.get("iterations"), list):
                    data = loaded
                else:
                    logger.warning("Starting a fresh manifest; %s has no iterations list", path)
        data["iterations"].append(record.to_json_dict())
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
