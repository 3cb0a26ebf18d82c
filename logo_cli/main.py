from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import OUTPUT_DIR, STATIC_URL_PATH, ensure_output_dir, load_settings
from .errors import (
    ConfigurationError,
    DownloadError,
    TemplateNotFoundError,
    TemplateRenderError,
    UpstreamError,
)
from .schemas import (
    CacheStats,
    GenerateLogoRequest,
    GenerateLogoResponse,
    GenerationOptions,
    GenerationRequest,
    Industry,
    ProfessionalTemplate,
    TemplateCategory,
    TemplateComplexity,
)
from .services.cache import CacheStore
from .services.downloader import ImageDownloader
from .services.logo_generator import LogoGenerator
from .services.templates import get_template, list_templates

# Ensure output directory exists before mounting static files.
ensure_output_dir()

app = FastAPI(title="Logo Generator API", version="1.0.0")

# Basic CORS to allow calls from a separate front end.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Serve downloaded logo files so clients can fetch them by URL.
app.mount(STATIC_URL_PATH, StaticFiles(directory=OUTPUT_DIR), name="logos")


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": f"{exc} {exc.hint}".strip()})


@lru_cache
def get_cache() -> Optional[CacheStore]:
    settings = load_settings()
    if not settings.cache_enabled:
        return None
    return CacheStore(
        settings.cache_dir,
        ttl_seconds=settings.cache_ttl,
        max_size_mb=settings.max_cache_size_mb,
    )


@lru_cache
def get_generator() -> LogoGenerator:
    settings = load_settings()
    return LogoGenerator(cache=get_cache(), api_key=settings.require_api_key())


@lru_cache
def get_downloader() -> ImageDownloader:
    return ImageDownloader()


@app.post("/generate", response_model=GenerateLogoResponse)
async def generate_logo(
    payload: GenerateLogoRequest,
    generator: LogoGenerator = Depends(get_generator),
    downloader: ImageDownloader = Depends(get_downloader),
) -> GenerateLogoResponse:
    try:
        request = GenerationRequest(
            company=payload.company,
            prompt=payload.prompt,
            style=payload.style,
            industry=payload.industry,
            colors=payload.colors,
            size=payload.size,
            quality=payload.quality,
        )
        options = GenerationOptions(
            template=payload.template,
            negative_prompts=payload.negative_prompts,
            template_params=payload.template_params,
        )
        logo = await generator.generate(request, options)

        image_url = None
        if payload.download:
            path = await downloader.download(logo, OUTPUT_DIR, payload.iteration)
            logo.local_path = str(path)
            image_url = f"{STATIC_URL_PATH.rstrip('/')}/{path.relative_to(OUTPUT_DIR).as_posix()}"
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TemplateRenderError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (UpstreamError, DownloadError) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return GenerateLogoResponse(logo=logo, image_url=image_url)


@app.get("/templates", response_model=List[ProfessionalTemplate])
def templates(
    category: Optional[TemplateCategory] = None,
    industry: Optional[Industry] = None,
    complexity: Optional[TemplateComplexity] = None,
) -> List[ProfessionalTemplate]:
    return list_templates(category=category, industry=industry, complexity=complexity)


@app.get("/templates/{template_id}", response_model=ProfessionalTemplate)
def template_detail(template_id: str) -> ProfessionalTemplate:
    try:
        return get_template(template_id)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/cache/stats")
async def cache_stats(cache: Optional[CacheStore] = Depends(get_cache)) -> dict:
    if cache is None:
        return {"enabled": False}
    stats: CacheStats = await cache.stats()
    return {"enabled": True, **stats.model_dump(), "total_size_mb": stats.total_size_mb}


@app.delete("/cache")
async def clear_cache(cache: Optional[CacheStore] = Depends(get_cache)) -> dict:
    if cache is None:
        return {"cleared": False}
    await cache.clear()
    return {"cleared": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("logo_cli.main:app", host="0.0.0.0", port=8000, reload=True)
