"""Command-line interface for logo-cli."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_CONCURRENCY, TEMPLATES_DIR, Settings, load_settings, save_settings
from .errors import ConfigurationError, LogoCliError
from .schemas import (
    BatchJob,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    ImageQuality,
    ImageSize,
    Industry,
    LogoStyle,
    ProfessionalTemplate,
    TemplateCategory,
    TemplateComplexity,
    UserTemplate,
    UserTemplateVariation,
)
from .services.batch import BatchOrchestrator, load_batch_file, preview, summarize
from .services.cache import CacheStore
from .services.downloader import ImageDownloader, iteration_dir
from .services.logo_generator import LogoGenerator
from .services.templates import list_templates
from .services.user_templates import UserTemplateLibrary, generate_from_template


def _values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logo-cli",
        description="Generate logos from text descriptions with the OpenAI Images API.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate a logo from a description.")
    generate.add_argument("-p", "--prompt", required=True, help="Logo description.")
    generate.add_argument("-c", "--company", required=True, help="Company name.")
    generate.add_argument("-s", "--style", choices=_values(LogoStyle), help="Logo style.")
    generate.add_argument("-t", "--template", help="Professional template id (see 'browse').")
    generate.add_argument("--industry", choices=_values(Industry), help="Target industry.")
    generate.add_argument("--size", choices=_values(ImageSize), help="Image size.")
    generate.add_argument("--quality", choices=_values(ImageQuality), help="Image quality.")
    generate.add_argument("--colors", help="Comma-separated color preferences.")
    generate.add_argument(
        "--negative",
        action="append",
        default=[],
        metavar="TEXT",
        help="Extra negative prompt; may be repeated.",
    )
    generate.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Template parameter override, e.g. --param shape=hexagon.",
    )
    generate.add_argument("-o", "--output", help="Output directory.")
    generate.add_argument("--variations", type=_positive_int, default=1, help="Number of variations to generate.")
    generate.add_argument("--no-download", action="store_true", help="Only print the image URL.")
    generate.add_argument("--iteration", type=_positive_int, help="Iteration number (creates an iteration-N folder).")
    generate.add_argument("--quiet", action="store_true", help="Print a JSON summary only.")

    batch = commands.add_parser("batch", help="Generate many logos from a CSV or JSON file.")
    batch.add_argument("-f", "--file", required=True, help="Input file (CSV or JSON).")
    batch.add_argument("-o", "--output", help="Output directory.")
    batch.add_argument("--concurrency", type=_positive_int, default=DEFAULT_CONCURRENCY, help="Concurrent generations.")
    batch.add_argument("--format", choices=["auto", "json", "csv"], default="auto", help="Input format.")
    batch.add_argument("--dry-run", action="store_true", help="Show what would be generated.")
    batch.add_argument("--iteration", type=_positive_int, help="Iteration number (creates an iteration-N folder).")
    batch.add_argument("--quiet", action="store_true", help="Print a JSON summary only.")

    browse = commands.add_parser("browse", help="Browse professional logo templates.")
    browse.add_argument("--category", choices=_values(TemplateCategory))
    browse.add_argument("--industry", choices=_values(Industry))
    browse.add_argument("--complexity", choices=_values(TemplateComplexity))
    browse.add_argument("--list", action="store_true", help="Show a compact list.")

    template = commands.add_parser("template", help="Manage and use your own saved templates.")
    template.add_argument("--dir", help="Templates directory (default: LOGO_TEMPLATES_DIR or ./templates).")
    template_commands = template.add_subparsers(dest="template_command", required=True)
    template_commands.add_parser("list", help="List saved templates.")
    template_show = template_commands.add_parser("show", help="Show template details.")
    template_show.add_argument("-t", "--template", required=True, help="Template name or id.")
    template_create = template_commands.add_parser("create", help="Create a new template.")
    template_create.add_argument("-n", "--name", required=True, help="Template name.")
    template_create.add_argument("-d", "--description", required=True, help="Template description.")
    template_create.add_argument("-p", "--prompt", required=True, help="Base prompt.")
    template_create.add_argument("-i", "--industry", choices=_values(Industry), help="Target industry.")
    template_create.add_argument(
        "--variation",
        action="append",
        default=[],
        metavar="NAME=MODIFIER",
        help="Named variation appended to the base prompt; may be repeated (max 5).",
    )
    template_use = template_commands.add_parser("use", help="Generate logos from a saved template.")
    template_use.add_argument("-t", "--template", required=True, help="Template name or id.")
    template_use.add_argument("-c", "--company", required=True, help="Company name.")
    template_use.add_argument("--all-variations", action="store_true", help="Generate every variation.")
    template_use.add_argument("-o", "--output", help="Output directory.")
    template_use.add_argument("--no-download", action="store_true", help="Only print the image URLs.")

    cache = commands.add_parser("cache", help="Inspect or clear the result cache.")
    cache.add_argument("action", choices=["stats", "clear"])

    config = commands.add_parser("config", help="Show or update configuration.")
    config_commands = config.add_subparsers(dest="config_command", required=True)
    config_commands.add_parser("show", help="Show the current configuration.")
    config_set = config_commands.add_parser("set", help="Update the configuration file.")
    config_set.add_argument("--api-key", help="OpenAI API key.")
    config_set.add_argument("--output-dir", help="Default output directory.")

    return parser


def build_cache(settings: Settings) -> Optional[CacheStore]:
    if not settings.cache_enabled:
        return None
    return CacheStore(
        settings.cache_dir,
        ttl_seconds=settings.cache_ttl,
        max_size_mb=settings.max_cache_size_mb,
    )


def build_generator(settings: Settings, cache: Optional[CacheStore] = None) -> LogoGenerator:
    return LogoGenerator(cache=cache, api_key=settings.require_api_key())


def _parse_params(pairs: Iterable[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise LogoCliError(f"Invalid template parameter '{pair}', expected NAME=VALUE")
        params[name.strip().lower()] = value.strip()
    return params


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


async def run_generate(args: argparse.Namespace, settings: Settings) -> int:
    cache = build_cache(settings)
    generator = build_generator(settings, cache)
    request = GenerationRequest(
        company=args.company,
        prompt=args.prompt,
        style=args.style or settings.default_style,
        industry=args.industry,
        colors=args.colors.split(",") if args.colors else None,
        size=args.size or settings.default_size,
        quality=args.quality or settings.default_quality,
    )
    options = GenerationOptions(
        template=args.template,
        negative_prompts=args.negative,
        template_params=_parse_params(args.param),
    )

    if not args.quiet:
        print(f"Generating logo for {request.company} ({request.style.value})...")

    if args.variations > 1:
        results = await generator.generate_variations(request, args.variations, options)
    else:
        results = [await generator.generate(request, options)]

    if not args.no_download:
        output_dir = args.output or settings.output_dir
        downloader = ImageDownloader()
        for result in results:
            path = await downloader.download(result, output_dir, args.iteration)
            result.local_path = str(path)
        if args.iteration:
            await downloader.create_iteration_manifest(
                output_dir,
                args.iteration,
                f"{request.company}: {request.prompt}",
                results,
            )

    if cache is not None:
        await cache.join()

    total_cost = sum(result.metadata.cost for result in results)
    if args.quiet:
        _print_json(
            {
                "success": True,
                "count": len(results),
                "totalCost": round(total_cost, 4),
                "logos": [
                    {
                        "index": index,
                        "url": result.url,
                        "id": result.metadata.id,
                        "cost": result.metadata.cost,
                        "revisedPrompt": result.revised_prompt,
                        "localPath": result.local_path,
                    }
                    for index, result in enumerate(results, start=1)
                ],
            }
        )
        return 0

    for index, result in enumerate(results, start=1):
        _print_result(index, result)
    print(f"\nTotal cost: ${total_cost:.3f}")
    return 0


def _print_result(index: int, result: GenerationResult) -> None:
    print(f"\nLogo {index}:")
    print(f"  URL: {result.url}")
    print(f"  ID: {result.metadata.id}")
    print(f"  Cost: ${result.metadata.cost:.3f}")
    if result.revised_prompt:
        print(f"  Revised: {result.revised_prompt}")
    if result.local_path:
        print(f"  Saved: {result.local_path}")


async def run_batch(args: argparse.Namespace, settings: Settings) -> int:
    requests = load_batch_file(args.file, args.format)
    if not args.quiet:
        print(f"Loaded {len(requests)} logo requests")

    if args.dry_run:
        lines, total = preview(requests)
        print("Dry run - showing what would be generated:")
        for line in lines:
            print(line)
        print(f"\nEstimated cost: ${total:.3f}")
        return 0

    cache = build_cache(settings)
    orchestrator = BatchOrchestrator(build_generator(settings, cache), ImageDownloader())
    output_dir = args.output or settings.output_dir
    job = BatchJob(
        requests=requests,
        concurrency=args.concurrency,
        output_dir=output_dir,
        iteration=args.iteration,
        quiet=args.quiet,
    )
    if not args.quiet:
        print(f"Starting batch generation with {job.concurrency} concurrent workers...")
    result = await orchestrator.run(job)
    if cache is not None:
        await cache.join()

    if args.quiet:
        _print_json(summarize(result, output_dir, args.iteration))
        return 0

    print("\nBatch generation complete")
    print(f"Successful: {result.stats.successful}")
    print(f"Failed: {result.stats.failed}")
    print(f"Duration: {round(result.stats.duration)}s")
    print(f"Total cost: ${result.stats.total_cost:.3f}")
    print(f"Output directory: {iteration_dir(output_dir, args.iteration)}")
    for index, failure in enumerate(result.failed, start=1):
        print(f"  {index}. {failure.request.company}: {failure.error}")
    return 0


def run_browse(args: argparse.Namespace) -> int:
    templates = list_templates(
        category=TemplateCategory(args.category) if args.category else None,
        industry=Industry(args.industry) if args.industry else None,
        complexity=TemplateComplexity(args.complexity) if args.complexity else None,
    )
    if not templates:
        print("No templates found matching your criteria")
        return 0

    if args.list:
        for index, template in enumerate(templates, start=1):
            print(f"{index}. {template.id} - {template.name}")
        return 0

    for template in templates:
        _print_template(template)
    print("\nUse a template: logo-cli generate -c NAME -p DESCRIPTION --template TEMPLATE_ID")
    return 0


def _print_template(template: ProfessionalTemplate) -> None:
    print(f"\n{template.name}")
    print(f"  ID: {template.id}")
    print(f"  Description: {template.description}")
    print(f"  Category: {template.category.value}")
    print(f"  Complexity: {template.complexity.value}")
    if template.industry_fit:
        print(f"  Industries: {', '.join(industry.value for industry in template.industry_fit)}")
    if template.optional_params:
        params = ", ".join(f"{name}={value}" for name, value in template.optional_params.items())
        print(f"  Parameters: {params}")
    if template.examples:
        print(f"  Examples: {', '.join(template.examples)}")
    print(f"  Cost tier: {template.cost_tier.value} quality")


def _parse_variations(pairs: Iterable[str]) -> List[UserTemplateVariation]:
    variations = []
    for pair in pairs:
        name, sep, modifier = pair.partition("=")
        if not sep or not name.strip():
            raise LogoCliError(f"Invalid variation '{pair}', expected NAME=MODIFIER")
        variations.append(UserTemplateVariation(name=name.strip(), modifier=modifier.strip()))
    return variations


def _print_user_template(template: UserTemplate) -> None:
    print(f"Template: {template.name}")
    print(f"  ID: {template.id}")
    print(f"  Description: {template.description}")
    print(f"  Industry: {template.industry.value if template.industry else 'Any'}")
    print(f"  Base prompt: {template.base_prompt}")
    print(f"  Author: {template.metadata.author}")
    print(f"  Version: {template.metadata.version}")
    print("  Variations:")
    for index, variation in enumerate(template.variations, start=1):
        print(f"    {index}. {variation.name}: {variation.modifier or '(base prompt only)'}")
        if variation.description:
            print(f"       {variation.description}")


async def run_template(args: argparse.Namespace, settings: Settings) -> int:
    library = UserTemplateLibrary(args.dir or TEMPLATES_DIR)

    if args.template_command == "list":
        templates = library.all_templates()
        if not templates:
            print("No templates found")
            print("Create one with: logo-cli template create -n NAME -d DESCRIPTION -p PROMPT")
            return 0
        for index, template in enumerate(templates, start=1):
            industry = template.industry.value if template.industry else "Any"
            print(f"{index}. {template.name} ({template.id})")
            print(f"   {template.description}")
            print(f"   Industry: {industry}  Variations: {len(template.variations)}")
        return 0

    if args.template_command == "create":
        template, path = library.create(
            name=args.name,
            description=args.description,
            base_prompt=args.prompt,
            industry=Industry(args.industry) if args.industry else None,
            variations=_parse_variations(args.variation),
        )
        print(f"Template '{template.name}' created")
        print(f"Saved to: {path}")
        return 0

    template = library.load(args.template)
    if args.template_command == "show":
        _print_user_template(template)
        return 0

    cache = build_cache(settings)
    generator = build_generator(settings, cache)
    output_dir = args.output or settings.output_dir
    print(f"Using template: {template.name}")
    results = await generate_from_template(
        generator,
        template,
        args.company,
        all_variations=args.all_variations,
        downloader=None if args.no_download else ImageDownloader(),
        output_dir=None if args.no_download else output_dir,
    )
    if cache is not None:
        await cache.join()

    for name, result in results:
        print(f"  {name}: {result.local_path or result.url}")
    total_cost = sum(result.metadata.cost for _, result in results)
    print(f"Total cost: ${total_cost:.3f}")
    return 0


async def run_cache(args: argparse.Namespace, settings: Settings) -> int:
    cache = build_cache(settings)
    if cache is None:
        print("Cache is disabled (LOGO_CACHE_ENABLED=false)")
        return 0
    if args.action == "clear":
        await cache.clear()
        print("Cache cleared")
        return 0
    stats = await cache.stats()
    print(f"Memory entries: {stats.memory_entries}")
    print(f"File entries: {stats.file_entries}")
    print(f"Total size: {stats.total_size_mb} MB")
    return 0


def run_config(args: argparse.Namespace, settings: Settings) -> int:
    if args.config_command == "set":
        updates = {"api_key": args.api_key, "output_dir": args.output_dir}
        if not any(updates.values()):
            raise ConfigurationError("Nothing to update.", hint="Pass --api-key and/or --output-dir")
        path = save_settings(updates)
        print(f"Configuration saved to {path}")
        return 0

    shown = settings.model_dump(mode="json")
    if shown["api_key"]:
        shown["api_key"] = f"{shown['api_key'][:7]}..."
    _print_json(shown)
    return 0


def _configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args)

    try:
        if args.command == "browse":
            return run_browse(args)
        settings = load_settings()
        if args.command == "config":
            return run_config(args, settings)
        if args.command == "cache":
            return asyncio.run(run_cache(args, settings))
        if args.command == "batch":
            return asyncio.run(run_batch(args, settings))
        if args.command == "template":
            return asyncio.run(run_template(args, settings))
        return asyncio.run(run_generate(args, settings))
    except LogoCliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        hint = getattr(exc, "hint", "")
        if hint:
            print(hint, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
