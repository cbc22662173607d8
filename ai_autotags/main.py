from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .cache import CacheConfig, MemoryCache, RedisCache, ResultCache
from .config_validator import ConfigurationError, validate_settings
from .frontmatter import FrontmatterService
from .models.connection_pool import HTTPConnectionPool
from .pipeline import AutoTagPipeline
from .service import AIService
from .settings import AppSettings
from .telemetry import configure_telemetry, instrument_all
from .triggers import AutoExecutionScheduler
from .vault import FileVault

logger = logging.getLogger(__name__)


def build_cache(settings: AppSettings) -> ResultCache:
    if settings.cache_backend == "redis":
        return RedisCache(
            CacheConfig(
                url=settings.redis_url,
                ttl_seconds=max(1, int(settings.cache_ttl_seconds)),
                prefix=settings.redis_prefix,
            )
        )
    return MemoryCache(ttl_seconds=settings.cache_ttl_seconds)


def build_service(settings: AppSettings, pool: HTTPConnectionPool | None = None) -> AIService:
    return AIService(
        settings.provider_config(),
        tag_count=settings.tag_count,
        cache=build_cache(settings),
        enable_cache=settings.enable_cache,
        connection_pool=pool or HTTPConnectionPool(timeout=settings.timeout_ms / 1000),
        max_input_chars=settings.max_input_chars,
    )


def build_scheduler(settings: AppSettings, pipeline: AutoTagPipeline) -> AutoExecutionScheduler | None:
    """Scheduler for hosts that forward vault events; None when auto-execution is off."""
    if not settings.auto_execute:
        return None
    return AutoExecutionScheduler(
        pipeline.process_document,
        settings.auto_execute_trigger,
        paused=settings.auto_tagging_paused,
        resolve=pipeline.vault.resolve,
    )


async def run_tag(settings: AppSettings, args: argparse.Namespace) -> int:
    document = Path(args.path)
    vault = FileVault(document.parent)
    service = build_service(settings)
    pipeline = AutoTagPipeline(
        service,
        FrontmatterService(vault, max_existing_tags=settings.max_existing_tags),
        vault,
        notifier=print,
        generate_properties=settings.generate_properties,
    )
    try:
        updated = await pipeline.process_document(
            document.name,
            text=args.selection,
            force_update=args.force,
            generate_properties=True if args.all_properties else None,
        )
    finally:
        await service.close()
    return 0 if updated or service.last_error is None else 1


async def run_test_connection(settings: AppSettings) -> int:
    service = build_service(settings)
    try:
        result = await service.test_connection()
    finally:
        await service.close()
    print(result.message)
    return 0 if result.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-autotags",
        description="Generate tags and properties for Markdown notes with an AI provider",
    )
    parser.add_argument("--config", help="YAML settings file (defaults to AUTOTAGS_* env vars)")
    parser.add_argument("--log-level", default="WARNING")
    subparsers = parser.add_subparsers(dest="command", required=True)

    tag = subparsers.add_parser("tag", help="Tag one note")
    tag.add_argument("path")
    tag.add_argument("--force", action="store_true", help="Ignore the existing-tag limit")
    tag.add_argument(
        "--all-properties",
        action="store_true",
        help="Also generate title, author, date, source, url, aliases and summary",
    )
    tag.add_argument("--selection", help="Analyze this text instead of the note body")

    subparsers.add_parser("test-connection", help="Check the configured provider")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = AppSettings.from_yaml(args.config) if args.config else AppSettings()
    try:
        validate_settings(settings)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        return 2

    configure_telemetry(settings.telemetry_config())
    instrument_all()

    if args.command == "tag":
        return asyncio.run(run_tag(settings, args))
    return asyncio.run(run_test_connection(settings))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
