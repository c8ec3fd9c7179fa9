#!/usr/bin/env python3
"""
Demo script for the translation cache.

Shows tier-one and tier-two hits, the identical-language short circuit and a
bounded batch fan-out. Uses the in-memory durable tier. Without
OPENAI_API_KEY the provider is replaced by a local httpx mock transport that
echoes the text with a language tag.
"""

import asyncio
import json
import time

import httpx

from translation_cache.config import get_settings
from translation_cache.entities import BatchJob, ErrorRecord
from translation_cache.errors import SkippedIdentical
from translation_cache.repositories import InMemoryEntryRepository, OpenAIInferenceClient
from translation_cache.services import CacheOrchestrator, ConcurrencyDispatcher


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def _offline_handler(request: httpx.Request) -> httpx.Response:
    payload = json.loads(request.content)
    prompt = payload["messages"][-1]["content"]
    text = prompt.split("Text to translate:\n", 1)[-1]
    return httpx.Response(
        200,
        json={
            "model": payload["model"],
            "choices": [{"message": {"content": f"[offline] {text}"}}],
            "usage": {"total_tokens": len(text)},
        },
    )


def build_client(settings) -> OpenAIInferenceClient:
    """Use the real provider when a key is configured, else a mock transport."""
    if settings.openai_api_key:
        return OpenAIInferenceClient.create(settings)
    print("\n⚠️  OPENAI_API_KEY not set, using offline mock provider")
    return OpenAIInferenceClient(
        api_key="offline-demo",
        model=settings.openai_model,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(_offline_handler)),
    )


async def demo_cache_tiers(orchestrator: CacheOrchestrator) -> None:
    """Demonstrate tier-one and tier-two hits."""
    print_section("Cache Tiers")

    text = "Good morning, how are you today?"
    for attempt in range(1, 3):
        start = time.time()
        resolution = await orchestrator.resolve_detailed(text, "en", "ja")
        duration = (time.time() - start) * 1000
        print(f"\n  Call {attempt}: served by {resolution.source.value} in {duration:.2f}ms")
        print(f"  Result: {resolution.result.output}")

    await orchestrator.flush()
    orchestrator.tier_one.clear()
    resolution = await orchestrator.resolve_detailed(text, "en", "ja")
    print(f"\n  After clearing tier one: served by {resolution.source.value}")


async def demo_skip_identical(orchestrator: CacheOrchestrator) -> None:
    """Demonstrate the identical-language short circuit."""
    print_section("Identical Source and Target")

    try:
        await orchestrator.resolve("謝謝", "zh-TW", "zh-TW")
    except SkippedIdentical as e:
        print(f"\n  ✓ Skipped, original text returned: {e.original_input}")


async def demo_batch(dispatcher: ConcurrencyDispatcher) -> None:
    """Demonstrate a bounded batch fan-out."""
    print_section("Batch Fan-out (concurrency 2)")

    job = BatchJob.create(
        input="Thank you for coming",
        source_variant="en",
        target_variants=["zh-TW", "ja", "ko", "th", "vi", "en"],
        concurrency_limit=2,
    )
    outcomes = await dispatcher.run(job)
    for variant, outcome in sorted(outcomes.items()):
        if isinstance(outcome, ErrorRecord):
            print(f"  ✗ {variant:<6} {outcome.kind}: {outcome.message}")
        else:
            print(f"  ✓ {variant:<6} {outcome.output}")


async def main() -> None:
    settings = get_settings()
    client = build_client(settings)
    orchestrator = CacheOrchestrator.create(
        settings=settings,
        store=InMemoryEntryRepository(),
        client=client,
    )
    dispatcher = ConcurrencyDispatcher(orchestrator)

    try:
        await demo_cache_tiers(orchestrator)
        await demo_skip_identical(orchestrator)
        await demo_batch(dispatcher)

        print_section("Statistics")
        for name, value in orchestrator.get_stats().items():
            print(f"  {name:<24} {value}")
    finally:
        await orchestrator.aclose()
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
