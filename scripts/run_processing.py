#!/usr/bin/env python3
"""
Content Processing Script

Operator CLI for the chunk extraction pipeline: walk the source document
through the AI backend, inspect the chunk catalog and re-run stages on
single chunks.

Stages per chunk:
1. Theory Extraction - Create the chunk from raw lines (range, next)
2. Theory Enhancement - Add worked examples (enhance)
3. Question Generation - Quiz questions (questions)
4. Task Generation - Coding tasks (tasks)
5. Chunk Rewrite - Operator-guided rewrite (rewrite)

Setup:
    1. Ensure Redis is running (docker-compose up -d redis)
    2. Copy .env.example to .env in the project root and fill in API keys
    3. Put the source document at SOURCE_DOCUMENT_PATH (default data/MyNotes.md)

Usage:
    # Show cursor, progress and catalog size
    python run_processing.py status

    # Process the next chunk at the cursor (honors AI boundary suggestions)
    python run_processing.py next

    # Extract a line range (end exclusive)
    python run_processing.py range 0 500 --chunk-size 100 --delay 2

    # Extract a range and run enhancement, questions and tasks over it
    python run_processing.py all-stages 0 300

    # Re-run one stage for one chunk
    python run_processing.py questions chunk_0_100_1718000000000
    python run_processing.py rewrite chunk_0_100_1718000000000 --focus questions --difficulty hard

    # Catalog management
    python run_processing.py list
    python run_processing.py complete chunk_0_100_1718000000000
    python run_processing.py export exports/chunks.json
    python run_processing.py reset --clear-chunks

    # Use the local Ollama backend instead of the hosted one
    python run_processing.py --backend local --model llama3.1:8b next

Environment Variables (set in .env or environment):
    - REDIS_URL: Chunk catalog and processing state
    - LLM_BACKEND: hosted | local
    - TEXT_MODEL + GEMINI_API_KEY / OPENAI_API_KEY / ANTHROPIC_API_KEY: hosted backend
    - OLLAMA_BASE_URL, OLLAMA_MODEL: local backend
    - PROCESSING_CHUNK_SIZE_LINES, PROCESSING_PROCESSING_DELAY_SECONDS: pacing
    - DEBUG: Enable verbose logging
"""

import argparse
import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

# Add backend to path for imports (must be before content_processor.* imports)
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from dotenv import load_dotenv

# Load environment variables from project root .env
project_root = Path(__file__).parent.parent
if (project_root / ".env").exists():
    load_dotenv(project_root / ".env")
else:
    load_dotenv(project_root / "backend" / ".env")

# App imports (after sys.path setup and env loading)
from content_processor.config import processing_settings, settings
from content_processor.db.redis import close_redis_pool
from content_processor.enums import (
    BackendName,
    Difficulty,
    ProcessingStage,
    QuestionType,
    RewriteFocus,
)
from content_processor.exceptions import ContentProcessorError
from content_processor.models import ProcessedChunk, RewriteOptions
from content_processor.services.llm import (
    BackendConfig,
    LLMBackend,
    default_backend_config,
    get_backend,
)
from content_processor.services.processing import (
    ProcessingStateManager,
    RangeProcessor,
    RangeReport,
    SourceDocument,
    StageOrchestrator,
    StageOutcome,
    progress_percent,
)
from content_processor.services.storage import (
    ChunkStore,
    InMemoryChunkStore,
    RedisChunkStore,
    export_chunks,
    export_chunks_json,
    mark_chunk_completed,
)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    # Reduce noise from httpx and other libs (unless --debug)
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("LiteLLM").setLevel(logging.WARNING)


# =============================================================================
# Wiring
# =============================================================================


def create_store(args: argparse.Namespace) -> ChunkStore:
    if args.store == "memory":
        return InMemoryChunkStore()
    return RedisChunkStore()


async def load_source(args: argparse.Namespace) -> SourceDocument:
    path = args.source or settings.SOURCE_DOCUMENT_PATH
    try:
        return await SourceDocument.load(path)
    except FileNotFoundError:
        print(f"❌ Source document not found: {path}")
        sys.exit(1)


@asynccontextmanager
async def open_backend(args: argparse.Namespace) -> AsyncIterator[LLMBackend]:
    """Construct, initialize and finally close the selected backend."""
    name = args.backend or settings.LLM_BACKEND
    backend = get_backend(name)
    config = default_backend_config(name)
    if args.model:
        config = BackendConfig(
            model=args.model, api_key=config.api_key, base_url=config.base_url
        )
    if not await backend.initialize(config):
        print(f"❌ Could not initialize the {backend.name} backend (see log above)")
        sys.exit(1)
    try:
        yield backend
    finally:
        await backend.close()


def format_chunk(chunk: ProcessedChunk) -> str:
    done = "✅" if chunk.completed else "⏳"
    suggested = chunk.logical_block_info.suggested_end_line
    lines = [
        f"{done} {chunk.id}",
        f"   Lines: {chunk.start_line}-{chunk.display_end_line}",
        f"   Theory: {len(chunk.theory)}  Questions: {len(chunk.questions)}  "
        f"Tasks: {len(chunk.tasks)}",
    ]
    if suggested > 0:
        lines.append(f"   Suggested end line: {suggested}")
    for block in chunk.theory[:5]:
        lines.append(f"      • {block.title}")
    if len(chunk.theory) > 5:
        lines.append(f"      ... and {len(chunk.theory) - 5} more")
    return "\n".join(lines)


def print_outcome(outcome: StageOutcome) -> None:
    if outcome.succeeded:
        print(f"\n✅ {outcome.stage.value} succeeded")
        print(format_chunk(outcome.chunk))
    else:
        print(f"\n❌ {outcome.stage.value} failed: {outcome.error}")
        print("   The chunk was left unchanged.")


def print_report(report: RangeReport) -> None:
    print(f"\n{'=' * 60}")
    print("📊 RANGE SUMMARY")
    print(f"{'=' * 60}")
    print(f"Lines: {report.start_line}-{report.end_line}")
    print(f"Chunks saved: {len(report.chunks)}")
    print(f"Chunks failed: {len(report.failures)}")
    for failure in report.failures:
        print(f"   ❌ lines {failure.start_line}-{failure.end_line}: {failure.error}")
    if report.stage_outcomes:
        print(
            f"Stage runs: {len(report.stage_outcomes)} "
            f"({len(report.failed_stages)} failed)"
        )
        for outcome in report.failed_stages:
            print(f"   ❌ {outcome.stage.value} {outcome.chunk_id}: {outcome.error}")


# =============================================================================
# Commands
# =============================================================================


async def show_status(args: argparse.Namespace, store: ChunkStore) -> None:
    state = await ProcessingStateManager(store).get_state()
    chunks = await store.list_chunks()
    completed = sum(1 for c in chunks if c.completed)

    print("\n" + "=" * 60)
    print("📚 PROCESSING STATUS")
    print("=" * 60)
    print(f"Position: {state.current_position}/{state.total_lines} lines")
    print(f"Progress: {progress_percent(state):.1f}%")
    if state.last_processed_date:
        print(f"Last processed: {state.last_processed_date.strftime('%Y-%m-%d %H:%M')}")
    if state.is_processing:
        print("🔄 A step is marked as in progress")
    if state.error:
        print(f"❌ Last error: {state.error}")
    print(f"Chunks: {len(chunks)} ({completed} completed)")


async def init_state(args: argparse.Namespace, store: ChunkStore) -> None:
    document = await load_source(args)
    state = await ProcessingStateManager(store).initialize(document.total_lines)
    print(f"✅ Processing state: {state.current_position}/{state.total_lines} lines")


async def reset_state(args: argparse.Namespace, store: ChunkStore) -> None:
    document = await load_source(args)
    state = await ProcessingStateManager(store).reset(document.total_lines)
    print(f"🔄 Cursor reset to line 0 of {state.total_lines}")
    if args.clear_chunks:
        removed = await store.clear_chunks()
        print(f"🗑️  Removed {removed} chunks")


async def list_chunks(args: argparse.Namespace, store: ChunkStore) -> None:
    if args.format == "json":
        print(await export_chunks_json(store))
        return
    chunks = await store.list_chunks()
    if not chunks:
        print("📭 No chunks processed yet")
        return
    print(f"\nShowing {len(chunks)} chunks\n{'─' * 60}")
    for chunk in chunks:
        print(format_chunk(chunk))
        print()


async def complete_chunk(args: argparse.Namespace, store: ChunkStore) -> None:
    chunk = await mark_chunk_completed(store, args.chunk_id)
    print(f"✅ Marked {chunk.id} as completed")


async def export_catalog(args: argparse.Namespace, store: ChunkStore) -> None:
    count = await export_chunks(store, args.path)
    print(f"💾 Exported {count} chunks to {args.path}")


async def run_pipeline(args: argparse.Namespace, store: ChunkStore) -> None:
    """Commands that need the source document and an AI backend."""
    document = await load_source(args)
    async with open_backend(args) as backend:
        orchestrator = StageOrchestrator(backend, store)
        processor = RangeProcessor(orchestrator, ProcessingStateManager(store), document)

        if args.command == "next":
            chunk, state = await processor.process_next_chunk(args.chunk_size)
            print(format_chunk(chunk))
            print(f"\n📍 Position: {state.current_position}/{state.total_lines} "
                  f"({progress_percent(state):.1f}%)")

        elif args.command == "range":
            await processor.process_range(
                args.start, args.end, args.chunk_size, args.delay
            )
            print_report(processor.last_report)

        elif args.command == "all-stages":
            report = await processor.process_all_stages(
                args.start, args.end, args.chunk_size, args.delay
            )
            print_report(report)


async def run_chunk_stage(args: argparse.Namespace, store: ChunkStore) -> None:
    """Single-chunk stage commands."""
    stage = COMMAND_STAGES[args.command]
    rewrite_options = None
    if stage == ProcessingStage.CHUNK_REWRITE:
        rewrite_options = RewriteOptions(
            focus=args.focus,
            difficulty=args.difficulty,
            question_types=args.question_types or [],
            enhance_examples=args.enhance_examples,
            simplify_content=args.simplify,
        )
    async with open_backend(args) as backend:
        outcome = await StageOrchestrator(backend, store).run_stage(
            stage, args.chunk_id, rewrite_options=rewrite_options
        )
    print_outcome(outcome)


COMMAND_STAGES = {
    "enhance": ProcessingStage.THEORY_ENHANCEMENT,
    "questions": ProcessingStage.QUESTION_GENERATION,
    "tasks": ProcessingStage.TASK_GENERATION,
    "rewrite": ProcessingStage.CHUNK_REWRITE,
}

COMMANDS = {
    "status": show_status,
    "init": init_state,
    "reset": reset_state,
    "list": list_chunks,
    "complete": complete_chunk,
    "export": export_catalog,
    "next": run_pipeline,
    "range": run_pipeline,
    "all-stages": run_pipeline,
    **{name: run_chunk_stage for name in COMMAND_STAGES},
}


# =============================================================================
# CLI Setup
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        description="Extract learning content from a study document with an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--backend",
        choices=[b.value for b in BackendName],
        default=None,
        help=f"AI backend (default: {settings.LLM_BACKEND})",
    )
    parser.add_argument("--model", help="Model override for the selected backend")
    parser.add_argument(
        "--source",
        metavar="PATH",
        help=f"Source document (default: {settings.SOURCE_DOCUMENT_PATH})",
    )
    parser.add_argument(
        "--store",
        choices=["redis", "memory"],
        default="redis",
        help="Chunk storage; 'memory' is a throwaway dry run (default: redis)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("status", help="Show cursor, progress and catalog size")
    subparsers.add_parser("init", help="Record the source document's line count")

    reset_parser = subparsers.add_parser("reset", help="Move the cursor back to line 0")
    reset_parser.add_argument(
        "--clear-chunks", action="store_true", help="Also delete every stored chunk"
    )

    next_parser = subparsers.add_parser("next", help="Process the chunk at the cursor")
    add_chunk_size_arg(next_parser)

    for name, help_text in (
        ("range", "Extract theory for a line range"),
        ("all-stages", "Extract a range, then enhance and generate questions/tasks"),
    ):
        range_parser = subparsers.add_parser(name, help=help_text)
        range_parser.add_argument("start", type=int, help="First line (0-based)")
        range_parser.add_argument("end", type=int, help="End line (exclusive)")
        add_chunk_size_arg(range_parser)
        range_parser.add_argument(
            "--delay",
            type=float,
            default=None,
            help=f"Seconds between AI calls "
            f"(default: {processing_settings.PROCESSING_DELAY_SECONDS})",
        )

    for name, stage in COMMAND_STAGES.items():
        stage_parser = subparsers.add_parser(name, help=f"Run {stage.value} on one chunk")
        stage_parser.add_argument("chunk_id", help="Chunk id (see list)")

    rewrite_parser = subparsers.choices["rewrite"]
    rewrite_parser.add_argument("--focus", choices=[f.value for f in RewriteFocus])
    rewrite_parser.add_argument("--difficulty", choices=[d.value for d in Difficulty])
    rewrite_parser.add_argument(
        "--question-types",
        nargs="+",
        choices=[t.value for t in QuestionType],
        help="Question types to include",
    )
    rewrite_parser.add_argument(
        "--enhance-examples", action="store_true", help="Improve code examples"
    )
    rewrite_parser.add_argument(
        "--simplify", action="store_true", help="Simplify content for beginners"
    )

    complete_parser = subparsers.add_parser("complete", help="Mark a chunk as completed")
    complete_parser.add_argument("chunk_id", help="Chunk id (see list)")

    list_parser = subparsers.add_parser("list", help="List processed chunks")
    list_parser.add_argument(
        "--format",
        "-f",
        choices=["summary", "json"],
        default="summary",
        help="Output format (default: summary)",
    )

    export_parser = subparsers.add_parser("export", help="Export all chunks as JSON")
    export_parser.add_argument("path", help="Output file")

    return parser


def add_chunk_size_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help=f"Lines per chunk (default: {processing_settings.CHUNK_SIZE_LINES})",
    )


async def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.debug or settings.DEBUG)

    store = create_store(args)
    try:
        await COMMANDS[args.command](args, store)
    except ContentProcessorError as e:
        print(f"\n❌ {e}")
        sys.exit(1)
    finally:
        await store.close()
        await close_redis_pool()


if __name__ == "__main__":
    asyncio.run(main())
