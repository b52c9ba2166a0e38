"""
Unit tests for the operator CLI (scripts/run_processing.py).

The script is loaded from its file path; commands run against the
in-memory store and a scripted backend.
"""

import importlib.util
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from content_processor.enums import Difficulty, QuestionType, RewriteFocus
from tests.fakes import FakeBackend, extraction_response

SCRIPT = Path(__file__).resolve().parents[3] / "scripts" / "run_processing.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("run_processing", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def source_file(tmp_path) -> Path:
    path = tmp_path / "notes.md"
    path.write_text("\n".join(f"line {i}" for i in range(120)), encoding="utf-8")
    return path


def parse(cli, *argv: str):
    return cli.create_parser().parse_args(list(argv))


class TestParser:
    def test_range_arguments(self, cli) -> None:
        args = parse(cli, "--store", "memory", "range", "0", "500", "--chunk-size", "50")

        assert args.command == "range"
        assert (args.start, args.end, args.chunk_size, args.delay) == (0, 500, 50, None)
        assert args.store == "memory"

    def test_rewrite_options(self, cli) -> None:
        args = parse(
            cli,
            "rewrite",
            "chunk_0_100_1",
            "--focus",
            "questions",
            "--difficulty",
            "hard",
            "--question-types",
            "mcq",
            "code",
            "--simplify",
        )

        assert args.chunk_id == "chunk_0_100_1"
        assert RewriteFocus(args.focus) == RewriteFocus.QUESTIONS
        assert Difficulty(args.difficulty) == Difficulty.HARD
        assert [QuestionType(t) for t in args.question_types] == [
            QuestionType.MCQ,
            QuestionType.CODE,
        ]
        assert args.simplify and not args.enhance_examples

    def test_invalid_backend_rejected(self, cli) -> None:
        with pytest.raises(SystemExit):
            parse(cli, "--backend", "mainframe", "status")


class TestCommands:
    @pytest.mark.asyncio
    async def test_next_then_status(self, cli, memory_store, source_file, capsys) -> None:
        backend = FakeBackend([extraction_response(("Hooks",))])
        args = parse(cli, "--source", str(source_file), "next", "--chunk-size", "100")

        with patch.object(cli, "get_backend", return_value=backend):
            await cli.COMMANDS[args.command](args, memory_store)
        await cli.COMMANDS["status"](parse(cli, "status"), memory_store)

        output = capsys.readouterr().out
        assert "Hooks" in output
        assert "Position: 100/120" in output
        assert len(await memory_store.list_chunks()) == 1

    @pytest.mark.asyncio
    async def test_questions_failure_reported(
        self, cli, memory_store, sample_chunk, capsys
    ) -> None:
        await memory_store.save_chunk(sample_chunk)
        backend = FakeBackend(["not json"])
        args = parse(cli, "questions", sample_chunk.id)

        with patch.object(cli, "get_backend", return_value=backend):
            await cli.COMMANDS[args.command](args, memory_store)

        assert "question-generation failed" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_complete_and_export(
        self, cli, memory_store, sample_chunk, tmp_path
    ) -> None:
        await memory_store.save_chunk(sample_chunk)
        path = tmp_path / "out" / "chunks.json"

        await cli.COMMANDS["complete"](parse(cli, "complete", sample_chunk.id), memory_store)
        await cli.COMMANDS["export"](parse(cli, "export", str(path)), memory_store)

        exported = json.loads(path.read_text(encoding="utf-8"))
        assert exported[sample_chunk.id]["completed"] is True

    @pytest.mark.asyncio
    async def test_reset_clears_chunks(
        self, cli, memory_store, sample_chunk, source_file
    ) -> None:
        await memory_store.save_chunk(sample_chunk)
        args = parse(cli, "--source", str(source_file), "reset", "--clear-chunks")

        await cli.COMMANDS[args.command](args, memory_store)

        assert await memory_store.list_chunks() == []
        state = await memory_store.get_state()
        assert (state.current_position, state.total_lines) == (0, 120)
