"""Unit tests for deterministic stage logging."""

from __future__ import annotations

import io

from voicedesk.telemetry.logger import RunLogger


def test_run_logger_emits_sorted_sanitized_context() -> None:
    """Stage lines should carry level, stage, event, and sorted context tokens."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.log_stage_start("synthesize", voice="en-US-Journey-D", mode="proxy")
    run_logger.log_stage_complete("voices", count=3, note="two words")
    run_logger.log_stage_failure("synthesize", "UpstreamError")

    assert sink.getvalue().splitlines() == [
        "[phase] level=INFO stage=synthesize event=start mode=proxy voice=en-US-Journey-D",
        "[phase] level=INFO stage=voices event=complete count=3 note=two_words",
        "[phase] level=ERROR stage=synthesize event=failure error_type=UpstreamError",
    ]


def test_run_logger_respects_level() -> None:
    """Lines below the configured level should be dropped."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink, level="ERROR")

    run_logger.log_stage_start("voices")
    run_logger.log_stage_failure("voices", "NetworkError")

    assert sink.getvalue().splitlines() == [
        "[phase] level=ERROR stage=voices event=failure error_type=NetworkError",
    ]
