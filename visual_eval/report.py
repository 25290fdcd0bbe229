"""Markdown report for a finished evaluation run."""

import time
from typing import Sequence

from visual_eval.records import ExampleRun


def _cell(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) > limit:
        text = text[:limit] + "..."
    return text.replace("|", "\\|")


def generate_report(
    runs: Sequence[ExampleRun],
    model: str,
    judge_model: str,
    dataset_name: str,
) -> str:
    """Generate a markdown report summarizing all evaluation results."""
    lines = [
        "# HTML Generation Vision Evaluation",
        "",
        f"**Generator**: `{model}`",
        f"**Judge**: `{judge_model}`",
        f"**Dataset**: `{dataset_name}`",
        f"**Date**: {time.strftime('%Y-%m-%d %H:%M')}",
        f"**Examples**: {len(runs)}",
        "",
    ]

    if runs:
        avg = sum(r.score.score for r in runs) / len(runs)
        lines.append(f"**Average Score**: {avg * 10:.1f} / 10")
        lines.append("")

    lines.append("## Results")
    lines.append("")
    lines.append("| # | ID | Request | Score | Judge | Screenshot |")
    lines.append("|---|----|---------|-------|-------|------------|")

    for i, run in enumerate(runs):
        example_id = run.example.id if run.example.id is not None else i
        screenshot = f"![screenshot](screenshots/{example_id}.png)"
        lines.append(
            f"| {i + 1} | {example_id} | {_cell(run.example.input.input, 50)} "
            f"| {run.score.raw_score}/10 | {_cell(run.score.comment, 80)} | {screenshot} |"
        )

    lines.append("")
    return "\n".join(lines)
