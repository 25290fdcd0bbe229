"""
Run the HTML generator over a dataset and score every output with the vision judge.

For each example: generate HTML from the request, render it in headless Chromium,
ask the judge model for a 0-10 rating of the screenshot, and log the normalised
score to W&B. Examples are processed one at a time.

Usage:
    # Evaluate against a local JSONL dataset
    python -m visual_eval.run_eval \
        --test-data data/html-generation-20261019-153000.jsonl \
        --output-dir eval_results/baseline

    # Evaluate against a dataset on the Hugging Face Hub
    python -m visual_eval.run_eval \
        --hf-dataset your-username/html-generation-20261019-153000 \
        --model "openai/gpt-4o-mini" \
        --judge-model "openai/gpt-4o" \
        --limit 3

    # Without W&B
    WANDB_MODE=disabled python -m visual_eval.run_eval --test-data ...
"""

import argparse
import json
import os
import sys
from typing import Callable, Optional, Sequence

from visual_eval.dataset import load_jsonl, load_remote_dataset
from visual_eval.eval_config import (
    DEFAULT_GENERATOR_MODEL,
    DEFAULT_JUDGE_MODEL,
    HF_TOKEN,
    WANDB_PROJECT,
    make_openai_client,
)
from visual_eval.generate_html import generate_html
from visual_eval.html_metrics import compute_html_stats
from visual_eval.judge import evaluate_prediction
from visual_eval.records import (
    DatasetExample,
    EvaluationScore,
    ExampleRun,
    GenerationRequest,
    GenerationResult,
    RenderedImage,
)
from visual_eval.render import render_html, save_rendered_image
from visual_eval.report import generate_report
from visual_eval.tracking import WandbTracker, make_run_name

GenerateFn = Callable[[GenerationRequest], GenerationResult]
EvaluateFn = Callable[[GenerationRequest, GenerationResult], EvaluationScore]


def run_and_score(
    examples: Sequence[DatasetExample],
    generate: GenerateFn,
    evaluate: EvaluateFn,
    on_result: Optional[Callable[[int, ExampleRun], None]] = None,
) -> list[ExampleRun]:
    """Generate and score each example in order. Errors propagate."""
    runs = []
    for i, example in enumerate(examples):
        result = generate(example.input)
        score = evaluate(example.input, result)
        run = ExampleRun(example=example, result=result, score=score)
        runs.append(run)
        if on_result is not None:
            on_result(i, run)
    return runs


class RecordingRenderer:
    """Renderer that remembers the last screenshot so it can be saved and logged."""

    def __init__(self, render: Callable[[str], RenderedImage] = render_html):
        self._render = render
        self.last_image: Optional[RenderedImage] = None

    def __call__(self, html: str) -> RenderedImage:
        self.last_image = self._render(html)
        return self.last_image


def save_example_artifacts(output_dir: str, example_id, run: ExampleRun) -> None:
    """Save generated HTML, screenshot and judgment for human review."""
    with open(os.path.join(output_dir, f"{example_id}_generation.html"), "w", encoding="utf-8") as f:
        f.write(run.result.output)
    if run.image is not None:
        save_rendered_image(run.image, os.path.join(output_dir, "screenshots", f"{example_id}.png"))
    judgment = {
        "id": example_id,
        "input": run.example.input.input,
        "key": run.score.key,
        "score": run.score.score,
        "raw_score": run.score.raw_score,
        "comment": run.score.comment,
    }
    with open(os.path.join(output_dir, f"{example_id}_judgment.json"), "w", encoding="utf-8") as f:
        json.dump(judgment, f, indent=2)


def main():
    parser = argparse.ArgumentParser(
        description="Generate HTML for each dataset example and score it with a vision judge"
    )
    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument(
        "--test-data",
        type=str,
        help="Path to a local JSONL dataset (e.g. data/html-generation-20261019-153000.jsonl)",
    )
    source_group.add_argument(
        "--hf-dataset",
        type=str,
        help="Hugging Face dataset repo id (e.g. your-username/html-generation-20261019-153000)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_GENERATOR_MODEL,
        help=f"Generator model ID (default: {DEFAULT_GENERATOR_MODEL})",
    )
    parser.add_argument(
        "--judge-model",
        type=str,
        default=DEFAULT_JUDGE_MODEL,
        help=f"Vision judge model ID (default: {DEFAULT_JUDGE_MODEL})",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="eval_results",
        help="Directory to save generated HTML, screenshots and judgments",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only evaluate the first N examples",
    )
    parser.add_argument(
        "--wandb-project",
        type=str,
        default=WANDB_PROJECT,
        help=f"W&B project name (default: {WANDB_PROJECT})",
    )
    args = parser.parse_args()

    sys.stdout.reconfigure(line_buffering=True)

    try:
        client = make_openai_client()
    except RuntimeError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if args.test_data:
        examples = load_jsonl(args.test_data)
        dataset_name = os.path.splitext(os.path.basename(args.test_data))[0]
    else:
        examples = load_remote_dataset(args.hf_dataset, token=HF_TOKEN)
        dataset_name = args.hf_dataset
    total_available = len(examples)
    if args.limit:
        examples = examples[: args.limit]

    print(f"Evaluating {len(examples)} of {total_available} examples from {dataset_name}")
    print(f"Generator: {args.model}")
    print(f"Judge: {args.judge_model}")
    print(f"Output: {args.output_dir}")
    print()

    os.makedirs(os.path.join(args.output_dir, "screenshots"), exist_ok=True)

    tracker = WandbTracker(
        project=args.wandb_project,
        run_name=make_run_name(args.model, dataset_name),
        config={
            "model": args.model,
            "judge_model": args.judge_model,
            "dataset": dataset_name,
            "num_examples": len(examples),
            "total_available": total_available,
        },
    )
    print(f"W&B run: {tracker.url}")
    print()

    renderer = RecordingRenderer()

    def generate(request: GenerationRequest) -> GenerationResult:
        return generate_html(client, args.model, request)

    def evaluate(request: GenerationRequest, result: GenerationResult) -> EvaluationScore:
        return evaluate_prediction(client, args.judge_model, request, result, render=renderer)

    def on_result(i: int, run: ExampleRun) -> None:
        run.image = renderer.last_image
        example_id = run.example.id if run.example.id is not None else i
        print(f"[{i + 1}/{len(examples)}] ID={example_id}: {run.example.input.input[:60]}")
        print(f"  Score: {run.score.raw_score}/10")
        save_example_artifacts(args.output_dir, example_id, run)
        tracker.log_example(i, run, image=run.image, stats=compute_html_stats(run.result.output))

    runs = run_and_score(examples, generate, evaluate, on_result=on_result)
    tracker.finish(runs)

    report = generate_report(runs, args.model, args.judge_model, dataset_name)
    report_path = os.path.join(args.output_dir, "report.md")
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(report)
    print(f"\nReport saved to {report_path}")

    if runs:
        avg = sum(r.score.score for r in runs) / len(runs)
        print(f"\n{'='*50}")
        print(f"SUMMARY: Average Score = {avg * 10:.1f} / 10")
        print(f"{'='*50}")

    print(f"\nW&B run: {tracker.url}")


if __name__ == "__main__":
    main()
