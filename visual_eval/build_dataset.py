"""
Build an evaluation dataset: generate reference HTML for a list of page
descriptions and upload the pairs to the Hugging Face Hub.

The dataset name embeds the generation timestamp, so every build creates a new
dataset repo. A JSONL copy is written under --data-dir.

Usage:
    python -m visual_eval.build_dataset --namespace your-username

    # Custom prompts, one per line
    python -m visual_eval.build_dataset --prompts-file prompts.txt --namespace your-username

    # Local JSONL only, no upload
    python -m visual_eval.build_dataset --local-only
"""

import argparse
import os
import sys

from visual_eval.dataset import (
    DEFAULT_PROMPTS,
    build_examples,
    create_remote_dataset,
    make_dataset_name,
    write_jsonl,
)
from visual_eval.eval_config import (
    DATA_DIR,
    DATASET_PREFIX,
    DEFAULT_GENERATOR_MODEL,
    HF_NAMESPACE,
    HF_TOKEN,
    make_openai_client,
)
from visual_eval.generate_html import generate_html
from visual_eval.records import GenerationRequest


def load_prompts(prompts_file: str | None) -> list[str]:
    """Read one prompt per non-empty line, or fall back to the built-in list."""
    if not prompts_file:
        return list(DEFAULT_PROMPTS)
    with open(prompts_file, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def main():
    parser = argparse.ArgumentParser(description="Build and upload an HTML generation dataset")
    parser.add_argument(
        "--prompts-file",
        type=str,
        default=None,
        help="Text file with one page description per line (default: built-in prompts)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_GENERATOR_MODEL,
        help=f"Model used to generate the reference outputs (default: {DEFAULT_GENERATOR_MODEL})",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        default=DATASET_PREFIX,
        help=f"Dataset name prefix (default: {DATASET_PREFIX})",
    )
    parser.add_argument(
        "--namespace",
        type=str,
        default=HF_NAMESPACE,
        help="Hugging Face user or organization to create the dataset under",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=DATA_DIR,
        help=f"Directory for the local JSONL copy (default: {DATA_DIR})",
    )
    parser.add_argument("--private", action="store_true", help="Make the dataset repo private")
    parser.add_argument("--local-only", action="store_true", help="Skip the Hub upload")
    parser.add_argument("--yes", action="store_true", help="Upload without asking for confirmation")
    args = parser.parse_args()

    sys.stdout.reconfigure(line_buffering=True)

    try:
        client = make_openai_client()
    except RuntimeError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    prompts = load_prompts(args.prompts_file)
    dataset_name = make_dataset_name(args.prefix)
    print(f"Building dataset {dataset_name} with {len(prompts)} prompts using {args.model}")

    requests = [GenerationRequest(input=p) for p in prompts]
    results = []
    for i, request in enumerate(requests):
        print(f"[{i + 1}/{len(requests)}] {request.input[:60]}")
        result = generate_html(client, args.model, request)
        print(f"  Generated {len(result.output)} chars")
        results.append(result)

    examples = build_examples(requests, results)
    jsonl_path = os.path.join(args.data_dir, f"{dataset_name}.jsonl")
    write_jsonl(examples, jsonl_path)
    print(f"Saved {len(examples)} examples to {jsonl_path}")

    if args.local_only:
        return

    if not args.yes:
        response = input(f"Push dataset {dataset_name} to the Hugging Face Hub? (yes/no): ")
        if response.lower() not in ["yes", "y"]:
            print("Aborted.")
            return

    repo_id = create_remote_dataset(
        dataset_name,
        examples,
        namespace=args.namespace,
        private=args.private,
        token=HF_TOKEN,
    )
    print(f"\nDataset pushed to: https://huggingface.co/datasets/{repo_id}")
    print(f"Evaluate with: python -m visual_eval.run_eval --hf-dataset {repo_id}")


if __name__ == "__main__":
    main()
