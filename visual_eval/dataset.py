"""
Dataset step: store input/reference-output pairs on the Hugging Face Hub.

Each dataset gets a human-readable name that embeds the time it was generated,
e.g. ``html-generation-20261019-153000``. A JSONL copy is kept locally.
"""

import json
import os
from datetime import datetime
from typing import Iterable, Sequence

from datasets import Dataset, load_dataset
from huggingface_hub import HfApi

from visual_eval.eval_config import DATASET_PREFIX
from visual_eval.records import DatasetExample, GenerationRequest, GenerationResult

DEFAULT_PROMPTS = [
    "a tax calculator",
    "a landing page for a coffee shop with a menu and opening hours",
    "a personal portfolio page for a photographer",
    "a todo list app with add and delete buttons",
    "a pricing table with three subscription tiers",
]

DATASET_CARD = """---
license: mit
task_categories:
- text-generation
tags:
- code-generation
- html
- vision-evaluation
---

# {name}

Webpage descriptions paired with reference HTML generated for them.
Used to drive screenshot-based (vision judge) evaluation runs.

## Columns

- `id`: example index
- `input`: natural-language description of the page
- `reference_output`: reference HTML document

## Usage

```python
from datasets import load_dataset

dataset = load_dataset("{repo_id}", split="train")
print(dataset[0]["input"])
```
"""


def make_dataset_name(prefix: str = DATASET_PREFIX, when: datetime | None = None) -> str:
    """Dataset name with the generation timestamp embedded."""
    when = when or datetime.now()
    return f"{prefix}-{when.strftime('%Y%m%d-%H%M%S')}"


def build_examples(
    requests: Sequence[GenerationRequest],
    results: Sequence[GenerationResult],
) -> list[DatasetExample]:
    """Pair each request with its reference output."""
    if len(requests) != len(results):
        raise ValueError(
            f"Got {len(requests)} requests but {len(results)} reference outputs"
        )
    return [
        DatasetExample(input=req, reference_output=res, id=i)
        for i, (req, res) in enumerate(zip(requests, results))
    ]


def examples_to_dataset(examples: Iterable[DatasetExample]) -> Dataset:
    rows = [example.to_row() for example in examples]
    return Dataset.from_dict({
        "id": [row["id"] for row in rows],
        "input": [row["input"] for row in rows],
        "reference_output": [row["reference_output"] for row in rows],
    })


def dataset_to_examples(dataset: Iterable[dict]) -> list[DatasetExample]:
    return [DatasetExample.from_row(row) for row in dataset]


def write_jsonl(examples: Iterable[DatasetExample], output_path: str) -> None:
    """Write examples to a JSONL file, one row per line."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        for example in examples:
            f.write(json.dumps(example.to_row(), ensure_ascii=False) + "\n")


def load_jsonl(file_path: str) -> list[DatasetExample]:
    """Load examples from a JSONL file."""
    examples = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                examples.append(DatasetExample.from_row(json.loads(line)))
    return examples


def create_remote_dataset(
    name: str,
    examples: Sequence[DatasetExample],
    namespace: str | None = None,
    private: bool = False,
    token: str | None = None,
) -> str:
    """Create a dataset repo on the Hub holding the examples. Returns the repo id."""
    repo_id = f"{namespace}/{name}" if namespace else name
    dataset = examples_to_dataset(examples)
    dataset.push_to_hub(repo_id, private=private, token=token)
    upload_dataset_card(repo_id, name, token=token)
    return repo_id


def upload_dataset_card(repo_id: str, name: str, token: str | None = None) -> None:
    """Upload README.md for the dataset repo. Failure only warns; the data is already pushed."""
    api = HfApi(token=token)
    card = DATASET_CARD.format(name=name, repo_id=repo_id)
    try:
        api.upload_file(
            path_or_fileobj=card.encode(),
            path_in_repo="README.md",
            repo_id=repo_id,
            repo_type="dataset",
            token=token,
        )
    except Exception as e:
        print(f"WARNING: Could not create dataset card for {repo_id}: {e}")


def load_remote_dataset(
    repo_id: str,
    split: str = "train",
    token: str | None = None,
) -> list[DatasetExample]:
    """Fetch examples back from the Hub."""
    dataset = load_dataset(repo_id, split=split, token=token)
    return dataset_to_examples(dataset)
