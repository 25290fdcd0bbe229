"""
Experiment tracking on Weights & Biases.

One W&B run per evaluation experiment. Each example logs its score, a visual
card (request, screenshot, judge reply) and static HTML metrics; the run
summary carries the aggregate score.
"""

import html as html_lib
import time
from typing import Optional, Sequence

import wandb

from visual_eval.html_metrics import HtmlStats
from visual_eval.records import ExampleRun, RenderedImage

# HTML card for W&B: request on top, screenshot below, judge reply at the bottom
WANDB_CARD_TEMPLATE = """\
<div style="font-family: system-ui, -apple-system, sans-serif; width: 100%; box-sizing: border-box;">
  <div style="background: #f8f9fa; border-radius: 8px; padding: 16px; margin-bottom: 16px;">
    <div style="font-size: 14px; color: #666; margin-bottom: 4px;">Example {index} &bull; Score: {raw_score}/10</div>
    <div style="font-size: 16px; font-weight: 600; color: #1a1a1a;">{request}</div>
  </div>
  <img src="{image_url}" style="width: 100%; height: auto; border: 1px solid #ddd; border-radius: 6px; display: block;" />
  <div style="background: #fafafa; border-radius: 6px; padding: 12px; font-size: 14px; margin-top: 16px;">
    <span style="font-weight: 600; color: #555;">Judge:</span> {comment}
  </div>
</div>"""

TABLE_COLUMNS = ["id", "input", "score", "raw_score", "comment", "output_chars"]


def make_run_name(model: str, dataset_name: str) -> str:
    """Run name from the generator model and dataset, e.g. gpt-4o-mini-html-generation-...-1019-1530."""
    model_short = model.split("/")[-1]
    dataset_short = dataset_name.split("/")[-1]
    return f"{model_short}-{dataset_short}-{time.strftime('%m%d-%H%M')}"


def build_wandb_card(index: int, run: ExampleRun, image: Optional[RenderedImage]) -> wandb.Html:
    card = WANDB_CARD_TEMPLATE.format(
        index=index,
        raw_score=run.score.raw_score,
        request=html_lib.escape(run.example.input.input[:300]),
        image_url=image.data_url if image else "",
        comment=html_lib.escape(run.score.comment[:500]) or "—",
    )
    return wandb.Html(card)


class WandbTracker:
    """Forwards scores of one evaluation run to W&B."""

    def __init__(self, project: str, run_name: str, config: Optional[dict] = None):
        self.run = wandb.init(project=project, name=run_name, config=config or {})
        self.rows: list[list] = []

    @property
    def url(self) -> Optional[str]:
        return getattr(self.run, "url", None)

    def log_example(
        self,
        index: int,
        run: ExampleRun,
        image: Optional[RenderedImage] = None,
        stats: Optional[HtmlStats] = None,
    ) -> None:
        payload = {
            run.score.key: run.score.score,
            "example_idx": index,
            f"examples/{index}": build_wandb_card(index, run, image),
        }
        if stats is not None:
            payload.update(stats.as_log_dict())
        wandb.log(payload)
        self.rows.append([
            run.example.id,
            run.example.input.input,
            run.score.score,
            run.score.raw_score,
            run.score.comment,
            len(run.result.output),
        ])

    def finish(self, runs: Sequence[ExampleRun]) -> None:
        scores = [r.score.score for r in runs]
        if scores:
            key = runs[0].score.key
            wandb.summary[f"avg_{key}"] = round(sum(scores) / len(scores), 4)
            wandb.summary[f"min_{key}"] = min(scores)
            wandb.summary[f"max_{key}"] = max(scores)
        wandb.summary["num_examples"] = len(runs)
        if self.rows:
            wandb.log({"results": wandb.Table(columns=TABLE_COLUMNS, data=self.rows)})
        wandb.finish()
