"""
Vision judge: score how faithfully a rendered page matches the original request.

The screenshot and the request text go to a vision-capable model in a single
multimodal message. The model answers with an integer from 0 to 10, which is
normalised to [0.0, 1.0].

Replies that carry no integer, or an integer outside 0-10, raise
JudgeResponseError instead of producing a score.
"""

import re
from collections.abc import Callable, Mapping

from openai import OpenAI

from visual_eval.eval_config import JUDGE_MAX_TOKENS, JUDGE_TEMPERATURE, MAX_SCORE, SCORE_KEY
from visual_eval.records import EvaluationScore, GenerationRequest, GenerationResult, RenderedImage
from visual_eval.render import render_html

JUDGE_PROMPT = """\
You are grading a webpage that was generated from a written request.
The attached image is a browser screenshot of the generated page.

Request: {input}

Rate from 0 to 10 how faithfully the page in the screenshot fulfils the request.
0 means blank, broken or unrelated; 10 means it fully delivers what was asked
with a clean, usable layout.

Respond with a single integer between 0 and 10 and nothing else."""

_INTEGER = re.compile(r"[-+]?\d+")


class JudgeResponseError(ValueError):
    """The judge reply could not be turned into a 0-10 score."""


def build_judge_content(request: GenerationRequest, image: RenderedImage) -> list[dict]:
    """Build the multimodal content parts for the judge message."""
    return [
        {"type": "text", "text": JUDGE_PROMPT.format(input=request.input)},
        {"type": "image_url", "image_url": {"url": image.data_url}},
    ]


def parse_score(text: str | None) -> int:
    """Parse the first integer in the judge reply (base 10)."""
    match = _INTEGER.search(text or "")
    if match is None:
        raise JudgeResponseError(f"Judge reply contains no integer score: {text!r}")
    value = int(match.group(), 10)
    if not 0 <= value <= MAX_SCORE:
        raise JudgeResponseError(f"Judge score {value} is outside 0-{MAX_SCORE}: {text!r}")
    return value


def prediction_output(prediction) -> str:
    """Return the HTML held by a prediction, refusing anything that is not text."""
    if isinstance(prediction, Mapping):
        output = prediction.get("output")
    else:
        output = getattr(prediction, "output", None)
    if not isinstance(output, str):
        raise TypeError(
            f"Prediction output must be an HTML string, got {type(output).__name__}"
        )
    return output


def evaluate_prediction(
    client: OpenAI,
    judge_model: str,
    request: GenerationRequest,
    prediction: GenerationResult | Mapping,
    render: Callable[[str], RenderedImage] = render_html,
) -> EvaluationScore:
    """Render the prediction, ask the judge for a score and normalise it."""
    html = prediction_output(prediction)
    image = render(html)
    return judge_image(client, judge_model, request, image)


def judge_image(
    client: OpenAI,
    judge_model: str,
    request: GenerationRequest,
    image: RenderedImage,
) -> EvaluationScore:
    """Score an already-rendered screenshot against the request."""
    response = client.chat.completions.create(
        model=judge_model,
        messages=[{"role": "user", "content": build_judge_content(request, image)}],
        max_tokens=JUDGE_MAX_TOKENS,
        temperature=JUDGE_TEMPERATURE,
    )
    reply = (response.choices[0].message.content or "").strip()
    value = parse_score(reply)
    return EvaluationScore(key=SCORE_KEY, score=value / MAX_SCORE, comment=reply)
