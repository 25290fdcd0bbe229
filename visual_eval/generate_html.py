"""
Generator step: turn a natural-language page description into a full HTML document.
"""

import re

from openai import OpenAI

from visual_eval.eval_config import GENERATOR_MAX_TOKENS, GENERATOR_TEMPERATURE
from visual_eval.records import GenerationRequest, GenerationResult

DOCTYPE = "<!DOCTYPE html>"
_DOCUMENT_START = re.compile(r"<!doctype|<html", re.IGNORECASE)

GENERATION_PROMPT = """\
You are an expert front-end developer. Build the following webpage:

{input}

Requirements:
- Return ONE complete, self-contained HTML document starting with <!DOCTYPE html>.
- Inline all CSS and JavaScript. Tailwind via <script src="https://cdn.tailwindcss.com"></script> is allowed.
- Do not reference local files or images that do not exist.
- Respond with the HTML only. No explanations, no markdown."""

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body>
{content}
</body>
</html>
"""


def format_generation_prompt(request: GenerationRequest) -> str:
    return GENERATION_PROMPT.format(input=request.input)


def extract_code(response_text: str) -> str:
    """Extract HTML from the model response.

    Uses the contents of triple-backtick blocks when present, otherwise the
    whole (stripped) response. A block cut off before its closing fence runs
    to the end of the reply.
    """
    pattern = r"```(?:html)?\s*\n(.*?)(?:```|\Z)"
    matches = [m.strip() for m in re.findall(pattern, response_text, re.DOTALL) if m.strip()]
    if matches:
        return "\n".join(matches)
    return response_text.strip()


def wrap_in_html(code: str, title: str = "Generated Page") -> str:
    """Return a full HTML document that starts with a doctype declaration.

    Anything before the first <!doctype or <html tag (model chatter) is dropped.
    """
    match = _DOCUMENT_START.search(code)
    if match is None:
        return HTML_TEMPLATE.format(title=title, content=code)
    document = code[match.start():]
    if document[:9].lower() == "<!doctype":
        return document
    return f"{DOCTYPE}\n{document}"


def generate_html(client: OpenAI, model: str, request: GenerationRequest) -> GenerationResult:
    """Ask the generator model for a page and parse its reply to raw HTML."""
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": format_generation_prompt(request)}],
        max_tokens=GENERATOR_MAX_TOKENS,
        temperature=GENERATOR_TEMPERATURE,
    )
    content = response.choices[0].message.content or ""
    return GenerationResult(output=wrap_in_html(extract_code(content), title=request.input[:60]))
