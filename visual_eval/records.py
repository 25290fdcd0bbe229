"""Value records passed between the generate, render, judge and tracking steps."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GenerationRequest:
    """Natural-language description of the webpage to generate."""
    input: str


@dataclass(frozen=True)
class GenerationResult:
    """Raw HTML returned by the generator."""
    output: str


@dataclass(frozen=True)
class RenderedImage:
    """Base64-encoded screenshot of rendered HTML."""
    data: str
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class DatasetExample:
    """An input/reference-output pair stored in the remote dataset."""
    input: GenerationRequest
    reference_output: GenerationResult
    id: Optional[int] = None

    def to_row(self) -> dict:
        """Flatten to the column layout used on the Hub and in JSONL files."""
        return {
            "id": self.id,
            "input": self.input.input,
            "reference_output": self.reference_output.output,
        }

    @classmethod
    def from_row(cls, row: dict) -> "DatasetExample":
        missing = [key for key in ("input", "reference_output") if key not in row]
        if missing:
            raise ValueError(f"Dataset row is missing column(s): {', '.join(missing)}")
        return cls(
            input=GenerationRequest(input=row["input"]),
            reference_output=GenerationResult(output=row["reference_output"]),
            id=row.get("id"),
        )


@dataclass(frozen=True)
class EvaluationScore:
    """Judge verdict, normalised to [0.0, 1.0]."""
    key: str
    score: float
    comment: str = ""

    @property
    def raw_score(self) -> int:
        """The 0-10 integer the judge reported."""
        return round(self.score * 10)


@dataclass
class ExampleRun:
    """One example after generation and evaluation."""
    example: DatasetExample
    result: GenerationResult
    score: EvaluationScore
    image: Optional[RenderedImage] = None
