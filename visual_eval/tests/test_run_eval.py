import json
import os
import tempfile
import unittest
from unittest import mock

from visual_eval.records import (
    DatasetExample,
    EvaluationScore,
    ExampleRun,
    GenerationRequest,
    GenerationResult,
    RenderedImage,
)
from visual_eval.run_eval import RecordingRenderer, run_and_score, save_example_artifacts


def make_examples(*prompts):
    return [
        DatasetExample(
            input=GenerationRequest(input=p),
            reference_output=GenerationResult(output=f"<!DOCTYPE html><p>{p}</p>"),
            id=i,
        )
        for i, p in enumerate(prompts)
    ]


class TestRunAndScore(unittest.TestCase):
    def test_sequential_generate_then_evaluate(self):
        calls = []

        def generate(request):
            calls.append(("generate", request.input))
            return GenerationResult(output=f"<!DOCTYPE html><h1>{request.input}</h1>")

        def evaluate(request, result):
            calls.append(("evaluate", request.input))
            return EvaluationScore(key="visual_fidelity", score=0.7, comment="7")

        forwarded = []
        runs = run_and_score(
            make_examples("a tax calculator", "a blog"),
            generate,
            evaluate,
            on_result=lambda i, run: forwarded.append((i, run.score.score)),
        )

        self.assertEqual(calls, [
            ("generate", "a tax calculator"),
            ("evaluate", "a tax calculator"),
            ("generate", "a blog"),
            ("evaluate", "a blog"),
        ])
        self.assertEqual(forwarded, [(0, 0.7), (1, 0.7)])
        self.assertEqual(len(runs), 2)
        self.assertIn("a blog", runs[1].result.output)

    def test_evaluate_receives_generated_result(self):
        evaluate = mock.Mock(return_value=EvaluationScore(key="k", score=1.0))
        result = GenerationResult(output="<!DOCTYPE html>")
        run_and_score(make_examples("x"), mock.Mock(return_value=result), evaluate)
        evaluate.assert_called_once_with(GenerationRequest(input="x"), result)

    def test_failure_propagates_and_stops(self):
        generate = mock.Mock(side_effect=[GenerationResult(output="a"), RuntimeError("boom")])
        evaluate = mock.Mock(return_value=EvaluationScore(key="k", score=0.0))
        with self.assertRaises(RuntimeError):
            run_and_score(make_examples("x", "y", "z"), generate, evaluate)
        self.assertEqual(generate.call_count, 2)
        self.assertEqual(evaluate.call_count, 1)

    def test_empty_dataset(self):
        self.assertEqual(run_and_score([], mock.Mock(), mock.Mock()), [])


class TestRecordingRenderer(unittest.TestCase):
    def test_remembers_last_image(self):
        image = RenderedImage(data="eA==")
        renderer = RecordingRenderer(render=mock.Mock(return_value=image))
        self.assertIsNone(renderer.last_image)
        self.assertIs(renderer("<p>x</p>"), image)
        self.assertIs(renderer.last_image, image)


class TestSaveExampleArtifacts(unittest.TestCase):
    def test_writes_html_screenshot_and_judgment(self):
        example = make_examples("a tax calculator")[0]
        run = ExampleRun(
            example=example,
            result=GenerationResult(output="<!DOCTYPE html><p>tax</p>"),
            score=EvaluationScore(key="visual_fidelity", score=0.8, comment="8"),
            image=RenderedImage(data="eA=="),
        )
        with tempfile.TemporaryDirectory() as tmp:
            save_example_artifacts(tmp, 0, run)
            with open(os.path.join(tmp, "0_generation.html"), encoding="utf-8") as f:
                self.assertEqual(f.read(), "<!DOCTYPE html><p>tax</p>")
            with open(os.path.join(tmp, "screenshots", "0.png"), "rb") as f:
                self.assertEqual(f.read(), b"x")
            with open(os.path.join(tmp, "0_judgment.json"), encoding="utf-8") as f:
                judgment = json.load(f)
        self.assertEqual(judgment["raw_score"], 8)
        self.assertEqual(judgment["score"], 0.8)
        self.assertEqual(judgment["input"], "a tax calculator")


if __name__ == "__main__":
    unittest.main()
