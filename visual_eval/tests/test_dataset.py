import os
import tempfile
import unittest
from datetime import datetime
from unittest import mock

from visual_eval.dataset import (
    DEFAULT_PROMPTS,
    build_examples,
    create_remote_dataset,
    dataset_to_examples,
    examples_to_dataset,
    load_jsonl,
    load_remote_dataset,
    make_dataset_name,
    write_jsonl,
)
from visual_eval.records import DatasetExample, GenerationRequest, GenerationResult


def sample_examples():
    requests = [GenerationRequest(input="a tax calculator"), GenerationRequest(input="a blog | home")]
    results = [
        GenerationResult(output="<!DOCTYPE html><html><body>Tax</body></html>"),
        GenerationResult(output="<!DOCTYPE html>\n<html>\n<body>Blog ünïcode</body>\n</html>"),
    ]
    return build_examples(requests, results)


class TestDatasetName(unittest.TestCase):
    def test_embeds_timestamp(self):
        name = make_dataset_name("html-generation", datetime(2026, 10, 19, 15, 30, 5))
        self.assertEqual(name, "html-generation-20261019-153005")

    def test_default_prompts_include_tax_calculator(self):
        self.assertIn("a tax calculator", DEFAULT_PROMPTS)


class TestBuildExamples(unittest.TestCase):
    def test_pairs_in_order_with_ids(self):
        examples = sample_examples()
        self.assertEqual([e.id for e in examples], [0, 1])
        self.assertEqual(examples[0].input.input, "a tax calculator")
        self.assertIn("Tax", examples[0].reference_output.output)

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            build_examples([GenerationRequest(input="x")], [])

    def test_row_missing_column(self):
        with self.assertRaises(ValueError):
            DatasetExample.from_row({"input": "x"})


class TestRoundTrip(unittest.TestCase):
    def test_hf_dataset_round_trip(self):
        examples = sample_examples()
        dataset = examples_to_dataset(examples)
        self.assertEqual(dataset.column_names, ["id", "input", "reference_output"])
        self.assertEqual(dataset_to_examples(dataset), examples)

    def test_jsonl_round_trip(self):
        examples = sample_examples()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "data", "set.jsonl")
            write_jsonl(examples, path)
            self.assertEqual(load_jsonl(path), examples)

    def test_upload_then_load_yields_same_pairs(self):
        examples = sample_examples()
        store = {}

        def fake_push(self, repo_id, private=False, token=None):
            store[repo_id] = self.to_list()

        def fake_load(repo_id, split="train", token=None):
            return examples_to_dataset(dataset_to_examples(store[repo_id]))

        with mock.patch("datasets.Dataset.push_to_hub", fake_push), \
                mock.patch("visual_eval.dataset.load_dataset", side_effect=fake_load), \
                mock.patch("visual_eval.dataset.HfApi") as hf_api:
            repo_id = create_remote_dataset("html-generation-20261019-153005", examples, namespace="me")
            loaded = load_remote_dataset(repo_id)

        self.assertEqual(repo_id, "me/html-generation-20261019-153005")
        self.assertEqual(loaded, examples)
        upload = hf_api.return_value.upload_file.call_args.kwargs
        self.assertEqual(upload["path_in_repo"], "README.md")
        self.assertEqual(upload["repo_type"], "dataset")
        self.assertEqual(upload["repo_id"], repo_id)


class TestRemoteDataset(unittest.TestCase):
    def test_card_failure_only_warns(self):
        with mock.patch("datasets.Dataset.push_to_hub") as push, \
                mock.patch("visual_eval.dataset.HfApi") as hf_api, \
                mock.patch("builtins.print") as printed:
            hf_api.return_value.upload_file.side_effect = RuntimeError("403")
            repo_id = create_remote_dataset("name", sample_examples())
        self.assertEqual(repo_id, "name")
        push.assert_called_once()
        self.assertIn("WARNING", printed.call_args.args[0])

    def test_push_failure_propagates(self):
        with mock.patch("datasets.Dataset.push_to_hub", side_effect=RuntimeError("offline")), \
                mock.patch("visual_eval.dataset.HfApi") as hf_api:
            with self.assertRaises(RuntimeError):
                create_remote_dataset("name", sample_examples(), namespace="me")
        hf_api.return_value.upload_file.assert_not_called()

    def test_load_passes_split_and_token(self):
        with mock.patch("visual_eval.dataset.load_dataset", return_value=[
            {"id": 3, "input": "a tax calculator", "reference_output": "<!DOCTYPE html>"},
        ]) as load:
            examples = load_remote_dataset("me/set", split="test", token="tok")
        load.assert_called_once_with("me/set", split="test", token="tok")
        self.assertEqual(examples[0].id, 3)
        self.assertEqual(examples[0].reference_output.output, "<!DOCTYPE html>")


if __name__ == "__main__":
    unittest.main()
