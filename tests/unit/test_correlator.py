import pytest

from docrouter.processor.models import InputDocument
from docrouter.routing.correlator import correlate, input_stem, output_stem


def _make_input(name: str) -> InputDocument:
    return InputDocument(local_id=name, content=b"", mime_type="application/pdf")


class TestOutputStem:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("output/b/classification/123/0/doc_7-0.json", "doc_7"),
            ("output/b/classification/123/0/doc_7-12.json", "doc_7"),
            ("scan-2024-3.json", "scan-2024"),
            ("plain.json", "plain"),
            ("no-suffix", "no-suffix"),
        ],
    )
    def test_strips_shard_suffix(self, key: str, expected: str) -> None:
        assert output_stem(key) == expected


class TestInputStem:
    def test_strips_extension(self) -> None:
        assert input_stem("doc_7.png") == "doc_7"

    def test_uses_basename(self) -> None:
        assert input_stem("scans/doc_7.pdf") == "doc_7"

    def test_only_last_extension(self) -> None:
        assert input_stem("archive.tar.gz") == "archive.tar"


class TestCorrelate:
    def test_matches_by_stem(self) -> None:
        inputs = [_make_input("doc_1.pdf"), _make_input("doc_7.png")]

        assert correlate("output/b/c/1/0/doc_7-0.json", inputs) is inputs[1]

    def test_no_match(self) -> None:
        inputs = [_make_input("doc_1.pdf")]

        assert correlate("output/b/c/1/0/other-0.json", inputs) is None

    def test_shared_stem_resolves_to_first_input(self) -> None:
        inputs = [_make_input("doc_7.pdf"), _make_input("doc_7.png")]

        assert correlate("output/b/c/1/0/doc_7-0.json", inputs) is inputs[0]
        assert correlate("output/b/c/1/0/doc_7-1.json", list(reversed(inputs))) is inputs[1]

    def test_is_deterministic(self) -> None:
        inputs = [_make_input("a.pdf"), _make_input("b.pdf")]

        results = {correlate("x/b-0.json", inputs).local_id for _ in range(10)}

        assert results == {"b.pdf"}
