"""Maps remote output files back to the input documents they came from.

The batch API returns no explicit input/output link. Output basenames are
derived from input basenames (extension dropped, ``-<shard>.json`` appended),
so the filename stem is the only join key. Two inputs sharing a stem with
different extensions cannot be told apart: the first one in input order wins.
"""

import posixpath
import re
from collections.abc import Sequence

from docrouter.processor.models import STRUCTURED_OUTPUT_EXTENSION, InputDocument

_SHARD_SUFFIX = re.compile(r"-\d+" + re.escape(STRUCTURED_OUTPUT_EXTENSION) + r"$")


def output_stem(output_key: str) -> str:
    """``output/b/classification/1/doc_7-0.json`` -> ``doc_7``"""
    basename = posixpath.basename(output_key)
    stem, count = _SHARD_SUFFIX.subn("", basename)
    if count:
        return stem
    return posixpath.splitext(basename)[0]


def input_stem(local_id: str) -> str:
    """``scans/doc_7.png`` -> ``doc_7``"""
    return posixpath.splitext(posixpath.basename(local_id))[0]


def correlate(output_key: str, inputs: Sequence[InputDocument]) -> InputDocument | None:
    """Return the first input whose stem equals the output's stem, or None."""
    stem = output_stem(output_key)
    for document in inputs:
        if input_stem(document.local_id) == stem:
            return document
    return None
