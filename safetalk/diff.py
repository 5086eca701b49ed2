"""
Review spans between what the sender typed and what was delivered.

Each span is a dict with ``type`` (equal/delete/insert), ``text``, and
the offsets it occupies: ``orig_start``/``orig_end`` in the draft for
equal and delete spans, ``new_start``/``new_end`` in the delivered text
for equal and insert spans.
"""

from __future__ import annotations

import diff_match_patch as dmp_module

_dmp = dmp_module.diff_match_patch()

_SPAN_TYPES = {
    _dmp.DIFF_EQUAL: "equal",
    _dmp.DIFF_DELETE: "delete",
    _dmp.DIFF_INSERT: "insert",
}


def compute_diff_spans(original: str, delivered: str) -> list[dict]:
    """Semantically cleaned spans; concatenating them rebuilds both texts."""
    diffs = _dmp.diff_main(original, delivered)
    _dmp.diff_cleanupSemantic(diffs)

    spans = []
    orig_pos = new_pos = 0
    for op, text in diffs:
        span = {"type": _SPAN_TYPES[op], "text": text}
        if op != _dmp.DIFF_INSERT:
            span["orig_start"], span["orig_end"] = orig_pos, orig_pos + len(text)
            orig_pos += len(text)
        if op != _dmp.DIFF_DELETE:
            span["new_start"], span["new_end"] = new_pos, new_pos + len(text)
            new_pos += len(text)
        spans.append(span)
    return spans
