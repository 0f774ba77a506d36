from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rotalog.sinks.rotating_file import RotatingSink, archive_path_for

pytestmark = pytest.mark.property

file_names = st.text(
    alphabet=st.characters(categories=("Ll", "Lu", "Nd"), max_codepoint=127),
    min_size=1,
    max_size=20,
).map(lambda s: f"{s}.log")

payloads = st.lists(st.binary(min_size=0, max_size=256), max_size=40)


@given(name=file_names, day=st.dates(min_value=date(1970, 1, 1)))
def test_archive_name_is_name_dot_iso_date(name: str, day: date) -> None:
    path = Path("/var/log") / name
    archive = archive_path_for(path, day)
    assert archive.parent == path.parent
    assert archive.name == f"{name}.{day.isoformat()}"


@settings(max_examples=40, deadline=None)
@given(before=payloads, after=payloads, day=st.dates(min_value=date(1970, 1, 1)))
def test_rotation_moves_content_and_starts_empty(
    before: list[bytes], after: list[bytes], day: date
) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "app.log"
        sink = RotatingSink(path, today=lambda: day)
        written = sum(sink.write(p) for p in before)
        assert written == sum(len(p) for p in before)

        sink.rotate()
        assert path.read_bytes() == b""
        for p in after:
            sink.write(p)
        sink.close()

        assert archive_path_for(path, day).read_bytes() == b"".join(before)
        assert path.read_bytes() == b"".join(after)


@settings(max_examples=25, deadline=None)
@given(generations=st.lists(payloads, min_size=1, max_size=6))
def test_same_day_last_rotation_wins(generations: list[list[bytes]]) -> None:
    day = date(2024, 3, 15)
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "app.log"
        sink = RotatingSink(path, today=lambda: day)
        for generation in generations:
            for p in generation:
                sink.write(p)
            sink.rotate()
        sink.close()

        assert archive_path_for(path, day).read_bytes() == b"".join(generations[-1])
        assert path.read_bytes() == b""
