import io

import numpy as np
import pytest

from pamstream.services.stream_service import open_for_read
from pamstream.services.summary_service import (
    SummaryFunction,
    format_summary,
    summarize,
    summarize_rows,
)

PGM = b"P2\n3 1\n10\n1 2 9\n"
PPM = b"P6\n2 1\n255\n" + bytes([10, 20, 30, 40, 50, 60])


def run(data: bytes, function: SummaryFunction):
    with open_for_read(io.BytesIO(data)) as reader:
        return summarize(reader, function)


@pytest.mark.parametrize(
    "function, value",
    [
        (SummaryFunction.SUM, 12),
        (SummaryFunction.MEAN, 4.0),
        (SummaryFunction.MIN, 1),
        (SummaryFunction.MAX, 9),
    ],
)
def test_summarize(function, value):
    summary = run(PGM, function)
    assert summary.value == value
    assert summary.count == 3
    assert summary.maxval == 10


def test_max_is_the_maximum_across_rows():
    summary = run(PPM, SummaryFunction.MAX)
    assert summary.value == 60
    assert summary.count == 6


def test_format_summary():
    assert format_summary(run(PGM, SummaryFunction.MEAN)) == "the mean of all samples is 4.000000"
    assert format_summary(run(PGM, SummaryFunction.SUM)) == "the sum of all samples is 12"
    assert format_summary(run(PGM, SummaryFunction.MAX), normalize=True) == (
        "the maximum of all samples is 0.900000"
    )
    assert format_summary(run(PGM, SummaryFunction.MIN), brief=True) == "1"


def test_summarize_rows():
    stats = summarize_rows(np.array([[[0], [4]], [[2], [6]]]), 7)
    assert stats == {"min": 0, "max": 6, "mean": 3.0, "maxval": 7}
    assert summarize_rows(np.empty((0, 1, 1)), 7)["mean"] == 0.0
