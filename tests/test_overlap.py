"""Tests for overlap detection."""

from datetime import datetime, timedelta

from cinesched.engine.overlap import check, first_conflict, spans_overlap, sweep
from cinesched.models.time_block import Span


def _span(h1, m1, h2, m2, label=None, ref=None, day=1):
    return Span(
        start=datetime(2024, 6, day, h1, m1),
        end=datetime(2024, 6, day, h2, m2),
        label=label,
        ref=ref,
    )


class TestCheck:
    """Test checking a candidate against a room's spans."""

    def test_detects_overlap_with_existing(self):
        """09:30 candidate collides with the 09:00-11:43 screening."""
        existing = [_span(9, 0, 11, 43, label="Dune", ref="1")]
        candidate = _span(9, 30, 12, 13)

        result = check(candidate, existing)
        assert result
        assert result.with_span == existing[0]
        assert result.message == "Overlaps Dune (09:00-11:43)"

    def test_touching_spans_do_not_conflict(self):
        """A span starting exactly when another ends fits."""
        existing = [_span(9, 0, 11, 43)]
        assert not check(_span(11, 43, 14, 0), existing)
        assert not check(_span(7, 0, 9, 0), existing)

    def test_skips_self(self):
        """An entry being moved never conflicts with its own old position."""
        existing = [_span(9, 0, 11, 43, ref="5")]
        assert not check(_span(9, 30, 12, 13, ref="5"), existing)

    def test_reports_earliest_collision(self):
        existing = [_span(12, 0, 13, 0, label="later"), _span(9, 0, 10, 0, label="earlier")]
        result = check(_span(9, 30, 12, 30), existing)
        assert result.with_span.label == "earlier"

    def test_empty_room(self):
        assert not check(_span(9, 0, 10, 0), [])

    def test_overlap_is_symmetric(self):
        a = _span(9, 0, 11, 0)
        b = _span(10, 59, 12, 0)
        c = _span(11, 0, 12, 0)
        assert spans_overlap(a, b) and spans_overlap(b, a)
        assert not spans_overlap(a, c) and not spans_overlap(c, a)

    def test_cross_midnight_overlap(self):
        late = Span(start=datetime(2024, 6, 1, 23, 30), end=datetime(2024, 6, 2, 2, 13))
        early = Span(start=datetime(2024, 6, 2, 0, 30), end=datetime(2024, 6, 2, 3, 0))
        assert spans_overlap(late, early)


class TestSweep:
    """Test the sort-based classification against pairwise comparison."""

    def _pairwise(self, spans):
        out = []
        for i, s in enumerate(spans):
            out.append(any(spans_overlap(s, o) for j, o in enumerate(spans) if j != i))
        return out

    def test_matches_pairwise(self):
        spans = [
            _span(9, 0, 12, 0),
            _span(10, 0, 10, 30),
            _span(11, 0, 11, 15),
            _span(12, 0, 13, 0),
            _span(14, 0, 15, 0),
            _span(14, 59, 16, 0),
            _span(18, 0, 19, 0),
        ]
        partners = sweep(spans)
        assert [p is not None for p in partners] == self._pairwise(spans)

    def test_nested_spans_all_flagged(self):
        """A long span containing two short ones is flagged together with both."""
        spans = [_span(9, 0, 15, 0), _span(10, 0, 11, 0), _span(13, 0, 14, 0)]
        partners = sweep(spans)
        assert all(p is not None for p in partners)
        assert partners[1] == spans[0]
        assert partners[2] == spans[0]

    def test_empty_spans_never_conflict(self):
        spans = [_span(9, 0, 9, 0), _span(8, 0, 10, 0)]
        assert sweep(spans) == [None, None]
        assert [p is not None for p in sweep(spans)] == self._pairwise(spans)
        assert not spans_overlap(spans[0], spans[1])
        assert first_conflict(spans) is None

    def test_many_adjacent_spans(self):
        base = datetime(2024, 6, 1, 8, 0)
        spans = [
            Span(start=base + timedelta(minutes=30 * i), end=base + timedelta(minutes=30 * (i + 1)))
            for i in range(40)
        ]
        assert sweep(spans) == [None] * 40
        assert first_conflict(spans) is None


class TestFirstConflict:
    """Test the first-collision scan."""

    def test_returns_pair(self):
        a = _span(9, 0, 11, 0, label="a")
        b = _span(10, 0, 12, 0, label="b")
        hit = first_conflict([b, a])
        assert hit == (b, a)


class TestBoundary:
    """Test half-open boundaries in both directions."""

    def test_touching_and_overlapping_by_one_minute(self):
        later = _span(11, 0, 12, 0)
        assert not check(_span(9, 0, 11, 0), [later])
        assert not check(later, [_span(9, 0, 11, 0)])
        assert check(_span(9, 0, 11, 1), [later])
        assert check(later, [_span(9, 0, 11, 1)])
