"""Tests for same-pitch and cross-pitch note merging."""

import logging

import numpy as np
import pytest

from midi_cleaner.core import InvalidArgumentError, Note
from midi_cleaner.processing.merge import CrossPitchMerger, SamePitchMerger


def spans(notes):
    return [(n.pitch, n.start_time, n.end_time) for n in notes]


@pytest.fixture
def noisy_notes():
    """Fragmented transcription: many short same-pitch pieces plus blips."""
    rng = np.random.default_rng(7)
    notes = []
    for _ in range(60):
        start = float(rng.uniform(0, 10))
        notes.append(
            Note(
                pitch=int(rng.choice([60, 62, 64, 67])),
                start_time=start,
                end_time=start + float(rng.uniform(0.01, 0.6)),
                velocity=int(rng.integers(20, 120)),
            )
        )
    return notes


class TestSamePitchMerger:
    """Test merging of same-pitch fragments."""

    def test_merges_near_consecutive_notes(self):
        """A gap smaller than the threshold joins the two notes."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=60, start_time=1.02, end_time=2.0),
        ]

        result = SamePitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 2.0)]

    def test_keeps_notes_separated_by_threshold(self):
        """Gap test is strict: a gap equal to the threshold is not merged."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=60, start_time=1.5, end_time=2.0),
        ]

        result = SamePitchMerger(0.5).merge(notes)

        assert spans(result) == [(60, 0.0, 1.0), (60, 1.5, 2.0)]

    def test_touching_notes_merge_with_zero_threshold(self):
        """Overlap test is inclusive: touching notes merge even at threshold 0."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=60, start_time=1.0, end_time=2.0),
        ]

        result = SamePitchMerger(0.0).merge(notes)

        assert spans(result) == [(60, 0.0, 2.0)]

    def test_end_time_never_shrinks(self):
        """A contained note does not cut the accumulator short."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=3.0),
            Note(pitch=60, start_time=1.0, end_time=2.0),
        ]

        result = SamePitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 3.0)]

    def test_sorts_within_pitch_group(self):
        notes = [
            Note(pitch=60, start_time=2.0, end_time=3.0),
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=60, start_time=1.01, end_time=1.5),
        ]

        result = SamePitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 1.5), (60, 2.0, 3.0)]

    def test_output_grouped_by_pitch(self):
        """Groups are concatenated in first-appearance order, not re-sorted by time."""
        notes = [
            Note(pitch=62, start_time=0.0, end_time=1.0),
            Note(pitch=60, start_time=0.5, end_time=1.0),
            Note(pitch=62, start_time=2.0, end_time=3.0),
        ]

        result = SamePitchMerger(0.05).merge(notes)

        assert spans(result) == [(62, 0.0, 1.0), (62, 2.0, 3.0), (60, 0.5, 1.0)]

    def test_merged_note_keeps_first_fields(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0, velocity=90, program=4),
            Note(pitch=60, start_time=0.5, end_time=2.0, velocity=30, program=5),
        ]

        result = SamePitchMerger(0.05).merge(notes)

        assert result[0].velocity == 90
        assert result[0].program == 4

    def test_does_not_mutate_input(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=60, start_time=1.02, end_time=2.0),
        ]

        SamePitchMerger(0.05).merge(notes)

        assert spans(notes) == [(60, 0.0, 1.0), (60, 1.02, 2.0)]

    def test_empty_input(self):
        assert SamePitchMerger(0.05).merge([]) == []

    def test_negative_threshold_rejected(self):
        with pytest.raises(InvalidArgumentError):
            SamePitchMerger(-0.01)

    def test_no_close_same_pitch_pairs_survive(self, noisy_notes):
        """Every surviving same-pitch pair is separated by at least the threshold."""
        threshold = 0.05
        result = SamePitchMerger(threshold).merge(noisy_notes)

        for pitch in {n.pitch for n in result}:
            group = sorted((n for n in result if n.pitch == pitch), key=lambda n: n.start_time)
            for prev, note in zip(group, group[1:]):
                gap = note.start_time - prev.end_time
                assert gap >= threshold, f"pitch {pitch}: gap {gap:.3f} below threshold"
                assert gap > 0

        assert len(result) <= len(noisy_notes)


class TestCrossPitchMerger:
    """Test absorption of short notes into overlapping notes of other pitches."""

    def test_shorter_note_absorbed_into_longer(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=2.0),
            Note(pitch=64, start_time=0.5, end_time=1.0),
        ]

        result = CrossPitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 2.0)]

    def test_later_longer_note_survives_and_spans_both(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=0.5),
            Note(pitch=64, start_time=0.25, end_time=2.0),
        ]

        result = CrossPitchMerger(0.0).merge(notes)

        assert spans(result) == [(64, 0.0, 2.0)]

    def test_tie_keeps_earlier_note(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=64, start_time=0.5, end_time=1.5),
        ]

        result = CrossPitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 1.5)]

    def test_nearly_consecutive_notes_merge(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=64, start_time=1.02, end_time=1.5),
        ]

        result = CrossPitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 1.5)]

    def test_separated_notes_kept(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=64, start_time=1.5, end_time=2.0),
        ]

        result = CrossPitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 1.0), (64, 1.5, 2.0)]

    def test_touching_notes_kept_with_zero_threshold(self):
        """Overlap is half-open and the gap window is empty at threshold 0."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=64, start_time=1.0, end_time=2.0),
        ]

        result = CrossPitchMerger(0.0).merge(notes)

        assert len(result) == 2

    def test_same_pitch_pairs_ignored(self):
        notes = [
            Note(pitch=60, start_time=0.5, end_time=2.0),
            Note(pitch=60, start_time=0.0, end_time=1.0),
        ]

        result = CrossPitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 1.0), (60, 0.5, 2.0)]

    def test_merges_until_stable(self):
        """A widened survivor can overlap a note it did not touch before."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=62, start_time=0.9, end_time=1.2),
            Note(pitch=64, start_time=1.15, end_time=3.0),
        ]

        result = CrossPitchMerger(0.0).merge(notes)

        assert spans(result) == [(64, 0.0, 3.0)]

    def test_max_merges_caps_work(self, caplog):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=62, start_time=0.9, end_time=1.2),
            Note(pitch=64, start_time=1.15, end_time=3.0),
        ]

        with caplog.at_level(logging.WARNING, logger="midi_cleaner.processing.merge"):
            result = CrossPitchMerger(0.0, max_merges=1).merge(notes)

        assert spans(result) == [(60, 0.0, 1.2), (64, 1.15, 3.0)]
        assert "stopped after 1 merges" in caplog.text

    def test_negative_duration_note_is_absorbed(self):
        """A malformed note compares as shorter than any real note."""
        notes = [
            Note(pitch=60, start_time=0.0, end_time=1.0),
            Note(pitch=64, start_time=0.6, end_time=0.4),
        ]

        result = CrossPitchMerger(0.05).merge(notes)

        assert spans(result) == [(60, 0.0, 1.0)]

    def test_does_not_mutate_input(self):
        notes = [
            Note(pitch=60, start_time=0.0, end_time=0.5),
            Note(pitch=64, start_time=0.25, end_time=2.0),
        ]

        CrossPitchMerger(0.05).merge(notes)

        assert spans(notes) == [(60, 0.0, 0.5), (64, 0.25, 2.0)]

    def test_count_never_grows(self, noisy_notes):
        result = CrossPitchMerger(0.05).merge(noisy_notes)

        assert 0 < len(result) <= len(noisy_notes)

    def test_no_mergeable_pair_survives(self, noisy_notes):
        threshold = 0.05
        result = CrossPitchMerger(threshold).merge(noisy_notes)

        for i, a in enumerate(result):
            for b in result[i + 1:]:
                if a.pitch == b.pitch:
                    continue
                assert not (a.start_time < b.end_time and b.start_time < a.end_time)
                assert not (0 <= b.start_time - a.end_time < threshold)

    def test_invalid_arguments_rejected(self):
        with pytest.raises(InvalidArgumentError):
            CrossPitchMerger(-1.0)
        with pytest.raises(InvalidArgumentError):
            CrossPitchMerger(0.05, max_merges=-1)
