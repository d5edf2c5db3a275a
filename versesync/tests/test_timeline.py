"""
Tests for the virtual timeline: segment map builder and position translator.
"""

import pytest
from dataclasses import FrozenInstanceError

from versesync.timeline.position import locate_segment, to_real, to_virtual
from versesync.timeline.segment import Segment, TimingData
from versesync.timeline.segment_map import build_segment_map, total_duration
from versesync.tests.test_doubles import create_segment, genesis_playlist


class TestSegmentMapBuilder:
    """Tests for build_segment_map()."""

    def test_virtual_offsets_accumulate(self):
        """Durations 10, 15, 8 are laid end to end."""
        segment_map = build_segment_map(genesis_playlist())

        assert [s.virtual_start for s in segment_map] == [0, 10, 25]
        assert [s.virtual_end for s in segment_map] == [10, 25, 33]
        assert [s.duration for s in segment_map] == [10, 15, 8]
        assert total_duration(segment_map) == 33

    def test_contiguity(self):
        segments = [
            create_segment(timestamps=[3.5, 7.25]),
            create_segment(timestamps=[100.0, 105.2, 111.0, 118.5]),
            create_segment(timestamps=[0.0, 0.1]),
            create_segment(timestamps=[42.0, 50.0, 61.3]),
        ]
        segment_map = build_segment_map(segments)

        assert segment_map[0].virtual_start == 0
        for current, following in zip(segment_map, segment_map[1:]):
            assert current.virtual_end == pytest.approx(following.virtual_start)

    def test_total_duration_is_sum_of_durations(self):
        segments = [
            create_segment(timestamps=[100.0, 105.2, 111.0, 118.5]),
            create_segment(timestamps=[12.0, 20.0]),
        ]
        segment_map = build_segment_map(segments)

        assert total_duration(segment_map) == pytest.approx(sum(s.duration for s in segment_map))
        assert total_duration(segment_map) == pytest.approx(18.5 + 8.0)

    def test_start_and_end_come_from_first_and_last_timestamp(self):
        segment_map = build_segment_map([create_segment(timestamps=[100.0, 105.2, 111.0, 118.5])])

        segment = segment_map[0]
        assert segment.start_timestamp == 100.0
        assert segment.end_timestamp == 118.5
        assert segment.index == 0

    @pytest.mark.parametrize("segments", [None, []])
    def test_empty_input_yields_empty_map(self, segments):
        assert build_segment_map(segments) == []
        assert total_duration([]) == 0

    def test_segment_without_timestamps_has_zero_duration(self):
        segment_map = build_segment_map([
            create_segment(timestamps=[]),
            create_segment(timestamps=[5.0]),
            create_segment(timestamps=[0.0, 4.0]),
        ])

        assert segment_map[0].start_timestamp == 0
        assert segment_map[0].end_timestamp == 0
        assert segment_map[1].duration == 0
        assert segment_map[1].end_timestamp == 5.0
        assert segment_map[2].virtual_start == 0
        assert total_duration(segment_map) == 4.0

    def test_passthrough_fields(self):
        segment = create_segment(reference="JHN 3:16-18", image_url="img/3.jpg", text="For God so loved", section_num=4)
        enhanced = build_segment_map([segment])[0]

        assert enhanced.reference == "JHN 3:16-18"
        assert enhanced.audio_url == segment.audio_url
        assert enhanced.image_url == "img/3.jpg"
        assert enhanced.text == "For God so loved"
        assert enhanced.section_num == 4
        assert enhanced.segment is segment

    def test_enhanced_segment_is_immutable(self):
        enhanced = build_segment_map([create_segment()])[0]
        with pytest.raises(FrozenInstanceError):
            enhanced.virtual_start = 5.0


class TestSegmentModel:
    """Tests for Segment / TimingData construction helpers."""

    def test_from_dict_accepts_camel_case(self):
        segment = Segment.from_dict({
            "reference": "JHN 3:16-18",
            "audioUrl": "https://audio.example/JHN3.mp3",
            "timingData": {"timestamps": [100, 105.2, 111, 118.5], "reference": "JHN3:16-18"},
            "sectionNum": "2",
            "refIndex": 1,
            "imageUrl": "img.jpg",
            "chapter": "3",
        })

        assert segment.audio_url == "https://audio.example/JHN3.mp3"
        assert segment.timestamps == (100.0, 105.2, 111.0, 118.5)
        assert segment.timing_data.reference == "JHN3:16-18"
        assert segment.section_num == 2
        assert segment.ref_index == 1
        assert segment.image_url == "img.jpg"
        assert segment.chapter == 3

    def test_from_dict_requires_reference(self):
        with pytest.raises(ValueError):
            Segment.from_dict({"audio_url": "x.mp3"})

    def test_timing_data_from_list(self):
        assert TimingData.from_value([1, 2.5]).timestamps == (1.0, 2.5)
        assert TimingData.from_value(None).timestamps == ()


class TestPositionTranslator:
    """Tests for to_virtual(), to_real() and locate_segment()."""

    @pytest.fixture
    def segment_map(self):
        return build_segment_map(genesis_playlist())

    def test_seek_target_in_third_segment(self, segment_map):
        """Virtual 27 lands 2 s into the third segment."""
        segment = locate_segment(segment_map, 27)
        position = to_real(segment, 27)

        assert segment.index == 2
        assert position.offset == pytest.approx(2.0)
        assert position.real_time == pytest.approx(2.0)

    def test_to_virtual_adds_segment_offset(self, segment_map):
        assert to_virtual(segment_map[1], 4.0) == pytest.approx(14.0)

    def test_to_virtual_clamps_before_start(self):
        segment = build_segment_map([create_segment(timestamps=[100.0, 118.5])])[0]
        assert to_virtual(segment, 99.2) == 0.0

    @pytest.mark.parametrize("real_time", [100.0, 103.3, 111.0, 117.9, 118.5])
    def test_round_trip(self, real_time):
        segment_map = build_segment_map([
            create_segment(timestamps=[0.0, 7.0]),
            create_segment(timestamps=[100.0, 105.2, 111.0, 118.5]),
        ])
        segment = segment_map[1]

        assert to_real(segment, to_virtual(segment, real_time)).real_time == pytest.approx(real_time)

    @pytest.mark.parametrize("virtual_time,expected_index", [
        (-5.0, 0),
        (0.0, 0),
        (9.99, 0),
        (10.0, 0),  # Boundary belongs to the first matching segment
        (10.01, 1),
        (33.0, 2),
        (1000.0, 2),
    ])
    def test_lookup_is_total(self, segment_map, virtual_time, expected_index):
        segment = locate_segment(segment_map, virtual_time)
        assert segment is not None
        assert segment.index == expected_index

    def test_lookup_on_empty_map(self):
        assert locate_segment([], 3.0) is None
