"""Tests for bitrate planning."""

from dataclasses import FrozenInstanceError

import pytest

from sizefit.compressor.planner import (
    audio_floor,
    compute_pixel_ratio,
    output_duration,
    plan_audio,
    plan_bitrates,
    plan_video,
    video_floor,
)
from sizefit.core.catalog import H265, OPUS, VORBIS, Codec
from sizefit.domain.errors import PlanningError
from sizefit.domain.models import AspectRatio, ComputedOptions, Metadata


class TestOutputDuration:
    """Tests for output_duration."""

    def test_plain_duration(self, make_options, metadata_1080p):
        assert output_duration(make_options(), metadata_1080p) == 120.0

    def test_speed_shortens_output(self, make_options, metadata_1080p):
        assert output_duration(make_options(speed=2.0), metadata_1080p) == 60.0

    @pytest.mark.parametrize("duration", [0.0, -1.0])
    def test_non_positive_duration(self, make_options, duration):
        with pytest.raises(PlanningError):
            output_duration(make_options(), Metadata(duration_seconds=duration))


class TestPlanAudio:
    """Tests for plan_audio."""

    def test_unset_quality_is_maximum(self, make_options):
        assert plan_audio(make_options()) == 256.0

    def test_half_quality(self, make_options):
        assert plan_audio(make_options(audio_quality=0.5)) == 128.0

    def test_floor(self, make_options):
        assert plan_audio(make_options(audio_quality=0.0)) == 16.0

    def test_custom_ceiling(self, make_options):
        options = make_options(audio_quality=0.5, max_audio_bitrate_kbps=192.0)
        assert plan_audio(options) == 96.0

    def test_codec_floor_above_configured_floor(self, make_options):
        options = make_options(audio_codec=VORBIS, audio_quality=0.1)
        assert plan_audio(options) == 45.0

    def test_configured_floor_above_codec_floor(self, make_options):
        options = make_options(audio_codec=OPUS, audio_quality=0.0)
        assert plan_audio(options) == 16.0


class TestFloors:
    """Tests for the effective bitrate floors."""

    def test_audio_floor_uses_higher_of_both(self, make_options):
        assert audio_floor(make_options(audio_codec=VORBIS)) == 45.0
        assert audio_floor(make_options(audio_codec=OPUS)) == 16.0
        assert audio_floor(make_options(audio_codec=None)) == 16.0

    def test_video_floor_uses_higher_of_both(self, make_options):
        heavy = Codec("Heavy", "libheavy", min_bitrate_kbps=500)
        assert video_floor(make_options(video_codec=heavy)) == 500.0
        assert video_floor(make_options(video_codec=H265)) == 64.0

    def test_lowered_configured_floor_exposes_codec_floor(self, make_options):
        options = make_options(video_codec=H265, min_video_bitrate_kbps=0.0)
        assert video_floor(options) == 32.0


class TestComputePixelRatio:
    """Tests for compute_pixel_ratio."""

    def test_no_resize(self, make_options, metadata_1080p):
        assert compute_pixel_ratio(make_options(), metadata_1080p) == 1.0

    def test_explicit_downscale(self, make_options, metadata_1080p):
        options = make_options(output_width=960, output_height=540)
        assert compute_pixel_ratio(options, metadata_1080p) == pytest.approx(0.25)

    def test_upscale_keeps_one(self, make_options, metadata_1080p):
        options = make_options(output_width=3840, output_height=2160)
        assert compute_pixel_ratio(options, metadata_1080p) == 1.0

    def test_width_only_uses_aspect_ratio(self, make_options, metadata_1080p):
        options = make_options(output_width=1280)
        # 1280 x 720 of 1920 x 1080
        assert compute_pixel_ratio(options, metadata_1080p) == pytest.approx(
            (1280 * 720) / (1920 * 1080)
        )

    def test_height_only_uses_aspect_ratio(self, make_options, metadata_1080p):
        options = make_options(output_height=540)
        assert compute_pixel_ratio(options, metadata_1080p) == pytest.approx(0.25)

    def test_width_only_without_aspect_uses_dimensions(self, make_options):
        metadata = Metadata(duration_seconds=10.0, width=1000, height=500)
        options = make_options(output_width=500)
        assert compute_pixel_ratio(options, metadata) == pytest.approx(0.25)

    def test_display_aspect_drives_derived_height(self, make_options):
        """Anamorphic input derives height from the display ratio."""
        metadata = Metadata(
            duration_seconds=10.0,
            width=720,
            height=480,
            aspect_ratio=AspectRatio(16, 9),
        )
        options = make_options(output_width=640)
        assert compute_pixel_ratio(options, metadata) == pytest.approx(
            (640 * 360) / (720 * 480)
        )

    def test_unknown_input_dimensions(self, make_options):
        metadata = Metadata(duration_seconds=10.0)
        options = make_options(output_width=640, output_height=360)
        assert compute_pixel_ratio(options, metadata) == 1.0

    def test_smaller_output_never_raises_ratio(self, make_options, metadata_1080p):
        ratios = [
            compute_pixel_ratio(make_options(output_width=w), metadata_1080p)
            for w in (1920, 1600, 1280, 960, 640)
        ]
        assert ratios == sorted(ratios, reverse=True)


class TestPlanVideo:
    """Tests for plan_video."""

    def test_budget_minus_audio(self, make_options, metadata_1080p):
        options = make_options(size_kbps=80_000.0)
        computed = ComputedOptions(audio_bitrate_kbps=128.0)

        video = plan_video(options, computed, metadata_1080p)

        budget = 80_000.0 / 120.0 * 0.98
        assert video == pytest.approx(budget - 128.0)

    def test_tiny_budget_hits_floor(self, make_options, metadata_1080p):
        """120 s into 8000 kbit leaves less than the audio bitrate."""
        options = make_options(size_kbps=8000.0, audio_quality=0.5)
        computed = ComputedOptions(audio_bitrate_kbps=plan_audio(options))

        assert computed.audio_bitrate_kbps == 128.0
        assert plan_video(options, computed, metadata_1080p) == 64.0

    def test_pixel_ratio_applied(self, make_options, metadata_1080p):
        options = make_options(output_width=960, output_height=540)
        video = plan_video(options, ComputedOptions(), metadata_1080p)

        assert video == pytest.approx(80_000.0 / 120.0 * 0.98 * 0.25)

    def test_speed_raises_bitrate(self, make_options, metadata_1080p):
        normal = plan_video(make_options(), ComputedOptions(), metadata_1080p)
        fast = plan_video(make_options(speed=2.0), ComputedOptions(), metadata_1080p)

        assert fast == pytest.approx(normal * 2)

    def test_requires_size(self, make_options, metadata_1080p):
        with pytest.raises(PlanningError, match="target size"):
            plan_video(make_options(size_kbps=None), ComputedOptions(), metadata_1080p)

    def test_codec_floor_applies_to_tiny_budget(self, make_options, metadata_1080p):
        heavy = Codec("Heavy", "libheavy", min_bitrate_kbps=500)
        options = make_options(video_codec=heavy, size_kbps=8000.0)
        computed = ComputedOptions(audio_bitrate_kbps=128.0)

        assert plan_video(options, computed, metadata_1080p) == 500.0

    def test_zero_duration(self, make_options):
        with pytest.raises(PlanningError):
            plan_video(
                make_options(), ComputedOptions(), Metadata(duration_seconds=0.0)
            )


class TestPlanBitrates:
    """Tests for plan_bitrates."""

    def test_plans_both_and_freezes(self, make_options, metadata_1080p):
        computed = plan_bitrates(make_options(audio_quality=0.5), metadata_1080p)

        assert computed.audio_bitrate_kbps == 128.0
        assert computed.video_bitrate_kbps == pytest.approx(
            80_000.0 / 120.0 * 0.98 - 128.0
        )
        assert computed.frozen
        with pytest.raises(FrozenInstanceError):
            computed.video_bitrate_kbps = 1.0

    def test_audio_only(self, audio_only_options, metadata_1080p):
        computed = plan_bitrates(audio_only_options(audio_codec=OPUS), metadata_1080p)

        assert computed.audio_bitrate_kbps == 256.0
        assert computed.video_bitrate_kbps is None

    def test_video_without_size_has_no_video_bitrate(
        self, make_options, metadata_1080p
    ):
        computed = plan_bitrates(make_options(size_kbps=None), metadata_1080p)
        assert computed.video_bitrate_kbps is None

    def test_video_only(self, make_options, metadata_1080p):
        computed = plan_bitrates(make_options(audio_codec=None), metadata_1080p)

        assert computed.audio_bitrate_kbps is None
        assert computed.video_bitrate_kbps == pytest.approx(80_000.0 / 120.0 * 0.98)


class TestComputedOptions:
    """Tests for ComputedOptions freezing."""

    def test_mutable_until_frozen(self):
        computed = ComputedOptions()
        computed.audio_bitrate_kbps = 96.0
        computed.freeze()

        with pytest.raises(FrozenInstanceError):
            computed.audio_bitrate_kbps = 128.0
        assert computed.audio_bitrate_kbps == 96.0
