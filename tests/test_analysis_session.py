"""
Tests for the comparison session.

Tests cover:
- Loading a pair and publishing the active mode's result
- Mode switches with and without a loaded pair
- Stale results from superseded mode switches being dropped
- Superseded loads never replacing the newer pair
- Decode failures and invalid metadata, with the session staying usable
- Wipe reset on load
"""

import threading

import pytest
from PIL import Image

from VD_Libs.CompareLib.analysis_results import DifferentialView, IntensityView, WipeView
from VD_Libs.CompareLib.comparison_models import AnalysisMode, ImageDescriptor
from VD_Libs.SessionLib.analysis_executors import (
    AnalysisExecutorRegistry,
    execute_differential_mode,
    execute_intensity_mode,
    execute_wipe_mode,
)
from VD_Libs.SessionLib.analysis_session import ComparisonSession, GenerationCounter
from VD_Libs.errors import DecodeFailure, InvalidMetadata

TIMEOUT = 10


@pytest.fixture
def pair_bytes(png_bytes):
    return png_bytes(64, 64, (100, 100, 100, 255)), png_bytes(64, 32, (180, 100, 100, 255))


class TestGenerationCounter:
    """Tests for GenerationCounter."""

    def test_advance_invalidates_older_tokens(self):
        counter = GenerationCounter()
        first = counter.advance()
        second = counter.advance()

        assert second > first
        assert counter.is_current(second)
        assert not counter.is_current(first)

    def test_concurrent_advances_are_unique(self):
        counter = GenerationCounter()
        tokens = []
        lock = threading.Lock()

        def worker():
            for _ in range(200):
                token = counter.advance()
                with lock:
                    tokens.append(token)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(tokens)) == 800
        assert counter.current == 800


class TestLoadPair:
    """Tests for ComparisonSession.load_pair."""

    def test_load_publishes_wipe_result(self, pair_bytes):
        results = []
        with ComparisonSession(on_result=results.append) as session:
            result = session.load_pair(*pair_bytes).result(timeout=TIMEOUT)

            assert isinstance(result.payload, WipeView)
            assert result.generation == session.generation
            assert session.current_result is result
            assert session.pair.original.size == (64, 64)
            assert session.pair.transform.offset_y == 16.0
            assert not session.is_busy

        assert results == [result]

    def test_load_runs_active_mode(self, pair_bytes):
        with ComparisonSession() as session:
            assert session.set_mode(AnalysisMode.DIFFERENTIAL) is None

            result = session.load_pair(*pair_bytes).result(timeout=TIMEOUT)

            assert isinstance(result.payload, DifferentialView)
            assert result.payload.crop.has_missing_area

    def test_load_resets_wipe_position(self, pair_bytes):
        with ComparisonSession() as session:
            session.wipe.set_position(80)

            session.load_pair(*pair_bytes).result(timeout=TIMEOUT)

            assert session.wipe.position == 50.0

    def test_invalid_declared_metadata_raises_immediately(self, pair_bytes):
        with ComparisonSession() as session:
            with pytest.raises(InvalidMetadata):
                session.load_pair(*pair_bytes, edited_descriptor=ImageDescriptor(0, 32))

            assert session.pair is None
            assert not session.is_busy

    def test_decoded_dimensions_win_over_declared(self, pair_bytes):
        with ComparisonSession() as session:
            session.load_pair(
                *pair_bytes,
                original_descriptor=ImageDescriptor(10, 10),
                edited_descriptor=ImageDescriptor(64, 32),
            ).result(timeout=TIMEOUT)

            assert session.pair.original_descriptor == ImageDescriptor(64, 64)

    def test_decode_failure_is_reported(self, png_bytes):
        errors = []
        results = []
        with ComparisonSession(on_result=results.append, on_error=errors.append) as session:
            future = session.load_pair(b"not an image", png_bytes(8, 8))

            with pytest.raises(DecodeFailure):
                future.result(timeout=TIMEOUT)

            assert len(errors) == 1
            assert isinstance(errors[0], DecodeFailure)
            assert results == []
            assert session.pair is None
            assert not session.is_busy

    def test_unexpected_decoder_error_keeps_session_usable(self):
        images = {
            "original": Image.new("RGBA", (32, 32), (10, 10, 10, 255)),
            "edited": Image.new("RGBA", (32, 16), (90, 10, 10, 255)),
        }

        def decoder(source):
            if source == "broken":
                raise RuntimeError("decoder crashed")
            return images[source]

        errors = []
        with ComparisonSession(on_error=errors.append, decoder=decoder) as session:
            session.load_pair("original", "edited").result(timeout=TIMEOUT)
            previous = session.pair

            with pytest.raises(RuntimeError):
                session.load_pair("broken", "edited").result(timeout=TIMEOUT)

            assert len(errors) == 1
            assert not session.is_busy
            assert session.pair is previous

            future = session.set_mode(AnalysisMode.INTENSITY)
            assert future is not None
            assert isinstance(future.result(timeout=TIMEOUT).payload, IntensityView)

    def test_oversized_image_is_reported(self, pair_bytes, png_bytes, monkeypatch):
        errors = []
        with ComparisonSession(on_error=errors.append) as session:
            session.load_pair(*pair_bytes).result(timeout=TIMEOUT)
            monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

            future = session.load_pair(png_bytes(200, 200), png_bytes(200, 200))

            with pytest.raises(DecodeFailure):
                future.result(timeout=TIMEOUT)

            assert len(errors) == 1
            assert isinstance(errors[0], DecodeFailure)
            assert not session.is_busy

            retry = session.set_mode(AnalysisMode.DIFFERENTIAL)
            assert retry is not None
            assert isinstance(retry.result(timeout=TIMEOUT).payload, DifferentialView)


class TestSetMode:
    """Tests for ComparisonSession.set_mode."""

    def test_set_mode_without_pair(self):
        with ComparisonSession() as session:
            before = session.generation

            assert session.set_mode("intensity") is None
            assert session.mode is AnalysisMode.INTENSITY
            assert session.generation == before + 1
            assert not session.is_busy

    def test_set_mode_rejects_unknown_mode(self):
        with ComparisonSession() as session:
            with pytest.raises(ValueError):
                session.set_mode("sepia")

    def test_switch_modes_after_load(self, pair_bytes):
        with ComparisonSession() as session:
            session.load_pair(*pair_bytes).result(timeout=TIMEOUT)

            result = session.set_mode(AnalysisMode.INTENSITY).result(timeout=TIMEOUT)

            assert isinstance(result.payload, IntensityView)
            assert result.mode is AnalysisMode.INTENSITY
            assert session.current_result is result

    def test_refresh_reruns_active_mode(self, pair_bytes):
        with ComparisonSession() as session:
            first = session.load_pair(*pair_bytes).result(timeout=TIMEOUT)

            second = session.refresh().result(timeout=TIMEOUT)

            assert second.mode is first.mode
            assert second.generation > first.generation


class TestStaleResults:
    """Results of superseded passes are dropped and never published."""

    def test_slow_pass_does_not_overwrite_newer_mode(self, pair_bytes):
        started = threading.Event()
        release = threading.Event()

        def slow_intensity(context):
            started.set()
            release.wait(TIMEOUT)
            return execute_intensity_mode(context)

        registry = AnalysisExecutorRegistry()
        registry.register(AnalysisMode.WIPE, execute_wipe_mode)
        registry.register(AnalysisMode.INTENSITY, slow_intensity)
        registry.register(AnalysisMode.DIFFERENTIAL, execute_differential_mode)

        results = []
        with ComparisonSession(registry=registry, on_result=results.append, analysis_workers=2) as session:
            session.load_pair(*pair_bytes).result(timeout=TIMEOUT)

            slow = session.set_mode(AnalysisMode.INTENSITY)
            assert started.wait(TIMEOUT)
            fast = session.set_mode(AnalysisMode.DIFFERENTIAL).result(timeout=TIMEOUT)

            release.set()

            assert slow.result(timeout=TIMEOUT) is None
            assert session.current_result is fast
            assert [r.mode for r in results] == [AnalysisMode.WIPE, AnalysisMode.DIFFERENTIAL]
            assert not session.is_busy

    def test_superseded_load_never_replaces_newer_pair(self):
        release = threading.Event()
        images = {
            "slow-original": Image.new("RGBA", (40, 40), (255, 0, 0, 255)),
            "slow-edited": Image.new("RGBA", (40, 40), (255, 0, 0, 255)),
            "fast-original": Image.new("RGBA", (20, 20), (0, 255, 0, 255)),
            "fast-edited": Image.new("RGBA", (20, 10), (0, 255, 0, 255)),
        }

        def decoder(source):
            if source == "slow-original":
                release.wait(TIMEOUT)
            return images[source]

        results = []
        with ComparisonSession(on_result=results.append, decoder=decoder) as session:
            old = session.load_pair("slow-original", "slow-edited")
            new = session.load_pair("fast-original", "fast-edited")

            newest = new.result(timeout=TIMEOUT)
            release.set()

            assert old.result(timeout=TIMEOUT) is None
            assert session.pair.original is images["fast-original"]
            assert session.current_result is newest
            assert results == [newest]

    def test_mode_switch_during_load_is_applied_to_load(self):
        release = threading.Event()
        image = Image.new("RGBA", (32, 32), (10, 10, 10, 255))

        def decoder(source):
            release.wait(TIMEOUT)
            return image

        with ComparisonSession(decoder=decoder) as session:
            future = session.load_pair("original", "edited")

            assert session.set_mode(AnalysisMode.INTENSITY) is None
            assert session.is_busy
            release.set()

            result = future.result(timeout=TIMEOUT)
            assert result.mode is AnalysisMode.INTENSITY
            assert result.generation == session.generation
