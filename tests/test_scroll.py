"""Tests for scroll depth sampling."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from compass_tracker.core import ScrollSampler
from compass_tracker.core.scroll import measure_scroll_fraction


@dataclass
class _Surface:
    content_offset_y: float = 0.0
    content_inset_top: float = 0.0
    content_height: float = 1000.0


class _BrokenSurface:
    content_offset_y = 0.0
    content_inset_top = 0.0

    @property
    def content_height(self):
        raise RuntimeError("view was released")


def test_no_surface_means_no_percent():
    assert ScrollSampler().sample_scroll_percent() is None


def test_percent_is_clamped_and_rounded():
    sampler = ScrollSampler()

    sampler.attach(_Surface(content_offset_y=125.0))
    assert sampler.sample_scroll_percent() == 13.0

    sampler.attach(_Surface(content_offset_y=-50.0))
    assert sampler.sample_scroll_percent() == 0.0

    sampler.attach(_Surface(content_offset_y=5000.0))
    assert sampler.sample_scroll_percent() == 100.0


def test_top_inset_counts_as_scrolled():
    assert measure_scroll_fraction(_Surface(content_offset_y=-20.0, content_inset_top=120.0)) == 0.1


def test_empty_content_has_no_percent():
    sampler = ScrollSampler()
    sampler.attach(_Surface(content_height=0.0))
    assert sampler.sample_scroll_percent() is None


def test_measurement_hops_onto_ui_executor():
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="ui") as ui:
        sampler = ScrollSampler(ui_executor=ui)
        sampler.attach(_Surface(content_offset_y=500.0))
        assert sampler.sample_scroll_percent() == 50.0


def test_failed_measurement_is_skipped():
    sampler = ScrollSampler()
    sampler.attach(_BrokenSurface())
    assert sampler.sample_scroll_percent() is None


def test_detach_releases_surface():
    sampler = ScrollSampler()
    sampler.attach(_Surface())
    sampler.detach()
    assert not sampler.attached
    assert sampler.sample_scroll_percent() is None
