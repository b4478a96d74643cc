"""
Tests for the statistics aggregator, seen-set and classification helpers.
"""

import itertools
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from lingostat.engine.classify import classify_file, classify_link
from lingostat.engine.state import SeenSet, StatsAggregator
from lingostat.models import ContentItem, ContentKind, FileCategory, LinkCategory
from lingostat.utils.urls import extract_drive_file_id, extract_video_id, normalize_link


class TestStatsAggregator:
    """Test merge, guard, snapshot and reset."""

    def test_merge_creates_and_sums_buckets(self):
        """Counters add up and items keep merge order."""
        aggregator = StatsAggregator()

        assert aggregator.merge("en", lines=10, doc_count=1, item_id="a.pdf")
        assert aggregator.merge("en", watch_seconds=30.0, media_count=1, item_id="b.mp3")

        en = aggregator.snapshot()["en"]
        assert en.lines == 10
        assert en.doc_count == 1
        assert en.watch_seconds == 30.0
        assert en.media_count == 1
        assert en.items == ("a.pdf", "b.mp3")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"media_count": 1, "watch_seconds": 0.0},
            {"doc_count": 1, "lines": 0},
        ],
    )
    def test_zero_magnitude_measurements_dropped(self, kwargs, caplog):
        """Counts without magnitude never reach the aggregate."""
        aggregator = StatsAggregator()

        assert aggregator.merge("en", item_id="x", **kwargs) is False

        assert len(aggregator) == 0
        assert "Dropping zero-magnitude measurement" in caplog.text

    def test_provenance_only_merge(self):
        """All-zero merges register the item."""
        aggregator = StatsAggregator()

        assert aggregator.merge("other", item_id="blob.bin")

        other = aggregator.snapshot()["other"]
        assert other.items == ("blob.bin",)
        assert other.doc_count == 0

    def test_negative_measurement_rejected(self):
        """Negative values are a caller bug."""
        with pytest.raises(ValueError):
            StatsAggregator().merge("en", lines=-1)

    def test_snapshot_is_read_only(self):
        """Snapshots cannot be mutated or affected by later merges."""
        aggregator = StatsAggregator()
        aggregator.merge("en", lines=1, doc_count=1, item_id="a")
        snapshot = aggregator.snapshot()

        with pytest.raises(TypeError):
            snapshot["fr"] = snapshot["en"]

        aggregator.merge("en", lines=1, doc_count=1, item_id="b")
        assert snapshot["en"].lines == 1

    def test_totals(self):
        """Totals sum every bucket."""
        aggregator = StatsAggregator()
        aggregator.merge("en", lines=5, doc_count=1, item_id="a")
        aggregator.merge("fr", lines=7, doc_count=1, item_id="b")
        aggregator.merge("fr", watch_seconds=12.5, media_count=1, item_id="c")

        totals = aggregator.totals()
        assert totals.lines == 12
        assert totals.doc_count == 2
        assert totals.watch_seconds == 12.5
        assert totals.media_count == 1

    def test_order_independence(self):
        """Every permutation of merges gives the same totals."""
        measurements = [
            ("en", {"lines": 3, "doc_count": 1}),
            ("en", {"watch_seconds": 1.5, "media_count": 1}),
            ("de", {"lines": 8, "doc_count": 1}),
            ("other", {}),
        ]
        results = set()
        for order in itertools.permutations(measurements):
            aggregator = StatsAggregator()
            for language, kwargs in order:
                aggregator.merge(language, item_id="i", **kwargs)
            results.add(aggregator.totals())

        assert len(results) == 1

    def test_reset_clears_buckets_and_seen(self):
        """Reset clears both lifecycle-paired structures."""
        aggregator = StatsAggregator()
        aggregator.merge("en", lines=1, doc_count=1, item_id="a")
        aggregator.seen.claim("https://example.com")

        aggregator.reset()

        assert len(aggregator) == 0
        assert len(aggregator.seen) == 0
        assert aggregator.seen.claim("https://example.com")

    def test_concurrent_merges(self):
        """Merges from many threads are all counted."""
        aggregator = StatsAggregator()

        def work(i):
            aggregator.merge("en", lines=1, doc_count=1, item_id=str(i))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(500)))

        en = aggregator.snapshot()["en"]
        assert en.lines == 500
        assert len(en.items) == 500


class TestSeenSet:
    """Test atomic claim semantics."""

    def test_claim_once(self):
        seen = SeenSet()
        assert seen.claim("https://example.com/a")
        assert not seen.claim("https://example.com/a")
        assert "https://example.com/a" in seen

    def test_equivalent_urls_share_a_claim(self):
        """Normalization makes trivially different URLs one link."""
        seen = SeenSet()
        assert seen.claim("https://Example.com:443/a/#frag")
        assert not seen.claim("https://example.com/a")

    def test_concurrent_claims(self):
        """Exactly one of many racing threads wins a claim."""
        seen = SeenSet()
        barrier = threading.Barrier(8)

        def race(_):
            barrier.wait()
            return seen.claim("https://example.com/race")

        with ThreadPoolExecutor(max_workers=8) as pool:
            wins = list(pool.map(race, range(8)))

        assert wins.count(True) == 1


class TestClassification:
    """Test file and link classification."""

    @pytest.mark.parametrize(
        "name,category",
        [
            ("song.MP3", FileCategory.AUDIO),
            ("talk.m4a", FileCategory.AUDIO),
            ("movie.mp4", FileCategory.VIDEO),
            ("clip.webm", FileCategory.VIDEO),
            ("book.pdf", FileCategory.DOCUMENT),
            ("links.xlsx", FileCategory.SPREADSHEET),
            ("bundle.zip", FileCategory.ARCHIVE),
            ("blob.bin", FileCategory.UNKNOWN),
            ("README", FileCategory.UNKNOWN),
        ],
    )
    def test_classify_file(self, name, category):
        assert classify_file(ContentItem.file(f"/data/{name}")) == category

    @pytest.mark.parametrize(
        "url,category",
        [
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", LinkCategory.VIDEO_PLATFORM),
            ("https://youtu.be/dQw4w9WgXcQ", LinkCategory.VIDEO_PLATFORM),
            ("https://m.youtube.com/shorts/dQw4w9WgXcQ", LinkCategory.VIDEO_PLATFORM),
            ("https://drive.google.com/file/d/1AbCdEfGhIjKlMnOp/view", LinkCategory.CLOUD_DRIVE),
            ("https://example.com/page", LinkCategory.OTHER),
            ("not a url", LinkCategory.OTHER),
        ],
    )
    def test_classify_link(self, url, category):
        assert classify_link(url) == category

    def test_link_item(self):
        """Links are content items identified by their URL."""
        item = ContentItem.link("https://example.com/page.pdf")

        assert item.kind == ContentKind.LINK
        assert item.identity == "https://example.com/page.pdf"
        assert item.extension is None


class TestUrlHelpers:
    """Test normalization and identifier extraction."""

    def test_normalize_link(self):
        assert normalize_link("HTTPS://Example.COM:443/Path/?q=1#top") == "https://example.com/Path?q=1"
        assert normalize_link("http://example.com:8080/") == "http://example.com:8080"
        assert normalize_link("  https://example.com/a  ") == "https://example.com/a"

    @pytest.mark.parametrize(
        "url",
        [
            "https://drive.google.com/file/d/1AbCdEfGhIjKlMnOp/view?usp=sharing",
            "https://drive.google.com/open?id=1AbCdEfGhIjKlMnOp",
            "https://docs.google.com/uc?export=download&id=1AbCdEfGhIjKlMnOp",
        ],
    )
    def test_extract_drive_file_id(self, url):
        assert extract_drive_file_id(url) == "1AbCdEfGhIjKlMnOp"

    def test_extract_drive_file_id_missing(self):
        assert extract_drive_file_id("https://drive.google.com/drive/my-drive") is None

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://music.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://www.youtube.com/live/dQw4w9WgXcQ",
        ],
    )
    def test_extract_video_id(self, url):
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/@somechannel",
            "https://www.youtube.com/channel/UC1234567890",
            "https://www.youtube.com/user/someone",
            "https://www.youtube.com/playlist?list=PL123",
            "https://www.youtube.com/",
        ],
    )
    def test_extract_video_id_unresolvable(self, url):
        assert extract_video_id(url) is None
