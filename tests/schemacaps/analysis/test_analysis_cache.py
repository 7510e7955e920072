"""Tests for per-run analysis memoization."""

from schemacaps.analysis.cache import AnalysisCache
from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.models import ModelCapabilities


class TestAnalysisCache:
    """Tests for AnalysisCache."""

    def test_miss_then_hit(self):
        cache = AnalysisCache()
        config = AnalyzerConfig()
        caps = ModelCapabilities(model="Post")

        assert cache.get("Post", config) is None
        cache.set("Post", config, caps)

        assert cache.get("Post", config) is caps
        assert cache.has("Post", config) is True
        assert len(cache) == 1

    def test_equal_configs_share_entries(self):
        """Test that a separately built but equal config hits the same entry."""
        cache = AnalysisCache()
        cache.set("Post", AnalyzerConfig(), ModelCapabilities(model="Post"))

        assert cache.has("Post", AnalyzerConfig()) is True

    def test_different_config_misses(self):
        cache = AnalysisCache()
        cache.set("Post", AnalyzerConfig(), ModelCapabilities(model="Post"))

        assert cache.get("Post", AnalyzerConfig(max_display_fields=1)) is None

    def test_key(self):
        config = AnalyzerConfig()
        assert AnalysisCache.key("Post", config) == ("Post", config.fingerprint())

    def test_clear(self):
        cache = AnalysisCache()
        cache.set("Post", AnalyzerConfig(), ModelCapabilities(model="Post"))
        cache.clear()

        assert len(cache) == 0
