"""Per-run memoization of model analysis results."""

from typing import Dict, Optional, Tuple

from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.models import ModelCapabilities

CacheKey = Tuple[str, str]  # (model name, config fingerprint)


class AnalysisCache:
    """
    Lazily populated store of ModelCapabilities for one analysis run.

    Entries are keyed by model name and configuration fingerprint, so results
    computed under a different configuration are never returned. There is no
    eviction; start a new cache to start a new run.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, ModelCapabilities] = {}

    @staticmethod
    def key(model_name: str, config: AnalyzerConfig) -> CacheKey:
        return (model_name, config.fingerprint())

    def get(self, model_name: str, config: AnalyzerConfig) -> Optional[ModelCapabilities]:
        return self._entries.get(self.key(model_name, config))

    def set(
        self, model_name: str, config: AnalyzerConfig, capabilities: ModelCapabilities
    ) -> None:
        self._entries[self.key(model_name, config)] = capabilities

    def has(self, model_name: str, config: AnalyzerConfig) -> bool:
        return self.key(model_name, config) in self._entries

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
