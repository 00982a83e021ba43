"""
Preview Cache - mémoïse resolve+build pour éviter les recalculs à chaque frappe
"""
from collections import OrderedDict
from typing import Dict, Optional, Tuple

from models.risk_policy import RiskPolicy


class PreviewCache:
    """
    Cache LRU borné des previews.
    Clé = (politique JSON canonique, solde en centimes): mêmes entrées → même arbre.
    """

    def __init__(self, max_size: int = 256):
        self.max_size = max_size
        self.cache: "OrderedDict[Tuple[str, int], object]" = OrderedDict()

        # Stats
        self.hits = 0
        self.misses = 0

    def get_cache_key(self, policy: RiskPolicy, balance_cents: int) -> Tuple[str, int]:
        """Génère une clé de cache basée sur les entrées"""
        return (policy.model_dump_json(by_alias=True), balance_cents)

    def get(self, key: Tuple[str, int]) -> Optional[object]:
        """Récupère une preview depuis le cache"""
        if key in self.cache:
            self.hits += 1
            self.cache.move_to_end(key)
            return self.cache[key]
        self.misses += 1
        return None

    def put(self, key: Tuple[str, int], preview: object):
        """Stocke une preview; évince la plus ancienne au-delà de max_size"""
        self.cache[key] = preview
        self.cache.move_to_end(key)
        while len(self.cache) > self.max_size:
            self.cache.popitem(last=False)

    def clear(self):
        self.cache.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> Dict:
        """Retourne les statistiques de cache"""
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": hit_rate,
            "cache_size": len(self.cache),
            "max_size": self.max_size,
        }
