from .prober import Prober, is_reachable_status
from .harness import ProcessHarness
from .evaluator import StrategyEvaluator
from .selector import ResultSelector
from .cluster import fetch_cluster_codename, decode_cluster_name, compute_auto_gcs

__all__ = [
    'Prober',
    'is_reachable_status',
    'ProcessHarness',
    'StrategyEvaluator',
    'ResultSelector',
    'fetch_cluster_codename',
    'decode_cluster_name',
    'compute_auto_gcs',
]
