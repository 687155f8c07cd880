"""Git synchronization functionality for aursync."""

from .analysis import MergeAnalysis, analyze_merge
from .clone import clone_package, ensure_present
from .merge import fast_forward, three_way_merge
from .operations import fetch_remote_head, refresh
from .utils import MergeResult, PackageState, RefreshResult, SyncOutcome

__all__ = [
    'MergeAnalysis',
    'analyze_merge',
    'clone_package',
    'ensure_present',
    'fast_forward',
    'three_way_merge',
    'fetch_remote_head',
    'refresh',
    'MergeResult',
    'PackageState',
    'RefreshResult',
    'SyncOutcome'
]
