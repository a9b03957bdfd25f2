"""Outbreak simulation: single outbreaks, binned collections and batches."""

from .outbreak import Outbreak, get_cluster_ids  # noqa: F401
from .branching import GrowthError, simulate_outbreak  # noqa: F401
from .binned import BinError, BinnedOutbreakConfig, binned_outbreaks  # noqa: F401
