"""Stochastic outbreak simulation with transmission trees and pathogen genomes.

Re-exports the main entry points so scripts can import from outbreak_sim
without deep module paths.
"""

from .version_info import VERSION as __version__  # noqa: F401
from .case import CaseHistory, History  # noqa: F401
from .disease import DiseaseModel, rounded_poisson  # noqa: F401
from .disease.simple import SimpleDisease  # noqa: F401
from .disease.covid import Covid  # noqa: F401
from .genome import Genome  # noqa: F401
from .genome.simple import SimpleGenome  # noqa: F401
from .simulate import (  # noqa: F401
    BinError,
    BinnedOutbreakConfig,
    GrowthError,
    Outbreak,
    binned_outbreaks,
    simulate_outbreak,
)
