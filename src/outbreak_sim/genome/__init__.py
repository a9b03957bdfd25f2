# src/outbreak_sim/genome/__init__.py
"""
Genome contract.

A genome is an immutable value: every mutation returns a new genome, so one
ancestral genome can be shared between many lineages.
"""

import abc
import io


def mutations_by_time(generation_time, mutation_rate, rng) -> int:
    """Poisson number of mutations expected over ``generation_time`` steps."""
    lam = float(generation_time) * float(mutation_rate)
    if lam <= 0.0:
        return 0
    return int(rng.poisson(lam))


class Genome(abc.ABC):
    """Base class for genome sequences with a mutation model."""

    @abc.abstractmethod
    def mutate(self, n_mutations: int, rng) -> "Genome":
        """Return a copy with exactly ``n_mutations`` mutations."""

    def mutate_time(self, generation_time, mutation_rate: float, rng) -> "Genome":
        """Return a copy mutated according to an elapsed time.

        The number of mutations is Poisson with mean
        ``generation_time * mutation_rate``.
        """
        n_mutations = mutations_by_time(generation_time, mutation_rate, rng)
        return self.mutate(n_mutations, rng)

    @abc.abstractmethod
    def snps(self, other: "Genome") -> int:
        """SNP distance from another genome."""

    @abc.abstractmethod
    def write_nucleotides(self, writer) -> None:
        """Write the genome as a nucleotide string (suitable for FASTA)."""

    def nucleotides(self) -> str:
        buf = io.StringIO()
        self.write_nucleotides(buf)
        return buf.getvalue()
