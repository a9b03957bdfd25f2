# src/outbreak_sim/genome/simple.py
"""
Fixed-width bit-vector genome.

Each site is one bit of a Python integer (site 0 is the least significant
bit). Mutation flips sites chosen uniformly at random without replacement,
SNP distance is the popcount of the XOR.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import Genome

# default number of distinct sites that can be represented
GENOME_LENGTH = 64


@dataclass(frozen=True)
class SimpleGenome(Genome):
    bits: int = 0
    width: int = GENOME_LENGTH

    def __post_init__(self):
        if self.width < 1:
            raise ValueError(f"Genome width must be >= 1, got {self.width}")
        if self.bits < 0 or self.bits >> self.width:
            raise ValueError(f"Bits do not fit in a genome of width {self.width}")

    def __repr__(self):
        return f"SimpleGenome({self.nucleotides()})"

    def mutate(self, n_mutations: int, rng) -> "SimpleGenome":
        """Flip exactly ``n_mutations`` distinct sites chosen at random."""
        n_mutations = int(n_mutations)
        if n_mutations < 0:
            raise ValueError(f"Number of mutations must be >= 0, got {n_mutations}")
        if n_mutations > self.width:
            raise ValueError(
                f"Requested number of mutations ({n_mutations}) exceeds width "
                f"of genome representation ({self.width})"
            )
        if n_mutations == 0:
            return self

        mask = 0
        for pos in rng.choice(self.width, size=n_mutations, replace=False):
            mask |= 1 << int(pos)
        return SimpleGenome(self.bits ^ mask, self.width)

    def snps(self, other: "SimpleGenome") -> int:
        """Count the sites at which the genomes differ."""
        if other.width != self.width:
            raise ValueError(f"Cannot compare genomes of width {self.width} and {other.width}")
        return bin(self.bits ^ other.bits).count("1")

    def write_nucleotides(self, writer) -> None:
        # relabel 1 and 0 as A and C
        writer.write("".join(
            "A" if (self.bits >> pos) & 1 else "C" for pos in range(self.width)
        ))
