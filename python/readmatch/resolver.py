"""
Category Resolver - Classify one matched read.

The full set of matching source files is considered. Expected categories
win over unexpected ones; within the winning group one category is drawn
uniformly at random. An ambiguous read is sampled into exactly one
bucket so aggregate counts are neither double-counted nor skewed by a
fixed priority order.
"""

import random
from typing import Iterable, List, Optional, Sequence

from .models import Classification, ClassificationResult, SourceFile


class CategoryResolver:
    """
    Resolves matched source files into a single classification.

    Args:
        sources: Source file table, indexed by SourceFile.index
        rng: Random source for tie-breaks (unseeded by default)
    """

    def __init__(self, sources: Sequence[SourceFile], rng: Optional[random.Random] = None):
        self.sources = sources
        self.rng = rng or random.Random()

    def resolve(
        self,
        matched: Iterable[int],
        expected: frozenset = frozenset(),
    ) -> ClassificationResult:
        """
        Classify a read found in the index.

        Args:
            matched: Indices of the source files containing the read
            expected: Categories the query file accepts

        Returns:
            EXPECTED / UNEXPECTED with the drawn category, or UNCATEGORIZED
            with the paths of every matched file
        """
        matched_sources = [self.sources[i] for i in matched]

        expected_hits: List[str] = []
        unexpected_hits: List[str] = []
        for source in matched_sources:
            if not source.is_categorized:
                continue
            if source.category in expected:
                expected_hits.append(source.category)
            else:
                unexpected_hits.append(source.category)

        if expected_hits:
            return ClassificationResult(
                kind=Classification.EXPECTED,
                category=self.rng.choice(expected_hits),
            )
        if unexpected_hits:
            return ClassificationResult(
                kind=Classification.UNEXPECTED,
                category=self.rng.choice(unexpected_hits),
            )
        return ClassificationResult(
            kind=Classification.UNCATEGORIZED,
            matched_paths=tuple(source.path for source in matched_sources),
        )
