# core/solutions.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from config.settings import settings
from core.entities import StageDefinition
from util.enums import Solution


@dataclass(frozen=True)
class SolutionPreset:
    """
    How long a solution's simulated job runs and which weighted stages it reports.
    `duration_ms=None` falls back to settings.DEFAULT_DURATION_MS.
    """

    solution: Solution
    title: str
    duration_ms: Optional[int] = None
    stages: Tuple[StageDefinition, ...] = field(default_factory=tuple)

    @property
    def effective_duration_ms(self) -> int:
        return self.duration_ms or settings.DEFAULT_DURATION_MS


AE_PROCESSING_STAGES: Tuple[StageDefinition, ...] = (
    StageDefinition("initializing", 5, "Setting up the enrichment pipeline"),
    StageDefinition(
        "finding_similar_products", 30, "Finding similar products on the web"
    ),
    StageDefinition(
        "verifying_visual_similarity", 20, "Verifying visual similarity of products"
    ),
    StageDefinition(
        "scraping_attributes", 25, "Extracting attributes from similar products"
    ),
    StageDefinition("enriching_attributes", 15, "Finalizing attribute enrichment"),
    StageDefinition("preparing_results", 5, "Preparing final results"),
)

SOLUTION_PRESETS: Dict[Solution, SolutionPreset] = {
    Solution.ATTRIBUTE_EXTRACTION: SolutionPreset(
        Solution.ATTRIBUTE_EXTRACTION,
        "Attribute Extraction",
        duration_ms=20000,
        stages=AE_PROCESSING_STAGES,
    ),
    Solution.COLLECTION_BUILDER: SolutionPreset(
        Solution.COLLECTION_BUILDER, "Collection Builder", duration_ms=10000
    ),
    Solution.HEADER_OPTIMIZATION: SolutionPreset(
        Solution.HEADER_OPTIMIZATION, "Header Optimization", duration_ms=12000
    ),
    Solution.LOW_HANGING_FRUITS: SolutionPreset(
        Solution.LOW_HANGING_FRUITS, "Low-Hanging Fruits"
    ),
    Solution.INTERNAL_LINKS: SolutionPreset(Solution.INTERNAL_LINKS, "Internal Links"),
    Solution.ON_PAGE_BOOSTING: SolutionPreset(
        Solution.ON_PAGE_BOOSTING, "On-Page Boosting"
    ),
}


def get_preset(solution: Solution) -> SolutionPreset:
    return SOLUTION_PRESETS[solution]


def preamble_for(solution: Solution, product_count: int = 0) -> List[str]:
    """Log lines a solution writes before its simulated pipeline starts."""
    if solution == Solution.ATTRIBUTE_EXTRACTION:
        return [
            f"Starting attribute enrichment for {product_count} products",
            f"Using embeddings model: {settings.AE_EMBEDDING_MODEL}",
        ]
    return []
