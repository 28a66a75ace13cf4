"""
Analysis Result Model
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class AnalysisResult:
    """Cached worth-buying analysis of a product, overwritten on recompute."""

    product_id: int = 0
    worth_buying_score: int = 50
    tier: str = "fair deal"
    recommendation: str = ""
    analysis_summary: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        created_at = self.created_at
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        return {
            'product_id': self.product_id,
            'worth_buying_score': self.worth_buying_score,
            'tier': self.tier,
            'recommendation': self.recommendation,
            'analysis_summary': self.analysis_summary,
            'created_at': created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AnalysisResult':
        return cls(
            product_id=data.get('product_id', 0),
            worth_buying_score=int(data.get('worth_buying_score', 50)),
            tier=data.get('tier') or 'fair deal',
            recommendation=data.get('recommendation', ''),
            analysis_summary=data.get('analysis_summary') or '',
            created_at=data.get('created_at'),
        )
