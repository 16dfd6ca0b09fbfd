"""MovieLens top-N report generator.

Loads one of the three MovieLens layouts, aggregates per-movie rating
statistics (optionally across concurrent workers) and writes ranked
CSV reports sliced by gender, genre and age bracket.
"""

from src.movielens.pipeline import PipelineResult, ReportPipeline

__all__ = ["PipelineResult", "ReportPipeline"]
