"""Report writers."""

from src.movielens.writers.csv_writer import ReportWriter, format_average, safe_label

__all__ = ["ReportWriter", "format_average", "safe_label"]
