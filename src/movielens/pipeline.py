"""Report pipeline: load, aggregate, rank and write every report.

Mirrors one run of the report generator:
1. Load the dataset folder (fatal on a missing file)
2. Aggregate ratings, single-threaded or partitioned
3. Select the top-N rows of every supported report
4. Write one CSV per report under the mode's output folder
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.movielens.aggregation import (
    AggregateBucket,
    AggregationDriver,
    AggregationStats,
    ReportSpec,
    build_report_specs,
    select_top,
)
from src.movielens.loaders import detect_variant, get_loader
from src.movielens.models import Dataset
from src.movielens.utils import get_logger
from src.movielens.writers import ReportWriter
from src.settings import get_settings_summary, settings

MULTITHREADED_DIR = "withMultithreading"
SINGLE_THREADED_DIR = "withoutMultithreading"


@dataclass
class PipelineResult:
    """Outcome of one report run.

    Attributes:
        variant: Dataset variant loaded.
        parallel: Whether the partitioned driver was used.
        output_dir: Folder holding the reports.
        reports: Written file per report id.
        aggregation: Driver counters.
        load_seconds: Dataset loading time.
        report_seconds: Aggregation + ranking + writing time.
        total_seconds: Whole run time.
    """

    variant: str
    parallel: bool
    output_dir: Path
    reports: dict[str, Path] = field(default_factory=dict)
    aggregation: AggregationStats = field(default_factory=AggregationStats)
    load_seconds: float = 0.0
    report_seconds: float = 0.0
    total_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for reporting."""
        return {
            "variant": self.variant,
            "parallel": self.parallel,
            "output_dir": str(self.output_dir),
            "reports": {rid: str(path) for rid, path in self.reports.items()},
            "aggregation": self.aggregation.to_dict(),
            "load_seconds": round(self.load_seconds, 3),
            "report_seconds": round(self.report_seconds, 3),
            "total_seconds": round(self.total_seconds, 3),
        }


class ReportPipeline:
    """Runs the report generator end to end."""

    def __init__(
        self,
        output_root: Path | None = None,
        top_n: int | None = None,
        genres: list[str] | None = None,
        chunk_size: int | None = None,
        max_workers: int | None = None,
        executor: str | None = None,
    ) -> None:
        """Initialize pipeline (unset values come from settings).

        Args:
            output_root: Root folder of the mode sub-folders.
            top_n: Rows per report.
            genres: Target genres.
            chunk_size: Ratings per partition.
            max_workers: Worker bound for the partitioned mode.
            executor: Worker pool kind.

        Raises:
            ValueError: If top_n is below 1.
        """
        self._logger = get_logger("movielens.pipeline")
        self.output_root = output_root or settings.paths.output_dir
        self.top_n = top_n if top_n is not None else settings.reports.top_n
        if self.top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {self.top_n}")
        self.genres = genres if genres is not None else settings.reports.genres
        self.chunk_size = chunk_size
        self.max_workers = max_workers
        self.executor = executor
        self.writer = ReportWriter(prefix=settings.reports.report_prefix(self.top_n))

    def run(
        self,
        dataset_dir: Path | str,
        variant: str | None = None,
        parallel: bool = False,
    ) -> PipelineResult:
        """Generate every report for a dataset folder.

        Args:
            dataset_dir: MovieLens folder.
            variant: Dataset variant, detected from the files when None.
            parallel: Use the partitioned (multi-threaded) driver.

        Returns:
            PipelineResult with written files and timings.

        Raises:
            DatasetLoadError: If the dataset cannot be loaded.
            UnknownVariantError: If the variant cannot be resolved.
        """
        total_start = time.perf_counter()
        dataset_dir = Path(dataset_dir)
        variant = variant or detect_variant(dataset_dir)
        self._logger.debug(f"Configured defaults: {get_settings_summary()}")

        self._logger.info(f"Loading dataset {variant} from {dataset_dir}")
        dataset = get_loader(variant).load(dataset_dir)
        load_seconds = time.perf_counter() - total_start

        output_dir = self.output_root / (MULTITHREADED_DIR if parallel else SINGLE_THREADED_DIR)
        mode = "multithreaded" if parallel else "single-threaded"
        self._logger.info(f"Generating reports ({mode}) to folder: {output_dir}")

        report_start = time.perf_counter()
        result = self.generate(dataset, output_dir, parallel)
        result.load_seconds = load_seconds
        result.report_seconds = time.perf_counter() - report_start
        result.total_seconds = time.perf_counter() - total_start

        self._log_timings(result)
        return result

    def generate(self, dataset: Dataset, output_dir: Path, parallel: bool = False) -> PipelineResult:
        """Aggregate a loaded dataset and write its reports.

        Args:
            dataset: Loaded dataset.
            output_dir: Destination folder.
            parallel: Use the partitioned driver.

        Returns:
            PipelineResult (timings left to the caller).
        """
        driver = AggregationDriver(
            dataset,
            chunk_size=self.chunk_size,
            max_workers=self.max_workers,
            executor=self.executor,
        )
        bucket = driver.run_partitioned() if parallel else driver.run_single_threaded()

        result = PipelineResult(
            variant=dataset.variant,
            parallel=parallel,
            output_dir=output_dir,
            aggregation=driver.stats,
        )
        for spec in build_report_specs(dataset, self.genres):
            result.reports[spec.report_id] = self._write_report(bucket, dataset, spec, output_dir)
        return result

    def _write_report(
        self,
        bucket: AggregateBucket,
        dataset: Dataset,
        spec: ReportSpec,
        output_dir: Path,
    ) -> Path:
        rows = select_top(bucket, dataset.movies, spec, self.top_n)
        path = self.writer.write_report(output_dir, spec, rows)
        self._logger.debug(f"{spec.report_id}: {len(rows)} rows -> {path.name}")
        return path

    def _log_timings(self, result: PipelineResult) -> None:
        self._logger.info(f"Reports written to {result.output_dir} ({len(result.reports)} files)")
        self._logger.info(f"Report generation time: {result.report_seconds:.3f} s")
        self._logger.info(f"Total execution time  : {result.total_seconds:.3f} s")
