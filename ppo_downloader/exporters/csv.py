"""
CSV exporter for PPO phenology data.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from ppo_downloader.utils import get_logger


class CSVExporter:
    """
    Export a result table to CSV format.

    Example:
        exporter = CSVExporter()
        exporter.export(df, "output.csv")
    """

    FILE_EXTENSION = ".csv"

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        """
        Initialize the exporter.

        Args:
            delimiter: Field delimiter (default: comma)
            encoding: Output file encoding (default: utf-8)
        """
        self.delimiter = delimiter
        self.encoding = encoding
        self.logger = get_logger()

    def export(
        self,
        df: pd.DataFrame,
        output_path: str | Path,
        **kwargs,  # Accept extra args for compatibility
    ) -> Path:
        """
        Export a DataFrame to a CSV file.

        Args:
            df: Result table
            output_path: Output file path

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)

        # Ensure .csv extension
        if output_path.suffix.lower() != ".csv":
            output_path = output_path.with_suffix(".csv")

        self.logger.info(f"Exporting {len(df):,} records to CSV...")

        df.to_csv(
            output_path,
            index=False,
            encoding=self.encoding,
            sep=self.delimiter,
        )

        self.logger.info(f"CSV file saved: {output_path}")
        return output_path
