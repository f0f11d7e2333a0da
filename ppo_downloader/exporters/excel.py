"""
Excel exporter with conditional formatting.

Exports result tables to Excel format with:
- Yellow highlighting for rows without coordinates
- Proper column widths
- Frozen header row
"""

from __future__ import annotations

from pathlib import Path

import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ppo_downloader.utils import get_logger


class ExcelExporter:
    """
    Export a result table to Excel format.

    Example:
        exporter = ExcelExporter()
        exporter.export(df, "output.xlsx", highlight_missing=True)
    """

    # Yellow fill for rows missing coordinates
    YELLOW_FILL = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")

    HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

    HEADER_FONT = Font(color="FFFFFF", bold=True)

    COORDINATE_COLUMNS = ("latitude", "longitude")

    FILE_EXTENSION = ".xlsx"

    def __init__(self, sheet_title: str = "PPO Data"):
        """Initialize the exporter."""
        self.sheet_title = sheet_title
        self.logger = get_logger()

    def export(
        self,
        df: pd.DataFrame,
        output_path: str | Path,
        highlight_missing: bool = True,
        **kwargs,
    ) -> Path:
        """
        Export a DataFrame to an Excel file.

        Args:
            df: Result table
            output_path: Output file path
            highlight_missing: Highlight rows without latitude or longitude

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)

        # Ensure .xlsx extension
        if output_path.suffix.lower() != ".xlsx":
            output_path = output_path.with_suffix(".xlsx")

        self.logger.info(f"Exporting {len(df):,} records to Excel...")

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = self.sheet_title

        for col_idx, column in enumerate(df.columns, start=1):
            cell = ws.cell(row=1, column=col_idx, value=str(column))
            cell.fill = self.HEADER_FILL
            cell.font = self.HEADER_FONT
            cell.alignment = Alignment(horizontal="center")

        coord_idx = [
            idx for idx, col in enumerate(df.columns)
            if str(col).lower() in self.COORDINATE_COLUMNS
        ]

        for row_idx, row in enumerate(df.itertuples(index=False), start=2):
            values = [None if pd.isna(value) else value for value in row]

            for col_idx, value in enumerate(values, start=1):
                if hasattr(value, "item"):
                    value = value.item()
                ws.cell(row=row_idx, column=col_idx, value=value)

            if highlight_missing and any(values[idx] is None for idx in coord_idx):
                for col_idx in range(1, len(values) + 1):
                    ws.cell(row=row_idx, column=col_idx).fill = self.YELLOW_FILL

        self._adjust_column_widths(ws, df)

        # Freeze the header row
        ws.freeze_panes = "A2"

        wb.save(output_path)
        self.logger.info(f"Excel file saved: {output_path}")
        return output_path

    def _adjust_column_widths(self, ws, df: pd.DataFrame) -> None:
        """Size columns to their content, sampling the first 100 rows."""
        sample = df.head(100)

        for col_idx, column in enumerate(df.columns, start=1):
            max_length = len(str(column))

            for value in sample.iloc[:, col_idx - 1]:
                if not pd.isna(value):
                    max_length = max(max_length, len(str(value)))

            # Padding, max 50 characters
            ws.column_dimensions[get_column_letter(col_idx)].width = min(
                max_length + 2, 50
            )
