"""Slicing pie workbook renderer.

Runs the domain blocks over a pie snapshot and lays the resulting
DataFrames out as formatted sheets. Totals, equity percentages and equity
values are written as Excel formulas over the slice cells, so the workbook
stays live when someone edits a slice count.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, Alignment, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from slicingpie_domain.blocks import (
    ActivityBlock,
    Block,
    BlockContext,
    BlockExecutor,
    ContributionsBlock,
    EquityBlock,
    VestingBlock,
)
from slicingpie_domain.schemas import ReportCFG, SlicingPieData


SLICES_FORMAT = '#,##0'
PERCENT_FORMAT = '0.0%'
MONEY_FORMAT = '$#,##0'
DATE_FORMAT = 'yyyy-mm-dd'
DATETIME_FORMAT = 'yyyy-mm-dd hh:mm'

VESTING_STATE_LABELS = {
    "none": "No vesting",
    "pre_cliff": "Pre-cliff",
    "vesting": "Vesting",
    "fully_vested": "Fully vested",
}


def _cell_value(value: Any) -> Any:
    """Convert a DataFrame value into something openpyxl can store."""
    if value is None or pd.isna(value):
        return None
    if isinstance(value, (datetime, pd.Timestamp)):
        ts = pd.Timestamp(value)
        # Excel has no timezones; store UTC wall time
        if ts.tzinfo is not None:
            ts = ts.tz_convert("UTC").tz_localize(None)
        return ts.to_pydatetime()
    return value


class SlicingPieWorkbookRenderer:
    """Render a slicing pie report workbook.

    Sheets (depending on config):
        Equity         - slices, equity % and optional equity value per contributor
        Contributions  - active contributions grouped by contributor with subtotals
        Vesting        - vesting state now and vested slices at each projection date
        Activity       - most recent deletions and restorations

    Example:
        renderer = SlicingPieWorkbookRenderer(ReportCFG(as_of_date=date(2025, 6, 30)), ledger.export_data())
        renderer.render("pie.xlsx")
    """

    EQUITY_HEADER_ROW = 5

    def __init__(self, config: ReportCFG, data: SlicingPieData):
        self.config = config
        self.data = data

        # Define styles
        self.blue_font = Font(color="0000FF")  # Blue for input values
        self.black_font = Font(color="000000")  # Black for calculated values
        self.bold_font = Font(bold=True)
        self.title_font = Font(size=14, bold=True)
        self.subtitle_font = Font(italic=True)

        # Header styling
        self.header_font = Font(bold=True, color="FFFFFF")  # White text on dark blue
        self.header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")

        # Section header styling
        self.section_header_font = Font(italic=True, bold=True)
        self.section_header_fill = PatternFill(start_color="E7E6E6", end_color="E7E6E6", fill_type="solid")

        # Valuation input styling
        self.input_cell_fill = PatternFill(start_color="CCE5FF", end_color="CCE5FF", fill_type="solid")

        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        self.totals_border = Border(top=Side(style='medium'), bottom=Side(style='medium'))

        self.center_align = Alignment(horizontal='center', vertical='center', wrap_text=True)

    @property
    def as_of_date(self) -> date:
        return self.config.as_of_date or date.today()

    def render(self, output_path: str) -> str:
        wb = self.build_workbook()
        wb.save(output_path)
        return output_path

    def build_workbook(self) -> Workbook:
        context = self.compute()

        wb = Workbook()
        wb.remove(wb.active)

        self._render_equity_sheet(wb, context)
        if self.config.include_contributions_sheet:
            self._render_contributions_sheet(wb, context)
        if self.config.include_vesting_sheet:
            self._render_vesting_sheet(wb, context)
        if self.config.include_activity_sheet:
            self._render_activity_sheet(wb, context)

        return wb

    def compute(self) -> BlockContext:
        """Run the blocks the configured sheets need.

        Returns:
            Context holding the snapshot, the as-of date and every block output
        """
        blocks: List[Block] = [EquityBlock(valuation=self.config.valuation)]
        if self.config.include_contributions_sheet:
            blocks.append(ContributionsBlock())
        if self.config.include_vesting_sheet:
            blocks.append(VestingBlock(projections=self.config.vesting_projections))
        if self.config.include_activity_sheet:
            blocks.append(ActivityBlock(limit=self.config.recent_activity_limit))

        context = BlockContext()
        context.set("pie_data", self.data)
        context.set("as_of_date", self.as_of_date)
        return BlockExecutor(blocks).execute(context)

    # ------------------------------------------------------------------ #
    # Shared helpers
    # ------------------------------------------------------------------ #

    def _new_sheet(self, wb: Workbook, title: str, heading: str) -> Worksheet:
        sheet = wb.create_sheet(title=title)
        sheet.sheet_properties.pageSetUpPr.fitToPage = True
        sheet.sheet_view.showGridLines = False

        title_cell = sheet["A1"]
        title_cell.value = f"{heading} - {self.data.company.name}"
        title_cell.font = self.title_font

        subtitle = sheet["A2"]
        subtitle.value = f"As of {self.as_of_date.isoformat()}"
        subtitle.font = self.subtitle_font
        return sheet

    def _write_header(self, sheet: Worksheet, row: int, headers: List[str], widths: List[int]) -> None:
        for idx, (header, width) in enumerate(zip(headers, widths), start=1):
            cell = sheet.cell(row=row, column=idx, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.center_align
            cell.border = Border(right=Side(style='thin', color="FFFFFF"))
            sheet.column_dimensions[get_column_letter(idx)].width = width

    def _write_cell(self, sheet: Worksheet, row: int, column: int, value: Any,
                    number_format: str = None, font: Font = None) -> None:
        cell = sheet.cell(row=row, column=column, value=_cell_value(value))
        cell.border = self.thin_border
        if number_format:
            cell.number_format = number_format
        if font is not None:
            cell.font = font

    def _write_total(self, sheet: Worksheet, row: int, column: int, formula: str,
                     number_format: str = SLICES_FORMAT) -> None:
        cell = sheet.cell(row=row, column=column, value=formula)
        cell.font = self.bold_font
        cell.border = self.totals_border
        cell.number_format = number_format

    # ------------------------------------------------------------------ #
    # Equity sheet
    # ------------------------------------------------------------------ #

    def _render_equity_sheet(self, wb: Workbook, context: BlockContext) -> None:
        sheet = self._new_sheet(wb, "Equity", "Slicing Pie")
        equity_df: pd.DataFrame = context.get("equity_by_contributor")
        with_value = self.config.valuation is not None

        valuation_ref = None
        if with_value:
            sheet["A3"] = "Valuation"
            sheet["A3"].font = self.bold_font
            valuation_cell = sheet["B3"]
            valuation_cell.value = float(self.config.valuation)
            valuation_cell.number_format = MONEY_FORMAT
            valuation_cell.font = self.blue_font
            valuation_cell.fill = self.input_cell_fill
            valuation_cell.border = self.thin_border
            valuation_ref = "$B$3"

        headers = ["Contributor", "Hourly Rate", "Contributions", "Slices", "Equity %"]
        widths = [28, 14, 14, 14, 12]
        if with_value:
            headers.append("Equity Value")
            widths.append(16)

        header_row = self.EQUITY_HEADER_ROW
        self._write_header(sheet, header_row, headers, widths)
        sheet.freeze_panes = f"B{header_row + 1}"

        first_row = header_row + 1
        last_row = first_row + len(equity_df) - 1
        totals_row = first_row + len(equity_df) + 1

        for offset, item in enumerate(equity_df.to_dict("records")):
            row = first_row + offset
            self._write_cell(sheet, row, 1, item["contributor_name"])
            self._write_cell(sheet, row, 2, item["hourly_rate"], MONEY_FORMAT, self.blue_font)
            self._write_cell(sheet, row, 3, item["contributions_count"], SLICES_FORMAT)
            self._write_cell(sheet, row, 4, item["total_slices"], SLICES_FORMAT, self.blue_font)
            self._write_cell(sheet, row, 5, f"=IFERROR(D{row}/D${totals_row},0)", PERCENT_FORMAT, self.black_font)
            if with_value:
                self._write_cell(sheet, row, 6, f"=E{row}*{valuation_ref}", MONEY_FORMAT, self.black_font)

        label = sheet.cell(row=totals_row, column=1, value="Totals")
        label.font = self.bold_font
        label.border = self.totals_border

        if len(equity_df):
            self._write_total(sheet, totals_row, 3, f"=SUM(C{first_row}:C{last_row})")
            self._write_total(sheet, totals_row, 4, f"=SUM(D{first_row}:D{last_row})")
            self._write_total(sheet, totals_row, 5, f"=SUM(E{first_row}:E{last_row})", PERCENT_FORMAT)
            if with_value:
                self._write_total(sheet, totals_row, 6, f"=SUM(F{first_row}:F{last_row})", MONEY_FORMAT)
        else:
            self._write_total(sheet, totals_row, 3, 0)
            self._write_total(sheet, totals_row, 4, 0)

        summary = context.get("equity_summary").iloc[0]
        latest = summary["most_recent_contribution_date"]
        note_row = totals_row + 2
        sheet.cell(row=note_row, column=1, value="Most recent contribution").font = self.subtitle_font
        self._write_cell(sheet, note_row, 2, latest if latest is not None else "n/a", DATE_FORMAT)

    # ------------------------------------------------------------------ #
    # Contributions sheet
    # ------------------------------------------------------------------ #

    def _render_contributions_sheet(self, wb: Workbook, context: BlockContext) -> None:
        sheet = self._new_sheet(wb, "Contributions", "Contributions")
        breakdown: pd.DataFrame = context.get("contributions_breakdown")

        headers = ["Date", "Type", "Value", "Multiplier", "Slices", "Description"]
        self._write_header(sheet, 4, headers, [14, 16, 14, 12, 14, 48])
        sheet.freeze_panes = "A5"

        row = 5
        subtotal_cells: List[str] = []
        for _, group in breakdown.groupby("contributor_id", sort=False):
            name = group["contributor_name"].iloc[0]
            section = sheet.cell(row=row, column=1, value=name)
            section.font = self.section_header_font
            for column in range(1, len(headers) + 1):
                sheet.cell(row=row, column=column).fill = self.section_header_fill
            row += 1

            first_row = row
            for item in group.to_dict("records"):
                self._write_cell(sheet, row, 1, item["date"], DATE_FORMAT)
                self._write_cell(sheet, row, 2, item["type_label"])
                value_format = '#,##0.## "hrs"' if item["type"] == "time" else MONEY_FORMAT
                self._write_cell(sheet, row, 3, item["value"], value_format, self.blue_font)
                self._write_cell(sheet, row, 4, item["multiplier"], '0"x"')
                self._write_cell(sheet, row, 5, item["slices"], SLICES_FORMAT)
                self._write_cell(sheet, row, 6, item["description"])
                row += 1

            label = sheet.cell(row=row, column=4, value="Subtotal")
            label.font = self.bold_font
            self._write_total(sheet, row, 5, f"=SUM(E{first_row}:E{row - 1})")
            subtotal_cells.append(f"E{row}")
            row += 2

        label = sheet.cell(row=row, column=4, value="Total")
        label.font = self.bold_font
        total_formula = f"={'+'.join(subtotal_cells)}" if subtotal_cells else 0
        self._write_total(sheet, row, 5, total_formula)

    # ------------------------------------------------------------------ #
    # Vesting sheet
    # ------------------------------------------------------------------ #

    def _render_vesting_sheet(self, wb: Workbook, context: BlockContext) -> None:
        sheet = self._new_sheet(wb, "Vesting", "Vesting")
        positions: pd.DataFrame = context.get("vesting_by_contributor")
        projections: pd.DataFrame = context.get("vesting_projections")

        labels = list(dict.fromkeys(projections["label"])) if len(projections) else [VestingBlock.CURRENT_LABEL]
        headers = ["Contributor", "State", "Cliff Date", "Full Vest Date", "Total Slices", "% Vested"]
        headers += [f"Vested ({label})" for label in labels]
        widths = [28, 14, 14, 14, 14, 12] + [16] * len(labels)
        self._write_header(sheet, 4, headers, widths)
        sheet.freeze_panes = "B5"

        vested: Dict[tuple, float] = {
            (item["label"], item["contributor_id"]): item["vested_slices"]
            for item in projections.to_dict("records")
        }

        first_row = 5
        for offset, item in enumerate(positions.to_dict("records")):
            row = first_row + offset
            self._write_cell(sheet, row, 1, item["contributor_name"])
            self._write_cell(sheet, row, 2, VESTING_STATE_LABELS[item["vesting_state"]])
            self._write_cell(sheet, row, 3, item["cliff_date"], DATE_FORMAT)
            self._write_cell(sheet, row, 4, item["full_vest_date"], DATE_FORMAT)
            self._write_cell(sheet, row, 5, item["total_slices"], SLICES_FORMAT, self.blue_font)
            self._write_cell(sheet, row, 6, item["percent_vested"] / 100, '0.00%')
            for idx, label in enumerate(labels):
                self._write_cell(sheet, row, 7 + idx, vested.get((label, item["contributor_id"]), 0.0), SLICES_FORMAT)

        last_row = first_row + len(positions) - 1
        totals_row = last_row + 2
        label = sheet.cell(row=totals_row, column=1, value="Totals")
        label.font = self.bold_font
        label.border = self.totals_border
        if len(positions):
            for column in [5] + [7 + idx for idx in range(len(labels))]:
                letter = get_column_letter(column)
                self._write_total(sheet, totals_row, column, f"=SUM({letter}{first_row}:{letter}{last_row})")

        summary = context.get("vesting_summary").iloc[0]
        row = totals_row + 2
        facts = [
            ("Overall vested", summary["overall_percent_vested"] / 100, '0.00%'),
            ("Next cliff date", summary["next_cliff_date"], DATE_FORMAT),
            ("Next full vest date", summary["next_full_vest_date"], DATE_FORMAT),
            ("Contributors pre-cliff", summary["contributors_pre_cliff"], None),
            ("Contributors vesting", summary["contributors_vesting"], None),
            ("Contributors fully vested", summary["contributors_fully_vested"], None),
        ]
        for caption, value, number_format in facts:
            sheet.cell(row=row, column=1, value=caption).font = self.subtitle_font
            self._write_cell(sheet, row, 2, value, number_format)
            row += 1

    # ------------------------------------------------------------------ #
    # Activity sheet
    # ------------------------------------------------------------------ #

    def _render_activity_sheet(self, wb: Workbook, context: BlockContext) -> None:
        sheet = self._new_sheet(wb, "Activity", "Recent Activity")
        activity: pd.DataFrame = context.get("recent_activity")

        headers = ["When (UTC)", "Action", "Record", "Label", "Slices", "Cascaded"]
        self._write_header(sheet, 4, headers, [18, 12, 14, 40, 14, 12])
        sheet.freeze_panes = "A5"

        if activity.empty:
            sheet.cell(row=5, column=1, value="No activity yet").font = self.subtitle_font
            return

        for offset, item in enumerate(activity.to_dict("records")):
            row = 5 + offset
            self._write_cell(sheet, row, 1, item["timestamp"], DATETIME_FORMAT)
            self._write_cell(sheet, row, 2, item["action"].capitalize())
            self._write_cell(sheet, row, 3, item["target_kind"].capitalize())
            self._write_cell(sheet, row, 4, item["target_label"])
            self._write_cell(sheet, row, 5, item["slices_affected"], SLICES_FORMAT)
            self._write_cell(sheet, row, 6, item["cascade_count"], "0")
