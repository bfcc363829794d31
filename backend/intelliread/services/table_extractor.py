"""Table reconstruction from positioned page text"""
import math
import logging
from typing import Dict, List
from ..models.document import ExtractedTable, TextItem
from ..utils.helpers import generate_table_id

logger = logging.getLogger(__name__)

EMPTY_CELL = "-"


class TableExtractor:
    """
    Rebuild tables from the layout of text items on a page.

    Items sharing a baseline (within ROW_TOLERANCE units) form a row; runs of
    rows with similar column counts become tables. This is a lossy heuristic
    and table boundaries need not match the visual grid.
    """

    ROW_TOLERANCE = 5
    MIN_COLUMNS = 2
    MAX_COLUMN_DRIFT = 2
    MIN_ROWS = 3  # header + 2 data rows

    def extract(
        self,
        items: List[TextItem],
        page_number: int,
        document_id: str = "",
        start_index: int = 0
    ) -> List[ExtractedTable]:
        """
        Detect tables among a page's text items

        Args:
            items: Positioned text items of the page
            page_number: 1-based page the items belong to
            document_id: Owning document
            start_index: table_index assigned to the first table found

        Returns:
            Tables in top-to-bottom order
        """
        rows = self._group_rows(items)

        tables: List[ExtractedTable] = []
        current: List[List[TextItem]] = []
        prev_col_count = 0

        for row in rows:
            col_count = len(row)
            extends_run = col_count >= self.MIN_COLUMNS and (
                not current or abs(col_count - prev_col_count) <= self.MAX_COLUMN_DRIFT
            )
            if extends_run:
                current.append(row)
            else:
                if len(current) >= self.MIN_ROWS:
                    tables.append(self._structure(current, page_number, document_id, start_index + len(tables)))
                current = [row] if col_count >= self.MIN_COLUMNS else []
            prev_col_count = col_count

        if len(current) >= self.MIN_ROWS:
            tables.append(self._structure(current, page_number, document_id, start_index + len(tables)))

        if tables:
            logger.debug(f"Detected {len(tables)} tables on page {page_number}")
        return tables

    def _group_rows(self, items: List[TextItem]) -> List[List[TextItem]]:
        """Bucket items by rounded baseline, top row first, cells left to right"""
        buckets: Dict[int, List[TextItem]] = {}
        for item in items:
            if not item.text.strip():
                continue
            # Round half up so that jitter either side of a boundary behaves the same
            key = int(math.floor(item.y / self.ROW_TOLERANCE + 0.5)) * self.ROW_TOLERANCE
            buckets.setdefault(key, []).append(item)

        return [
            sorted(buckets[key], key=lambda item: item.x)
            for key in sorted(buckets, reverse=True)
        ]

    def _structure(
        self,
        rows: List[List[TextItem]],
        page_number: int,
        document_id: str,
        table_index: int
    ) -> ExtractedTable:
        headers = [item.text.strip() or EMPTY_CELL for item in rows[0]]
        width = len(headers)

        data = []
        for row in rows[1:]:
            cells = [item.text.strip() or EMPTY_CELL for item in row[:width]]
            cells.extend([EMPTY_CELL] * (width - len(cells)))
            data.append(cells)

        return ExtractedTable(
            id=generate_table_id(document_id, table_index),
            document_id=document_id,
            table_index=table_index,
            page=page_number,
            headers=headers,
            data=data,
            rows=len(data),
            columns=width
        )
