"""Convert provider responses into caller-facing results."""

from datetime import datetime
from decimal import Decimal
from typing import Callable
from uuid import UUID

from ocr_relay.core.cost import CostCalculator
from ocr_relay.core.result import (
    ExtractedImage,
    ExtractedTable,
    OCRPage,
    OCRResult,
    PageDimensions,
)
from ocr_relay.engines.wire import OCRResponse, WirePage, WireTable


class ResponseTransformer:
    """Map an ``OCRResponse`` onto ``OCRResult``."""

    DIMENSION_UNIT = "px"

    def __init__(self, cost_function: Callable[[int], Decimal] | None = None) -> None:
        self.cost_function = cost_function or CostCalculator().calculate_cost

    @staticmethod
    def _table_text(table: WireTable) -> str:
        # An empty markdown body is still the provider's answer
        if table.markdown is not None:
            return table.markdown
        if table.html is not None:
            return table.html
        return ""

    def transform_page(self, page: WirePage) -> OCRPage:
        tables = tuple(
            ExtractedTable(id=table.id, markdown=self._table_text(table))
            for table in page.tables or ()
        )
        images = tuple(
            ExtractedImage(
                id=image.id,
                top_left_x=float(image.top_left_x),
                top_left_y=float(image.top_left_y),
                bottom_right_x=float(image.bottom_right_x),
                bottom_right_y=float(image.bottom_right_y),
                image_base64=image.image_base64,
            )
            for image in page.images or ()
        )
        dimensions = None
        if page.dimensions is not None:
            dimensions = PageDimensions(
                width=float(page.dimensions.width),
                height=float(page.dimensions.height),
                unit=self.DIMENSION_UNIT,
            )

        return OCRPage(
            index=page.index,
            markdown=page.markdown,
            tables=tables,
            images=images,
            dimensions=dimensions,
            header=page.header,
            footer=page.footer,
        )

    def transform(
        self,
        response: OCRResponse,
        document_id: UUID,
        started_at: datetime,
        ended_at: datetime,
    ) -> OCRResult:
        # Billing counts pages processed, which can differ from pages returned
        cost = self.cost_function(response.usage_info.pages_processed)

        return OCRResult(
            document_id=document_id,
            pages=tuple(self.transform_page(page) for page in response.pages),
            model=response.model,
            cost=cost,
            processing_duration=(ended_at - started_at).total_seconds(),
            completed_at=ended_at,
        )
