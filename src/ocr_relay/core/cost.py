"""Cost calculation for Mistral OCR pricing.

Standard API pricing: $0.001 per page ($1.00 per 1,000 pages).
"""

from decimal import ROUND_HALF_UP, Decimal


class CostCalculator:
    """Compute the billed cost for a number of processed pages."""

    COST_PER_PAGE = Decimal("0.001")

    def __init__(self, cost_per_page: Decimal | str | None = None) -> None:
        self.cost_per_page = Decimal(cost_per_page) if cost_per_page is not None else self.COST_PER_PAGE

    def calculate_cost(self, pages: int) -> Decimal:
        if pages <= 0:
            return Decimal("0")
        return Decimal(pages) * self.cost_per_page

    def __call__(self, pages: int) -> Decimal:
        return self.calculate_cost(pages)

    def format_detailed_cost(self, cost: Decimal, pages: int) -> str:
        """e.g. ``$0.012 (12 pages @ $0.001/page)``."""
        unit = "page" if pages == 1 else "pages"
        return f"{format_cost(cost)} ({pages} {unit} @ ${self.cost_per_page}/page)"


def format_cost(cost: Decimal, estimate: bool = False) -> str:
    """Format a USD amount: 2 decimals from $1 upward, up to 4 below."""
    if cost >= 1:
        text = f"${cost.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"
    else:
        quantized = cost.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
        digits = str(quantized).rstrip("0")
        whole, _, frac = digits.partition(".")
        text = f"${whole}.{frac.ljust(2, '0')}"
    return f"~{text}" if estimate else text
