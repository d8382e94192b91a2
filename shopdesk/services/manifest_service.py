"""
Manifest Service
Builds the fulfillment sheet for a batch of selected orders

Read-only: nothing here writes to the database.

Outputs:
- Manifest model (JSON for the UI print view)
- Plain-text sheet
- Excel workbook (openpyxl)

Author: TM3
Date: 2026-03-02
"""
import io
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from shopdesk.core.errors import EmptySelectionError, NotFoundError
from shopdesk.domain.manifest import Manifest, ManifestEntry
from shopdesk.domain.order import Order
from shopdesk.domain.stock import quantize_money
from shopdesk.repositories.order_repository import OrderRepository


def compose_manifest(orders: Sequence[Order], generated_at: datetime) -> Manifest:
    """
    Aggregate orders into a manifest (pure function)

    Raises:
        EmptySelectionError: no orders given
    """
    if not orders:
        raise EmptySelectionError()

    entries = [
        ManifestEntry(
            order_id=order.id,
            order_number=order.order_number,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            shipping_address=order.shipping_address.one_line(),
            lines=[item.label for item in order.items],
            units=order.total_quantity,
            status=order.status.value,
            total_amount=order.total_amount,
            notes=order.note_entries,
        )
        for order in orders
    ]
    grand_total = quantize_money(sum((o.total_amount for o in orders), Decimal("0")))
    return Manifest(generated_at=generated_at, entries=entries, grand_total=grand_total)


def render_text(manifest: Manifest) -> str:
    """Printable plain-text version of the manifest"""
    rule = "=" * 64
    out: List[str] = [
        "FULFILLMENT MANIFEST",
        f"Generated: {manifest.generated_at.strftime('%Y-%m-%d %H:%M UTC')}",
        f"Orders: {manifest.order_count}",
        rule,
    ]

    for entry in manifest.entries:
        out.append(f"Order #{entry.order_number}  [{entry.status.upper()}]")
        out.append(f"  {entry.customer_name}  {entry.customer_phone}")
        if entry.shipping_address:
            out.append(f"  {entry.shipping_address}")
        for line in entry.lines:
            out.append(f"    - {line}")
        if entry.notes:
            out.append("  Notes:")
            for note in entry.notes:
                out.append(f"    {note}")
        out.append(f"  Total: {entry.total_amount:.2f}")
        out.append("-" * 64)

    out.append(f"GRAND TOTAL: {manifest.grand_total:.2f}")
    return "\n".join(out) + "\n"


def export_workbook(manifest: Manifest) -> io.BytesIO:
    """Excel fulfillment sheet, one row per order"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Manifest"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4F46E5", end_color="4F46E5", fill_type="solid")
    thin = Side(style="thin", color="CBD5E1")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    wrap = Alignment(wrap_text=True, vertical="top")

    headers = ["Order #", "Customer", "Phone", "Address", "Items", "Units", "Status", "Total", "Notes"]
    ws.append(headers)
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.border = border
        cell.alignment = Alignment(horizontal="center")

    for entry in manifest.entries:
        ws.append([
            entry.order_number,
            entry.customer_name,
            entry.customer_phone,
            entry.shipping_address,
            "\n".join(entry.lines),
            entry.units,
            entry.status.upper(),
            float(entry.total_amount),
            "\n".join(entry.notes),
        ])
        for cell in ws[ws.max_row]:
            cell.border = border
            cell.alignment = wrap

    ws.append([])
    ws.append(["", "", "", "", "", "", "GRAND TOTAL", float(manifest.grand_total), ""])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)

    widths = [10, 22, 16, 36, 44, 8, 12, 12, 40]
    for idx, width in enumerate(widths):
        ws.column_dimensions[chr(ord("A") + idx)].width = width
    for row in ws.iter_rows(min_row=2, min_col=8, max_col=8):
        for cell in row:
            cell.number_format = "#,##0.00"

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output


class ManifestService:
    """Loads selected orders and builds their manifest"""

    def __init__(
        self,
        orders: Optional[OrderRepository] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.orders = orders or OrderRepository()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def build_manifest(self, order_ids: Iterable[int]) -> Manifest:
        """
        Build the manifest for the selected orders, in selection order

        Raises:
            EmptySelectionError: no ids given
            NotFoundError: an id does not match any order
        """
        selected = list(dict.fromkeys(order_ids))
        if not selected:
            raise EmptySelectionError()

        found = {order.id: order for order in self.orders.find_by_ids(selected)}
        missing = [order_id for order_id in selected if order_id not in found]
        if missing:
            raise NotFoundError("Order", missing[0] if len(missing) == 1 else missing)

        return compose_manifest([found[order_id] for order_id in selected], self._clock())
