# ==============================================================================
# RENDERIZADO DE BOLETAS
# ==============================================================================
# Función pura: (venta o venta en curso, configuración) -> documento HTML.
# El documento es autocontenido (estilos de impresión 80mm en línea) para
# poder mandarlo a un iframe oculto o a un directorio de cola de impresión.
# ==============================================================================

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, PackageLoader, select_autoescape

from pos_system.models import (
    DEFAULT_CURRENCY,
    DEFAULT_CUSTOMER_NAME,
    DEFAULT_LAYOUT,
    RECEIPT_LAYOUTS,
    BusinessSettings,
    Sale,
    SaleItem,
)
from pos_system.repositories.base import generate_id

FALLBACK_BUSINESS_NAME = "POS System"

_env = Environment(
    loader=PackageLoader('pos_system', 'templates'),
    autoescape=select_autoescape(['html']),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _money(value: Any) -> str:
    return f"{float(value or 0):.2f}"


def _quantity(value: Any) -> str:
    value = float(value or 0)
    return str(int(value)) if value.is_integer() else f"{value:g}"


_env.filters['money'] = _money
_env.filters['qty'] = _quantity


def _format_date(iso_date: str) -> str:
    """ISO-8601 -> 'DD/MM/YYYY HH:MM'. Si no se puede leer, se muestra tal cual."""
    try:
        parsed = datetime.fromisoformat(iso_date.replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        return iso_date or ''
    return parsed.strftime('%d/%m/%Y %H:%M')


def _cart_to_sale(cart: Dict[str, Any], now: datetime) -> Sale:
    """Venta en curso (dict del compositor) -> Sale sin guardar con id del momento."""
    sale = Sale(
        id=generate_id([], now_ms=int(now.timestamp() * 1000)),
        customerName=cart.get('customerName') or DEFAULT_CUSTOMER_NAME,
        items=[SaleItem.from_dict(line) for line in cart.get('items', [])],
        date=now.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
    )
    sale.calculate_total()
    return sale


def render_receipt(
    sale_or_cart: Union[Sale, Dict[str, Any]],
    settings: Optional[BusinessSettings] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Genera el documento HTML de la boleta.

    Args:
        sale_or_cart: Venta registrada, o el estado del compositor
        settings: Configuración del negocio (por defecto si es None)
        now: Momento usado para numerar una venta en curso

    Returns:
        Documento HTML completo
    """
    settings = settings or BusinessSettings()
    if isinstance(sale_or_cart, Sale):
        sale = sale_or_cart
    else:
        sale = _cart_to_sale(sale_or_cart, now or datetime.now(timezone.utc))

    layout = settings.receiptLayout if settings.receiptLayout in RECEIPT_LAYOUTS else DEFAULT_LAYOUT
    contact = ' | '.join(part for part in (settings.phone, settings.email) if part)

    template = _env.get_template('receipt.html')
    return template.render(
        sale=sale,
        settings=settings,
        business_name=settings.businessName or FALLBACK_BUSINESS_NAME,
        contact_line=contact,
        currency=settings.currency or DEFAULT_CURRENCY,
        layout=layout,
        invoice_no=sale.invoice_no,
        sale_date=_format_date(sale.date),
    )
