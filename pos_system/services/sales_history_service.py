# ==============================================================================
# SERVICIO DE HISTORIAL DE VENTAS
# ==============================================================================
# Consulta, búsqueda, eliminación y pedido de edición de ventas registradas.
# ==============================================================================

from datetime import datetime
from typing import Any, List, MutableMapping, Optional

from pos_system.models import Sale, clean_text
from pos_system.repositories.interfaces import ISalesRepository
from pos_system.services.errors import ConfirmationRequiredError, NotFoundError
from pos_system.services.sale_composer import SaleComposer


def _date_labels(iso_date: str) -> List[str]:
    """Representaciones de fecha buscables: YYYY-MM-DD y DD/MM/YYYY."""
    if not iso_date:
        return []
    try:
        parsed = datetime.fromisoformat(iso_date.replace('Z', '+00:00'))
    except ValueError:
        return [iso_date]
    return [iso_date, parsed.strftime('%Y-%m-%d'), parsed.strftime('%d/%m/%Y')]


class SalesHistoryService:
    """Servicio para el historial de ventas."""

    def __init__(self, sales_repo: ISalesRepository):
        self.sales_repo = sales_repo

    def list(self) -> List[Sale]:
        """Ventas de la más reciente a la más antigua."""
        return list(reversed(self.sales_repo.load()))

    def get(self, sale_id: str) -> Optional[Sale]:
        return self.sales_repo.get_sale(sale_id)

    def search(self, term: str) -> List[Sale]:
        """
        Filtra por nombre de cliente, id o fecha (YYYY-MM-DD o DD/MM/YYYY).
        Término vacío retorna todo.
        """
        sales = self.list()
        term = clean_text(term).lower()
        if not term:
            return sales

        def matches(sale: Sale) -> bool:
            if term in sale.customerName.lower() or term in sale.id.lower():
                return True
            return any(term in label.lower() for label in _date_labels(sale.date))

        return [sale for sale in sales if matches(sale)]

    def delete(self, sale_id: str, confirmed: bool = False) -> Sale:
        """
        Raises:
            NotFoundError: La venta no existe
            ConfirmationRequiredError: Falta la confirmación del usuario
        """
        with self.sales_repo.lock:
            sale = self.sales_repo.get_sale(sale_id)
            if sale is None:
                raise NotFoundError("Venta no encontrada.")
            if not confirmed:
                raise ConfirmationRequiredError(
                    f"¿Seguro que deseas eliminar la venta {sale.invoice_no}?"
                )
            self.sales_repo.delete_sale(sale_id)
        return sale

    def request_edit(self, sale_id: str, session: MutableMapping[str, Any]) -> Sale:
        """
        Marca la venta para abrirse en el compositor en modo edición.

        Raises:
            NotFoundError: La venta no existe
        """
        sale = self.sales_repo.get_sale(sale_id)
        if sale is None:
            raise NotFoundError("Venta no encontrada.")
        session[SaleComposer.EDIT_FLAG_KEY] = sale.id
        return sale
