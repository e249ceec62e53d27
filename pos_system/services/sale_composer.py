# ==============================================================================
# SERVICIO DE VENTA EN CURSO (COMPOSITOR)
# ==============================================================================
# Centraliza la lógica de la venta que se está armando en caja.
# La venta en curso vive en un mapping inyectado (la sesión de Flask en la app
# web, un dict en tests) y NO se guarda en pos-sales hasta completarla.
# ==============================================================================

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, MutableMapping, Optional

from pos_system.models import (
    DEFAULT_CUSTOMER_NAME,
    Item,
    Sale,
    SaleItem,
    clean_text,
    normalize_number,
    round_money,
)
from pos_system.performance_logger import log_warning, profile_function
from pos_system.repositories.base import generate_id
from pos_system.repositories.interfaces import ISalesRepository
from pos_system.services.errors import NotFoundError, ValidationError
from pos_system.services.item_service import ItemService


def utc_now_iso() -> str:
    """Fecha actual ISO-8601 en UTC con milisegundos (2024-01-01T10:00:00.000Z)."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_quantity(value: Any, allow_zero: bool = False) -> float:
    """
    Convierte la cantidad ingresada a número.

    Raises:
        ValidationError: Si no es numérica o no es positiva
    """
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Cantidad inválida.")
    if not math.isfinite(quantity) or (quantity <= 0 and not allow_zero):
        raise ValidationError("La cantidad debe ser mayor a 0.")
    return normalize_number(quantity)


class SaleComposer:
    """
    Servicio para armar una venta.

    Responsabilidades:
    - Buscar items por nombre exacto o por índice (entrada rápida por teclado)
    - Sugerencias mientras se escribe
    - Agregar/quitar líneas, acumular cantidades del mismo item
    - Completar la venta (nueva o reemplazando una venta editada)

    Estado guardado en state['current_sale']:
        {'lines': [...], 'customerName': '', 'editingSaleId': None}
    """

    STATE_KEY = 'current_sale'
    # Bandera transitoria que deja el historial para pedir edición de una venta
    EDIT_FLAG_KEY = 'editSaleId'

    def __init__(
        self,
        item_service: ItemService,
        sales_repo: ISalesRepository,
        state: MutableMapping[str, Any]
    ):
        """
        Inicializa el compositor.

        Args:
            item_service: Servicio de items (catálogo actual)
            sales_repo: Repositorio de ventas
            state: Mapping donde vive la venta en curso (ej: flask.session)
        """
        self.item_service = item_service
        self.sales_repo = sales_repo
        self.session = state

    # =========================================================================
    # ESTADO
    # =========================================================================

    def _get_state(self) -> Dict[str, Any]:
        current = self.session.get(self.STATE_KEY) or {}
        return {
            'lines': list(current.get('lines', [])),
            'customerName': current.get('customerName', ''),
            'editingSaleId': current.get('editingSaleId'),
        }

    def _save_state(self, current: Dict[str, Any]) -> None:
        self.session[self.STATE_KEY] = current
        # La sesión de Flask no detecta cambios en objetos anidados
        if hasattr(self.session, 'modified'):
            self.session.modified = True

    def lines(self) -> List[SaleItem]:
        return [SaleItem.from_dict(line) for line in self._get_state()['lines']]

    def total(self) -> float:
        return round_money(sum(line.total for line in self.lines()))

    def state(self) -> Dict[str, Any]:
        """
        Obtiene la venta en curso con totales calculados.

        Returns:
            Dict con items, customerName, editingSaleId, total, items_count
        """
        current = self._get_state()
        lines = self.lines()
        return {
            'items': [line.to_dict() for line in lines],
            'customerName': current['customerName'],
            'editingSaleId': current['editingSaleId'],
            'total': round_money(sum(line.total for line in lines)),
            'items_count': len(lines),
        }

    # =========================================================================
    # BÚSQUEDA
    # =========================================================================

    def lookup(self, term: str) -> Optional[Item]:
        """
        Coincidencia exacta: nombre (sin distinguir mayúsculas) o índice.

        Returns:
            Primer item que coincide o None
        """
        term = clean_text(term)
        if not term:
            return None
        lowered = term.lower()
        for item in self.item_service.list():
            if item.name.lower() == lowered or str(item.index) == term:
                return item
        return None

    def suggestions(self, term: str) -> List[Item]:
        """Items cuyo nombre contiene el término o cuyo índice es el término."""
        term = clean_text(term)
        if not term:
            return []
        lowered = term.lower()
        return [
            item for item in self.item_service.list()
            if lowered in item.name.lower() or str(item.index) == term
        ]

    def enter_search(self, term: str) -> Optional[Item]:
        """
        Enter en el campo de búsqueda: si hay coincidencia exacta la interfaz
        pasa el foco a la cantidad. No modifica la venta.
        """
        return self.lookup(term)

    def enter_quantity(self, term: str, quantity: Any = 1) -> Optional[SaleItem]:
        """
        Enter en el campo de cantidad: agrega la coincidencia exacta y la
        interfaz vuelve el foco a la búsqueda. Sin coincidencia no hace nada.
        """
        item = self.lookup(term)
        if item is None:
            return None
        return self.add_item(item, quantity)

    # =========================================================================
    # LÍNEAS
    # =========================================================================

    def add_item(self, item: Item, quantity: Any = 1) -> SaleItem:
        """
        Agrega un item a la venta. Si ya está, suma la cantidad y recalcula
        el total de la línea con el precio guardado en la línea.

        Raises:
            ValidationError: Cantidad inválida
        """
        quantity = parse_quantity(quantity)
        current = self._get_state()

        for pos, raw in enumerate(current['lines']):
            if raw.get('id') == item.id:
                line = SaleItem.from_dict(raw)
                line.quantity = normalize_number(line.quantity + quantity)
                line.recalculate()
                current['lines'][pos] = line.to_dict()
                break
        else:
            line = SaleItem.from_item(item, quantity)
            current['lines'].append(line.to_dict())

        self._save_state(current)
        return line

    def add_item_by_id(self, item_id: str, quantity: Any = 1) -> SaleItem:
        """
        Raises:
            NotFoundError: El item no existe en el catálogo
        """
        item = self.item_service.get(item_id)
        if item is None:
            raise NotFoundError("Item no encontrado.")
        return self.add_item(item, quantity)

    def update_quantity(self, item_id: str, quantity: Any) -> Optional[SaleItem]:
        """
        Cambia la cantidad de una línea. Cantidad <= 0 elimina la línea.

        Returns:
            Línea actualizada, o None si se eliminó
        """
        quantity = parse_quantity(quantity, allow_zero=True)
        if quantity <= 0:
            self.remove_line(item_id)
            return None

        current = self._get_state()
        for pos, raw in enumerate(current['lines']):
            if raw.get('id') == item_id:
                line = SaleItem.from_dict(raw)
                line.quantity = quantity
                line.recalculate()
                current['lines'][pos] = line.to_dict()
                self._save_state(current)
                return line
        raise NotFoundError("El item no está en la venta.")

    def remove_line(self, item_id: str) -> None:
        current = self._get_state()
        current['lines'] = [l for l in current['lines'] if l.get('id') != item_id]
        self._save_state(current)

    def set_customer_name(self, name: str) -> None:
        current = self._get_state()
        current['customerName'] = clean_text(name)
        self._save_state(current)

    def clear(self) -> None:
        """Descarta la venta en curso (y sale del modo edición)."""
        self._save_state({'lines': [], 'customerName': '', 'editingSaleId': None})

    # =========================================================================
    # EDICIÓN DE VENTAS EXISTENTES
    # =========================================================================

    def consume_edit_request(self, query_sale_id: Optional[str] = None) -> Optional[Sale]:
        """
        Abre en modo edición la venta indicada por parámetro de URL o por la
        bandera transitoria. La bandera se elimina siempre al leerla.
        """
        flagged = self.session.pop(self.EDIT_FLAG_KEY, None)
        sale_id = query_sale_id or flagged
        if not sale_id:
            return None
        return self.load_sale_for_edit(sale_id)

    def load_sale_for_edit(self, sale_id: str) -> Optional[Sale]:
        """
        Precarga las líneas y el cliente de una venta guardada.

        Returns:
            La venta cargada, o None si no existe (el compositor no cambia)
        """
        sale = self.sales_repo.get_sale(sale_id)
        if sale is None:
            log_warning(f"Venta {sale_id} no encontrada para editar")
            return None
        self._save_state({
            'lines': [line.to_dict() for line in sale.items],
            'customerName': sale.customerName,
            'editingSaleId': sale.id,
        })
        return sale

    # =========================================================================
    # COMPLETAR
    # =========================================================================

    @profile_function(name="Completar venta")
    def complete_sale(self) -> Optional[Sale]:
        """
        Registra la venta en curso.
        - Sin líneas: no hace nada y retorna None.
        - Modo edición: reemplaza la venta original (mismo id y fecha).
        - Si no: agrega una venta nueva al final.

        Raises:
            NotFoundError: La venta en edición ya no existe (la venta en curso se conserva)
        """
        current = self._get_state()
        lines = [SaleItem.from_dict(raw) for raw in current['lines']]
        if not lines:
            return None

        customer_name = current['customerName'] or DEFAULT_CUSTOMER_NAME
        editing_id = current['editingSaleId']

        with self.sales_repo.lock:
            if editing_id:
                original = self.sales_repo.get_sale(editing_id)
                if original is None:
                    raise NotFoundError("La venta que se estaba editando ya no existe.")
                sale = Sale(
                    id=original.id,
                    customerName=customer_name,
                    items=lines,
                    date=original.date,
                )
                sale.calculate_total()
                self.sales_repo.update_sale(sale)
            else:
                sale = Sale(
                    id=generate_id(s.id for s in self.sales_repo.load()),
                    customerName=customer_name,
                    items=lines,
                    date=utc_now_iso(),
                )
                sale.calculate_total()
                self.sales_repo.create_sale(sale)

        self.clear()
        return sale
