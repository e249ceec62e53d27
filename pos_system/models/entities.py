# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Diseñadas para ser independientes del mecanismo de persistencia.
# Los nombres de campo en to_dict() respetan el formato JSON guardado
# (camelCase: customerName, footerLogo, ...).
# ==============================================================================

from dataclasses import dataclass, field, fields
from typing import Optional, List, Dict, Any
from enum import Enum


# ==============================================================================
# ENUMERACIONES Y CONSTANTES
# ==============================================================================

class Unit(str, Enum):
    """Unidades de medida disponibles para un item."""
    KG = "kg"
    GRAM = "gram"
    LITER = "liter"
    ML = "ml"
    PIECE = "piece"
    DOZEN = "dozen"
    BOX = "box"
    PACK = "pack"


VALID_UNITS = tuple(u.value for u in Unit)
DEFAULT_UNIT = Unit.PIECE.value

# Monedas ofrecidas en la configuración del negocio
CURRENCIES = {
    'PKR': 'Pakistani Rupee',
    'USD': 'US Dollar',
    'EUR': 'Euro',
    'GBP': 'British Pound',
    'INR': 'Indian Rupee',
    'AED': 'UAE Dirham',
    'SAR': 'Saudi Riyal',
    'QAR': 'Qatari Riyal',
}
DEFAULT_CURRENCY = 'PKR'

# Diseños de boleta seleccionables
RECEIPT_LAYOUTS = {
    'layout1': 'Modern Clean',
    'layout2': 'Professional Table',
    'layout3': 'Minimal Simple',
    'layout4': 'Dark Header',
    'layout5': 'Elegant Boutique',
    'layout6': 'Boxed Corporate',
    'layout7': 'Gradient Premium',
    'layout8': 'Bold Impact',
    'layout9': 'Luxury Gold',
    'layout10': 'Retro Classic',
}
DEFAULT_LAYOUT = 'layout1'

DEFAULT_CUSTOMER_NAME = "Walk-in Customer"

# Campos de imagen (data URL) dentro de Settings
IMAGE_FIELDS = frozenset(['logo', 'footerLogo', 'paymentQR'])
MAX_IMAGE_BYTES = 2 * 1024 * 1024  # 2 MB


def round_money(value: float) -> float:
    """Redondeo monetario a 2 decimales."""
    return round(float(value), 2)


def clean_text(value: Any) -> str:
    """Texto ingresado sin espacios extremos. None -> '', números -> str."""
    if value is None:
        return ''
    return str(value).strip()


def normalize_number(value: float):
    """Devuelve int si el valor es entero (2.0 -> 2), si no el float."""
    value = float(value)
    return int(value) if value.is_integer() else value


# ==============================================================================
# CATÁLOGO
# ==============================================================================

@dataclass
class Category:
    """
    Categoría del catálogo.

    Attributes:
        id: Identificador (timestamp de creación en ms)
        name: Nombre único (sin distinguir mayúsculas)
    """
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(id=str(data.get('id', '')), name=data.get('name', ''))


@dataclass
class Item:
    """
    Item vendible del catálogo.

    Attributes:
        id: Identificador (timestamp de creación en ms)
        name: Nombre del item
        price: Precio unitario (> 0)
        category: Nombre de la categoría a la que pertenece
        unit: Unidad de medida (ver Unit)
        index: Posición 1..N, se renumera al eliminar
    """
    id: str
    name: str
    price: float
    category: str
    unit: str = DEFAULT_UNIT
    index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'category': self.category,
            'unit': self.unit,
            'index': self.index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Item':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=float(data.get('price', 0.0)),
            category=data.get('category', ''),
            unit=data.get('unit', DEFAULT_UNIT),
            index=int(data.get('index', 0)),
        )


# ==============================================================================
# VENTAS
# ==============================================================================

@dataclass
class SaleItem:
    """
    Línea de venta: copia (snapshot) del item al momento de vender,
    más la cantidad y el subtotal. Editar el catálogo después no la afecta.
    """
    id: str
    name: str
    price: float
    category: str
    unit: str
    index: int
    quantity: float = 1
    total: float = 0.0

    def __post_init__(self):
        """Calcula el total si no fue proporcionado."""
        if not self.total:
            self.recalculate()

    def recalculate(self) -> None:
        self.total = round_money(self.quantity * self.price)

    @classmethod
    def from_item(cls, item: Item, quantity: float = 1) -> 'SaleItem':
        """Toma la foto del item del catálogo."""
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            category=item.category,
            unit=item.unit,
            index=item.index,
            quantity=normalize_number(quantity),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'category': self.category,
            'unit': self.unit,
            'index': self.index,
            'quantity': self.quantity,
            'total': self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleItem':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=float(data.get('price', 0.0)),
            category=data.get('category', ''),
            unit=data.get('unit', DEFAULT_UNIT),
            index=int(data.get('index', 0)),
            quantity=normalize_number(data.get('quantity', 1)),
            total=float(data.get('total', 0.0)),
        )


@dataclass
class Sale:
    """
    Venta completada.

    Attributes:
        id: Identificador (timestamp de creación en ms)
        customerName: Nombre del cliente (por defecto "Walk-in Customer")
        items: Líneas de venta (snapshots)
        total: Suma de los totales de línea
        date: Fecha ISO-8601 (UTC) de creación
    """
    id: str
    customerName: str = DEFAULT_CUSTOMER_NAME
    items: List[SaleItem] = field(default_factory=list)
    total: float = 0.0
    date: str = ''

    def calculate_total(self) -> float:
        """Recalcula el total a partir de las líneas."""
        self.total = round_money(sum(item.total for item in self.items))
        return self.total

    @property
    def invoice_no(self) -> str:
        """Número de boleta visible: INV- + últimos 4 caracteres del id."""
        return f"INV-{self.id[-4:]}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customerName': self.customerName,
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'date': self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        return cls(
            id=str(data.get('id', '')),
            customerName=data.get('customerName') or DEFAULT_CUSTOMER_NAME,
            items=[SaleItem.from_dict(i) for i in data.get('items', [])],
            total=float(data.get('total', 0.0)),
            date=data.get('date', ''),
        )


# ==============================================================================
# CONFIGURACIÓN DEL NEGOCIO
# ==============================================================================

@dataclass
class BusinessSettings:
    """
    Perfil del negocio: un único registro sin id, se sobrescribe completo.
    """
    businessName: str = ''
    ownerName: str = ''
    address: str = ''
    phone: str = ''
    email: str = ''
    logo: str = ''
    footerLogo: str = ''
    paymentQR: str = ''
    paymentText: str = ''
    receiptLayout: str = DEFAULT_LAYOUT
    currency: str = DEFAULT_CURRENCY
    headerText: str = ''
    footerText: str = ''
    thankYouText: str = "Thank you for your business!"
    visitAgainText: str = "Visit us again"

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'BusinessSettings':
        """Valores por defecto superpuestos con lo guardado (ignora claves extra)."""
        data = data or {}
        known = {
            name: data[name] for name in cls.field_names()
            if name in data and data[name] is not None
        }
        return cls(**known)
