from datetime import datetime, timezone

from pos_system.models import BusinessSettings, Sale, SaleItem
from pos_system.services import render_receipt


def _sale():
    lines = [
        SaleItem(id='1', name='Milk', price=2.5, category='Dairy', unit='liter', index=1, quantity=2),
        SaleItem(id='2', name='Cheese', price=4, category='Dairy', unit='kg', index=2, quantity=0.5),
    ]
    sale = Sale(id='1700000009876', customerName='Ana', items=lines, date='2024-03-05T10:15:00.000Z')
    sale.calculate_total()
    return sale


def test_default_settings_receipt():
    html = render_receipt(_sale(), BusinessSettings())

    assert 'POS System' in html
    assert 'CASH SALE INVOICE' in html
    assert 'INV-9876' in html
    assert '05/03/2024 10:15' in html
    assert 'Ana' in html
    assert '2 liter' in html
    assert '0.5 kg' in html
    assert '5.00' in html
    assert 'PKR 7.00' in html
    assert 'Thank you for your business!' in html
    assert 'Visit us again' in html
    assert '<body class="layout1">' in html
    assert '@page' in html


def test_business_profile_on_receipt():
    settings = BusinessSettings(
        businessName='Corner Shop',
        address='12 Main St',
        phone='555-1234',
        email='shop@example.com',
        headerText='Open 24/7',
        footerText='No refunds',
        paymentText='Pay by QR',
        paymentQR='data:image/png;base64,AAAA',
        currency='USD',
        receiptLayout='layout4',
    )
    html = render_receipt(_sale(), settings)

    assert 'Corner Shop' in html
    assert 'POS System' not in html
    assert '12 Main St' in html
    assert '555-1234 | shop@example.com' in html
    assert 'Open 24/7' in html
    assert 'No refunds' in html
    assert 'Pay by QR' in html
    assert 'data:image/png;base64,AAAA' in html
    assert 'USD 7.00' in html
    assert '<body class="layout4">' in html


def test_contact_line_without_email():
    html = render_receipt(_sale(), BusinessSettings(phone='555-1234'))
    assert '555-1234' in html
    assert '555-1234 |' not in html


def test_text_is_escaped():
    sale = _sale()
    sale.customerName = '<script>alert(1)</script>'
    html = render_receipt(sale, BusinessSettings())
    assert '<script>alert(1)</script>' not in html
    assert '&lt;script&gt;' in html


def test_in_progress_cart_gets_timestamp_invoice():
    cart = {
        'items': [_sale().items[0].to_dict()],
        'customerName': '',
    }
    now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    html = render_receipt(cart, BusinessSettings(), now=now)

    expected_id = str(int(now.timestamp() * 1000))
    assert f'INV-{expected_id[-4:]}' in html
    assert 'Walk-in Customer' in html
    assert 'PKR 5.00' in html


def test_unknown_layout_falls_back():
    html = render_receipt(_sale(), BusinessSettings(receiptLayout='fancy'))
    assert '<body class="layout1">' in html


def test_retro_layout_styles_the_body():
    html = render_receipt(_sale(), BusinessSettings(receiptLayout='layout10'))
    assert '<body class="layout10">' in html
    assert 'body.layout10' in html
