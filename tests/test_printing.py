import os

from pos_system.services import FramePrinter, IPrinter, SpoolPrinter


def test_printers_share_the_interface(tmp_path):
    assert isinstance(FramePrinter(), IPrinter)
    assert isinstance(SpoolPrinter(str(tmp_path)), IPrinter)


def test_frame_printer_page_embeds_document_and_delays():
    page = FramePrinter().print_document('<html><body>INV-1234</body></html>')

    assert 'iframe' in page
    assert 'INV-1234' in page
    assert '.print()' in page
    assert '}, 300);' in page
    assert '}, 1000);' in page
    # the receipt travels as a JS string, never as raw markup in the page
    assert '<body>INV-1234' not in page


def test_spool_printer_writes_then_cleans_up(tmp_path):
    spool = tmp_path / 'spool'
    printer = SpoolPrinter(str(spool), cleanup_delay=60)
    try:
        path = printer.print_document('<p>receipt</p>')
        assert os.path.dirname(path) == str(spool)
        with open(path, encoding='utf-8') as f:
            assert f.read() == '<p>receipt</p>'

        printer.cleanup(path)
        assert not os.path.exists(path)
        printer.cleanup(path)
    finally:
        printer.cancel_pending()


def test_spool_printer_failure_is_swallowed(tmp_path):
    blocker = tmp_path / 'not-a-dir'
    blocker.write_text('file in the way')
    printer = SpoolPrinter(str(blocker), cleanup_delay=60)

    assert printer.print_document('<p>receipt</p>') is None


def test_frame_printer_removes_frame_even_if_print_fails():
    page = FramePrinter().print_document('<p>receipt</p>')

    try_block = page[page.index('try {'):page.index('catch (e)')]
    assert '.print()' in try_block
    assert 'removeChild' not in try_block
    assert page.index('removeChild') > page.index('catch (e)')


def test_spool_printer_forgets_finished_cleanups(tmp_path):
    printer = SpoolPrinter(str(tmp_path / 'spool'), cleanup_delay=60)
    try:
        first = printer.print_document('<p>one</p>')
        second = printer.print_document('<p>two</p>')
        assert sorted(printer.pending()) == sorted([first, second])

        printer.cleanup(first)
        assert printer.pending() == [second]
    finally:
        printer.cancel_pending()
    assert printer.pending() == []
