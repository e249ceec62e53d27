import json
import os

from pos_system.models import Category
from pos_system.repositories import (
    ICategoryRepository,
    IDictRepository,
    IItemRepository,
    IListRepository,
    ISalesRepository,
    ISettingsRepository,
    generate_id,
)


def test_generate_id_bumps_on_collision():
    assert generate_id([], now_ms=1000) == '1000'
    assert generate_id(['1000', '1001'], now_ms=1000) == '1002'


def test_repositories_match_interfaces(container):
    assert isinstance(container.category_repo, ICategoryRepository)
    assert isinstance(container.category_repo, IListRepository)
    assert isinstance(container.item_repo, IItemRepository)
    assert isinstance(container.sales_repo, ISalesRepository)
    assert isinstance(container.settings_repo, ISettingsRepository)
    assert isinstance(container.settings_repo, IDictRepository)


def test_one_json_file_per_key(container):
    container.category_repo.save([Category(id='1', name='Dairy')])
    container.settings_repo.save({'businessName': 'Corner Shop'})

    files = sorted(os.listdir(container.base_path))
    assert files == ['pos-categories.json', 'pos-settings.json']

    with open(container.category_repo.file_path, encoding='utf-8') as f:
        assert json.load(f) == [{'id': '1', 'name': 'Dairy'}]


def test_wrong_shape_reads_as_empty(container):
    with open(container.settings_repo.file_path, 'w', encoding='utf-8') as f:
        json.dump(['not', 'an', 'object'], f)
    assert container.settings_repo.load() == {}


def test_clear_removes_key(container):
    container.settings_repo.save({'currency': 'USD'})
    container.settings_repo.clear()
    assert not container.settings_repo.exists()
    container.settings_repo.clear()


def test_undecodable_file_reads_as_empty(container):
    with open(container.item_repo.file_path, 'wb') as f:
        f.write(b'\xff\xfe\x00garbage')
    assert container.item_repo.load() == []
    assert container.item_service.list() == []
