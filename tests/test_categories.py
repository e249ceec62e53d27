import pytest

from pos_system.services import (
    ConfirmationRequiredError,
    NotFoundError,
    ValidationError,
)


def test_create_and_list(container):
    service = container.category_service
    dairy = service.create('  Dairy ')
    assert dairy.name == 'Dairy'
    assert [c.name for c in service.list()] == ['Dairy']


def test_empty_name_rejected(container):
    with pytest.raises(ValidationError):
        container.category_service.create('   ')
    assert container.category_service.list() == []


def test_duplicate_name_is_case_insensitive(container):
    service = container.category_service
    service.create('Dairy')
    with pytest.raises(ValidationError):
        service.create('dairy')
    assert len(service.list()) == 1


def test_rename_to_own_name_allowed(container):
    service = container.category_service
    dairy = service.create('Dairy')
    renamed = service.update(dairy.id, 'DAIRY')
    assert renamed.name == 'DAIRY'


def test_rename_to_other_existing_name_rejected(container):
    service = container.category_service
    service.create('Dairy')
    bakery = service.create('Bakery')
    with pytest.raises(ValidationError):
        service.update(bakery.id, 'Dairy')
    assert service.category_repo.get_category(bakery.id).name == 'Bakery'


def test_rename_moves_items_to_new_name(container, dairy):
    category = container.category_service.list()[0]
    container.category_service.update(category.id, 'Milk Products')
    assert {i.category for i in container.item_service.list()} == {'Milk Products'}


def test_update_unknown_category(container):
    with pytest.raises(NotFoundError):
        container.category_service.update('nope', 'Dairy')


def test_delete_requires_confirmation(container):
    service = container.category_service
    dairy = service.create('Dairy')
    with pytest.raises(ConfirmationRequiredError):
        service.delete(dairy.id)
    assert len(service.list()) == 1

    service.delete(dairy.id, confirmed=True)
    assert service.list() == []


def test_delete_rejected_while_items_use_it(container, dairy):
    service = container.category_service
    category = service.list()[0]
    before = service.category_repo.get_all()

    with pytest.raises(ValidationError):
        service.delete(category.id, confirmed=True)

    assert service.category_repo.get_all() == before


def test_delete_allowed_after_items_removed(container, dairy):
    milk, cheese = dairy
    container.item_service.delete(milk.id, confirmed=True)
    container.item_service.delete(cheese.id, confirmed=True)
    category = container.category_service.list()[0]
    container.category_service.delete(category.id, confirmed=True)
    assert container.category_service.list() == []


def test_rename_unknown_category_to_taken_name_is_not_found(container):
    container.category_service.create('Dairy')
    with pytest.raises(NotFoundError):
        container.category_service.update('nope', 'dairy')


def test_numeric_name_is_stored_as_text(container):
    assert container.category_service.create(5).name == '5'
