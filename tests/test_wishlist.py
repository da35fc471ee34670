import pytest

from storefront.errors import BusinessRuleError, NotFoundError, ValidationError
from storefront.models import Wishlist
from storefront.models.wishlist import DEFAULT_WISHLIST_NAME
from storefront.services import wishlist as wishlist_service


# --- service ---

def test_default_wishlist_is_created_once(app):
    first = wishlist_service.get_or_create_default('u1')
    second = wishlist_service.get_or_create_default('u1')
    assert first.id == second.id
    assert first.name == DEFAULT_WISHLIST_NAME
    assert Wishlist.query.filter_by(user_id='u1').count() == 1


def test_get_wishlists_ensures_default_and_orders_oldest_first(app):
    wishlists = wishlist_service.get_wishlists('u1')
    assert [w.name for w in wishlists] == [DEFAULT_WISHLIST_NAME]

    wishlist_service.create_wishlist('u1', 'Birthday')
    assert [w.name for w in wishlist_service.get_wishlists('u1')] == \
        [DEFAULT_WISHLIST_NAME, 'Birthday']


def test_default_wishlist_cannot_be_deleted(app):
    default = wishlist_service.get_or_create_default('u1')
    with pytest.raises(BusinessRuleError):
        wishlist_service.delete_wishlist(default.id)
    with pytest.raises(BusinessRuleError):
        wishlist_service.delete_wishlist(default.id)


def test_default_name_is_reserved(app):
    default = wishlist_service.get_or_create_default('u1')
    with pytest.raises(ValidationError):
        wishlist_service.create_wishlist('u1', DEFAULT_WISHLIST_NAME)
    with pytest.raises(ValidationError):
        wishlist_service.update_wishlist(default.id, name='Renamed')

    other = wishlist_service.create_wishlist('u1', 'Gifts')
    with pytest.raises(ValidationError):
        wishlist_service.update_wishlist(other.id, name=DEFAULT_WISHLIST_NAME)


def test_update_and_delete_wishlist(app):
    wishlist = wishlist_service.create_wishlist('u1', 'Gifts')
    updated = wishlist_service.update_wishlist(wishlist.id, name='Presents', is_public=True)
    assert (updated.name, updated.is_public) == ('Presents', True)

    assert wishlist_service.delete_wishlist(wishlist.id) is True
    with pytest.raises(NotFoundError):
        wishlist_service.delete_wishlist(wishlist.id)


def test_add_item_is_idempotent_per_product(make_product):
    product = make_product()
    default = wishlist_service.get_or_create_default('u1')

    first = wishlist_service.add_item(default.id, product.id, notes='for later')
    again = wishlist_service.add_item(default.id, product.id)
    assert again.id == first.id
    assert again.notes == 'for later'

    noted = wishlist_service.add_item(default.id, product.id, notes='gift')
    assert noted.notes == 'gift'
    assert len(wishlist_service.get_wishlist(default.id).items) == 1


def test_add_item_requires_product_and_wishlist(make_product):
    default = wishlist_service.get_or_create_default('u1')
    with pytest.raises(NotFoundError):
        wishlist_service.add_item(default.id, 'missing-product')
    with pytest.raises(NotFoundError):
        wishlist_service.add_item('missing-wishlist', make_product().id)


def test_remove_item_is_scoped_to_its_wishlist(make_product):
    product = make_product()
    default = wishlist_service.get_or_create_default('u1')
    other = wishlist_service.create_wishlist('u1', 'Other')
    item = wishlist_service.add_item(default.id, product.id)

    with pytest.raises(NotFoundError):
        wishlist_service.remove_item(other.id, item.id)
    assert wishlist_service.remove_item(default.id, item.id) is True


# --- API ---

def test_wishlist_requires_authentication(client):
    assert client.get('/api/wishlist').status_code == 401


def test_wishlist_api_flow(client, auth_headers, make_product):
    headers = auth_headers('u1')
    product = make_product(image_url='/p.jpg')

    listing = client.get('/api/wishlist', headers=headers).get_json()
    assert len(listing) == 1
    default = listing[0]
    assert default['is_default'] is True
    assert default['item_count'] == 0

    response = client.post(f"/api/wishlist/{default['id']}/items",
                           json={'product_id': product.id, 'notes': 'black one'},
                           headers=headers)
    assert response.status_code == 201
    item = response.get_json()
    assert item['product']['images'][0]['image_url'] == '/p.jpg'

    detail = client.get(f"/api/wishlist/{default['id']}", headers=headers).get_json()
    assert detail['item_count'] == 1
    assert detail['items'][0]['notes'] == 'black one'

    response = client.delete(f"/api/wishlist/{default['id']}/items/{item['id']}",
                             headers=headers)
    assert response.status_code == 204

    response = client.delete(f"/api/wishlist/{default['id']}", headers=headers)
    assert response.status_code == 409
    assert response.get_json()['error'] == 'BUSINESS_RULE'


def test_create_update_delete_via_api(client, auth_headers):
    headers = auth_headers('u1')
    response = client.post('/api/wishlist', json={'name': 'Gadgets', 'is_public': True},
                           headers=headers)
    assert response.status_code == 201
    wishlist = response.get_json()
    assert wishlist['is_public'] is True

    response = client.put(f"/api/wishlist/{wishlist['id']}", json={'is_public': False},
                          headers=headers)
    assert response.status_code == 200
    assert response.get_json()['is_public'] is False
    assert response.get_json()['name'] == 'Gadgets'

    assert client.post('/api/wishlist', json={}, headers=headers).status_code == 400
    response = client.post('/api/wishlist', json={'name': DEFAULT_WISHLIST_NAME},
                           headers=headers)
    assert response.status_code == 400

    response = client.delete(f"/api/wishlist/{wishlist['id']}", headers=headers)
    assert response.status_code == 204
    assert client.get(f"/api/wishlist/{wishlist['id']}", headers=headers).status_code == 404


def test_visibility_and_ownership(client, auth_headers, make_product):
    owner, stranger = auth_headers('owner'), auth_headers('stranger')
    private = client.post('/api/wishlist', json={'name': 'Private'}, headers=owner).get_json()
    public = client.post('/api/wishlist', json={'name': 'Public', 'is_public': True},
                         headers=owner).get_json()

    assert client.get(f"/api/wishlist/{private['id']}", headers=stranger).status_code == 403
    assert client.get(f"/api/wishlist/{public['id']}", headers=stranger).status_code == 200

    product = make_product()
    response = client.post(f"/api/wishlist/{public['id']}/items",
                           json={'product_id': product.id}, headers=stranger)
    assert response.status_code == 403
    response = client.put(f"/api/wishlist/{public['id']}", json={'name': 'Mine now'},
                          headers=stranger)
    assert response.status_code == 403
    assert client.delete(f"/api/wishlist/{public['id']}", headers=stranger).status_code == 403
