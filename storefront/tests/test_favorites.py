# -*- coding: utf-8 -*-
"""
Favoritos: alternar, toasts y consultas invalidadas.
"""


def test_double_toggle_restores_original_state(container, customer, products):
    service = container.favorite_service

    first = service.toggle_favorite(customer, 1)
    second = service.toggle_favorite(customer, 1)

    assert first['data'] == {'product_id': 1, 'is_favorite': True}
    assert first['toast']['title'] == '찜 추가 완료'
    assert second['data'] == {'product_id': 1, 'is_favorite': False}
    assert second['toast']['title'] == '찜 제거 완료'
    assert not service.is_favorited(customer, 1).data


def test_anonymous_toggle_never_reaches_repository(container, products):
    result = container.favorite_service.toggle_favorite(None, 1)

    assert result['error'] == 'auth_required'
    assert result['toast']['description'] == '찜 기능을 사용하려면 로그인해주세요.'
    assert container.favorite_repo.get_all() == []


def test_anonymous_is_never_favorited(container):
    assert container.favorite_service.is_favorited(None, 1).data is False


def test_favorites_list_refreshes_after_toggle(container, customer, products):
    service = container.favorite_service
    assert service.get_favorites(customer).data == []

    service.toggle_favorite(customer, 1)
    assert service.is_favorited(customer, 1).data is True

    favorites = service.get_favorites(customer).data
    assert [f['product_id'] for f in favorites] == [1]
    assert favorites[0]['product']['name_ko'] == '딸기 케이크'


def test_repository_failure_gives_error_toast(container, customer, products, monkeypatch, capsys):
    def broken(*args, **kwargs):
        raise OSError('sin espacio')

    monkeypatch.setattr(container.favorite_repo, 'add', broken)
    result = container.favorite_service.toggle_favorite(customer, 1)

    assert result['error'] == 'remote'
    assert result['toast']['title'] == '오류 발생'
    assert '[ERROR FAVORITO]' in capsys.readouterr().out
    assert not container.favorite_service.is_pending('toggle_favorite', (customer.id, 1))
