"""
Unit Tests for Client Storage
=============================
"""
import pytest
import sys
import os

os.environ.setdefault('VERBOSE_DEBUG', 'false')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nyay_sahayak.storage.connection import Database
from nyay_sahayak.storage.client_storage import ClientStorage


@pytest.fixture
def database(tmp_path):
    db = Database(tmp_path / 'storage.db')
    yield db
    db.close()


class TestClientStorage:
    """Test namespaced key-value storage."""

    def test_get_missing(self, database):
        storage = ClientStorage('client-a', database)
        assert storage.get('missing') is None

    def test_set_get_remove(self, database):
        storage = ClientStorage('client-a', database)
        storage.set('nyaySahayakLanguage', 'hi')
        assert storage.get('nyaySahayakLanguage') == 'hi'

        storage.set('nyaySahayakLanguage', 'ta')
        assert storage.get('nyaySahayakLanguage') == 'ta'

        storage.remove('nyaySahayakLanguage')
        assert storage.get('nyaySahayakLanguage') is None

    def test_namespaces_are_isolated(self, database):
        first = ClientStorage('client-a', database)
        second = ClientStorage('client-b', database)

        first.set('key', 'one')
        assert second.get('key') is None

    def test_json_values(self, database):
        storage = ClientStorage('client-a', database)
        storage.set_json('user', {'id': '1', 'name': 'न्याय'})
        assert storage.get_json('user') == {'id': '1', 'name': 'न्याय'}

    def test_malformed_json_returns_default(self, database):
        storage = ClientStorage('client-a', database)
        storage.set('user', '{not json')
        assert storage.get_json('user') is None
        assert storage.get_json('user', {}) == {}

    def test_values_survive_new_storage_object(self, database):
        ClientStorage('client-a', database).set('key', 'kept')
        assert ClientStorage('client-a', database).get('key') == 'kept'
