#!/usr/bin/env python3
# tests/test_main.py - Unit tests for main.py

import pytest
import os
import sys
from types import SimpleNamespace

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

gi = pytest.importorskip('gi')
try:
    gi.require_version('IBus', '1.0')
    gi.require_version('Gio', '2.0')
    from gi.repository import IBus  # noqa: F401
    import main
except (ImportError, ValueError):
    pytest.skip('IBus typelib is not available', allow_module_level=True)

from config import BopomofoConfig, PinyinConfig


class FakeSettings:
    def __init__(self, values):
        self._values = values
        self.props = SimpleNamespace()

    def list_keys(self):
        return list(self._values)

    def get_value(self, key):
        return self._values[key]

    def connect(self, signal, callback):
        return 1

    def disconnect(self, handler_id):
        pass


class TestCreateConfigs:
    """Test suite for create_configs()"""

    def test_profiles_created_with_store_values(self, monkeypatch):
        stores = {
            'pinyin': FakeSettings({'lookup-table-page-size': 9, 'init-full': True}),
            'bopomofo': None,
        }
        monkeypatch.setattr(main.settings, 'new_settings', lambda section: stores[section])

        configs, bridges = main.create_configs()

        assert isinstance(configs['pinyin'], PinyinConfig)
        assert isinstance(configs['bopomofo'], BopomofoConfig)
        assert configs['pinyin'].page_size == 9
        assert configs['pinyin'].init_full is True
        assert configs['bopomofo'].page_size == 5
        assert len(bridges) == 1

    def test_without_schemas(self, monkeypatch):
        monkeypatch.setattr(main.settings, 'new_settings', lambda section: None)

        configs, bridges = main.create_configs()

        assert configs['pinyin'].page_size == 5
        assert bridges == []
