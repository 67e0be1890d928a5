#!/usr/bin/env python3
# tests/test_settings.py - Unit tests for settings.py

import pytest
import os
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

gi = pytest.importorskip('gi')
try:
    gi.require_version('Gio', '2.0')
    from gi.repository import Gio  # noqa: F401
except (ImportError, ValueError):
    pytest.skip('Gio typelib is not available', allow_module_level=True)

import settings
from config import ChangeResult, PinyinConfig
from settings import SettingsBridge, to_settings_key


class FakeSettings:
    """Minimal Gio.Settings look-alike"""

    def __init__(self, values):
        self._values = dict(values)
        self._callbacks = []
        self.props = SimpleNamespace()

    def list_keys(self):
        return list(self._values)

    def get_value(self, key):
        return self._values[key]

    def connect(self, signal, callback):
        assert signal == 'changed'
        self._callbacks.append(callback)
        return len(self._callbacks)

    def disconnect(self, handler_id):
        self._callbacks[handler_id - 1] = None

    def set(self, key, value):
        self._values[key] = value
        for callback in self._callbacks:
            if callback is not None:
                callback(self, key)


class TestToSettingsKey:
    """Test suite for to_settings_key()"""

    @pytest.mark.parametrize('name, key', [
        ('LookupTablePageSize', 'lookup-table-page-size'),
        ('FuzzyPinyin_C_CH', 'fuzzy-pinyin-c-ch'),
        ('CorrectPinyin_AN_ANG', 'correct-pinyin-an-ang'),
        ('AuxiliarySelectKey_KP', 'auxiliary-select-key-kp'),
        ('InitSimplifiedChinese', 'init-simplified-chinese'),
        ('DoublePinyinShowRaw', 'double-pinyin-show-raw'),
    ])
    def test_conversion(self, name, key):
        assert to_settings_key(name) == key

    def test_keys_are_unique(self):
        names = PinyinConfig().names()
        assert len({to_settings_key(name) for name in names}) == len(names)


class TestSettingsBridge:
    """Test suite for SettingsBridge"""

    def test_start_loads_values(self):
        config = PinyinConfig(dictionary=MagicMock())
        gsettings = FakeSettings({
            'lookup-table-page-size': 8,
            'fuzzy-pinyin': True,
            'import-dictionary': '/tmp/x',
            'unrelated-key': 3,
        })
        SettingsBridge(config, gsettings).start()

        assert config.page_size == 8
        assert config.option_mask & 0x3FF << 9
        config._dictionary.import_dictionary.assert_not_called()

    def test_changed_signal(self):
        config = PinyinConfig(dictionary=MagicMock())
        gsettings = FakeSettings({'lookup-table-page-size': 5, 'export-dictionary': ''})
        SettingsBridge(config, gsettings).start()

        gsettings.set('lookup-table-page-size', 99)
        assert config.page_size == 5
        gsettings.set('lookup-table-page-size', 4)
        assert config.page_size == 4
        gsettings.set('export-dictionary', '/tmp/out')
        config._dictionary.export_dictionary.assert_called_once_with('/tmp/out')

    def test_stop(self):
        config = PinyinConfig()
        gsettings = FakeSettings({'auto-commit': False})
        bridge = SettingsBridge(config, gsettings)
        bridge.start()
        bridge.stop()

        gsettings.set('auto-commit', True)
        assert config.auto_commit is False

    def test_reader(self):
        config = PinyinConfig()
        bridge = SettingsBridge(config, FakeSettings({'lookup-table-orientation': 1}))

        assert bridge.reader('LookupTableOrientation', 0) == 1
        assert bridge.reader('LookupTablePageSize', 5) == 5

    def test_reader_drives_read_default_values(self):
        gsettings = FakeSettings({'lookup-table-page-size': 12, 'double-pinyin': True})
        holder = {}
        config = PinyinConfig(reader=lambda name, fallback: holder['bridge'].reader(name, fallback))
        holder['bridge'] = SettingsBridge(config, gsettings)

        config.read_default_values()
        assert config.page_size == 5
        assert config.double_pinyin is True

    def test_new_settings_without_schema(self, monkeypatch):
        source = MagicMock()
        source.lookup.return_value = None
        monkeypatch.setattr(settings.Gio.SettingsSchemaSource, 'get_default', lambda: source)

        assert settings.new_settings('pinyin') is None

    def test_apply_uses_config_section(self):
        config = MagicMock()
        config.names.return_value = ['AutoCommit']
        config.section = 'pinyin'
        config.apply_named_change.return_value = ChangeResult.CHANGED
        gsettings = FakeSettings({'auto-commit': False})
        SettingsBridge(config, gsettings).start()

        gsettings.set('auto-commit', True)
        config.apply_named_change.assert_called_once_with('pinyin', 'AutoCommit', True)
