"""
settings.py - Bridge between Gio.Settings and a config profile

Gio keys are the kebab-case form of the config names:

    LookupTablePageSize   -> lookup-table-page-size
    FuzzyPinyin_C_CH      -> fuzzy-pinyin-c-ch
    AuxiliarySelectKey_KP -> auxiliary-select-key-kp
"""

import logging
import re

import gi
gi.require_version('Gio', '2.0')
from gi.repository import Gio
# http://lazka.github.io/pgi-docs/Gio-2.0/classes/Settings.html

logger = logging.getLogger(__name__)

SCHEMA_ID_PREFIX = 'org.freedesktop.ibus.engine.'


def to_settings_key(name):
    '''
    'LookupTablePageSize' -> 'lookup-table-page-size'
    '''
    key = re.sub(r'(?<=[a-z0-9])(?=[A-Z])', '-', name)
    return key.replace('_', '-').lower()


def new_settings(section):
    '''
    Return the Gio.Settings for the section, or None when the schema is not installed.
    '''
    schema_id = SCHEMA_ID_PREFIX + section
    source = Gio.SettingsSchemaSource.get_default()
    if source is None or source.lookup(schema_id, True) is None:
        logger.warning(f'GSettings schema {schema_id} is not installed')
        return None
    return Gio.Settings.new(schema_id)


class SettingsBridge:
    """
    Keeps one config profile in sync with a Gio.Settings object.

    The settings object is duck-typed: anything with connect('changed', cb),
    get_value(key) and list_keys() (or props.settings_schema.list_keys()) works.
    """

    def __init__(self, config, settings):
        self._config = config
        self._settings = settings
        self._key_to_name = {to_settings_key(name): name for name in config.names()}
        self._handler_id = None

    def _schema_keys(self):
        schema = getattr(self._settings.props, 'settings_schema', None)
        if schema is not None:
            return schema.list_keys()
        return self._settings.list_keys()

    def reader(self, name, fallback):
        '''
        Suitable as the reader of a config profile (see BaseConfig.read_default).
        '''
        key = to_settings_key(name)
        if key not in self._schema_keys():
            return fallback
        return self._settings.get_value(key)

    def start(self):
        '''
        Load every key once, then follow the 'changed' signal.
        '''
        values = dict()
        for key in self._schema_keys():
            name = self._key_to_name.get(key)
            if name is None:
                logger.debug(f'SettingsBridge: key "{key}" has no config field')
                continue
            values[name] = self._settings.get_value(key)
        self._config.load_values(values)
        self._handler_id = self._settings.connect('changed', self._config_value_changed_cb)
        logger.debug(f'SettingsBridge started for {self._config.section}: {len(values)} values')

    def stop(self):
        if self._handler_id is not None:
            self._settings.disconnect(self._handler_id)
            self._handler_id = None

    def _config_value_changed_cb(self, settings, key):
        logger.debug(f'config_value_changed("{key}")')
        name = self._key_to_name.get(key)
        if name is None:
            logger.debug(f'SettingsBridge: key "{key}" has no config field')
            return
        self._config.apply_named_change(self._config.section, name, settings.get_value(key))
