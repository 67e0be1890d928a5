#!/usr/bin/env python3
"""
config.py - Engine options kept in sync with the external settings store
引擎选项，与外部设置存储保持同步

================================================================================
OVERVIEW / 概要
================================================================================

Each profile (pinyin, bopomofo) owns:

每个配置（拼音、注音）包含:

    option_bits  : one bit per linguistic feature (incomplete pinyin,
                   fuzzy pairs, dynamic adjust, corrections)
                   每个语言特性一位（不完整拼音、模糊音、动态调整、纠错）
    option_mask  : bits the user may override. The FuzzyPinyin and
                   CorrectPinyin settings switch whole groups in the mask
                   without touching the stored bits.
                   用户可以覆盖的位。FuzzyPinyin 和 CorrectPinyin
                   设置整组开关掩码，不改变已存储的位。
    scalar fields: page size, orientation, switches, schemes, ...
                   标量字段：页大小、方向、快捷键、方案……

Every setting name maps to exactly one field, one umbrella or one option
row, except the three action names (ImportDictionary, ExportDictionary,
ClearUserData) which are forwarded to the DictionaryManager.

================================================================================
SCHEMAS / 模式
================================================================================

The tables are data: a Schema is (fields, umbrellas, option rows, actions).
A profile lists its schemas, base first. A change is offered to each schema
in turn, so the base schema always gets the first chance.

    BaseConfig      : BASE_SCHEMA
    PinyinConfig    : BASE_SCHEMA, PINYIN_SCHEMA
    BopomofoConfig  : BASE_SCHEMA, BOPOMOFO_SCHEMA

================================================================================
MALFORMED VALUES / 无效值
================================================================================

Nothing here raises on bad input. A value of the wrong type becomes the
field's fallback, out-of-range scalars are replaced by a fixed value and
an unknown scheme index resolves to the DEFAULT scheme.
================================================================================
"""

from collections import namedtuple
import enum
import logging
import threading

from dictionary import LoggingDictionaryManager

logger = logging.getLogger(__name__)


class ChangeResult(enum.Enum):
    CHANGED = 'changed'
    NOT_MY_FIELD = 'not-my-field'
    WRONG_SECTION = 'wrong-section'


# option bits
PINYIN_INCOMPLETE       = 1 << 1
CHEWING_INCOMPLETE      = 1 << 2
DYNAMIC_ADJUST          = 1 << 6

PINYIN_AMB_C_CH         = 1 << 9
PINYIN_AMB_Z_ZH         = 1 << 10
PINYIN_AMB_S_SH         = 1 << 11
PINYIN_AMB_L_N          = 1 << 12
PINYIN_AMB_F_H          = 1 << 13
PINYIN_AMB_L_R          = 1 << 14
PINYIN_AMB_G_K          = 1 << 15
PINYIN_AMB_AN_ANG       = 1 << 16
PINYIN_AMB_EN_ENG       = 1 << 17
PINYIN_AMB_IN_ING       = 1 << 18
PINYIN_AMB_ALL          = 0x3FF << 9

PINYIN_CORRECT_GN_NG    = 1 << 21
PINYIN_CORRECT_MG_NG    = 1 << 22
PINYIN_CORRECT_IOU_IU   = 1 << 23
PINYIN_CORRECT_UEI_UI   = 1 << 24
PINYIN_CORRECT_UEN_UN   = 1 << 25
PINYIN_CORRECT_UE_VE    = 1 << 26
PINYIN_CORRECT_V_U      = 1 << 27
PINYIN_CORRECT_ON_ONG   = 1 << 28
PINYIN_CORRECT_ALL      = 0xFF << 21

PINYIN_DEFAULT_OPTION = PINYIN_INCOMPLETE | CHEWING_INCOMPLETE | PINYIN_CORRECT_ALL
PINYIN_DEFAULT_OPTION_MASK = PINYIN_INCOMPLETE | CHEWING_INCOMPLETE | PINYIN_CORRECT_ALL

# lookup table orientation (same values as IBus.Orientation)
ORIENTATION_HORIZONTAL = 0
ORIENTATION_VERTICAL = 1

DEFAULT_PAGE_SIZE = 5
MAX_PAGE_SIZE = 10
MAX_SELECT_KEYS = 9


class DoublePinyinScheme(enum.Enum):
    MS = 'ms'
    ZRM = 'zrm'
    ABC = 'abc'
    ZIGUANG = 'ziguang'
    PYJJ = 'pyjj'
    XHE = 'xhe'
    DEFAULT = 'default'


class ChewingScheme(enum.Enum):
    STANDARD = 'standard'
    GINYIEH = 'ginyieh'
    ETEN = 'eten'
    IBM = 'ibm'
    DEFAULT = 'default'


# index stored in the settings store -> scheme
DOUBLE_PINYIN_SCHEMES = {
    0: DoublePinyinScheme.MS,
    1: DoublePinyinScheme.ZRM,
    2: DoublePinyinScheme.ABC,
    3: DoublePinyinScheme.ZIGUANG,
    4: DoublePinyinScheme.PYJJ,
    5: DoublePinyinScheme.XHE,
}

CHEWING_SCHEMES = {
    0: ChewingScheme.STANDARD,
    1: ChewingScheme.GINYIEH,
    2: ChewingScheme.ETEN,
    3: ChewingScheme.IBM,
}


Field = namedtuple('Field', ['name', 'attr', 'default', 'check', 'initial'], defaults=(None, None))
Umbrella = namedtuple('Umbrella', ['name', 'mask', 'default'])
OptionRow = namedtuple('OptionRow', ['name', 'option', 'default'])
Action = namedtuple('Action', ['name', 'method'])
Schema = namedtuple('Schema', ['fields', 'umbrellas', 'options', 'actions'])


def _option(name, option):
    return OptionRow(name, option, (option & PINYIN_DEFAULT_OPTION) != 0)


def unpack_value(value):
    '''
    Values coming straight from Gio.Settings are GLib.Variant objects.
    '''
    if hasattr(value, 'unpack'):
        return value.unpack()
    return value


def normalize_value(value, fallback):
    """Return value when it has the type of fallback, else fallback.

    bool and int are told apart: True is not accepted for an int field
    and 1 is not accepted for a bool field.
    """
    value = unpack_value(value)
    if value is None:
        return fallback
    if isinstance(fallback, bool):
        return value if isinstance(value, bool) else fallback
    if isinstance(fallback, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return fallback
    if isinstance(fallback, str):
        return value if isinstance(value, str) else fallback
    return fallback


def lookup_scheme(schemes, index, default):
    scheme = schemes.get(index)
    if scheme is None:
        logger.warning(f'unknown scheme index {index}; using {default}')
        return default
    return scheme


def check_orientation(value):
    if value not in (ORIENTATION_HORIZONTAL, ORIENTATION_VERTICAL):
        logger.warning(f'invalid orientation {value}; using horizontal')
        return ORIENTATION_HORIZONTAL
    return value


def check_page_size(value):
    if not 0 <= value <= MAX_PAGE_SIZE:
        logger.warning(f'invalid page size {value}; using {DEFAULT_PAGE_SIZE}')
        return DEFAULT_PAGE_SIZE
    return value


def check_select_keys(value):
    if not 0 <= value < MAX_SELECT_KEYS:
        return 0
    return value


def double_pinyin_scheme(index):
    return lookup_scheme(DOUBLE_PINYIN_SCHEMES, index, DoublePinyinScheme.DEFAULT)


def chewing_scheme(index):
    return lookup_scheme(CHEWING_SCHEMES, index, ChewingScheme.DEFAULT)


BASE_SCHEMA = Schema(
    fields=(
        Field('LookupTableOrientation', 'orientation', ORIENTATION_HORIZONTAL, check_orientation),
        Field('LookupTablePageSize', 'page_size', DEFAULT_PAGE_SIZE, check_page_size),
        Field('RememberEveryInput', 'remember_every_input', False),
        Field('Dictionaries', 'dictionaries', ''),
        Field('MainSwitch', 'main_switch', '<Shift>'),
        Field('LetterSwitch', 'letter_switch', ''),
        Field('PunctSwitch', 'punct_switch', '<Control>period'),
        Field('TradSwitch', 'trad_switch', '<Control><Shift>f'),
    ),
    umbrellas=(
        Umbrella('FuzzyPinyin', PINYIN_AMB_ALL, False),
    ),
    options=(
        _option('IncompletePinyin', PINYIN_INCOMPLETE | CHEWING_INCOMPLETE),
        _option('FuzzyPinyin_C_CH', PINYIN_AMB_C_CH),
        _option('FuzzyPinyin_Z_ZH', PINYIN_AMB_Z_ZH),
        _option('FuzzyPinyin_S_SH', PINYIN_AMB_S_SH),
        _option('FuzzyPinyin_L_N', PINYIN_AMB_L_N),
        _option('FuzzyPinyin_F_H', PINYIN_AMB_F_H),
        _option('FuzzyPinyin_L_R', PINYIN_AMB_L_R),
        _option('FuzzyPinyin_G_K', PINYIN_AMB_G_K),
        _option('FuzzyPinyin_AN_ANG', PINYIN_AMB_AN_ANG),
        _option('FuzzyPinyin_EN_ENG', PINYIN_AMB_EN_ENG),
        _option('FuzzyPinyin_IN_ING', PINYIN_AMB_IN_ING),
        _option('DynamicAdjust', DYNAMIC_ADJUST),
    ),
    actions=(),
)

PINYIN_SCHEMA = Schema(
    fields=(
        Field('DoublePinyin', 'double_pinyin', False),
        Field('DoublePinyinSchema', 'double_pinyin_schema', 0, double_pinyin_scheme, DoublePinyinScheme.DEFAULT),
        Field('DoublePinyinShowRaw', 'double_pinyin_show_raw', False),
        Field('InitChinese', 'init_chinese', True),
        Field('InitFull', 'init_full', False),
        Field('InitFullPunct', 'init_full_punct', True),
        Field('InitSimplifiedChinese', 'init_simp_chinese', True),
        Field('SpecialPhrases', 'special_phrases', True),
        Field('ShiftSelectCandidate', 'shift_select_candidate', False),
        Field('MinusEqualPage', 'minus_equal_page', True),
        Field('CommaPeriodPage', 'comma_period_page', True),
        Field('AutoCommit', 'auto_commit', False),
    ),
    umbrellas=(
        Umbrella('CorrectPinyin', PINYIN_CORRECT_ALL, True),
    ),
    # CorrectPinyin_GN_NG is listed twice and CorrectPinyin_VE_UE shares the
    # V_U bit; both names are accepted by existing settings.
    options=(
        _option('CorrectPinyin_GN_NG', PINYIN_CORRECT_GN_NG),
        _option('CorrectPinyin_GN_NG', PINYIN_CORRECT_GN_NG),
        _option('CorrectPinyin_MG_NG', PINYIN_CORRECT_MG_NG),
        _option('CorrectPinyin_IOU_IU', PINYIN_CORRECT_IOU_IU),
        _option('CorrectPinyin_UEI_UI', PINYIN_CORRECT_UEI_UI),
        _option('CorrectPinyin_UEN_UN', PINYIN_CORRECT_UEN_UN),
        _option('CorrectPinyin_UE_VE', PINYIN_CORRECT_UE_VE),
        _option('CorrectPinyin_V_U', PINYIN_CORRECT_V_U),
        _option('CorrectPinyin_VE_UE', PINYIN_CORRECT_V_U),
        _option('CorrectPinyin_ON_ONG', PINYIN_CORRECT_ON_ONG),
    ),
    actions=(
        Action('ImportDictionary', 'import_dictionary'),
        Action('ExportDictionary', 'export_dictionary'),
        Action('ClearUserData', 'clear_user_data'),
    ),
)

BOPOMOFO_SCHEMA = Schema(
    fields=(
        Field('InitChinese', 'init_chinese', True),
        Field('InitFull', 'init_full', False),
        Field('InitFullPunct', 'init_full_punct', True),
        Field('InitSimplifiedChinese', 'init_simp_chinese', False),
        Field('SpecialPhrases', 'special_phrases', False),
        Field('BopomofoKeyboardMapping', 'bopomofo_keyboard_mapping', 0, chewing_scheme, ChewingScheme.DEFAULT),
        Field('SelectKeys', 'select_keys', 0, check_select_keys),
        Field('GuideKey', 'guide_key', True),
        Field('AuxiliarySelectKey_F', 'auxiliary_select_key_f', True),
        Field('AuxiliarySelectKey_KP', 'auxiliary_select_key_kp', True),
        Field('EnterKey', 'enter_key', True),
    ),
    umbrellas=(),
    options=(),
    actions=(),
)


class BaseConfig:
    """
    Options shared by both profiles.
    两个配置共享的选项。

    Args:
        section: The section this profile answers to ('pinyin', 'bopomofo').
        reader: Optional callable reader(name, fallback) returning the raw
                value stored under name; used by read_default().
        dictionary: DictionaryManager receiving the action commands.
    """

    SCHEMAS = (BASE_SCHEMA,)

    def __init__(self, section, reader=None, dictionary=None):
        self._section = section
        self._reader = reader
        self._dictionary = dictionary if dictionary is not None else LoggingDictionaryManager()
        self._lock = threading.RLock()
        self._listeners = []
        self.init_default_values()

    @property
    def section(self):
        return self._section

    def init_default_values(self):
        with self._lock:
            self.option_bits = PINYIN_DEFAULT_OPTION
            self.option_mask = PINYIN_DEFAULT_OPTION_MASK
            for field in self._fields():
                setattr(self, field.attr, self._initial(field))

    def connect(self, callback):
        '''
        callback(config) is called after every change that was handled.
        '''
        self._listeners.append(callback)

    def names(self):
        names = []
        for schema in self.SCHEMAS:
            for entry in schema.fields + schema.umbrellas + schema.options + schema.actions:
                if entry.name not in names:
                    names.append(entry.name)
        return names

    def action_names(self):
        return [action.name for schema in self.SCHEMAS for action in schema.actions]

    def _fields(self):
        return [field for schema in self.SCHEMAS for field in schema.fields]

    @classmethod
    def _initial(cls, field):
        # scheme fields start from DEFAULT, not from the scheme at index 0
        if field.initial is not None:
            return field.initial
        return cls._checked(field, field.default)

    @staticmethod
    def _checked(field, value):
        if field.check is None:
            return value
        return field.check(value)

    def read_default(self, name, fallback):
        """
        Read name from the store, falling back to fallback when the store
        has no usable value. Fields with a range check or a scheme table
        go through the same check as apply_named_change().
        """
        value = None
        if self._reader is not None:
            try:
                value = self._reader(name, fallback)
            except Exception as error:
                logger.error(f'read_default({name}): {error}')
        value = normalize_value(value, fallback)
        for field in self._fields():
            if field.name == name:
                return self._checked(field, value)
        return value

    def read_default_values(self):
        '''
        Initialise from defaults, then pull every field out of the store
        one by one. Used when the store cannot hand over all values at once.
        '''
        self.init_default_values()
        with self._lock:
            for schema in self.SCHEMAS:
                for field in schema.fields:
                    setattr(self, field.attr, self.read_default(field.name, field.default))
                for umbrella in schema.umbrellas:
                    self._set_mask(umbrella.mask, self.read_default(umbrella.name, umbrella.default))
                for row in schema.options:
                    self._set_option(row.option, self.read_default(row.name, row.default))
        logger.debug(f'{self._section}: default values read')

    def load_values(self, values):
        '''
        Apply a full {name: value} snapshot of the store. Actions are skipped.
        '''
        actions = self.action_names()
        for name, value in values.items():
            if name in actions:
                continue
            self.apply_named_change(self._section, name, value)

    def apply_named_change(self, section, name, value):
        if section != self._section:
            return ChangeResult.WRONG_SECTION

        for schema in self.SCHEMAS:
            for action in schema.actions:
                if action.name == name:
                    self._run_action(action, value)
                    return ChangeResult.CHANGED

        with self._lock:
            handled = self._value_changed(name, value)
        if not handled:
            logger.debug(f'{self._section}: "{name}" is not handled')
            return ChangeResult.NOT_MY_FIELD

        logger.debug(f'{self._section}: "{name}" changed')
        for callback in self._listeners:
            callback(self)
        return ChangeResult.CHANGED

    def _value_changed(self, name, value):
        for schema in self.SCHEMAS:
            if self._apply_schema(schema, name, value):
                return True
        return False

    def _apply_schema(self, schema, name, value):
        for field in schema.fields:
            if field.name == name:
                setattr(self, field.attr, self._checked(field, normalize_value(value, field.default)))
                return True
        for umbrella in schema.umbrellas:
            if umbrella.name == name:
                self._set_mask(umbrella.mask, normalize_value(value, umbrella.default))
                return True
        for row in schema.options:
            if row.name == name:
                self._set_option(row.option, normalize_value(value, row.default))
                return True
        return False

    def _run_action(self, action, value):
        argument = normalize_value(value, '')
        logger.info(f'{self._section}: {action.name}("{argument}")')
        try:
            getattr(self._dictionary, action.method)(argument)
        except Exception as error:
            logger.error(f'{action.name} failed: {error}')

    def _set_mask(self, mask, enabled):
        if enabled:
            self.option_mask |= mask
        else:
            self.option_mask &= ~mask

    def _set_option(self, option, enabled):
        if enabled:
            self.option_bits |= option
        else:
            self.option_bits &= ~option

    def has_option(self, option):
        with self._lock:
            return (self.option_bits & option) == option

    def effective_options(self):
        '''
        The options the back end should use: stored bits limited to the mask.
        '''
        with self._lock:
            return self.option_bits & self.option_mask

    def snapshot(self):
        with self._lock:
            values = {field.attr: getattr(self, field.attr) for field in self._fields()}
            values['option_bits'] = self.option_bits
            values['option_mask'] = self.option_mask
            return values


class PinyinConfig(BaseConfig):
    SCHEMAS = BaseConfig.SCHEMAS + (PINYIN_SCHEMA,)

    def __init__(self, reader=None, dictionary=None):
        super().__init__('pinyin', reader, dictionary)


class BopomofoConfig(BaseConfig):
    SCHEMAS = BaseConfig.SCHEMAS + (BOPOMOFO_SCHEMA,)

    def __init__(self, reader=None, dictionary=None):
        super().__init__('bopomofo', reader, dictionary)
