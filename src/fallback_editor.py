#!/usr/bin/env python3
"""
fallback_editor.py - Keystroke classifier for the fallback (direct) input mode
回退（直接）输入模式的按键分类器

================================================================================
WHAT THIS MODULE DOES / 本模块的作用
================================================================================

When the engine has nothing to convert (no pinyin in the preedit), every key
event ends up here. For each event the classifier decides one of:

当引擎没有需要转换的内容（预编辑区中没有拼音）时，每个按键事件都会到达这里。
对每个事件，分类器决定以下之一:

    - commit the literal character              提交原字符
    - commit its full-width form                提交全角字符
    - commit a transliterated punctuation mark  提交转换后的中文标点
    - leave the event to the application        不处理，交给应用程序

================================================================================
RULES / 规则 (evaluated in order / 按顺序匹配)
================================================================================

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ letters, digits      │ consumed only without modifiers               │
    │ 字母、数字            │ 仅在无修饰键时处理                              │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ space                │ consumed only without modifiers               │
    │ 空格                  │ 仅在无修饰键时处理                              │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ punctuation          │ process_punct(); Shift is allowed             │
    │ 标点                  │ 交给 process_punct()；允许 Shift               │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ anything else        │ not consumed                                  │
    │ 其他                  │ 不处理                                         │
    └──────────────────────┴──────────────────────────────────────────────┘

Keypad keys are canonicalized first: KP_0..KP_9 become 0..9, KP_Space
becomes space and the keypad operators become '=', '*', '+', '-', '.', '/'.

小键盘按键先被规范化: KP_0..KP_9 变为 0..9，KP_Space 变为空格，
小键盘运算符变为 '=', '*', '+', '-', '.', '/'。

================================================================================
PUNCTUATION / 标点
================================================================================

Ctrl+period toggles full-punctuation mode. Any other Ctrl/Alt/Super/Hyper/Meta
combination is left to the application so that shortcuts keep working.

Ctrl+句号 切换全角标点模式。其他 Ctrl/Alt/Super/Hyper/Meta 组合不处理，
以保证应用程序的快捷键正常工作。

In Chinese mode with full punctuation, FULL_PUNCT_TABLE is consulted. The
quotes alternate between the opening and closing glyph, and '.' right after a
digit stays '.' so that "3.14" can be typed. Marks not in the table (see
UNMAPPED_PUNCT) get the same treatment as in English mode.

在中文全角标点模式下查询 FULL_PUNCT_TABLE。引号在左右引号之间交替；
数字之后的 '.' 保持为 '.'，以便输入 "3.14"。不在表中的标点（见 UNMAPPED_PUNCT）
按英文模式处理。
================================================================================
"""

from collections import namedtuple
import logging

from halffull import to_full

import gi
gi.require_version('IBus', '1.0')
from gi.repository import IBus

logger = logging.getLogger(__name__)

# Caps Lock is not in either set; it is dropped before classification.
KEY_MODIFIERS = (IBus.ModifierType.SHIFT_MASK
                 | IBus.ModifierType.CONTROL_MASK
                 | IBus.ModifierType.MOD1_MASK
                 | IBus.ModifierType.SUPER_MASK
                 | IBus.ModifierType.HYPER_MASK
                 | IBus.ModifierType.META_MASK)
COMMAND_MODIFIERS = (IBus.ModifierType.CONTROL_MASK
                     | IBus.ModifierType.MOD1_MASK
                     | IBus.ModifierType.SUPER_MASK
                     | IBus.ModifierType.HYPER_MASK
                     | IBus.ModifierType.META_MASK)

KEYPAD_OPERATORS = {
    IBus.KEY_KP_Equal: IBus.KEY_equal,
    IBus.KEY_KP_Multiply: IBus.KEY_asterisk,
    IBus.KEY_KP_Add: IBus.KEY_plus,
    IBus.KEY_KP_Subtract: IBus.KEY_minus,
    IBus.KEY_KP_Decimal: IBus.KEY_period,
    IBus.KEY_KP_Divide: IBus.KEY_slash,
}

PUNCT_RANGES = (
    (IBus.KEY_exclam, IBus.KEY_slash),
    (IBus.KEY_colon, IBus.KEY_at),
    (IBus.KEY_bracketleft, IBus.KEY_quoteleft),
    (IBus.KEY_braceleft, IBus.KEY_asciitilde),
)

FULL_PUNCT_TABLE = {
    '`': '·',
    '~': '～',
    '!': '！',
    '$': '￥',
    '^': '……',
    '(': '（',
    ')': '）',
    '_': '——',
    '[': '【',
    ']': '】',
    '{': '『',
    '}': '』',
    '\\': '、',
    ';': '；',
    ':': '：',
    ',': '，',
    '<': '《',
    '>': '》',
    '?': '？',
}

# Left out of FULL_PUNCT_TABLE on purpose; they get the plain/full-width treatment.
UNMAPPED_PUNCT = ('@', '#', '%', '&', '*', '-', '=', '+', '|', '/')

QUOTE_GLYPHS = ('‘', '’')
DOUBLE_QUOTE_GLYPHS = ('“', '”')
FULL_STOP = '。'

ClassifyResult = namedtuple('ClassifyResult', ['consumed', 'emission'])

NOT_CONSUMED = ClassifyResult(False, None)


class FallbackState:
    """
    Per-session state of the classifier.
    每个输入会话的分类器状态。

    quote / double_quote are True while the next quote is an opening one.
    last_committed_char is the literal key (not the emitted glyph) of the
    last commit, used to keep '.' after a digit as a decimal point.
    """

    def __init__(self):
        self.quote = True
        self.double_quote = True
        self.last_committed_char = None

    def reset(self):
        self.quote = True
        self.double_quote = True


def canonicalize(keyval):
    '''
    Map keypad keys onto their main-keyboard equivalents.
    '''
    if IBus.KEY_KP_0 <= keyval <= IBus.KEY_KP_9:
        return keyval - IBus.KEY_KP_0 + IBus.KEY_0
    if keyval == IBus.KEY_KP_Space:
        return IBus.KEY_space
    return KEYPAD_OPERATORS.get(keyval, keyval)


def is_alnum(keyval):
    return (IBus.KEY_a <= keyval <= IBus.KEY_z
            or IBus.KEY_A <= keyval <= IBus.KEY_Z
            or IBus.KEY_0 <= keyval <= IBus.KEY_9)


def is_space(keyval):
    return keyval == IBus.KEY_space


def is_punct(keyval):
    return any(low <= keyval <= high for low, high in PUNCT_RANGES)


def _commit(c, text, state):
    state.last_committed_char = c
    return ClassifyResult(True, text)


def _commit_literal(c, props, state):
    return _commit(c, to_full(c) if props.is_full_width_mode() else c, state)


def _full_punct(c, state):
    """Return the Chinese punctuation for c, or None when c has none.

    Flips the matching quote parity when c is a quote.
    """
    if c == '\'':
        glyph = QUOTE_GLYPHS[0] if state.quote else QUOTE_GLYPHS[1]
        state.quote = not state.quote
        return glyph
    if c == '"':
        glyph = DOUBLE_QUOTE_GLYPHS[0] if state.double_quote else DOUBLE_QUOTE_GLYPHS[1]
        state.double_quote = not state.double_quote
        return glyph
    if c == '.':
        prev = state.last_committed_char
        if prev is not None and '0' <= prev <= '9':
            return c
        return FULL_STOP
    return FULL_PUNCT_TABLE.get(c)


def process_alnum(keyval, modifiers, props, state):
    if modifiers:
        return NOT_CONSUMED
    return _commit_literal(chr(keyval), props, state)


def process_space(keyval, modifiers, props, state):
    if modifiers:
        return NOT_CONSUMED
    return _commit_literal(' ', props, state)


def process_punct(keyval, modifiers, props, state):
    """
    Handle a punctuation key.
    处理标点按键。

    Returns:
        ClassifyResult: (consumed, emission). emission is None when nothing
                        is to be committed (including the Ctrl+period toggle).
    """
    command_modifiers = modifiers & COMMAND_MODIFIERS

    if keyval == IBus.KEY_period and command_modifiers == IBus.ModifierType.CONTROL_MASK:
        props.toggle_full_punct_mode()
        logger.debug('process_punct -- full punctuation toggled')
        return ClassifyResult(True, None)

    # check ctrl, alt, super, hyper and meta
    if command_modifiers:
        return NOT_CONSUMED

    c = chr(keyval)
    if props.is_chinese_mode() and props.is_full_punct_mode():
        glyph = _full_punct(c, state)
        if glyph is not None:
            return _commit(c, glyph, state)
    return _commit_literal(c, props, state)


RULES = (
    (is_alnum, process_alnum),
    (is_space, process_space),
    (is_punct, process_punct),
)


def classify(keyval, keycode, modifiers, props, state):
    """
    Classify one key press.
    对一次按键进行分类。

    Args:
        keyval: The keysym of the pressed key.
        keycode: The hardware keycode (not used for classification).
        modifiers: The modifier mask of the event.
        props: Mode provider; is_chinese_mode(), is_full_width_mode(),
               is_full_punct_mode() and toggle_full_punct_mode().
        state: The FallbackState of the session; mutated in place.

    Returns:
        ClassifyResult
    """
    modifiers &= KEY_MODIFIERS
    keyval = canonicalize(keyval)
    for matches, handler in RULES:
        if matches(keyval):
            return handler(keyval, modifiers, props, state)
    return NOT_CONSUMED


class FallbackEditor:
    """
    Classifier bound to one input session and a commit sink.
    绑定到一个输入会话和提交接口的分类器。

        >>> editor = FallbackEditor(props, engine_commit)
        >>> editor.process_key_event(ord('a'), 38, 0)
        True
    """

    def __init__(self, props, commit):
        self._props = props
        self._commit = commit
        self._state = FallbackState()

    @property
    def state(self):
        return self._state

    def process_key_event(self, keyval, keycode, modifiers):
        result = classify(keyval, keycode, modifiers, self._props, self._state)
        if result.emission is not None:
            logger.debug(f'process_key_event({keyval:#x}, {modifiers:#x}) -> "{result.emission}"')
            self._commit(result.emission)
        return result.consumed

    def reset(self):
        self._state.reset()
