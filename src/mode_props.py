"""
mode_props.py - Input mode flags shared by the engine and the fallback editor

The flags start from the init-state fields of a config profile
(InitChinese, InitFull, InitFullPunct, InitSimplifiedChinese) and are then
toggled by the user through the property menu or the Ctrl+period shortcut.
"""

from collections import namedtuple
import logging
import threading

logger = logging.getLogger(__name__)

ModeSnapshot = namedtuple('ModeSnapshot', ['chinese', 'full', 'full_punct', 'simplified_chinese'])


class ModeProperties:
    '''
    Holds the mode flags. All reads and toggles take the same lock, so a
    snapshot never mixes values from before and after a toggle.
    '''

    def __init__(self, config):
        self._config = config
        self._lock = threading.Lock()
        self._listeners = []
        self._chinese = True
        self._full = False
        self._full_punct = True
        self._simplified_chinese = True
        self.reset()

    def reset(self):
        '''
        Go back to the profile's init states. Listeners are told about
        every flag whose value changed.
        '''
        values = self._config.snapshot()
        with self._lock:
            before = ModeSnapshot(self._chinese, self._full, self._full_punct, self._simplified_chinese)
            self._chinese = values['init_chinese']
            self._full = values['init_full']
            self._full_punct = values['init_full_punct']
            self._simplified_chinese = values['init_simp_chinese']
            after = ModeSnapshot(self._chinese, self._full, self._full_punct, self._simplified_chinese)
        logger.debug(f'ModeProperties reset: {after}')
        for name in ModeSnapshot._fields:
            if getattr(before, name) != getattr(after, name):
                self._notify(name)

    def connect(self, callback):
        '''
        callback(name) is called with the name of the flag that changed:
        'chinese', 'full', 'full_punct' or 'simplified_chinese'
        '''
        self._listeners.append(callback)

    def _notify(self, name):
        for callback in self._listeners:
            callback(name)

    def snapshot(self):
        with self._lock:
            return ModeSnapshot(self._chinese, self._full, self._full_punct, self._simplified_chinese)

    def is_chinese_mode(self):
        with self._lock:
            return self._chinese

    def is_full_width_mode(self):
        with self._lock:
            return self._full

    def is_full_punct_mode(self):
        with self._lock:
            return self._full_punct

    def is_simplified_chinese(self):
        with self._lock:
            return self._simplified_chinese

    def toggle_mode_chinese(self):
        with self._lock:
            self._chinese = not self._chinese
        self._notify('chinese')

    def toggle_mode_full(self):
        with self._lock:
            self._full = not self._full
        self._notify('full')

    def toggle_full_punct_mode(self):
        with self._lock:
            self._full_punct = not self._full_punct
        self._notify('full_punct')

    def toggle_mode_simp(self):
        with self._lock:
            self._simplified_chinese = not self._simplified_chinese
        self._notify('simplified_chinese')
