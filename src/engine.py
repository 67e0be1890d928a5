from fallback_editor import FallbackEditor
from mode_props import ModeProperties

import logging

import gi
gi.require_version('IBus', '1.0')
from gi.repository import IBus
# http://lazka.github.io/pgi-docs/IBus-1.0/index.html

logger = logging.getLogger(__name__)

# property key -> (ModeProperties toggle, flag name in ModeSnapshot)
MODE_PROPS = {
    'InputMode.Chinese': ('toggle_mode_chinese', 'chinese'),
    'InputMode.Full': ('toggle_mode_full', 'full'),
    'InputMode.FullPunct': ('toggle_full_punct_mode', 'full_punct'),
}

MODE_LABELS = {
    'InputMode.Chinese': ('中', 'Chinese'),
    'InputMode.Full': ('全', 'Full-width letters'),
    'InputMode.FullPunct': ('，', 'Full-width punctuation'),
}


class EngineFallback(IBus.Engine):
    '''
    http://lazka.github.io/pgi-docs/IBus-1.0/classes/Engine.html

    One instance per input context. Key events go through the FallbackEditor;
    committed text goes to commit_text().
    '''
    __gtype_name__ = 'EngineFallback'

    def __init__(self, bus, object_path, config):
        super().__init__(connection=bus.get_connection(), object_path=object_path)
        self._config = config
        self._props = ModeProperties(config)
        self._props.connect(self._mode_changed_cb)
        self._editor = FallbackEditor(self._props, self._commit_string)
        self._init_props()
        logger.debug(f'EngineFallback({object_path}) for {config.section}')

    def _init_props(self):
        '''
        This function creates the GUI menu list (typically top-right corner).

        http://lazka.github.io/pgi-docs/IBus-1.0/classes/PropList.html
        http://lazka.github.io/pgi-docs/IBus-1.0/classes/Property.html
        '''
        self._prop_list = IBus.PropList()
        self._mode_prop = dict()
        snapshot = self._props.snapshot()
        for key, (symbol, label) in MODE_LABELS.items():
            prop = IBus.Property(
                key=key,
                prop_type=IBus.PropType.TOGGLE,
                symbol=IBus.Text.new_from_string(symbol),
                label=IBus.Text.new_from_string(label),
                icon=None,
                tooltip=None,
                sensitive=True,
                visible=True,
                state=self._prop_state(getattr(snapshot, MODE_PROPS[key][1])),
                sub_props=None)
            self._mode_prop[key] = prop
            self._prop_list.append(prop)

    @staticmethod
    def _prop_state(enabled):
        return IBus.PropState.CHECKED if enabled else IBus.PropState.UNCHECKED

    def _commit_string(self, text):
        self.commit_text(IBus.Text.new_from_string(text))

    def do_process_key_event(self, keyval, keycode, state):
        if state & IBus.ModifierType.RELEASE_MASK:
            return False
        return self._editor.process_key_event(keyval, keycode, state)

    def do_focus_in(self):
        self._editor.reset()
        self.register_properties(self._prop_list)

    def do_reset(self):
        self._editor.reset()

    def do_enable(self):
        self._props.reset()
        self._editor.reset()

    def do_property_activate(self, prop_name, state):
        logger.info(f'property_activate({prop_name}, {state})')
        if prop_name not in MODE_PROPS:
            return
        toggle, flag = MODE_PROPS[prop_name]
        if getattr(self._props.snapshot(), flag) != (state == IBus.PropState.CHECKED):
            getattr(self._props, toggle)()

    def _mode_changed_cb(self, name):
        snapshot = self._props.snapshot()
        for key, (_, flag) in MODE_PROPS.items():
            if flag == name:
                prop = self._mode_prop[key]
                prop.set_state(self._prop_state(getattr(snapshot, flag)))
                self.update_property(prop)
