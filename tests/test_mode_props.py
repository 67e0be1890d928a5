#!/usr/bin/env python3
# tests/test_mode_props.py - Unit tests for mode_props.py

import pytest
import os
import sys
import threading
from unittest.mock import MagicMock

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from config import BopomofoConfig, PinyinConfig
from mode_props import ModeProperties, ModeSnapshot


class TestInit:
    """Test suite for initial mode flags"""

    def test_from_pinyin_defaults(self):
        props = ModeProperties(PinyinConfig())
        assert props.snapshot() == ModeSnapshot(True, False, True, True)

    def test_from_bopomofo_defaults(self):
        props = ModeProperties(BopomofoConfig())
        assert props.is_simplified_chinese() is False

    def test_from_changed_config(self):
        config = PinyinConfig()
        config.apply_named_change('pinyin', 'InitFull', True)
        config.apply_named_change('pinyin', 'InitChinese', False)
        props = ModeProperties(config)

        assert props.is_full_width_mode() is True
        assert props.is_chinese_mode() is False


class TestToggles:
    """Test suite for the toggles and reset()"""

    @pytest.fixture
    def props(self):
        return ModeProperties(PinyinConfig())

    def test_toggle_full_punct(self, props):
        props.toggle_full_punct_mode()
        assert props.is_full_punct_mode() is False
        props.toggle_full_punct_mode()
        assert props.is_full_punct_mode() is True

    def test_toggles_notify(self, props):
        callback = MagicMock()
        props.connect(callback)

        props.toggle_mode_chinese()
        props.toggle_mode_full()
        props.toggle_full_punct_mode()
        props.toggle_mode_simp()

        assert [c.args[0] for c in callback.call_args_list] == ['chinese', 'full', 'full_punct', 'simplified_chinese']
        assert props.snapshot() == ModeSnapshot(False, True, False, False)

    def test_reset(self, props):
        props.toggle_mode_chinese()
        props.toggle_mode_full()
        props.reset()
        assert props.snapshot() == ModeSnapshot(True, False, True, True)

    def test_reset_notifies_changed_flags(self, props):
        props.toggle_full_punct_mode()
        props.toggle_mode_simp()
        seen = []
        props.connect(seen.append)

        props.reset()

        assert props.is_full_punct_mode() is True
        assert seen == ['full_punct', 'simplified_chinese']

    def test_reset_without_change_is_silent(self, props):
        seen = []
        props.connect(seen.append)
        props.reset()
        assert seen == []

    def test_reset_follows_config(self):
        config = PinyinConfig()
        props = ModeProperties(config)
        seen = []
        props.connect(seen.append)

        config.apply_named_change('pinyin', 'InitFull', True)
        props.reset()

        assert props.is_full_width_mode() is True
        assert seen == ['full']

    def test_snapshot_not_torn(self, props):
        """Toggling chinese and full together from another thread never yields a mixed snapshot"""
        props.toggle_mode_full()  # chinese=True, full=True
        stop = threading.Event()

        def toggler():
            while not stop.is_set():
                with props._lock:
                    props._chinese = not props._chinese
                    props._full = not props._full

        thread = threading.Thread(target=toggler)
        thread.start()
        try:
            for _ in range(2000):
                snapshot = props.snapshot()
                assert snapshot.chinese == snapshot.full
        finally:
            stop.set()
            thread.join()
