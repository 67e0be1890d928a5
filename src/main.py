"""
main.py - Entry point for the fallback IME engine
回退输入法引擎的入口

================================================================================
STARTUP / 启动
================================================================================

        ┌─────────────────────────────────────────────────────────────────────┐
        │  1. CONFIG DIRECTORY: create ~/.config/ibus-fallback/ if needed     │
        │     配置目录: 需要时创建 ~/.config/ibus-fallback/                     │
        │                              ↓                                      │
        │  2. LOGGING: log to ~/.config/ibus-fallback/ibus-fallback.log       │
        │     日志: 写入 ~/.config/ibus-fallback/ibus-fallback.log              │
        │                              ↓                                      │
        │  3. PROFILES: pinyin / bopomofo configs, defaults first, then       │
        │     the values in Gio.Settings                                      │
        │     配置: 拼音 / 注音，先使用默认值，再读取 Gio.Settings               │
        │                              ↓                                      │
        │  4. RUN: register the factory and start the main loop               │
        │     运行: 注册工厂并启动主循环                                         │
        └─────────────────────────────────────────────────────────────────────┘

    -i, --ibus       : Started by IBus daemon (normal operation)
    -d, --daemonize  : Fork to background (for manual startup)
    -h, --help       : Show help message and exit
================================================================================
"""

from config import BopomofoConfig, PinyinConfig
from engine import EngineFallback
import settings
import util

import getopt
import logging
import os
import sys

import gi
gi.require_version('IBus', '1.0')
from gi.repository import GLib, IBus

logger = logging.getLogger(__name__)

ENGINE_NAMES = ('pinyin', 'bopomofo')


def create_configs():
    '''
    Create the config profiles once per process. Each profile starts from
    its hard-coded defaults; the values in Gio.Settings are applied after.

    Returns:
        tuple: ({section: config}, [SettingsBridge, ...])
    '''
    configs = {
        'pinyin': PinyinConfig(),
        'bopomofo': BopomofoConfig(),
    }
    bridges = []
    for section, config in configs.items():
        gsettings = settings.new_settings(section)
        if gsettings is None:
            continue
        bridge = settings.SettingsBridge(config, gsettings)
        bridge.start()
        bridges.append(bridge)
    return configs, bridges


class IMApp:
    """
    IBus application hosting the pinyin and bopomofo fallback engines.

    _configs : dict
        One config profile per engine name, shared by all engine instances.
    _bridges : list
        SettingsBridge objects keeping the profiles in sync with Gio.Settings.
    """

    def __init__(self, exec_by_ibus: bool) -> None:
        if not isinstance(exec_by_ibus, bool):
            raise TypeError("The `exec_by_ibus` parameter must be a boolean value.")
        self.exec_by_ibus = exec_by_ibus
        self._engine_count = 0
        self._configs, self._bridges = create_configs()

        self._mainloop = GLib.MainLoop()
        self._bus = IBus.Bus()
        self._bus.connect("disconnected", self._bus_disconnected_cb)
        self._factory = IBus.Factory(self._bus)
        self._factory.connect("create-engine", self._create_engine_cb)
        if exec_by_ibus:
            self._bus.request_name("org.freedesktop.IBus.Fallback", 0)
        else:
            self._component = IBus.Component(
                name="org.freedesktop.IBus.Fallback",
                description="Chinese fallback input",
                version=util.get_version(),
                license="GPL",
                author="ibus-fallback developers",
                homepage="",
                textdomain=util.get_package_name())
            for name in ENGINE_NAMES:
                engine = IBus.EngineDesc(
                    name=name,
                    longname=f"Fallback ({name})",
                    description=f"Fallback input for the {name} engine",
                    language="zh",
                    license="GPL",
                    author="ibus-fallback developers",
                    icon=util.get_package_name(),
                    layout="default")
                self._component.add_engine(engine)
            self._bus.register_component(self._component)
            self._bus.set_global_engine_async("pinyin", -1, None, None, None)

    def _create_engine_cb(self, factory, engine_name):
        logger.debug(f'create-engine({engine_name})')
        config = self._configs.get(engine_name, self._configs['pinyin'])
        self._engine_count += 1
        object_path = f'/org/freedesktop/IBus/Engine/Fallback/{self._engine_count}'
        return EngineFallback(self._bus, object_path, config)

    def run(self):
        self._mainloop.run()

    def _bus_disconnected_cb(self, bus=None):
        for bridge in self._bridges:
            bridge.stop()
        self._mainloop.quit()


def print_help(v: int = 0) -> None:
    print("-i, --ibus             executed by IBus.")
    print("-h, --help             show this message.")
    print("-d, --daemonize        daemonize ibus")
    sys.exit(v)


def main():
    os.umask(0o077)

    # Create user specific data directory
    user_configdir = util.get_user_config_dir()
    os.makedirs(user_configdir, 0o700, True)

    config, warnings = util.get_config_data()

    # logging settings
    logfile_name = os.path.join(user_configdir, util.get_package_name() + '.log')
    logging.basicConfig(filename=logfile_name, level=util.get_logging_level(config), format='%(asctime)s %(levelname)-8s %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
    if warnings:
        logger.warning(warnings)
    logger.info(f'main.py user_configdir: {user_configdir}')

    exec_by_ibus = False
    daemonize = False

    shortopt = "ihd"
    longopt = ["ibus", "help", "daemonize"]

    try:
        opts, args = getopt.getopt(sys.argv[1:], shortopt, longopt)
    except getopt.GetoptError as err:
        logger.error(err)
        sys.exit(1)

    # argparse does not cope with the arguments IBus passes
    for o, a in opts:
        if o in ("-h", "--help"):
            print_help(0)
        elif o in ("-d", "--daemonize"):
            daemonize = True
        elif o in ("-i", "--ibus"):
            exec_by_ibus = True
        else:
            sys.stderr.write("Unknown argument: %s\n" % o)
            print_help(1)
    logger.info(f'daemonize? : {daemonize}')
    logger.info(f'IBus exec? : {exec_by_ibus}')

    if daemonize:
        if os.fork():
            sys.exit()
    IMApp(exec_by_ibus).run()


if __name__ == "__main__":
    main()
