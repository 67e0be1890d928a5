import codecs
import json
import logging
import os
import sysconfig
from gi.repository import GLib

logger = logging.getLogger(__name__)

NAME_TO_LOGGING_LEVEL = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def get_package_name():
    '''
    returns 'ibus-fallback'
    '''
    return 'ibus-fallback'


def get_version():
    return '0.1.0'


def get_prefix():
    '''
    The prefix the data files of the installation went to.
    It is usually /usr/local/ (or the virtualenv).
    '''
    return sysconfig.get_path('data')


def get_datadir():
    '''
    Return the path to the data directory under user-independent (central)
    location (= not under the HOME)
    '''
    return os.path.join(get_prefix(), 'share', get_package_name())


def get_default_config_path():
    '''
    Return the path to the default config file in the system installation.
    This is the config.json that gets copied to user's home on first run.
    '''
    return os.path.join(get_datadir(), 'config.json')


def get_user_config_dir():
    '''
    Return the path to the config directory under $HOME.
    Typically, it would be $HOME/.config/ibus-fallback
    '''
    return os.path.join(GLib.get_user_config_dir(), get_package_name())


def get_default_config_data():
    default_config_path = get_default_config_path()
    if not os.path.exists(default_config_path):
        logger.error(f'config.json is not found under {default_config_path}. Please check that installation was done without problem!')
        return {'logging_level': 'WARNING'}
    with codecs.open(default_config_path, encoding='utf-8') as f:
        return json.load(f)


def get_config_data():
    '''
    This function is to load the config JSON file from the HOME/.config/ibus-fallback
    When the file is not present (e.g., after initial installation), it will copy
    the default config.json from the central location.

    Returns:
        tuple: (config_data, warnings_string) where warnings_string is empty if no warnings
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')
    default_config = get_default_config_data()
    warnings = ""

    if not os.path.exists(configfile_path):
        warning_msg = f'config.json is not found under {get_user_config_dir()} . Copying the default config.json from {get_default_config_path()} ..'
        logger.warning(warning_msg)
        warnings = warning_msg
        os.makedirs(get_user_config_dir(), exist_ok=True)
        with open(configfile_path, 'w', encoding='utf-8') as f:
            json.dump(default_config, f, ensure_ascii=False)
        return default_config, warnings
    try:
        with codecs.open(configfile_path, encoding='utf-8') as f:
            config_data = json.load(f)
    except json.decoder.JSONDecodeError as e:
        logger.error(f'Error loading the config.json under {get_user_config_dir()}')
        logger.error(e)
        logger.error(f'Using (but not copying) the default config.json from {get_default_config_path()} ..')
        return default_config, warnings

    for k in default_config:
        if k not in config_data:
            warning_msg = f'The key "{k}" was not found in the config.json under {get_user_config_dir()} . Copying the default key-value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]
        if type(config_data[k]) != type(default_config[k]):
            warning_msg = f'Type mismatch found for the key "{k}" between config.json under {get_user_config_dir()} and default config.json. Replacing the value of this key with the value in default config.json'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]

    return config_data, warnings


def get_logging_level(config):
    '''
    Returns the logging level named by config['logging_level'].
    When the value is not present (or incorrect), WARNING is used.
    '''
    level = config.get('logging_level', 'WARNING')
    if level not in NAME_TO_LOGGING_LEVEL:
        logger.warning(f'Specified logging level {level} is not recognized. Using the default WARNING level.')
        level = 'WARNING'
    return NAME_TO_LOGGING_LEVEL[level]
