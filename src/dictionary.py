"""
dictionary.py - Dictionary-management collaborator of the config profiles

The ImportDictionary / ExportDictionary / ClearUserData settings are
commands, not values. When one of them changes, the config profile forwards
the received string to an object implementing DictionaryManager.
"""

import logging

logger = logging.getLogger(__name__)

# Targets accepted by clear_user_data()
CLEAR_TARGETS = ('all', 'user')


class DictionaryManager:
    '''
    Interface of the back end that owns the user dictionaries.
    '''

    def import_dictionary(self, path):
        raise NotImplementedError

    def export_dictionary(self, path):
        raise NotImplementedError

    def clear_user_data(self, target):
        raise NotImplementedError


class LoggingDictionaryManager(DictionaryManager):
    '''
    Used when the engine runs without a dictionary back end.
    Every command is recorded in the log and otherwise ignored.
    '''

    def import_dictionary(self, path):
        logger.warning(f'import_dictionary({path}): no dictionary back end')

    def export_dictionary(self, path):
        logger.warning(f'export_dictionary({path}): no dictionary back end')

    def clear_user_data(self, target):
        if target not in CLEAR_TARGETS:
            logger.warning(f'clear_user_data(): unknown target "{target}"')
            return
        logger.warning(f'clear_user_data({target}): no dictionary back end')
