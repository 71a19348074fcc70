import codecs
import json
import logging
import os

logger = logging.getLogger(__name__)


def load_params(filepath):
    """
    :type filepath: str
    :rtype: dict
    """
    with codecs.open(filepath, 'r', encoding='utf-8') as f:
        params = json.load(f)
    if not isinstance(params, dict):
        raise ValueError('Params file {} must contain a JSON object'.format(filepath))
    logger.info('Loaded params from %s:\n%s', filepath, json.dumps(params, sort_keys=True, indent=4))
    return params


def is_present(params, key):
    return params.get(key) is not None


def get_required(params, key):
    if not is_present(params, key):
        raise ValueError('Missing required parameter "{}"'.format(key))
    return params[key]


def get_boolean(params, key, default=False):
    value = params.get(key, default)
    if not isinstance(value, bool):
        raise ValueError('Parameter "{}" must be true or false, got {}'.format(key, value))
    return value


def get_float(params, key, default):
    value = params.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError('Parameter "{}" must be a number, got {}'.format(key, value))


def get_existing_directory(params, key):
    path = get_required(params, key)
    if not os.path.isdir(path):
        raise IOError('Directory {} given for "{}" does not exist'.format(path, key))
    return path


def get_existing_file(params, key):
    path = get_required(params, key)
    if not os.path.isfile(path):
        raise IOError('File {} given for "{}" does not exist'.format(path, key))
    return path


def get_creatable_directory(params, key):
    path = get_required(params, key)
    os.makedirs(path, exist_ok=True)
    return path
