# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

from hashlib import md5
import logging
import os
import string

import simplejson as json

logger = logging.getLogger(__name__)

if os.name == 'nt':
    def _replace_backslash(name):
        return name.replace("\\", "/")
else:
    def _replace_backslash(name):
        return name


def relpath(path, start):
    """ relative path of `path` from `start`, always using `/` """
    return _replace_backslash(os.path.relpath(path, start))


def to_bytestring(s):
    """ convert to bytestring an unicode """
    if isinstance(s, str):
        return s.encode('utf-8')
    return s


def dumps(obj, pretty=False):
    """ serialize `obj` to a json string. HTML characters are never
    escaped. """
    if pretty:
        return json.dumps(obj, indent=2, ensure_ascii=False)
    return json.dumps(obj, ensure_ascii=False)


def loads(data):
    return json.loads(data)


def sign(data):
    """ return md5 hexdigest of `data` """
    return md5(data).hexdigest()


def read(fname):
    """ read utf8 file content"""
    with open(fname, encoding="utf-8", newline="") as f:
        return f.read()


def write(fname, content):
    """ write content in a file

    :attr fname: string,filename
    :attr content: string
    """
    with open(fname, 'wb') as f:
        f.write(to_bytestring(content))


def write_json(fname, content):
    """ serialize content in pretty printed json and save it

    :attr fname: string
    :attr content: dict or list
    """
    write(fname, dumps(content, pretty=True))


def read_json(fname, use_environment=False):
    """ read a json file and deserialize

    :attr filename: string
    :attr use_environment: boolean, default is False. If
    True, replace environment variable by their value in file
    content

    :return: dict or list
    """
    data = read(fname)
    if use_environment:
        data = string.Template(data).safe_substitute(os.environ)
    return loads(data)


def get_path(obj, *keys):
    """ walk nested dicts following `keys`. Return None if a member
    is missing. """
    for key in keys:
        if not isinstance(obj, dict) or key not in obj:
            return None
        obj = obj[key]
    return obj


def ensure_dir(path):
    if not os.path.isdir(path):
        logger.info("%s does not exist, creating..." % path)
        os.makedirs(path)
    return path


def expandpath(path):
    return os.path.expanduser(os.path.expandvars(path))
