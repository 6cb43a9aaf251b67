# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import base64
import logging
import mimetypes
import os

from couchdeploy.errors import MissingRequiredFile, MalformedJson, \
InvalidDocument
from couchdeploy import util

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# files always added to the manifest, in this order
METADATA_FILES = ['couchapp.json', 'language', 'README.txt', 'rewrites.json']


def only_folders(path):
    return os.path.isdir(path)

def only_javascript(path):
    return os.path.isfile(path) and path.endswith('.js')

def _listdir(path, predicate):
    for name in sorted(os.listdir(path)):
        current_path = os.path.join(path, name)
        if predicate(current_path):
            yield name, current_path

def _function_name(name):
    return name[:-len('.js')]


class LocalDoc(object):
    """ fold a couchapp source folder into a design document.

    The folder must contain the `_id`, `language`, `couchapp.json`,
    `rewrites.json` and `README.txt` files. `views`, `lists`, `shows`
    and `_attachments` folders are optional.
    """

    def __init__(self, path):
        self.docdir = path
        self.manifest = []

    def __repr__(self):
        return "<%s (%s)>" % (self.__class__.__name__, self.docdir)

    def __str__(self):
        return util.dumps(self.doc())

    def _path(self, name):
        return os.path.join(self.docdir, name)

    def _read(self, path):
        try:
            return util.read(path)
        except UnicodeDecodeError as e:
            raise InvalidDocument("%s isn't utf8 encoded: %s" % (path,
                e)) from e

    def _read_required(self, name):
        path = self._path(name)
        if not os.path.isfile(path):
            raise MissingRequiredFile(path)
        return self._read(path)

    def _read_required_json(self, name, kind):
        content = self._read_required(name)
        try:
            value = util.loads(content)
        except ValueError as e:
            raise MalformedJson(self._path(name), str(e))
        if not isinstance(value, kind):
            raise MalformedJson(self._path(name),
                    "expected a json %s" % (
                        "object" if kind is dict else "array"))
        return value

    def get_id(self):
        docid = self._read_required('_id').strip()
        if not docid:
            raise InvalidDocument("%s is empty" % self._path('_id'))
        return docid

    def doc(self):
        """ build a fresh design document from the document directory.
        The manifest of the last build is kept in `self.manifest`. """
        docid = self.get_id()
        language = self._read_required('language').strip()
        meta = self._read_required_json('couchapp.json', dict)
        rewrites = self._read_required_json('rewrites.json', list)
        readme = self._read_required('README.txt')

        manifest = list(METADATA_FILES)
        signatures = {}
        objects = {}

        doc = {'_id': docid}
        doc['rewrites'] = rewrites
        doc['language'] = language

        views = self.views(manifest)
        if views is not None:
            doc['views'] = views
        lists = self.functions('lists', manifest)
        if lists is not None:
            doc['lists'] = lists
        doc['README'] = readme
        shows = self.functions('shows', manifest)
        if shows is not None:
            doc['shows'] = shows

        meta.update({
            'manifest': manifest,
            'signatures': signatures,
            'objects': objects
        })
        doc['couchapp'] = meta

        attachdir = self._path('_attachments')
        if os.path.isdir(attachdir):
            attachments = {}
            for name, filepath in self.attachments():
                logger.debug("attach %s" % name)
                with open(filepath, 'rb') as f:
                    data = f.read()
                attachments[name] = {
                    'content_type': content_type(name),
                    'data': base64.b64encode(data).decode('ascii')
                }
                signatures[name] = util.sign(data)
            doc['_attachments'] = attachments
        else:
            logger.warning("No attachments folder found!")

        self.manifest = manifest
        return doc

    def views(self, manifest):
        viewsdir = self._path('views')
        if not os.path.isdir(viewsdir):
            logger.warning("No views folder found!")
            return None

        views = {}
        manifest.append('views/')
        for vname, vpath in _listdir(viewsdir, only_folders):
            manifest.append('views/%s/' % vname)
            view = views[vname] = {}
            for fname, fpath in _listdir(vpath, only_javascript):
                view[_function_name(fname)] = self._read(fpath)
                manifest.append('views/%s/%s' % (vname, fname))
        return views

    def functions(self, kind, manifest):
        """ fold `lists` or `shows` folder """
        fundir = self._path(kind)
        if not os.path.isdir(fundir):
            logger.warning("No %s folder found!" % kind)
            return None

        funs = {}
        manifest.append('%s/' % kind)
        for fname, fpath in _listdir(fundir, only_javascript):
            funs[_function_name(fname)] = self._read(fpath)
            manifest.append('%s/%s' % (kind, fname))
        return funs

    def attachments(self):
        """ This function yield a tuple (name, filepath) corresponding
        to each file under `_attachments`. `name` is the name of
        attachment in `_attachments` member and `filepath` the path to
        the attachment on the disk.
        """
        attachdir = self._path('_attachments')
        if not os.path.isdir(attachdir):
            return
        for root, dirs, files in os.walk(attachdir):
            dirs.sort()
            for filename in sorted(files):
                filepath = os.path.join(root, filename)
                yield util.relpath(filepath, attachdir), filepath


def content_type(name):
    ctype, encoding = mimetypes.guess_type(name)
    return ctype or DEFAULT_CONTENT_TYPE


def document(path):
    return LocalDoc(path)
