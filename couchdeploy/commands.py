# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import logging
import os

import httplib2

from couchdeploy.client import Database
from couchdeploy.errors import AppError, CommandError, MissingRequiredFile, \
MalformedJson, RequestFailed, TransportError
from couchdeploy.localdoc import document
from couchdeploy import util

logger = logging.getLogger(__name__)

# errors turned into a CommandError by the commands
FAILURES = (EnvironmentError, AppError, RequestFailed, TransportError)

# deploy states
START = "start"
SOURCE_CHECKED = "source checked"
RESOURCE_RESOLVED = "resource resolved"
TARGET_CHECKED = "target checked"
DOC_LOADED = "doc loaded"
DB_ENSURED = "db ensured"
REV_RESOLVED = "rev resolved"
DEPLOYED = "deployed"
SKIPPED = "skipped"


def _initialize(conf):
    if conf.debug:
        conf.log()

def _check_source(conf):
    if not os.path.isdir(conf.source):
        logger.info("source folder %s does not exist, skipping." % conf.source)
        return False
    return True

def _load_artifact(path):
    if not os.path.isfile(path):
        raise MissingRequiredFile(path)
    try:
        doc = util.read_json(path)
    except ValueError as e:
        raise MalformedJson(path, str(e))
    if not isinstance(doc, dict) or not doc.get('_id'):
        raise MalformedJson(path, "design document without _id")
    return doc


def package(conf, *args, **opts):
    """ build the design document from the source folder and save it in
    `<target>/couchapp.json`. Return the design document, or None when
    nothing was packaged. """
    if conf.skip:
        logger.info("Skipping.")
        return None
    _initialize(conf)
    if not _check_source(conf):
        return None

    try:
        util.ensure_dir(conf.target)
        doc = document(conf.source).doc()
        if conf.debug:
            logger.debug(util.dumps(doc, pretty=True))
        util.write_json(conf.artifact, doc)
    except FAILURES as e:
        raise CommandError("Unable to package %s: %s" % (conf.source, e)) from e

    logger.info("%s packaged in %s" % (doc['_id'], conf.artifact))
    return doc


def deploy(conf, *args, **opts):
    """ send the packaged design document to the database, creating the
    database if needed. Return the saved document, or None when the
    deploy was skipped.

    `http` can be passed in `opts` to use a custom `httplib2.Http`.
    """
    state = START
    if conf.skip:
        logger.info("Skipping.")
        return None
    _initialize(conf)
    if not _check_source(conf):
        logger.debug("deploy: %s" % SKIPPED)
        return None
    state = SOURCE_CHECKED

    # httplib2 debuglevel is global, it is restored when done
    debuglevel = httplib2.debuglevel
    if conf.debug_wire:
        httplib2.debuglevel = 1

    db = None
    try:
        conf = conf.resolve()
        state = RESOURCE_RESOLVED

        util.ensure_dir(conf.target)
        state = TARGET_CHECKED

        doc = _load_artifact(conf.artifact)
        docid = doc['_id']
        state = DOC_LOADED

        db = Database(conf.connection, http=opts.get('http'),
                debug=conf.debug)
        if not db.probe():
            logger.info("database %s does not exist, creating..." % db.uri)
            db.create()
        state = DB_ENSURED

        olddoc = db.fetch(docid)
        if olddoc is not None:
            doc['_rev'] = olddoc['_rev']
        state = REV_RESOLVED

        db.upsert(docid, doc)
        state = DEPLOYED
    except (FAILURES + (KeyError,)) as e:
        logger.debug("deploy failed after state: %s" % state)
        raise CommandError("Unable to deploy %s: %s" % (conf.artifact, e)) from e
    finally:
        httplib2.debuglevel = debuglevel
        if db is not None:
            db.close()

    logger.info("%s deployed to %s" % (docid, conf.connection.uri))
    return doc


def version(conf, *args, **opts):
    from couchdeploy import __version__

    print("couchdeploy (version %s)" % __version__)
    print("Licensed under the Apache License, Version 2.0.")
    return 0


def usage(conf, *args, **opts):
    print("couchdeploy [OPTIONS] [CMD] [OPTIONSCMD]")
    print("usage:")
    print("")

    for opt in globalopts:
        print_option(opt)

    print("")
    print("list of commands:")
    print("-----------------")
    print("")
    for cmd in sorted(table.keys()):
        opts = table[cmd]
        print("%s\t %s" % (cmd, opts[2]))
        for opt in opts[1]:
            print_option(opt)
        print("")
    return 0

def print_option(opt):
    if opt[2] is None or opt[2] is True or opt[2] is False:
        default = ""
    else:
        default = " [VAL]"
    if opt[0]:
        print("-%s/--%s%s\t %s" % (opt[0], opt[1], default, opt[3]))
    else:
        print("--%s%s\t %s" % (opt[1], default, opt[3]))

globalopts = [
    ('h', 'help', None, "display help and exit"),
    ('', 'version', None, "display version and exit"),
    ('v', 'verbose', None, "enable additionnal output"),
    ('q', 'quiet', None, "don't print any message")
]

buildopts = [
    ('s', 'source', 'src', "couchapp source folder"),
    ('t', 'target', 'target', "folder where couchapp.json is written"),
    ('', 'skip', False, "do nothing"),
    ('', 'debug', False, "log configuration and design document"),
]

deployopts = buildopts + [
    ('', 'debug-wire', False, "dump http requests and responses"),
    ('', 'scheme', 'http', "couchdb scheme"),
    ('', 'host', 'localhost', "couchdb host"),
    ('p', 'port', 5984, "couchdb port"),
    ('d', 'db', '', "couchdb database"),
    ('u', 'user', '', "couchdb user"),
    ('', 'password', '', "couchdb password"),
]

table = {
    "package":
        (package,
        buildopts,
        "[OPTION]..."),
    "deploy":
        (deploy,
        deployopts,
        "[OPTION]..."),
    "help":
        (usage, [], ""),
    "version":
        (version, [], "")
}
