# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import base64
from collections import namedtuple
import logging
import os
from urllib.parse import urlsplit, unquote

from couchdeploy.errors import InvalidResourceUri, MalformedJson
from couchdeploy import util

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5984
DEFAULT_PORTS = {'http': 80, 'https': 443}

RC_FILE = '.couchapprc'


class Connection(namedtuple('Connection',
        'scheme host port db user password')):
    """ where the design document is deployed: scheme, host, port,
    database name and optional credentials. """

    __slots__ = ()

    def __new__(cls, scheme='http', host='localhost', port=DEFAULT_PORT,
            db='', user='', password=''):
        return super(Connection, cls).__new__(cls, scheme, host, int(port),
                db, user or '', password or '')

    @classmethod
    def from_uri(cls, uri):
        """ parse `scheme://[user:pass@]host[:port]/db` """
        try:
            parts = urlsplit(uri)
            port = parts.port
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidResourceUri("%r: %s" % (uri, e))
        if parts.scheme not in DEFAULT_PORTS:
            raise InvalidResourceUri("%r: unsupported scheme" % uri)
        if not parts.hostname:
            raise InvalidResourceUri("%r: host is missing" % uri)

        db = parts.path
        if db.startswith('/'):
            db = db[1:]
        if not db:
            raise InvalidResourceUri("%r: database is missing" % uri)

        user = password = ''
        if parts.username is not None and parts.password is not None:
            user = unquote(parts.username)
            password = unquote(parts.password)

        if port is None:
            port = DEFAULT_PORT
        return cls(parts.scheme, parts.hostname, port, db, user, password)

    def has_default_port(self):
        return DEFAULT_PORTS.get(self.scheme) == self.port

    @property
    def server_uri(self):
        host = self.host
        if ':' in host:
            # ipv6 literal
            host = "[%s]" % host
        if self.has_default_port():
            return "%s://%s" % (self.scheme, host)
        return "%s://%s:%s" % (self.scheme, host, self.port)

    @property
    def uri(self):
        """ database url, without credentials """
        return "%s/%s" % (self.server_uri, self.db)

    def auth_token(self):
        """ basic auth token. It is the base64 of an empty string when
        no credentials are set. """
        if self.user or self.password:
            userinfo = "%s:%s" % (self.user, self.password)
        else:
            userinfo = ""
        return base64.b64encode(userinfo.encode('utf-8')).decode('ascii')

    def __str__(self):
        return self.uri


class Config(namedtuple('Config',
        'source target skip debug debug_wire connection')):
    """ configuration of a run. It is built once; `resolve` returns a
    new config with the values of the `.couchapprc` file. """

    __slots__ = ()

    DEFAULT_SOURCE = 'src'
    DEFAULT_TARGET = 'target'

    def __new__(cls, source=DEFAULT_SOURCE, target=DEFAULT_TARGET,
            skip=False, debug=False, debug_wire=False, connection=None):
        if connection is None:
            connection = Connection()
        return super(Config, cls).__new__(cls, source, target, skip,
                debug, debug_wire, connection)

    @classmethod
    def from_options(cls, opts):
        """ build the config from command line options """
        connection = Connection(
            scheme=opts.get('scheme') or 'http',
            host=opts.get('host') or 'localhost',
            port=opts.get('port') or DEFAULT_PORT,
            db=opts.get('db', ''),
            user=opts.get('user', ''),
            password=opts.get('password', ''))
        return cls(
            source=util.expandpath(opts.get('source') or cls.DEFAULT_SOURCE),
            target=util.expandpath(opts.get('target') or cls.DEFAULT_TARGET),
            skip=bool(opts.get('skip')),
            debug=bool(opts.get('debug')),
            debug_wire=bool(opts.get('debug_wire')),
            connection=connection)

    @property
    def artifact(self):
        return os.path.join(self.target, 'couchapp.json')

    def resolve(self):
        """ return a config where the connection is taken from
        `env.default.db` in the `.couchapprc` file of the source
        folder, if there is one. """
        rcfile = os.path.join(self.source, RC_FILE)
        if not os.path.isfile(rcfile):
            logger.info("Resource uri: %s" % self.connection.uri)
            return self

        logger.info("Loading couchapp resource configuration...")
        try:
            rc = util.read_json(rcfile, use_environment=True)
        except ValueError as e:
            raise MalformedJson(rcfile, str(e))
        uri = util.get_path(rc, 'env', 'default', 'db')
        if not uri:
            logger.info("Resource uri: %s" % self.connection.uri)
            return self

        connection = Connection.from_uri(uri)
        if not connection.user and not connection.password:
            # credentials of the command line are kept
            connection = connection._replace(user=self.connection.user,
                    password=self.connection.password)
        logger.info("Resource uri: %s" % connection.uri)
        return self._replace(connection=connection)

    def log(self):
        logger.debug("Configuration:")
        for name in ('skip', 'debug', 'debug_wire', 'source', 'target'):
            logger.debug("%s: %s" % (name, getattr(self, name)))
        for name in ('scheme', 'host', 'port', 'db', 'user'):
            logger.debug("couchdb.%s: %s" % (name,
                getattr(self.connection, name)))
