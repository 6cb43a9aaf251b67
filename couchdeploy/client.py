# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import logging
import socket
from urllib.parse import quote

import httplib2

from couchdeploy import __version__
from couchdeploy.errors import DatabaseCheckError, DatabaseCreateError, \
FetchError, UpsertError, TransportError
from couchdeploy import util

USER_AGENT = "couchdeploy/%s" % __version__

logger = logging.getLogger(__name__)


class CouchdbResponse(object):
    """ status, reason, headers and body of a CouchDB answer """

    def __init__(self, resp, body):
        self.status = int(resp.status)
        self.reason = resp.reason
        self.headers = dict(resp)
        if isinstance(body, bytes):
            body = body.decode('utf-8', 'replace')
        self.body = body or ''

    def __repr__(self):
        return "<%s %s %s>" % (self.__class__.__name__, self.status,
                self.reason)

    @property
    def json_body(self):
        """ parsed body, None if the body is empty or isn't json """
        if not self.body.strip():
            return None
        try:
            return util.loads(self.body)
        except ValueError:
            return None


class Database(object):
    """ Object that abstract access to a CouchDB database. Every request
    is sent with basic authentication from the connection credentials.

    :attr connection: `couchdeploy.config.Connection`
    :attr http: an `httplib2.Http` like object, created if None.
    :attr debug: log requests and responses
    """

    def __init__(self, connection, http=None, debug=False):
        if http is None:
            http = httplib2.Http()
        http.force_exception_to_status_code = False
        self.http = http
        self.connection = connection
        self.uri = connection.uri
        self.debug = debug

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.uri)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        close = getattr(self.http, 'close', None)
        if close is not None:
            close()

    def probe(self):
        """ return True if the database exists, False if not """
        resp = self.request('HEAD')
        if resp.status == 200:
            return True
        elif resp.status == 404:
            return False
        raise DatabaseCheckError(
                "An error occurred while checking for database %s" % self.uri,
                status=resp.status, response=resp)

    def create(self):
        """ create the database """
        resp = self.request('PUT', body='')
        if resp.status != 201:
            raise DatabaseCreateError(
                    "Unable to create database %s" % self.uri,
                    status=resp.status, response=resp)
        logger.info("database %s created" % self.uri)
        return resp

    def fetch(self, docid):
        """ get a document. Return None if it doesn't exist.

        @param docid: str, document id to retrieve

        @return: dict, the document
        """
        resp = self.request('GET', escape_docid(docid))
        if resp.status == 200:
            doc = resp.json_body
            if isinstance(doc, dict):
                return doc
            raise FetchError("Document %s isn't a json object" % docid,
                    status=resp.status, response=resp)
        elif resp.status == 404:
            return None
        raise FetchError("Unable to retrieve document %s" % docid,
                status=resp.status, response=resp)

    def upsert(self, docid, doc):
        """ save a document. `doc` is a json string or a dict. The
        `_rev` member must be set when the document already exists.

        @return: dict, the CouchDB answer ({"ok": true, "id": .., "rev": ..})
        """
        if not isinstance(doc, (str, bytes)):
            doc = util.dumps(doc)
        resp = self.request('PUT', escape_docid(docid), body=doc,
                headers={'Content-Type': 'application/json'})
        if resp.status != 201:
            raise UpsertError("Unable to save document %s" % docid,
                    status=resp.status, response=resp)
        return resp.json_body

    def request(self, method, path=None, body=None, headers=None):
        """ Perform HTTP call to the database.

        @param method: str, 'HEAD', 'GET' or 'PUT'
        @param path: str, path to add to the database uri
        @param body: str, request body
        @param headers: dict, optional headers that will
            be added to HTTP request.

        @return: CouchdbResponse
        """
        headers = headers or {}
        headers.setdefault('Accept', 'application/json')
        headers.setdefault('User-Agent', USER_AGENT)
        headers.setdefault('Authorization',
                "Basic %s" % self.connection.auth_token())

        if body is not None:
            body = util.to_bytestring(body)
            headers.setdefault('Content-Length', str(len(body)))

        uri = self.uri
        if path:
            uri = "%s/%s" % (uri, path)

        if self.debug:
            logger.debug("Request: %s %s" % (method, uri))
        try:
            resp, content = self.http.request(uri, method, body=body,
                    headers=headers)
        except (socket.error, httplib2.HttpLib2Error) as e:
            raise TransportError("%s %s failed: %s" % (method, uri, e)) from e

        response = CouchdbResponse(resp, content)
        if self.debug:
            logger.debug("Got response: %s %s" % (response.status,
                response.reason))
            logger.debug("Headers: %s" % util.dumps(response.headers))
        return response


def escape_docid(docid):
    if docid.startswith('/'):
        docid = docid[1:]
    if docid.startswith('_design/'):
        docid = '_design/%s' % quote(docid[8:], safe='')
    else:
        docid = quote(docid, safe='')
    return docid
