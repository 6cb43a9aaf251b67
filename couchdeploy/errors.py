# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.


class AppError(Exception):
    """ raised when a application error appear """

class MissingRequiredFile(AppError):
    """ raised when a file required to build the design doc is missing """

    def __init__(self, path):
        AppError.__init__(self, "required file %s is missing" % path)
        self.path = path

class MalformedJson(AppError):
    """ raised when a json file can't be parsed or has the wrong type """

    def __init__(self, path, reason):
        AppError.__init__(self, "invalid json in %s: %s" % (path, reason))
        self.path = path

class InvalidDocument(AppError):
    """ raised when the design doc can't be built (empty _id, ...) """

class InvalidResourceUri(AppError):
    """ raised when a resource uri can't be parsed """

class CommandError(AppError):
    """ raised when a command fails. The original error is kept in
    `__cause__`. """

class CommandLineError(AppError):
    """ error when a bad command line is passed"""


class RequestFailed(Exception):
    """ raised when CouchDB answers with an unexpected status """

    def __init__(self, msg, status=None, response=None):
        Exception.__init__(self, msg)
        self.status = status
        self.response = response

    def __str__(self):
        msg = Exception.__str__(self)
        if self.status is None:
            return msg
        reason = getattr(self.response, 'reason', '') or ''
        return ("%s (%s %s)" % (msg, self.status, reason)).rstrip()

class DatabaseCheckError(RequestFailed):
    """ HEAD on the database returned something else than 200 or 404 """

class DatabaseCreateError(RequestFailed):
    """ database creation didn't return 201 """

class FetchError(RequestFailed):
    """ GET on a document returned something else than 200 or 404 """

class UpsertError(RequestFailed):
    """ saving a document didn't return 201 """

class TransportError(Exception):
    """ raised when the connection to the server fails """
