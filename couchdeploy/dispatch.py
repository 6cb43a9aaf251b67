# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import logging
import getopt
import sys
import traceback

import couchdeploy.commands as commands
from couchdeploy.config import Config
from couchdeploy.errors import AppError, CommandLineError

logger = logging.getLogger(__name__)


def set_logging(level=2):
    """
    Set level of logging, and choose where to display/save logs
    (file or standard output).
    """
    logger_ = logging.getLogger('couchdeploy')
    logger_.setLevel(level * 10)
    if logger_.handlers:
        return
    handler = logging.StreamHandler()
    format = r"%(asctime)s [%(levelname)s] %(message)s"
    datefmt = r"%Y-%m-%d %H:%M:%S"

    handler.setFormatter(logging.Formatter(format, datefmt))
    logger_.addHandler(handler)

def set_logging_level(level=2):
    logger_ = logging.getLogger('couchdeploy')
    logger_.setLevel(level * 10)


def run():
    sys.exit(dispatch(sys.argv[1:]))


def dispatch(args):
    set_logging()

    try:
        return _dispatch(args)
    except AppError as e:
        logger.error("couchdeploy error: %s" % str(e))
        if e.__cause__ is not None:
            logger.debug("caused by %r" % e.__cause__)
    except KeyboardInterrupt:
        logger.info("keyboard interrupt")
    except Exception as e:
        logger.critical("%s\n\n%s" % (str(e), traceback.format_exc()))
    return -1

def _dispatch(args):
    cmd, globalopts, opts, args = _parse(args)

    if globalopts["help"]:
        return commands.usage(None)
    elif globalopts["version"]:
        return commands.version(None)

    verbose = 2
    if globalopts["verbose"] or opts.get("debug"):
        verbose = 1
    elif globalopts["quiet"]:
        verbose = 4
    set_logging_level(verbose)

    if cmd not in commands.table:
        raise CommandLineError("unknown command %s" % cmd)
    if args:
        raise CommandLineError("%s doesn't take arguments: %s" % (cmd,
            " ".join(args)))

    conf = Config.from_options(opts)
    fun = commands.table[cmd][0]
    fun(conf)
    return 0


def _parse(args):
    options = {}
    cmdoptions = {}
    try:
        args = parseopts(args, commands.globalopts, options)
    except getopt.GetoptError as e:
        raise CommandLineError(str(e))

    if args:
        cmd, args = args[0], args[1:]
        if cmd in commands.table:
            cmdopts = list(commands.table[cmd][1])
        else:
            cmdopts = []
    else:
        cmd = "help"
        cmdopts = list(commands.table[cmd][1])

    for opt in commands.globalopts:
        cmdopts.append((opt[0], opt[1], options[opt[1]], opt[3]))

    try:
        args = parseopts(args, cmdopts, cmdoptions)
    except (getopt.GetoptError, ValueError) as e:
        raise CommandLineError("%s: %s" % (cmd, e))

    for opt in list(cmdoptions.keys()):
        if opt in options:
            options[opt] = cmdoptions[opt]
            del cmdoptions[opt]

    return cmd, options, cmdoptions, args


def parseopts(args, options, state):
    namelist = []
    shortlist = ''
    argmap = {}
    defmap = {}

    for short, name, default, comment in options:
        oname = name
        name = name.replace('-', '_')
        argmap['--' + oname] = name
        if short:
            argmap['-' + short] = name
        defmap[name] = default

        if isinstance(default, list):
            state[name] = default[:]
        else:
            state[name] = default

        if not (default is None or default is True or default is False):
            if short: short += ':'
            if oname: oname += '='
        if short:
            shortlist += short
        if name:
            namelist.append(oname)

    opts, args = getopt.getopt(args, shortlist, namelist)
    for opt, val in opts:
        name = argmap[opt]
        t = type(defmap[name])
        if t is int:
            state[name] = int(val)
        elif t is str:
            state[name] = val
        elif t is list:
            state[name].append(val)
        elif t is type(None) or t is bool:
            state[name] = True

    return args
