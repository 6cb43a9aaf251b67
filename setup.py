# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import ast
import os
import sys

if not hasattr(sys, 'version_info') or sys.version_info < (3, 6, 0, 'final'):
    raise SystemExit("couchdeploy requires Python 3.6 or later.")

from setuptools import setup, find_packages


def get_version():
    # read the version without importing the package and its dependencies
    fname = os.path.join(os.path.dirname(__file__), 'couchdeploy',
            '__init__.py')
    with open(fname) as f:
        for line in f:
            if line.startswith('version_info'):
                return ".".join(map(str, ast.literal_eval(line.split('=', 1)[1].strip())))
    raise SystemExit("couchdeploy version not found")


setup(
    name = 'couchdeploy',
    version = get_version(),
    license =  'Apache License 2',
    description = 'Package a CouchApp folder in a design document and '
        'deploy it to CouchDB.',
    long_description = """couchdeploy folds a CouchApp source folder
    (views, lists, shows, attachments and metadata) in a single
    couchapp.json design document, then creates or updates this design
    document in a CouchDB database.""",
    keywords = 'couchdb couchapp',
    platforms = ['any'],
    classifiers = [
        'License :: OSI Approved :: Apache Software License',
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'Development Status :: 4 - Beta',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'Topic :: Database',
        'Topic :: Utilities',
    ],

    packages = find_packages(exclude=['tests']),

    install_requires = [
        'httplib2',
        'simplejson',
    ],

    extras_require = {
        'test': ['pytest'],
    },

    entry_points = """
    [console_scripts]
    couchdeploy=couchdeploy.dispatch:run
    """,

    test_suite = 'tests',
)
