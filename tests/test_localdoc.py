# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

import base64
from hashlib import md5
import os
import shutil
import tempfile
import unittest

from couchdeploy.errors import MissingRequiredFile, MalformedJson, \
InvalidDocument
from couchdeploy.localdoc import LocalDoc, document, content_type

testapp_path = os.path.join(os.path.dirname(__file__), 'testapp')


class LocalDocTestCase(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.app_dir = os.path.join(self.tempdir, "testapp")
        shutil.copytree(testapp_path, self.app_dir)
        # binary attachment in a nested folder
        imgdir = os.path.join(self.app_dir, '_attachments', 'img', 'icons')
        os.makedirs(imgdir)
        self.logo = bytes(range(256))
        with open(os.path.join(imgdir, 'logo.unknownext'), 'wb') as f:
            f.write(self.logo)

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def _remove(self, name):
        path = os.path.join(self.app_dir, name)
        if os.path.isdir(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)

    def testDocument(self):
        doc = document(self.app_dir).doc()
        self.assertEqual(doc['_id'], '_design/testapp')
        self.assertEqual(doc['language'], 'javascript')
        self.assertEqual(doc['README'],
                'Test application.\n\nDeployed with couchdeploy.\n')
        self.assertEqual(doc['rewrites'][0], {"from": "/", "to": "index.html"})
        self.assertFalse('_rev' in doc)

    def testKeysOrder(self):
        doc = LocalDoc(self.app_dir).doc()
        self.assertEqual(list(doc.keys()), ['_id', 'rewrites', 'language',
            'views', 'lists', 'README', 'shows', 'couchapp', '_attachments'])

    def testFunctions(self):
        doc = LocalDoc(self.app_dir).doc()
        self.assertEqual(sorted(doc['views'].keys()), ['by_date', 'by_name'])
        self.assertEqual(sorted(doc['views']['by_name'].keys()),
                ['map', 'reduce'])
        self.assertTrue('emit(doc.name' in doc['views']['by_name']['map'])
        self.assertEqual(doc['views']['by_name']['reduce'], '_count\n')
        self.assertEqual(list(doc['lists'].keys()), ['feed'])
        # only .js files are functions
        self.assertEqual(list(doc['shows'].keys()), ['doc'])

    def testManifest(self):
        app = LocalDoc(self.app_dir)
        doc = app.doc()
        expected = [
            'couchapp.json',
            'language',
            'README.txt',
            'rewrites.json',
            'views/',
            'views/by_date/',
            'views/by_date/map.js',
            'views/by_name/',
            'views/by_name/map.js',
            'views/by_name/reduce.js',
            'lists/',
            'lists/feed.js',
            'shows/',
            'shows/doc.js',
        ]
        self.assertEqual(doc['couchapp']['manifest'], expected)
        self.assertEqual(app.manifest, expected)

    def testManifestWithoutOptionalFolders(self):
        for name in ('views', 'lists', 'shows', '_attachments'):
            self._remove(name)
        doc = LocalDoc(self.app_dir).doc()
        self.assertEqual(doc['couchapp']['manifest'],
                ['couchapp.json', 'language', 'README.txt', 'rewrites.json'])
        for name in ('views', 'lists', 'shows', '_attachments'):
            self.assertFalse(name in doc)
        self.assertEqual(doc['couchapp']['signatures'], {})

    def testEmptyViewsFolder(self):
        self._remove('views')
        os.makedirs(os.path.join(self.app_dir, 'views'))
        doc = LocalDoc(self.app_dir).doc()
        self.assertEqual(doc['views'], {})
        self.assertTrue('views/' in doc['couchapp']['manifest'])

    def testCouchappMeta(self):
        doc = LocalDoc(self.app_dir).doc()
        meta = doc['couchapp']
        self.assertEqual(meta['name'], 'Test application')
        self.assertEqual(meta['objects'], {})
        self.assertFalse('stale' in meta['manifest'])
        self.assertFalse('stale' in meta['signatures'])

    def testAttachments(self):
        doc = LocalDoc(self.app_dir).doc()
        attachments = doc['_attachments']
        self.assertEqual(sorted(attachments.keys()), [
            'img/icons/logo.unknownext', 'index.html', 'style/main.css'])
        self.assertEqual(attachments['index.html']['content_type'],
                'text/html')
        self.assertEqual(attachments['style/main.css']['content_type'],
                'text/css')
        logo = attachments['img/icons/logo.unknownext']
        self.assertEqual(logo['content_type'], 'application/octet-stream')
        self.assertEqual(base64.b64decode(logo['data']), self.logo)

    def testSignatures(self):
        doc = LocalDoc(self.app_dir).doc()
        signatures = doc['couchapp']['signatures']
        self.assertEqual(sorted(signatures.keys()),
                sorted(doc['_attachments'].keys()))
        for name, attachment in doc['_attachments'].items():
            data = base64.b64decode(attachment['data'])
            self.assertEqual(signatures[name], md5(data).hexdigest())

    def testAttachmentsOrder(self):
        names = [name for name, path in LocalDoc(self.app_dir).attachments()]
        self.assertEqual(names, ['index.html', 'img/icons/logo.unknownext',
            'style/main.css'])

    def testDocIsRebuilt(self):
        app = LocalDoc(self.app_dir)
        doc1 = app.doc()
        with open(os.path.join(self.app_dir, 'shows', 'other.js'), 'w') as f:
            f.write("function(doc, req) { return 'other'; }")
        doc2 = app.doc()
        self.assertFalse('other' in doc1['shows'])
        self.assertTrue('other' in doc2['shows'])
        self.assertTrue('shows/other.js' in doc2['couchapp']['manifest'])

    def testIdIsStripped(self):
        with open(os.path.join(self.app_dir, '_id'), 'w') as f:
            f.write("  _design/spaced \n\n")
        self.assertEqual(LocalDoc(self.app_dir).doc()['_id'],
                '_design/spaced')

    def testEmptyId(self):
        with open(os.path.join(self.app_dir, '_id'), 'w') as f:
            f.write(" \n")
        self.assertRaises(InvalidDocument, LocalDoc(self.app_dir).doc)

    def testNotUtf8(self):
        for name in ('README.txt', 'lists/feed.js',
                'views/by_name/map.js'):
            path = os.path.join(self.app_dir, name)
            with open(path, 'rb') as f:
                content = f.read()
            with open(path, 'wb') as f:
                f.write(b'\xff\xfe bad')
            try:
                with self.assertRaises(InvalidDocument) as ctx:
                    LocalDoc(self.app_dir).doc()
                self.assertTrue(isinstance(ctx.exception.__cause__,
                    UnicodeDecodeError))
            finally:
                with open(path, 'wb') as f:
                    f.write(content)

    def testMissingRequiredFiles(self):
        for name in ('_id', 'language', 'couchapp.json', 'rewrites.json',
                'README.txt'):
            tmp = os.path.join(self.tempdir, name)
            shutil.move(os.path.join(self.app_dir, name), tmp)
            try:
                with self.assertRaises(MissingRequiredFile) as ctx:
                    LocalDoc(self.app_dir).doc()
                self.assertTrue(ctx.exception.path.endswith(name))
            finally:
                shutil.move(tmp, os.path.join(self.app_dir, name))

    def testMalformedJson(self):
        with open(os.path.join(self.app_dir, 'couchapp.json'), 'w') as f:
            f.write("{not json")
        self.assertRaises(MalformedJson, LocalDoc(self.app_dir).doc)

    def testRewritesMustBeAnArray(self):
        with open(os.path.join(self.app_dir, 'rewrites.json'), 'w') as f:
            f.write('{"from": "/"}')
        self.assertRaises(MalformedJson, LocalDoc(self.app_dir).doc)

    def testCouchappJsonMustBeAnObject(self):
        with open(os.path.join(self.app_dir, 'couchapp.json'), 'w') as f:
            f.write('[]')
        self.assertRaises(MalformedJson, LocalDoc(self.app_dir).doc)

    def testContentType(self):
        self.assertTrue(content_type('a/b/c.js').endswith('javascript'))
        self.assertEqual(content_type('README'), 'application/octet-stream')


if __name__ == '__main__':
    unittest.main()
