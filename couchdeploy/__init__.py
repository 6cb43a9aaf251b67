# -*- coding: utf-8 -*-
#
# This file is part of couchdeploy released under the Apache 2 license.
# See the NOTICE for more information.

version_info = (1, 0, 0)
__version__ = ".".join(map(str, version_info))
