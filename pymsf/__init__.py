#!/usr/bin/env python
# -*- coding: UTF-8 -*-

'''
    This program is free software; you can redistribute it and/or modify
    it under the terms of the Revised BSD License.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    Revised BSD License for more details.

    Copyright 2018-2026 Cool Dude 2k - http://idb.berlios.de/
    Copyright 2018-2026 Game Maker 2k - http://intdb.sourceforge.net/
    Copyright 2018-2026 Kazuki Przyborowski - https://github.com/KazukiPrzyborowski

    $FileInfo: __init__.py - Last Update: 10/16/2026 Ver. 0.3.1 RC 1 - Author: cooldude2k $
'''

from .pymsf import *
from . import pymsf

__project__ = pymsf.__project__
__program_name__ = pymsf.__program_name__
__file_format_name__ = pymsf.__file_format_name__
__file_format_magic__ = pymsf.__file_format_magic__
__file_format_len__ = pymsf.__file_format_len__
__file_format_hex__ = pymsf.__file_format_hex__
__project_url__ = pymsf.__project_url__
__version_info__ = pymsf.__version_info__
__version_date_info__ = pymsf.__version_date_info__
__version_date__ = pymsf.__version_date__
__version_date_plusrc__ = pymsf.__version_date_plusrc__
__version__ = pymsf.__version__
