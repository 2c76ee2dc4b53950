# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""mkpw internals.

Warning:
    Non-public package (implementation detail), provided for didactical
    and educational purposes only. Subject to change without notice,
    including removal.

"""

import mkpw

__all__ = ()

PROG_NAME = mkpw.__distribution_name__
VERSION = mkpw.__version__
AUTHOR = mkpw.__author__
