# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib
"""Run [`mkpw.cli.mkpw`][] on import."""

import sys

if __name__ == '__main__':
    from mkpw.cli import mkpw

    sys.exit(mkpw())
