#!/usr/bin/env python3

# DropProject - submission processing pipeline
# Copyright © 2019-2024 The DropProject development team
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Helpers to pretty-print on terminals.

"""

import curses
import sys


class colors:
    BLACK = curses.COLOR_BLACK
    RED = curses.COLOR_RED
    GREEN = curses.COLOR_GREEN
    YELLOW = curses.COLOR_YELLOW
    BLUE = curses.COLOR_BLUE
    MAGENTA = curses.COLOR_MAGENTA
    CYAN = curses.COLOR_CYAN
    WHITE = curses.COLOR_WHITE


def has_color_support(stream) -> bool:
    """Try to determine if the given stream supports colored output.

    Return True only if the stream declares to be a TTY, if it has a
    file descriptor on which ncurses can initialize a terminal and if
    that terminal's entry in terminfo declares support for colors.

    stream: a file-like object.

    return: True if we're sure that colors are supported, False if
        they aren't or if we can't tell.

    """
    if stream.isatty():
        try:
            curses.setupterm(fd=stream.fileno())
            if curses.tigetnum("colors") > 0:
                return True
        # fileno() raises OSError on streams not backed by a descriptor.
        except (OSError, curses.error):
            pass
    return False


def add_color_to_string(string: str, color: int, stream=sys.stdout,
                        bold: bool = False, force: bool = False) -> str:
    """Format the string to be printed with the given color.

    string: the string to color.
    color: the color as a colors constant, like colors.BLACK.
    stream: the stream the string will be written to; colors are only
        added if it supports them.
    bold: True if the string should be bold.
    force: True if the string should be formatted even if the given
        stream has no color support.

    return: the formatted string.

    """
    if force or has_color_support(stream):
        return "%s%s%s%s" % (
            curses.tparm(
                curses.tigetstr("setaf"), color
            ).decode("ascii") if color != colors.BLACK else "",
            curses.tparm(curses.tigetstr("bold")).decode("ascii")
            if bold else "",
            string,
            curses.tparm(curses.tigetstr("sgr0")).decode("ascii")
        )
    else:
        return string
