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

import argparse
import logging
import os
import re
import stat

import chardet
import gevent


logger = logging.getLogger(__name__)


def mkdir(path: str) -> bool:
    """Make a directory (and its parents) without complaining for errors.

    path: the path of the directory to create
    returns: True if the dir is ok, False if it is not

    """
    try:
        os.makedirs(path)
        return True
    except FileExistsError:
        return os.path.isdir(path)
    except OSError:
        return False


# This function uses os.fwalk() to avoid the symlink attack, see:
# - https://bugs.python.org/issue4489
# - https://bugs.python.org/issue13734
def rmtree(path: str, missing_ok: bool = False):
    """Recursively delete a directory tree.

    Remove the directory at the given path, but first remove the files
    it contains and recursively remove the subdirectories it contains.
    Be cooperative with other greenlets by yielding often.

    path: the path to a directory.
    missing_ok: if True, a missing path is not an error, which makes
        repeated deletions of the same tree harmless.

    raise (OSError): in case of errors in the elementary operations.

    """
    if missing_ok and not os.path.lexists(path):
        return
    # If path is a symlink, fwalk() yields no entries.
    for _, subdirnames, filenames, dirfd in os.fwalk(path, topdown=False):
        for filename in filenames:
            os.remove(filename, dir_fd=dirfd)
            gevent.sleep(0)
        for subdirname in subdirnames:
            if stat.S_ISLNK(os.lstat(subdirname, dir_fd=dirfd).st_mode):
                os.remove(subdirname, dir_fd=dirfd)
            else:
                os.rmdir(subdirname, dir_fd=dirfd)
            gevent.sleep(0)

    # Remove the directory itself. An exception is raised if path is a symlink.
    os.rmdir(path)


def utf8_decoder(value: str | bytes) -> str:
    """Decode given binary to text (if it isn't already) using UTF8, and
    falling back to other encodings when possible (using chardet to guess).

    value: value to decode.

    return: decoded value.

    raise (TypeError): if value isn't a string or can't be decoded.

    """
    if isinstance(value, str):
        return value
    elif isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            encoding = chardet.detect(value).get("encoding")
            if encoding is not None:
                try:
                    return value.decode(encoding)
                except (LookupError, UnicodeDecodeError):
                    pass

    raise TypeError("Not a string.")


_UNSAFE_ID_CHARACTERS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_id(value: str) -> str:
    """Strip from value everything that can't be part of an identifier.

    The result is safe to use in file names and in the separated lists
    passed around by the pipeline.

    """
    return _UNSAFE_ID_CHARACTERS.sub("", value)


def exists_case_sensitive(base: str, *components: str) -> bool:
    """Return whether base/components... exists, comparing names exactly.

    Each component is looked up in the listing of its parent, so that
    "Src" doesn't match "src" on case-insensitive filesystems.

    base: an existing directory, trusted to be spelled correctly.
    components: the path components to check, in order.

    """
    current = base
    for component in components:
        try:
            if component not in os.listdir(current):
                return False
        except (NotADirectoryError, FileNotFoundError):
            return False
        current = os.path.join(current, component)
    return True


def default_argument_parser(description: str) -> argparse.ArgumentParser:
    """Return an argument parser with the options common to all tools.

    description: description of the tool.

    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("-a", "--assignment-id", action="store",
                        type=utf8_decoder, required=True,
                        help="id of the assignment to work on")
    return parser
