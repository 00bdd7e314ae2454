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

"""Abstraction layer for reading from and writing to archives.

"""

import os

import patoolib
from patoolib.util import PatoolError


class ArchiveException(Exception):
    """Exception for when an archive cannot be created or extracted.

    """
    pass


class Archive:
    """Class to manage archives.

    This class has static methods to test, extract, and create
    archives; the format is chosen by patoolib from the file name.

    """

    @staticmethod
    def is_supported(path: str) -> bool:
        """Return whether the file at path is supported by patoolib.

        path: the path to test.

        return: whether path is supported.

        """
        try:
            patoolib.test_archive(path, verbosity=-1, interactive=False)
            return True
        except PatoolError:
            return False

    @staticmethod
    def create_from_dir(from_dir: str, archive_path: str):
        """Create a new archive containing all files in from_dir.

        Paths inside the archive are relative to from_dir. An existing
        file at archive_path is replaced.

        from_dir: directory with the files to archive.
        archive_path: the new archive's path.

        raise (ArchiveException): if patoolib fails.

        """
        archive_path = os.path.abspath(archive_path)
        if os.path.exists(archive_path):
            os.remove(archive_path)
        files = tuple(sorted(os.listdir(from_dir)))
        cwd = os.getcwd()
        os.chdir(from_dir)
        try:
            patoolib.create_archive(archive_path, files, verbosity=-1,
                                    interactive=False)
        except PatoolError as error:
            raise ArchiveException(
                "Cannot create archive %s: %s" % (archive_path, error))
        finally:
            os.chdir(cwd)

    @staticmethod
    def extract_to_dir(archive_path: str, to_dir: str):
        """Extract the content of an archive in to_dir.

        archive_path: path of the archive to extract.
        to_dir: destination directory, created if missing.

        raise (ArchiveException): if the file is not a valid archive.

        """
        os.makedirs(to_dir, exist_ok=True)
        try:
            patoolib.extract_archive(archive_path, outdir=to_dir,
                                     verbosity=-1, interactive=False)
        except PatoolError as error:
            raise ArchiveException(
                "Cannot extract archive %s: %s" % (archive_path, error))
