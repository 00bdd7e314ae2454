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

"""A unittest.TestCase mixin for tests interacting with the filesystem.

"""

import os
import shutil
import tempfile


class FileSystemMixin:
    """Mixin for tests with filesystem access."""

    def setUp(self):
        super().setUp()
        self.base_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.base_dir)
        super().tearDown()

    def get_path(self, inner_path):
        "Return the full path for a given inner path within the temp dir."
        return os.path.join(self.base_dir, inner_path)

    def makedirs(self, inner_path):
        """Create (possibly many) directories up to inner_path.

        inner_path (str): path to create.

        return (str): full path of the possibly new directory.

        """
        path = self.get_path(inner_path)
        os.makedirs(path, exist_ok=True)
        return path

    def write_file(self, inner_path, content):
        """Write content and return the full path.

        Missing parent directories are created.

        inner_path (str): path inside the temp dir to write to.
        content (bytes|str): content to write, str is encoded in UTF-8.

        return (str): full path of the file written.

        """
        path = self.get_path(inner_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        with open(path, "wb") as f:
            f.write(content)
        return path

    def read_file(self, inner_path):
        """Return the content of a file as str."""
        with open(self.get_path(inner_path), "rt", encoding="utf-8") as f:
            return f.read()

    def write_project(self, inner_path, files):
        """Write a tree of files.

        inner_path (str): root of the tree inside the temp dir.
        files ({str: bytes|str}): content of each file, by relative
            path.

        return (str): full path of the root of the tree.

        """
        root = self.makedirs(inner_path)
        for relative_path, content in files.items():
            self.write_file(os.path.join(inner_path, relative_path), content)
        return root
