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

"""Tests for the file system storage of raw projects.

"""

import os
import shutil
import unittest
import zipfile
from unittest.mock import MagicMock

from dptestsuite.unit_tests.filesystemmixin import FileSystemMixin

from dropproject.errors import ArchiveFailed, StorageFailed
from dropproject.service import FileSystemStorage


class TestFileSystemStorage(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.storage = FileSystemStorage(self.makedirs("upload"),
                                         self.makedirs("git"))

    def make_zip(self, name, files):
        path = self.get_path(name)
        with zipfile.ZipFile(path, "w") as archive:
            for relative_path, content in files.items():
                archive.writestr(relative_path, content)
        return path

    def submission_for(self, folder):
        submission = MagicMock()
        submission.upload_folder = \
            os.path.relpath(folder, self.storage.root())
        return submission

    def test_store(self):
        upload = self.make_zip("my project.zip", {
            "AUTHORS.txt": "a1;Student One\n",
            "src/Main.java": "class Main {}\n",
        })
        folder = self.storage.store(upload, "sample/assignment")

        relative = os.path.relpath(folder, self.storage.root())
        assignment_folder, name = os.path.split(relative)
        # The assignment id is sanitized to a single path component.
        self.assertNotIn(os.sep, assignment_folder)
        self.assertRegex(name, r"^\d+-")
        self.assertTrue(os.path.isfile(folder + ".zip"))
        self.assertTrue(os.path.isfile(os.path.join(folder, "AUTHORS.txt")))
        self.assertTrue(
            os.path.isfile(os.path.join(folder, "src", "Main.java")))
        # The received file is copied, not moved.
        self.assertTrue(os.path.isfile(upload))

    def test_store_twice_gives_different_folders(self):
        upload = self.make_zip("project.zip", {"AUTHORS.txt": "a1;One\n"})
        first = self.storage.store(upload, "assignment")
        second = self.storage.store(upload, "assignment")
        self.assertNotEqual(first, second)

    def test_store_invalid_archive(self):
        upload = self.write_file("project.zip", b"this is not a zip")
        with self.assertRaises(ArchiveFailed):
            self.storage.store(upload, "assignment")
        folders = [entry for entry in
                   os.listdir(self.get_path("upload/assignment"))
                   if not entry.endswith(".zip")]
        self.assertEqual(folders, [])

    def test_store_missing_upload(self):
        with self.assertRaises(StorageFailed):
            self.storage.store(self.get_path("missing.zip"), "assignment")

    def test_discard(self):
        upload = self.make_zip("project.zip", {"AUTHORS.txt": "a1;One\n"})
        folder = self.storage.store(upload, "assignment")
        self.storage.discard(folder)
        self.assertFalse(os.path.exists(folder))
        self.assertFalse(os.path.exists(folder + ".zip"))
        # Discarding twice is harmless.
        self.storage.discard(folder)

    def test_retrieve_unpacks_again(self):
        upload = self.make_zip("project.zip", {"AUTHORS.txt": "a1;One\n"})
        folder = self.storage.store(upload, "assignment")
        submission = self.submission_for(folder)

        self.assertEqual(self.storage.retrieve(submission), folder)
        shutil.rmtree(folder)
        self.assertEqual(self.storage.retrieve(submission), folder)
        self.assertTrue(os.path.isfile(os.path.join(folder, "AUTHORS.txt")))

    def test_retrieve_missing(self):
        upload = self.make_zip("project.zip", {"AUTHORS.txt": "a1;One\n"})
        folder = self.storage.store(upload, "assignment")
        submission = self.submission_for(folder)
        shutil.rmtree(folder)
        os.remove(folder + ".zip")
        self.assertIsNone(self.storage.retrieve(submission))

    def test_retrieve_git(self):
        submission = MagicMock()
        submission.upload_folder = None
        submission.git_submission.get_folder_relative_to_storage_root\
            .return_value = "assignment/12-repo"
        self.assertIsNone(self.storage.retrieve(submission))

        folder = self.makedirs("git/assignment/12-repo")
        self.assertEqual(self.storage.retrieve(submission), folder)

    def test_retrieve_without_source(self):
        submission = MagicMock()
        submission.upload_folder = None
        submission.git_submission = None
        self.assertIsNone(self.storage.retrieve(submission))

    def test_pack(self):
        folder = self.write_project("tree", {
            "pom.xml": "<project/>",
            "src/main/java/Main.java": "class Main {}\n",
        })
        archive_path = self.storage.pack(folder, self.get_path("tree.zip"))

        with zipfile.ZipFile(archive_path) as archive:
            names = archive.namelist()
        self.assertIn("pom.xml", names)
        self.assertIn("src/main/java/Main.java", names)


if __name__ == "__main__":
    unittest.main()
