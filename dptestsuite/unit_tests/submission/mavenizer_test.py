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

"""Tests for the transformation into the canonical layout.

"""

import os
import unittest
from unittest.mock import patch

from dropproject import config
from dropproject.db import Assignment, Language, Submission
from dropproject.errors import TransformationFailed
from dropproject.submission import TeacherFiles, mavenize, \
    remove_original_folder
from dptestsuite.unit_tests.filesystemmixin import FileSystemMixin


PACKAGE = "org/dropproject/sample"

STUDENT_FILES = {
    "src/%s/Main.java" % PACKAGE: "class Main {}",
    "src/%s/Util.java" % PACKAGE: "class Util { /* student */ }",
    "src/%s/TestMain.java" % PACKAGE: "class TestMain {}",
    "test-files/input.txt": "1 2 3",
    "AUTHORS.txt": "a1;Ana Silva",
    "README.md": "student readme",
}

TEACHER_FILES = {
    "pom.xml": "<project/>",
    "README.md": "teacher readme",
    "src/test/java/%s/TestTeacherMain.java" % PACKAGE: "class T {}",
    "src/main/java/%s/Util.java" % PACKAGE: "class Util { /* teacher */ }",
    ".git/HEAD": "ref: refs/heads/main",
}


def list_tree(root):
    result = {}
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            with open(path, "rb") as f:
                result[os.path.relpath(path, root)] = f.read()
    return result


class TestMavenize(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.assignment = Assignment(id="projAssignment",
                                     package_name="org.dropproject.sample",
                                     language=Language.JAVA,
                                     accepts_student_tests=True)
        self.teacher_files = TeacherFiles(self.get_path("assignments"),
                                          self.get_path("mavenized"))
        self.write_project("assignments/projAssignment", TEACHER_FILES)
        self.project = self.write_project("upload/projAssignment/1-p",
                                          STUDENT_FILES)
        self.submission = Submission(upload_folder="projAssignment/1-p",
                                     rebuilt=False)

        patcher = patch.object(config.storage,
                               "delete_original_project_folder", True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def call(self):
        return mavenize(self.project, self.submission, self.assignment,
                        self.teacher_files)

    def test_layout(self):
        tree = self.call()
        self.assertEqual(
            tree, self.get_path("mavenized/projAssignment/1-p-mavenized"))
        files = list_tree(tree)
        self.assertEqual(files["src/main/java/%s/Main.java" % PACKAGE],
                         b"class Main {}")
        self.assertEqual(files["src/test/java/%s/TestMain.java" % PACKAGE],
                         b"class TestMain {}")
        self.assertNotIn("src/main/java/%s/TestMain.java" % PACKAGE, files)
        self.assertEqual(files["test-files/input.txt"], b"1 2 3")
        self.assertEqual(files["AUTHORS.txt"], b"a1;Ana Silva")
        self.assertEqual(files["pom.xml"], b"<project/>")
        self.assertIn("src/test/java/%s/TestTeacherMain.java" % PACKAGE,
                      files)
        self.assertFalse(any(path.startswith(".git") for path in files))

    def test_student_tests_not_accepted(self):
        self.assignment.accepts_student_tests = False
        files = list_tree(self.call())
        self.assertNotIn("src/test/java/%s/TestMain.java" % PACKAGE, files)
        self.assertNotIn("src/main/java/%s/TestMain.java" % PACKAGE, files)

    def test_kotlin(self):
        self.assignment.language = Language.KOTLIN
        files = list_tree(self.call())
        self.assertIn("src/main/kotlin/%s/Main.java" % PACKAGE, files)

    def test_teacher_files_win(self):
        files = list_tree(self.call())
        self.assertEqual(files["src/main/java/%s/Util.java" % PACKAGE],
                         b"class Util { /* teacher */ }")

    def test_student_readme_wins(self):
        files = list_tree(self.call())
        self.assertEqual(files["README.md"], b"student readme")

    def test_teacher_readme_without_student_one(self):
        os.remove(os.path.join(self.project, "README.md"))
        files = list_tree(self.call())
        self.assertEqual(files["README.md"], b"teacher readme")

    def test_idempotent(self):
        with patch.object(config.storage, "delete_original_project_folder",
                          False):
            first = list_tree(self.call())
            # A stray file from a previous run must not survive.
            self.write_file(
                "mavenized/projAssignment/1-p-mavenized/stray.txt", "x")
            second = list_tree(self.call())
        self.assertEqual(first, second)

    def test_rebuilt_path(self):
        self.submission.rebuilt = True
        self.assertEqual(
            self.call(),
            self.get_path("mavenized/projAssignment/1-p-mavenized-for-"
                          "rebuild"))

    def test_raw_folder_deleted(self):
        self.call()
        self.assertFalse(os.path.exists(self.project))

    def test_raw_folder_kept_when_configured(self):
        with patch.object(config.storage, "delete_original_project_folder",
                          False):
            self.call()
        self.assertTrue(os.path.isdir(self.project))

    def test_raw_folder_kept_for_fixtures(self):
        self.assignment.id = "sampleJavaProject"
        self.call()
        self.assertTrue(os.path.isdir(self.project))

    def test_raw_folder_kept_for_git(self):
        self.submission.upload_folder = None
        self.submission.id = 42
        tree = self.call()
        self.assertTrue(tree.endswith("git-42-mavenized"))
        self.assertTrue(os.path.isdir(self.project))

    def test_remove_original_folder_idempotent(self):
        self.assertTrue(remove_original_folder(
            self.project, self.submission, self.assignment))
        self.assertTrue(remove_original_folder(
            self.project, self.submission, self.assignment))
        self.assertFalse(os.path.exists(self.project))

    def test_failure(self):
        os.remove(os.path.join(self.project, "AUTHORS.txt"))
        with self.assertRaises(TransformationFailed):
            self.call()
        # The raw project is kept for a later retry.
        self.assertTrue(os.path.isdir(self.project))


if __name__ == "__main__":
    unittest.main()
