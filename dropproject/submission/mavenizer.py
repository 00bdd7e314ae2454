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

"""Transformation of a student project into a canonical build tree.

The canonical tree has the sources in src/main/<language>, the student
tests (when accepted) in src/test/<language>, the test-files folder,
the AUTHORS.txt and, on top of everything, the teacher files.

"""

import logging
import os
import shutil
import typing

from dropproject import AUTHORS_FILE, README_FILE, SOURCE_ROOT, \
    TEST_FILES_FOLDER, TEST_PREFIX, config, rmtree
from dropproject.db import Assignment, Submission
from dropproject.errors import TransformationFailed
from .teacherfiles import TeacherFiles


logger = logging.getLogger(__name__)


def _copy_sources(source_root: str, destination: str,
                  accept: typing.Callable[[str], bool]) -> int:
    """Copy the files of source_root whose name is accepted.

    Folders are created only when they receive a file.

    return: the number of files copied.

    raise (OSError): if a copy fails.

    """
    copied = 0
    for dirpath, dirnames, filenames in os.walk(source_root):
        dirnames.sort()
        relative = os.path.relpath(dirpath, source_root)
        for filename in sorted(filenames):
            if not accept(filename):
                continue
            target_dir = os.path.normpath(os.path.join(destination, relative))
            os.makedirs(target_dir, exist_ok=True)
            shutil.copyfile(os.path.join(dirpath, filename),
                            os.path.join(target_dir, filename))
            copied += 1
    return copied


def keeps_original_folder(submission: Submission,
                          assignment: Assignment) -> bool:
    """Return whether the raw project must survive the transformation.

    Git working copies are reused by later submissions, and the raw
    uploads of the sample assignments are used to test the platform.

    """
    if submission.is_git():
        return True
    if not config.storage.delete_original_project_folder:
        return True
    return any(assignment.id.startswith(prefix)
               for prefix in config.storage.fixture_prefixes)


def remove_original_folder(project_folder: str, submission: Submission,
                           assignment: Assignment) -> bool:
    """Delete the raw project unless it must be kept.

    Deleting a folder that is already gone is not an error.

    return: whether the folder was (or already had been) removed.

    """
    if keeps_original_folder(submission, assignment):
        return False
    try:
        rmtree(project_folder, missing_ok=True)
    except OSError:
        # The canonical tree is complete, it is not a big problem.
        logger.warning("Couldn't delete original folder %s.",
                       project_folder, exc_info=True)
        return False
    return True


def mavenize(project_folder: str, submission: Submission,
             assignment: Assignment,
             teacher_files: TeacherFiles) -> str:
    """Build the canonical tree of submission from its raw project.

    Running it twice on the same input gives the same tree, since the
    previous tree is always deleted first.

    project_folder: the raw project, already validated.
    submission: the submission being processed.
    assignment: its assignment.
    teacher_files: where the teacher files and the trees are.

    return: the path of the canonical tree.

    raise (TransformationFailed): if any copy fails.

    """
    destination = teacher_files.get_project_folder(submission)
    language = assignment.language.source_folder
    source_root = os.path.join(project_folder, SOURCE_ROOT)

    try:
        rmtree(destination, missing_ok=True)
        os.makedirs(destination)

        _copy_sources(source_root,
                      os.path.join(destination, "src", "main", language),
                      lambda name: not name.startswith(TEST_PREFIX))
        if assignment.accepts_student_tests:
            _copy_sources(source_root,
                          os.path.join(destination, "src", "test", language),
                          lambda name: name.startswith(TEST_PREFIX))

        test_files = os.path.join(project_folder, TEST_FILES_FOLDER)
        if os.path.isdir(test_files):
            shutil.copytree(test_files,
                            os.path.join(destination, TEST_FILES_FOLDER))

        shutil.copyfile(os.path.join(project_folder, AUTHORS_FILE),
                        os.path.join(destination, AUTHORS_FILE))

        teacher_files.copy_to(assignment, destination)

        # The student's README describes their project, so it wins
        # over the teacher's.
        readme = os.path.join(project_folder, README_FILE)
        if os.path.isfile(readme):
            shutil.copyfile(readme, os.path.join(destination, README_FILE))
    except OSError as error:
        raise TransformationFailed(
            "Couldn't build the canonical tree of %s in %s: %s"
            % (project_folder, destination, error)) from error

    logger.info("Mavenized %s into %s.", project_folder, destination)
    remove_original_folder(project_folder, submission, assignment)
    return destination
