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

"""Checks on the layout of a student project.

"""

import logging
import os

from dropproject import README_FILE, SOURCE_ROOT, TEACHER_TEST_PREFIX, \
    exists_case_sensitive
from dropproject.db import Assignment
from dropproject.errors import N_


logger = logging.getLogger(__name__)


def _find_reserved_files(source_root: str) -> list[str]:
    """Return the paths, relative to the project, of the files whose
    name is reserved to the teacher tests.

    """
    found = []
    for dirpath, dirnames, filenames in os.walk(source_root):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.startswith(TEACHER_TEST_PREFIX):
                found.append(os.path.relpath(
                    os.path.join(dirpath, filename),
                    os.path.dirname(source_root)))
    return found


def validate_structure(project_folder: str,
                       assignment: Assignment) -> list[str]:
    """Check that a project follows the layout the assignment expects.

    All the checks are always run, so that the student can fix every
    problem at once. Names are compared exactly, also where the
    filesystem ignores case.

    project_folder: the root of the (unpacked) project.
    assignment: the assignment the project was submitted to.

    return: the messages describing the problems found, in a fixed
        order; empty if the project is valid.

    """
    errors = []
    package_path = assignment.package_path
    package_display = "/".join([SOURCE_ROOT] + package_path)
    entry_point = assignment.language.entry_point

    if not exists_case_sensitive(project_folder, SOURCE_ROOT):
        errors.append(N_("The project doesn't contain a folder '%s' in the "
                         "root") % SOURCE_ROOT)

    if not exists_case_sensitive(project_folder, SOURCE_ROOT,
                                 *package_path):
        errors.append(N_("The project doesn't contain a folder '%s'")
                      % package_display)

    if not exists_case_sensitive(project_folder, SOURCE_ROOT,
                                 *package_path, entry_point):
        errors.append(N_("The project doesn't contain the file %s in the "
                         "folder '%s'") % (entry_point, package_display))

    source_root = os.path.join(project_folder, SOURCE_ROOT)
    if os.path.isdir(source_root):
        reserved = _find_reserved_files(source_root)
        if reserved:
            errors.append(N_("The project can't contain files whose name "
                             "starts with %s: %s")
                          % (TEACHER_TEST_PREFIX, ", ".join(reserved)))

    if exists_case_sensitive(project_folder, README_FILE) and \
            not os.path.isfile(os.path.join(project_folder, README_FILE)):
        errors.append(N_("The %s file must be a file, not a folder")
                      % README_FILE)

    if errors:
        logger.debug("Project %s has %d structure errors.",
                     project_folder, len(errors))
    return errors
