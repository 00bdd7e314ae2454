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
"""Utility to pack the latest project of every group of an assignment
in a single archive.

"""

import logging
import os
import sys

from dropproject import default_argument_parser, sanitize_id, \
    utf8_decoder
from dropproject.db import Assignment, SessionGen
from dropproject.errors import EntityNotFound, PolicyViolation, \
    StorageFailed
from dropproject.report import export_mavenized_projects, \
    export_original_projects
from dropproject.service import FileSystemStorage
from dropproject.submission import TeacherFiles


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = default_argument_parser(
        "Pack the latest project of every group of an assignment.")
    parser.add_argument("-o", "--output", action="store", type=utf8_decoder,
                        help="where to write the archive (default: "
                             "<assignment id>_last_[mavenized_]"
                             "submissions.zip)")
    parser.add_argument("-m", "--mavenized", action="store_true",
                        help="if set, export the trees given to the build "
                             "instead of the projects as they were sent")
    args = parser.parse_args()

    archive_path = args.output or "%s_last_%ssubmissions.zip" % (
        sanitize_id(args.assignment_id), "mavenized_" if args.mavenized else "")
    if os.path.exists(archive_path):
        logger.critical("%s already exists.", archive_path)
        return 1

    storage = FileSystemStorage()
    with SessionGen() as session:
        try:
            assignment = Assignment.lookup(
                session, args.assignment_id).unwrap()
            if args.mavenized:
                count = export_mavenized_projects(
                    session, assignment, storage, TeacherFiles(),
                    archive_path)
            else:
                count = export_original_projects(
                    session, assignment, storage, archive_path)
        except PolicyViolation as error:
            logger.critical("%s", error.formatted_text)
            return 1
        except (EntityNotFound, StorageFailed) as error:
            logger.critical("%s", error)
            return 1

    if count == 0:
        print("Assignment %s has no project to export." % args.assignment_id)
    else:
        print("%d projects of %s exported to %s." % (
            count, args.assignment_id, archive_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
