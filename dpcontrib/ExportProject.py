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

"""Utility to pack the canonical tree of a submission in an archive,
as it was given to the build.

"""

import argparse
import logging
import os
import sys

from dropproject import utf8_decoder
from dropproject.db import SessionGen, Submission
from dropproject.errors import ArchiveFailed, EntityNotFound
from dropproject.service import FileSystemStorage
from dropproject.submission import TeacherFiles


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Pack the project of a submission in an archive.")
    parser.add_argument("submission_id", action="store", type=int,
                        help="id of the submission")
    parser.add_argument("archive", action="store", type=utf8_decoder,
                        nargs="?",
                        help="where to write the archive "
                             "(default: <submission id>.zip)")
    args = parser.parse_args()

    archive_path = args.archive or "%d.zip" % args.submission_id
    if os.path.exists(archive_path):
        logger.critical("%s already exists.", archive_path)
        return 1

    with SessionGen() as session:
        try:
            submission = Submission.lookup(
                session, args.submission_id).unwrap()
        except EntityNotFound as error:
            logger.critical("%s", error)
            return 1
        folder = TeacherFiles().get_project_folder(submission)

    if not os.path.isdir(folder):
        logger.critical("The project of submission %d was deleted, "
                        "rebuild it to export it.", args.submission_id)
        return 1
    try:
        FileSystemStorage().pack(folder, archive_path)
    except ArchiveFailed as error:
        logger.critical("%s", error)
        return 1

    print("Submission %d exported to %s." % (args.submission_id,
                                            archive_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
