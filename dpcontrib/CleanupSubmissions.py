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

"""Utility to free the disk space taken by the submissions of an
assignment that were not marked as final.

"""

import logging
import sys

from dropproject import default_argument_parser
from dropproject.db import Assignment, SessionGen
from dropproject.errors import EntityNotFound
from dropproject.report import cleanup_non_final
from dropproject.submission import TeacherFiles


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = default_argument_parser(
        "Delete the canonical trees of the submissions not marked as "
        "final.")
    parser.add_argument("-y", "--yes", action="store_true",
                        help="don't ask for confirmation")
    args = parser.parse_args()

    with SessionGen() as session:
        try:
            assignment = Assignment.lookup(
                session, args.assignment_id).unwrap()
        except EntityNotFound as error:
            logger.critical("%s", error)
            return 1

        if not args.yes:
            print("This will delete the projects of the non final "
                  "submissions of %s. Are you sure? [y/N] " % assignment.id,
                  end='')
            ans = sys.stdin.readline().strip().lower()
            if ans not in ["y", "yes"]:
                print("Will not delete.")
                return 0

        removed = cleanup_non_final(session, assignment, TeacherFiles())
    print("Deleted %d projects." % removed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
