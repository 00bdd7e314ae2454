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

"""Toggle the final flag of a submission.

"""

import argparse
import logging
import sys

from dropproject.db import SessionGen
from dropproject.errors import EntityNotFound, PolicyViolation
from dropproject.report import mark_as_final


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Mark a submission as the final one of its group, or "
                    "unmark it if it already is.")
    parser.add_argument("submission_id", action="store", type=int,
                        help="id of the submission")
    args = parser.parse_args()

    with SessionGen() as session:
        try:
            final = mark_as_final(session, args.submission_id)
        except EntityNotFound as error:
            logger.critical("%s", error)
            return 1
        except PolicyViolation as error:
            logger.critical("%s", error.formatted_text)
            return 1

    print("Submission %d is %s." % (
        args.submission_id, "final" if final else "not final"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
