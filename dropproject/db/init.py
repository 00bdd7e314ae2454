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

"""Create the tables of the pipeline in the database.

"""

import logging

from sqlalchemy.exc import OperationalError

from . import engine, metadata


logger = logging.getLogger(__name__)


def init_db() -> bool:
    """Create all the tables that don't exist yet.

    return: True if successful.

    """
    try:
        metadata.create_all(engine)
    except OperationalError:
        logger.error("Couldn't create the tables, check that the database "
                     "exists and that you have the privileges to use it.",
                     exc_info=True)
        return False
    return True
