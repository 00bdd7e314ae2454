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

import typing
from dataclasses import dataclass

from sqlalchemy.orm import declarative_base, object_session

from dropproject.errors import EntityNotFound


_T = typing.TypeVar("_T")


@dataclass(frozen=True)
class Found(typing.Generic[_T]):
    """Successful result of a lookup."""

    value: _T

    def __bool__(self):
        return True

    def unwrap(self) -> _T:
        return self.value


@dataclass(frozen=True)
class NotFound:
    """Failed result of a lookup, remembering what was looked for."""

    entity: str
    key: object

    def __bool__(self):
        return False

    def unwrap(self) -> typing.NoReturn:
        """Turn the missing entity into an error.

        raise (EntityNotFound): always.

        """
        raise EntityNotFound(self.entity, self.key)


LookupResult = Found[_T] | NotFound


class Base:
    """Base class for all classes managed by SQLAlchemy.

    """
    # Columns are declared with plain type annotations, not Mapped[].
    __allow_unmapped__ = True

    @property
    def sa_session(self):
        return object_session(self)

    @classmethod
    def lookup(cls, session, id_, for_update: bool = False) -> LookupResult:
        """Retrieve an object from the database by its primary key.

        session (Session): the session to query.
        id_: the primary key of the object.
        for_update: whether to lock the row until the end of the
            transaction.

        return: Found with the object, or NotFound.

        """
        obj = session.get(cls, id_, with_for_update=for_update or None)
        if obj is None:
            return NotFound(cls.__name__, id_)
        return Found(obj)

    @classmethod
    def get_from_id(cls, id_, session):
        """Retrieve an object from the database by its primary key.

        id_: the primary key of the object.
        session (Session): the session to query.

        return: the object.

        raise (EntityNotFound): if there is no such object.

        """
        return cls.lookup(session, id_).unwrap()


Base = declarative_base(cls=Base)
metadata = Base.metadata
