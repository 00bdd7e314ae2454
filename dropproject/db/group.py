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

"""Authors and the groups they submit with.

"""

from sqlalchemy import Column, ForeignKey, Integer, Table, Unicode
from sqlalchemy.orm import relationship

from . import Base, metadata


group_authors = Table(
    'group_authors', metadata,
    Column('group_id', Integer,
           ForeignKey('project_groups.id',
                      onupdate="CASCADE", ondelete="CASCADE"),
           primary_key=True),
    Column('author_id', Integer,
           ForeignKey('authors.id',
                      onupdate="CASCADE", ondelete="CASCADE"),
           primary_key=True))


class Author(Base):
    """A student, as listed in the AUTHORS.txt of a project.

    """
    __tablename__ = 'authors'

    id: int = Column(
        Integer,
        primary_key=True)

    # Student number or login, already sanitized.
    user_id: str = Column(
        Unicode,
        nullable=False,
        unique=True)

    # Name as last written in an AUTHORS.txt.
    name: str = Column(
        Unicode,
        nullable=False)

    groups: list["ProjectGroup"] = relationship(
        "ProjectGroup",
        secondary=group_authors,
        back_populates="authors")


class ProjectGroup(Base):
    """A set of authors working together.

    Two groups never have the same set of authors: groups are created
    on first use and shared by every submission of those authors.

    """
    __tablename__ = 'project_groups'

    id: int = Column(
        Integer,
        primary_key=True)

    authors: list[Author] = relationship(
        Author,
        secondary=group_authors,
        order_by=Author.user_id,
        back_populates="groups")

    @property
    def author_ids(self) -> frozenset[str]:
        return frozenset(author.user_id for author in self.authors)

    def contains(self, user_id: str) -> bool:
        return user_id in self.author_ids

    @property
    def authors_label(self) -> str:
        return "|".join(author.user_id for author in self.authors)
