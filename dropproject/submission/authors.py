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

"""Reading of the AUTHORS.txt manifest of a project.

Each line of the manifest is "id;name", where the name must contain at
least a first and a last name. The file may be in any encoding.

"""

import logging
import os
import typing

from dropproject import AUTHORS_FILE, sanitize_id, utf8_decoder
from dropproject.errors import N_, AuthorsManifestMalformed, \
    AuthorsManifestMissing, AuthorsManifestUnparseable


logger = logging.getLogger(__name__)


class AuthorDetails(typing.NamedTuple):
    user_id: str
    name: str


def parse_authors(text: str) -> list[AuthorDetails]:
    """Parse the content of an AUTHORS.txt file.

    text: the decoded content.

    return: the authors, in file order.

    raise (AuthorsManifestMalformed): if a line breaks one of the
        rules on ids and names, or an id is repeated.
    raise (AuthorsManifestUnparseable): if a line is not in the
        "id;name" format, or there are no authors at all.

    """
    authors = []
    seen = set()
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.lstrip("\ufeff").strip()
        if line == "":
            continue
        if ";" not in line:
            raise AuthorsManifestUnparseable([
                N_("Line %d of %s is not in the format NUMBER;NAME")
                % (number, AUTHORS_FILE)])
        raw_id, name = line.split(";", 1)
        user_id = sanitize_id(raw_id.strip())
        name = " ".join(name.split())
        if user_id == "":
            raise AuthorsManifestMalformed([
                N_("Line %d of %s doesn't start with a valid student "
                   "number") % (number, AUTHORS_FILE)])
        if name == "" or name[0].isdigit() or " " not in name:
            raise AuthorsManifestMalformed([
                N_("Each line of %s must be NUMBER;NAME with the first "
                   "and last name of the student (line %d)")
                % (AUTHORS_FILE, number)])
        if user_id in seen:
            raise AuthorsManifestMalformed([
                N_("Student %s appears more than once in %s")
                % (user_id, AUTHORS_FILE)])
        seen.add(user_id)
        authors.append(AuthorDetails(user_id, name))

    if not authors:
        raise AuthorsManifestUnparseable([
            N_("%s doesn't list any student") % AUTHORS_FILE])
    return authors


def read_authors(project_folder: str) -> list[AuthorDetails]:
    """Read the authors of the project rooted at project_folder.

    The encoding of the file is guessed: UTF-8 first, then what
    chardet suggests.

    project_folder: the root of the project.

    return: the authors, in file order.

    raise (AuthorsManifestMissing): if the file doesn't exist.
    raise (ValidationError): if the file can't be parsed, see
        parse_authors.

    """
    path = os.path.join(project_folder, AUTHORS_FILE)
    if not os.path.isfile(path):
        raise AuthorsManifestMissing()
    with open(path, "rb") as f:
        content = f.read()
    try:
        text = utf8_decoder(content)
    except TypeError:
        raise AuthorsManifestUnparseable([
            N_("Couldn't detect the encoding of %s") % AUTHORS_FILE])
    return parse_authors(text)


def authors_label(authors: typing.Iterable[AuthorDetails]) -> str:
    """Return the user ids of the authors joined with "|"."""
    return "|".join(author.user_id for author in authors)
