# This file is meant to be used for creating pytest fixtures.
# It's a bit of a hack, but we can put global initialization here.

import os
import tempfile

# Point the configuration to the testing one before anything reads it.
os.environ["DROPPROJECT_CONFIG"] = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "dropproject-testing.toml")

import dropproject  # noqa

# Use a throwaway database, created before dropproject.db builds the
# engine.
_db_dir = tempfile.mkdtemp(prefix="dropproject-fortesting-")
dropproject.config.database.url = "sqlite:///%s" % os.path.join(
    _db_dir, "dropproject-fortesting.db")
