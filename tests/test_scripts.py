"""Tests for the create_user and retention command-line entrypoints against a file-backed SQLite DB."""

import os
import tempfile
import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from hireauth import retention
from hireauth.core.security import verify_password
from hireauth.models import Base, Credentials, User
from hireauth.scripts import create_user

from support import make_settings


class ScriptTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        url = f"sqlite:///{os.path.join(self.tmpdir.name, 'hireauth.db')}"
        self.settings = make_settings(DATABASE_URL=url)
        self.engine = create_engine(url)
        Base.metadata.create_all(self.engine)

    def tearDown(self) -> None:
        self.engine.dispose()
        self.tmpdir.cleanup()


class TestCreateUser(ScriptTestCase):
    def test_creates_admin(self) -> None:
        with patch.object(create_user, "get_settings", return_value=self.settings):
            code = create_user.main(["root", "rootpw", "Admin"])
        self.assertEqual(code, 0)
        with Session(self.engine) as db:
            user = db.query(User).filter(User.username == "root").one()
            self.assertEqual(user.role, "Admin")
            self.assertTrue(verify_password("rootpw", user.password_hash))

    def test_duplicate_user_fails(self) -> None:
        with patch.object(create_user, "get_settings", return_value=self.settings):
            self.assertEqual(create_user.main(["root", "rootpw"]), 0)
            self.assertEqual(create_user.main(["root", "other"]), 1)


class TestRetentionCli(ScriptTestCase):
    def test_purges_expired_rows(self) -> None:
        with Session(self.engine) as db:
            user = User(username="bob", password_hash="x", role="User")
            db.add(user)
            db.flush()
            db.add(
                Credentials(
                    user_id=user.id,
                    refresh_token="expired",
                    expires_at=datetime.now(UTC) - timedelta(days=1),
                )
            )
            db.commit()
        with patch.object(retention, "get_settings", return_value=self.settings):
            self.assertEqual(retention.main(), 0)
        with Session(self.engine) as db:
            self.assertEqual(db.query(Credentials).count(), 0)
