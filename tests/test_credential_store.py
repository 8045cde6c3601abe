"""Tests for hireauth.services.credential_store against SQLite (in-memory, and file-backed for concurrency)."""

import os
import tempfile
import threading
import unittest
from datetime import UTC, datetime, timedelta

from hireauth.core.database import build_engine, build_session_factory
from hireauth.core.security import hash_password
from hireauth.models import Base, Credentials
from hireauth.services.credential_store import CredentialStore
from hireauth.services.users import UserRepository

from support import make_app, make_settings, open_session


class CredentialStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.app = make_app()
        self.session = open_session(self.app)
        users = UserRepository(self.session)
        self.alice = users.create("alice", hash_password("pw", rounds=4), "User")
        self.bob = users.create("bob", hash_password("pw", rounds=4), "User")
        self.store = CredentialStore(self.session)
        self.expiry = datetime.now(UTC) + timedelta(days=7)

    def tearDown(self) -> None:
        self.session.close()
        self.app.state.engine.dispose()

    def _row_count(self, user_id: int) -> int:
        return self.session.query(Credentials).filter(Credentials.user_id == user_id).count()


class TestSave(CredentialStoreTestCase):
    def test_first_save_inserts_row(self) -> None:
        self.store.save(self.alice.id, "token-a1", self.expiry)
        self.assertEqual(self._row_count(self.alice.id), 1)
        self.assertEqual(self.store.find_by_token("token-a1").id, self.alice.id)

    def test_second_save_overwrites_instead_of_appending(self) -> None:
        self.store.save(self.alice.id, "token-a1", self.expiry)
        self.store.save(self.alice.id, "token-a2", self.expiry)
        self.assertEqual(self._row_count(self.alice.id), 1)

    def test_superseded_token_is_no_longer_found(self) -> None:
        self.store.save(self.alice.id, "token-a1", self.expiry)
        self.store.save(self.alice.id, "token-a2", self.expiry)
        self.assertIsNone(self.store.find_by_token("token-a1"))
        self.assertEqual(self.store.find_by_token("token-a2").id, self.alice.id)

    def test_rotation_is_visible_to_other_sessions(self) -> None:
        other = open_session(self.app)
        try:
            CredentialStore(other).save(self.alice.id, "token-a1", self.expiry)
            self.store.save(self.alice.id, "token-a2", self.expiry)
            self.assertIsNone(CredentialStore(other).find_by_token("token-a1"))
        finally:
            other.close()

    def test_rows_are_per_user(self) -> None:
        self.store.save(self.alice.id, "token-a1", self.expiry)
        self.store.save(self.bob.id, "token-b1", self.expiry)
        self.assertEqual(self.store.find_by_token("token-a1").id, self.alice.id)
        self.assertEqual(self.store.find_by_token("token-b1").id, self.bob.id)


class TestDelete(CredentialStoreTestCase):
    def test_delete_removes_row(self) -> None:
        self.store.save(self.alice.id, "token-a1", self.expiry)
        self.assertTrue(self.store.delete(self.alice.id))
        self.assertEqual(self._row_count(self.alice.id), 0)
        self.assertIsNone(self.store.find_by_token("token-a1"))

    def test_delete_without_row_is_a_no_op(self) -> None:
        self.assertFalse(self.store.delete(self.alice.id))
        self.assertFalse(self.store.delete(self.alice.id))

    def test_delete_leaves_other_users_alone(self) -> None:
        self.store.save(self.alice.id, "token-a1", self.expiry)
        self.store.save(self.bob.id, "token-b1", self.expiry)
        self.store.delete(self.alice.id)
        self.assertEqual(self.store.find_by_token("token-b1").id, self.bob.id)


class TestFindByToken(CredentialStoreTestCase):
    def test_unknown_token(self) -> None:
        self.assertIsNone(self.store.find_by_token("nope"))

    def test_empty_token(self) -> None:
        self.assertIsNone(self.store.find_by_token(""))

    def test_expired_token_is_not_found(self) -> None:
        self.store.save(self.alice.id, "token-old", datetime.now(UTC) - timedelta(minutes=1))
        self.assertIsNone(self.store.find_by_token("token-old"))


class TestConcurrentSave(unittest.TestCase):
    """Logins racing on one user, each thread on its own session against a file-backed database."""

    THREADS = 4

    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        url = f"sqlite:///{os.path.join(self.tmpdir.name, 'hireauth.db')}"
        self.engine = build_engine(make_settings(DATABASE_URL=url))
        Base.metadata.create_all(self.engine)
        self.session_factory = build_session_factory(self.engine)
        with self.session_factory() as db:
            self.alice_id = UserRepository(db).create("alice", hash_password("pw", rounds=4), "User").id

    def tearDown(self) -> None:
        self.engine.dispose()
        self.tmpdir.cleanup()

    def test_concurrent_saves_leave_one_row(self) -> None:
        barrier = threading.Barrier(self.THREADS)
        expiry = datetime.now(UTC) + timedelta(days=7)
        errors: list[Exception] = []

        def login(n: int) -> None:
            with self.session_factory() as db:
                barrier.wait()
                try:
                    CredentialStore(db).save(self.alice_id, f"token-{n}", expiry)
                except Exception as e:
                    errors.append(e)

        threads = [threading.Thread(target=login, args=(n,)) for n in range(self.THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        with self.session_factory() as db:
            rows = db.query(Credentials).filter(Credentials.user_id == self.alice_id).all()
            self.assertEqual(len(rows), 1)
            last = rows[0].refresh_token
            store = CredentialStore(db)
            self.assertEqual(store.find_by_token(last).id, self.alice_id)
            for n in range(self.THREADS):
                token = f"token-{n}"
                if token != last:
                    self.assertIsNone(store.find_by_token(token))
