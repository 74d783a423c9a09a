import threading
import unittest
from datetime import datetime, timezone

from domain.models import Account, TransferRecord
from infrastructure.memory.account_directory import InMemoryAccountDirectory
from infrastructure.memory.identity_repository import InMemoryIdentityRepository
from infrastructure.memory.transfer_history import InMemoryTransferHistory


class InMemoryAccountDirectoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.directory = InMemoryAccountDirectory()

    def test_create_if_absent(self):
        first = Account(username="alice", password_hash="x", balance=10)
        second = Account(username="alice", password_hash="y", balance=99)

        self.assertTrue(self.directory.create_if_absent(first))
        self.assertFalse(self.directory.create_if_absent(second))
        self.assertIs(self.directory.find_by_username("alice"), first)

    def test_find_is_exact_match(self):
        self.directory.create_if_absent(Account(username="alice", password_hash=""))

        self.assertIsNone(self.directory.find_by_username("Alice"))
        self.assertIsNone(self.directory.find_by_username("alice "))

    def test_get_all_accounts_in_registration_order(self):
        for name in ["carol", "alice", "bob"]:
            self.directory.create_if_absent(Account(username=name, password_hash=""))

        names = [a.username for a in self.directory.get_all_accounts()]
        self.assertEqual(names, ["carol", "alice", "bob"])

    def test_debit_and_credit(self):
        account = Account(username="alice", password_hash="", balance=100)
        self.directory.create_if_absent(account)

        self.directory.apply_debit(account, 30)
        self.directory.apply_credit(account, 5)

        self.assertEqual(account.balance, 75)

    def test_lock_accounts_releases_on_error(self):
        for name in ["alice", "bob"]:
            self.directory.create_if_absent(Account(username=name, password_hash=""))

        with self.assertRaises(RuntimeError):
            with self.directory.lock_accounts("bob", "alice"):
                self.assertTrue(self.directory._locks["alice"].locked())
                self.assertTrue(self.directory._locks["bob"].locked())
                raise RuntimeError("boom")

        self.assertFalse(self.directory._locks["alice"].locked())
        self.assertFalse(self.directory._locks["bob"].locked())

    def test_lock_accounts_same_name_twice(self):
        self.directory.create_if_absent(Account(username="alice", password_hash=""))

        with self.directory.lock_accounts("alice", "alice"):
            self.assertTrue(self.directory._locks["alice"].locked())
        self.assertFalse(self.directory._locks["alice"].locked())

    def test_lock_accounts_blocks_other_holders(self):
        self.directory.create_if_absent(Account(username="alice", password_hash=""))
        acquired = threading.Event()

        def contender():
            with self.directory.lock_accounts("alice"):
                acquired.set()

        with self.directory.lock_accounts("alice"):
            thread = threading.Thread(target=contender)
            thread.start()
            self.assertFalse(acquired.wait(0.1))

        thread.join(timeout=5)
        self.assertTrue(acquired.is_set())

    def test_concurrent_create_if_absent_creates_once(self):
        results = []
        barrier = threading.Barrier(10)

        def register():
            barrier.wait()
            results.append(
                self.directory.create_if_absent(Account(username="alice", password_hash=""))
            )

        threads = [threading.Thread(target=register) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(results.count(True), 1)
        self.assertEqual(len(self.directory.get_all_accounts()), 1)


class InMemoryTransferHistoryTests(unittest.TestCase):
    def test_append_preserves_order_and_returns_snapshot(self):
        history = InMemoryTransferHistory()
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        records = [
            TransferRecord(sender="a", recipient="b", amount=n, timestamp=now)
            for n in (3, 1, 2)
        ]
        for record in records:
            history.append(record)

        snapshot = history.list_all()
        self.assertEqual(snapshot, records)
        snapshot.append(records[0])
        self.assertEqual(len(history.list_all()), 3)

    def test_record_to_dict(self):
        now = datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)
        record = TransferRecord(sender="a", recipient="b", amount=7, timestamp=now)

        self.assertEqual(
            record.to_dict(),
            {"from": "a", "to": "b", "amount": 7, "date": "2024-01-01T08:30:00+00:00"},
        )


class InMemoryIdentityRepositoryTests(unittest.TestCase):
    def test_set_find_clear(self):
        repo = InMemoryIdentityRepository()

        self.assertIsNone(repo.find_username_by_external("discord", "1"))
        repo.set_external_identity("discord", "1", "alice")
        repo.set_external_identity("discord", "1", "bob")
        self.assertEqual(repo.find_username_by_external("discord", "1"), "bob")
        self.assertIsNone(repo.find_username_by_external("telegram", "1"))

        repo.clear_external_identity("discord", "1")
        repo.clear_external_identity("discord", "1")
        self.assertIsNone(repo.find_username_by_external("discord", "1"))


if __name__ == "__main__":
    unittest.main()
