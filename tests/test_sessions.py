import threading
import unittest

from cpauth.errors import (
    SessionAlreadyConsumed,
    SessionCapacityExceeded,
    SessionExpired,
    SessionNotFound,
)
from cpauth.groups import I1024, TOY
from cpauth.sessions import AUTH_ID_BYTES, SessionState, SessionStore, generate_auth_id

from .common import Counter, FixedEntropy


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestSessionStore(unittest.TestCase):
    def test_create_then_consume(self) -> None:
        store = SessionStore(TOY, entropy_f=FixedEntropy(b"\x02"), token_f=Counter("auth"))
        auth_id, challenge = store.create("alice", 12, 8)
        self.assertEqual((auth_id, challenge), ("auth-1", 2))
        self.assertIn(auth_id, store)
        self.assertEqual(store.pending_count(), 1)

        session = store.consume(auth_id)
        self.assertEqual(session.username, "alice")
        self.assertEqual((session.challenge, session.r1, session.r2), (2, 12, 8))
        self.assertIs(session.state, SessionState.CONSUMED)
        self.assertEqual(store.pending_count(), 0)

    def test_single_use(self) -> None:
        store = SessionStore(I1024)
        auth_id, _ = store.create("alice", 1, 1)
        store.consume(auth_id)
        with self.assertRaises(SessionAlreadyConsumed):
            store.consume(auth_id)
        with self.assertRaises(SessionAlreadyConsumed):
            store.consume(auth_id)

    def test_unknown_session(self) -> None:
        store = SessionStore(I1024)
        with self.assertRaises(SessionNotFound):
            store.consume("nope")

    def test_ids_and_challenges_are_fresh(self) -> None:
        store = SessionStore(I1024)
        issued = [store.create("alice", 1, 1) for _ in range(50)]
        self.assertEqual(len({auth_id for auth_id, _ in issued}), 50)
        self.assertEqual(len({challenge for _, challenge in issued}), 50)
        for _, challenge in issued:
            self.assertTrue(0 <= challenge < I1024.q)

    def test_token_collision_is_retried(self) -> None:
        tokens = iter(["same", "same", "other"])
        store = SessionStore(TOY, token_f=lambda: next(tokens))
        first, _ = store.create("alice", 1, 1)
        second, _ = store.create("bob", 1, 1)
        self.assertEqual((first, second), ("same", "other"))
        self.assertEqual(store.consume("same").username, "alice")

    def test_default_ids_are_unguessable(self) -> None:
        token = generate_auth_id()
        # urlsafe base64 of 16 random bytes
        self.assertGreaterEqual(len(token), AUTH_ID_BYTES * 4 // 3)
        self.assertNotEqual(token, generate_auth_id())


class TestExpiry(unittest.TestCase):
    def test_expired_session_is_consumed(self) -> None:
        clock = FakeClock()
        store = SessionStore(TOY, clock=clock, max_age=30)
        auth_id, _ = store.create("alice", 1, 1)
        clock.now += 31
        with self.assertRaises(SessionExpired):
            store.consume(auth_id)
        with self.assertRaises(SessionAlreadyConsumed):
            store.consume(auth_id)

    def test_within_max_age(self) -> None:
        clock = FakeClock()
        store = SessionStore(TOY, clock=clock, max_age=30)
        auth_id, _ = store.create("alice", 1, 1)
        clock.now += 30
        self.assertEqual(store.consume(auth_id).username, "alice")

    def test_no_expiry_by_default(self) -> None:
        clock = FakeClock()
        store = SessionStore(TOY, clock=clock)
        auth_id, _ = store.create("alice", 1, 1)
        clock.now += 10**9
        self.assertEqual(store.consume(auth_id).username, "alice")
        self.assertEqual(store.sweep(), 0)

    def test_sweep(self) -> None:
        clock = FakeClock()
        store = SessionStore(TOY, clock=clock, max_age=10)
        old_pending, _ = store.create("alice", 1, 1)
        old_used, _ = store.create("bob", 1, 1)
        store.consume(old_used)
        clock.now += 20
        fresh, _ = store.create("carol", 1, 1)
        self.assertEqual(store.sweep(), 2)
        self.assertEqual(len(store), 1)
        self.assertIn(fresh, store)
        with self.assertRaises(SessionNotFound):
            store.consume(old_pending)

    def test_invalid_policy(self) -> None:
        self.assertRaises(ValueError, SessionStore, TOY, max_age=0)
        self.assertRaises(ValueError, SessionStore, TOY, max_age=10, max_pending=0)
        self.assertRaises(ValueError, SessionStore, TOY, max_pending=5)


class TestCapacity(unittest.TestCase):
    def test_pending_bound(self) -> None:
        clock = FakeClock()
        store = SessionStore(TOY, clock=clock, max_age=10, max_pending=2)
        store.create("alice", 1, 1)
        used, _ = store.create("bob", 1, 1)
        with self.assertRaises(SessionCapacityExceeded):
            store.create("carol", 1, 1)

        # consumed sessions no longer count
        store.consume(used)
        store.create("carol", 1, 1)

        # stale sessions are swept to make room
        clock.now += 11
        store.create("dave", 1, 1)
        self.assertEqual(store.pending_count(), 1)


class TestConcurrency(unittest.TestCase):
    def test_exactly_one_consumer_wins(self) -> None:
        store = SessionStore(I1024)
        for _ in range(20):
            auth_id, _ = store.create("alice", 1, 1)
            workers = 8
            barrier = threading.Barrier(workers)
            outcomes = []
            outcomes_lock = threading.Lock()

            def attempt() -> None:
                barrier.wait()
                try:
                    store.consume(auth_id)
                    result = "ok"
                except SessionAlreadyConsumed:
                    result = "consumed"
                with outcomes_lock:
                    outcomes.append(result)

            threads = [threading.Thread(target=attempt) for _ in range(workers)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            self.assertEqual(outcomes.count("ok"), 1)
            self.assertEqual(outcomes.count("consumed"), workers - 1)

    def test_concurrent_creates_are_distinct(self) -> None:
        store = SessionStore(I1024)
        ids = []
        ids_lock = threading.Lock()

        def issue() -> None:
            for _ in range(25):
                auth_id, _ = store.create("alice", 1, 1)
                with ids_lock:
                    ids.append(auth_id)

        threads = [threading.Thread(target=issue) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(len(set(ids)), 100)
        self.assertEqual(len(store), 100)


if __name__ == "__main__":
    unittest.main()
