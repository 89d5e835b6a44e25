"""
Unit tests for SessionStore: atomic replacement, refresh swaps, identity cache,
and the one-time authorization code ledger.
"""

import threading

from src.services.drive.models import AuthenticatedUser, Credential
from src.services.drive.session import _MAX_CONSUMED_CODES, SessionStore


def _cred(n: int) -> Credential:
    return Credential(access_token=f"access-{n}", refresh_token=f"refresh-{n}")


class TestCredentialLifecycle:
    def test_starts_empty(self) -> None:
        store = SessionStore()
        assert store.get() is None
        assert store.has_token is False

    def test_replace_then_get(self) -> None:
        store = SessionStore()
        cred = _cred(1)
        store.replace(cred)
        assert store.get() is cred
        assert store.has_token is True

    def test_empty_access_token_is_not_a_session(self) -> None:
        store = SessionStore()
        store.replace(Credential(access_token=""))
        assert store.has_token is False

    def test_clear(self) -> None:
        store = SessionStore()
        store.replace(_cred(1))
        store.clear()
        assert store.get() is None

    def test_swap_if_current_succeeds_for_same_credential(self) -> None:
        store = SessionStore()
        old = _cred(1)
        store.replace(old)
        assert store.swap_if_current(old, _cred(2)) is True
        assert store.get().access_token == "access-2"

    def test_swap_if_current_loses_to_new_sign_in(self) -> None:
        store = SessionStore()
        old = _cred(1)
        store.replace(old)
        store.replace(_cred(3))
        assert store.swap_if_current(old, _cred(2)) is False
        assert store.get().access_token == "access-3"

    def test_readers_never_see_mixed_token_pairs(self) -> None:
        store = SessionStore()
        store.replace(_cred(0))
        mismatches: list[Credential] = []

        def writer() -> None:
            for i in range(1, 2000):
                store.replace(_cred(i))

        def reader() -> None:
            for _ in range(2000):
                cred = store.get()
                if cred.access_token.split("-")[1] != cred.refresh_token.split("-")[1]:
                    mismatches.append(cred)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert mismatches == []


class TestIdentityCache:
    def test_user_is_bound_to_credential(self) -> None:
        store = SessionStore()
        cred = _cred(1)
        store.replace(cred)
        user = AuthenticatedUser(id="people/1", name="Ada", email="ada@example.com")

        store.remember_user(cred, user)

        assert store.cached_user(cred) is user

    def test_replace_drops_cached_user(self) -> None:
        store = SessionStore()
        cred = _cred(1)
        store.replace(cred)
        store.remember_user(cred, AuthenticatedUser(id="people/1"))

        new = _cred(2)
        store.replace(new)

        assert store.cached_user(new) is None

    def test_stale_credential_cannot_store_user(self) -> None:
        store = SessionStore()
        old = _cred(1)
        store.replace(old)
        store.replace(_cred(2))

        store.remember_user(old, AuthenticatedUser(id="people/1"))

        assert store.cached_user(store.get()) is None


class TestCodeLedger:
    def test_first_claim_wins(self) -> None:
        store = SessionStore()
        assert store.claim_code("4/abc") is True
        assert store.claim_code("4/abc") is False

    def test_distinct_codes_are_independent(self) -> None:
        store = SessionStore()
        assert store.claim_code("a") is True
        assert store.claim_code("b") is True

    def test_ledger_is_bounded(self) -> None:
        store = SessionStore()
        for i in range(_MAX_CONSUMED_CODES + 10):
            store.claim_code(f"code-{i}")
        # oldest entries are evicted
        assert store.claim_code("code-0") is True
        assert store.claim_code(f"code-{_MAX_CONSUMED_CODES + 9}") is False
